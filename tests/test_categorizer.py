import pytest

from grocerygen.services.categorizer import Category, categorize


@pytest.mark.parametrize("name, category", [
    ("tomato", Category.PRODUCE),
    ("chicken breast", Category.MEAT),
    ("egg", Category.DAIRY),
    ("salt", Category.PANTRY),
    # Longest whole-word match wins
    ("chicken broth", Category.PANTRY),
    ("low sodium chicken broth", Category.PANTRY),
    ("boneless chicken", Category.MEAT),
    ("coconut milk", Category.PANTRY),
    # Keyword fallbacks
    ("sesame oil", Category.PANTRY),
    ("goat cheese", Category.DAIRY),
    ("mixed greens", Category.PRODUCE),
])
def test_categorize(name, category):
    assert categorize(name) is category


@pytest.mark.parametrize("name", ["", None, "xanthan gum", "dragonfruit"])
def test_categorize_unknown_is_other(name):
    assert categorize(name) is Category.OTHER


def test_table_words_do_not_match_inside_other_words():
    # "corn" must not match "peppercorn"
    assert categorize("peppercorn") is Category.OTHER
