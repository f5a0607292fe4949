import pytest

from grocerygen.domain import IngredientRecord
from grocerygen.parsing import ParsedIngredient, ParseFailure, normalize_name, parse, parse_quantity
from grocerygen.parsing.ingredient_parser import singularize, split_amount


@pytest.mark.parametrize("amount, expected", [
    ("2", 2.0),
    ("1.5", 1.5),
    ("1,5", 1.5),
    ("1,000", 1000.0),
    ("12,500.5", 12500.5),
    ("1/2", 0.5),
    ("1 1/2", 1.5),
    ("1-1/2", 1.5),
    ("½", 0.5),
    ("1½", 1.5),
    ("2-3", 3.0),
    ("2 to 3", 3.0),
])
def test_parse_quantity(amount, expected):
    assert parse_quantity(amount) == pytest.approx(expected)


@pytest.mark.parametrize("amount", [None, "", "   ", "a pinch", "to taste", "1/0"])
def test_parse_quantity_unparseable(amount):
    assert parse_quantity(amount) is None


def test_split_amount_keeps_trailing_unit():
    assert split_amount("8 oz") == (8.0, "oz")
    assert split_amount("100g") == (100.0, "g")
    assert split_amount("2 to 3 cups") == (3.0, "cups")
    assert split_amount("1-1/2 cups") == (1.5, "cups")
    assert split_amount("1,000 ml") == (1000.0, "ml")


@pytest.mark.parametrize("name, key", [
    ("Tomatoes", "tomato"),
    ("Large Eggs", "egg"),
    ("Onion, chopped", "onion"),
    ("Chicken Broth (low sodium)", "chicken broth"),
    ("Extra-Virgin Olive Oil", "olive oil"),
    ("EVOO", "olive oil"),
    ("Bay Leaves", "bay leaf"),
    ("Berries", "berry"),
    ("Hummus", "hummus"),
    ("Asparagus", "asparagus"),
    ("Peaches", "peach"),
    ("Swiss", "swiss"),
    ("Scallions", "green onion"),
])
def test_normalize_name(name, key):
    assert normalize_name(name) == key


def test_normalize_name_only_descriptors():
    # Nothing left after dropping descriptors: keep the words
    assert normalize_name("Fresh") == "fresh"


def test_singularize_short_words_untouched():
    assert singularize("gas") == "gas"
    assert singularize("glass") == "glass"


def test_parse_success():
    record = IngredientRecord(name="Chicken Broth", amount="2", unit=" cups ")
    parsed = parse(record)

    assert isinstance(parsed, ParsedIngredient)
    assert parsed.key == "chicken broth"
    assert parsed.display == "Chicken broth"
    assert parsed.quantity == 2.0
    assert parsed.unit == "cups"
    assert parsed.record is record


def test_parse_takes_unit_from_amount_when_missing():
    parsed = parse(IngredientRecord(name="chicken broth", amount="8 oz", unit=None))
    assert isinstance(parsed, ParsedIngredient)
    assert parsed.quantity == 8.0
    assert parsed.unit == "oz"


def test_parse_keeps_unit_case():
    parsed = parse(IngredientRecord(name="sugar", amount="1", unit="T"))
    assert parsed.unit == "T"


@pytest.mark.parametrize("amount, reason", [
    (None, "missing_amount"),
    ("", "missing_amount"),
    ("to taste", "non_numeric_amount"),
    ("0", "non_positive_amount"),
])
def test_parse_failure(amount, reason, caplog):
    record = IngredientRecord(name="Salt", amount=amount, unit=None)
    with caplog.at_level("WARNING", logger="grocerygen.parsing"):
        result = parse(record)

    assert isinstance(result, ParseFailure)
    assert result.reason == reason
    assert result.record is record
    assert result.key == "salt"
    assert result.display == "Salt"
    assert "Salt" in caplog.text


def test_parse_thousands_separator():
    parsed = parse(IngredientRecord(name="water", amount="1,000", unit="ml"))
    assert parsed.quantity == 1000.0
    assert parsed.unit == "ml"
