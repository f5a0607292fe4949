"""Shopping category lookup for normalized ingredient names."""

import re
from enum import Enum


class Category(str, Enum):
    PRODUCE = "produce"
    MEAT = "meat"
    DAIRY = "dairy"
    PANTRY = "pantry"
    OTHER = "other"


# Output order on the list
CATEGORY_ORDER = [Category.PRODUCE, Category.MEAT, Category.DAIRY, Category.PANTRY, Category.OTHER]

# Keys are normalized (singular, lower-case) names
INGREDIENT_CATEGORIES = {
    # Produce
    "onion": Category.PRODUCE, "red onion": Category.PRODUCE, "green onion": Category.PRODUCE,
    "garlic": Category.PRODUCE, "shallot": Category.PRODUCE, "ginger": Category.PRODUCE,
    "tomato": Category.PRODUCE, "cherry tomato": Category.PRODUCE,
    "bell pepper": Category.PRODUCE, "jalapeno": Category.PRODUCE, "chili": Category.PRODUCE,
    "broccoli": Category.PRODUCE, "spinach": Category.PRODUCE, "lettuce": Category.PRODUCE,
    "kale": Category.PRODUCE, "arugula": Category.PRODUCE, "cabbage": Category.PRODUCE,
    "carrot": Category.PRODUCE, "celery": Category.PRODUCE, "cucumber": Category.PRODUCE,
    "potato": Category.PRODUCE, "sweet potato": Category.PRODUCE,
    "zucchini": Category.PRODUCE, "squash": Category.PRODUCE, "eggplant": Category.PRODUCE,
    "cauliflower": Category.PRODUCE, "asparagus": Category.PRODUCE, "green bean": Category.PRODUCE,
    "corn": Category.PRODUCE, "pea": Category.PRODUCE, "mushroom": Category.PRODUCE,
    "avocado": Category.PRODUCE, "lemon": Category.PRODUCE, "lime": Category.PRODUCE,
    "apple": Category.PRODUCE, "banana": Category.PRODUCE, "orange": Category.PRODUCE,
    "berry": Category.PRODUCE, "strawberry": Category.PRODUCE, "blueberry": Category.PRODUCE,
    "raspberry": Category.PRODUCE, "grape": Category.PRODUCE, "mango": Category.PRODUCE,
    "cilantro": Category.PRODUCE, "parsley": Category.PRODUCE, "basil": Category.PRODUCE,
    "mint": Category.PRODUCE, "dill": Category.PRODUCE,

    # Meat & Seafood
    "chicken": Category.MEAT, "chicken breast": Category.MEAT, "chicken thigh": Category.MEAT,
    "beef": Category.MEAT, "ground beef": Category.MEAT, "steak": Category.MEAT,
    "pork": Category.MEAT, "pork chop": Category.MEAT, "pork tenderloin": Category.MEAT,
    "turkey": Category.MEAT, "ground turkey": Category.MEAT, "lamb": Category.MEAT,
    "bacon": Category.MEAT, "sausage": Category.MEAT, "ham": Category.MEAT,
    "salmon": Category.MEAT, "tuna": Category.MEAT, "shrimp": Category.MEAT,
    "cod": Category.MEAT, "tilapia": Category.MEAT, "fish": Category.MEAT,

    # Dairy & Eggs
    "milk": Category.DAIRY, "cheese": Category.DAIRY, "cheddar": Category.DAIRY,
    "mozzarella": Category.DAIRY, "parmesan": Category.DAIRY, "feta": Category.DAIRY,
    "cottage cheese": Category.DAIRY, "cream cheese": Category.DAIRY,
    "yogurt": Category.DAIRY, "greek yogurt": Category.DAIRY,
    "butter": Category.DAIRY, "cream": Category.DAIRY, "heavy cream": Category.DAIRY,
    "sour cream": Category.DAIRY, "egg": Category.DAIRY, "egg white": Category.DAIRY,

    # Pantry (dry goods, oils, condiments, spices)
    "rice": Category.PANTRY, "brown rice": Category.PANTRY, "quinoa": Category.PANTRY,
    "pasta": Category.PANTRY, "spaghetti": Category.PANTRY, "noodle": Category.PANTRY,
    "flour": Category.PANTRY, "sugar": Category.PANTRY, "brown sugar": Category.PANTRY,
    "oats": Category.PANTRY, "rolled oats": Category.PANTRY, "bread": Category.PANTRY,
    "tortilla": Category.PANTRY, "breadcrumb": Category.PANTRY, "panko": Category.PANTRY,
    "salt": Category.PANTRY, "pepper": Category.PANTRY, "black pepper": Category.PANTRY,
    "olive oil": Category.PANTRY, "vegetable oil": Category.PANTRY, "coconut oil": Category.PANTRY,
    "vinegar": Category.PANTRY, "soy sauce": Category.PANTRY, "honey": Category.PANTRY,
    "maple syrup": Category.PANTRY, "peanut butter": Category.PANTRY,
    "baking powder": Category.PANTRY, "baking soda": Category.PANTRY, "vanilla": Category.PANTRY,
    "broth": Category.PANTRY, "stock": Category.PANTRY,
    "chicken broth": Category.PANTRY, "chicken stock": Category.PANTRY,
    "beef broth": Category.PANTRY, "vegetable broth": Category.PANTRY,
    "canned tomato": Category.PANTRY, "tomato sauce": Category.PANTRY, "tomato paste": Category.PANTRY,
    "bean": Category.PANTRY, "black bean": Category.PANTRY, "chickpea": Category.PANTRY,
    "lentil": Category.PANTRY, "almond": Category.PANTRY, "walnut": Category.PANTRY,
    "cumin": Category.PANTRY, "paprika": Category.PANTRY, "chili powder": Category.PANTRY,
    "garlic powder": Category.PANTRY, "onion powder": Category.PANTRY, "oregano": Category.PANTRY,
    "thyme": Category.PANTRY, "rosemary": Category.PANTRY, "cinnamon": Category.PANTRY,
    "bay leaf": Category.PANTRY, "italian seasoning": Category.PANTRY,
    "almond milk": Category.PANTRY, "coconut milk": Category.PANTRY,
}

# Checked in order when nothing in the table matches
KEYWORD_FALLBACKS = [
    (("oil", "vinegar", "sauce", "spice", "seasoning", "powder", "flour"), Category.PANTRY),
    (("cheese", "milk", "yogurt"), Category.DAIRY),
    (("chicken", "beef", "pork", "fish", "meat", "steak"), Category.MEAT),
    (("lettuce", "greens", "herb"), Category.PRODUCE),
]


def _contains_words(name: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", name) is not None


def categorize(normalized_name: str) -> Category:
    """Map a normalized ingredient name to a shopping category.

    Exact match first, then the longest table entry found as whole words in
    the name (so "chicken broth" wins over "chicken"), then keywords.
    Anything else is OTHER.
    """
    name = (normalized_name or "").strip().lower()
    if not name:
        return Category.OTHER

    if name in INGREDIENT_CATEGORIES:
        return INGREDIENT_CATEGORIES[name]

    best_key = None
    for key in INGREDIENT_CATEGORIES:
        if _contains_words(name, key) and (best_key is None or len(key) > len(best_key)):
            best_key = key
    if best_key is not None:
        return INGREDIENT_CATEGORIES[best_key]

    for keywords, category in KEYWORD_FALLBACKS:
        if any(kw in name for kw in keywords):
            return category

    return Category.OTHER
