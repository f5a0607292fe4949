import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from ..domain import IngredientRecord

logger = logging.getLogger("grocerygen.parsing")

UNICODE_FRACTIONS = {
    "½": 0.5, "⅓": 1 / 3, "⅔": 2 / 3, "¼": 0.25, "¾": 0.75,
    "⅕": 0.2, "⅖": 0.4, "⅗": 0.6, "⅘": 0.8, "⅙": 1 / 6, "⅚": 5 / 6,
    "⅛": 0.125, "⅜": 0.375, "⅝": 0.625, "⅞": 0.875,
}

# Words that describe preparation or size, not the thing to buy
DESCRIPTORS = {
    "fresh", "dried", "frozen", "organic", "raw", "cooked",
    "large", "medium", "small", "extra", "lean",
    "chopped", "diced", "sliced", "minced", "crushed", "grated", "shredded",
    "beaten", "melted", "softened", "peeled", "rinsed", "drained", "halved",
    "boneless", "skinless", "trimmed", "thinly", "finely", "roughly",
    "optional", "divided",
}

# Whole-name rewrites applied after cleanup
ALIASES = {
    "extra virgin olive oil": "olive oil",
    "virgin olive oil": "olive oil",
    "evoo": "olive oil",
    "2 milk": "milk",
    "1 milk": "milk",
    "skim milk": "milk",
    "whole milk": "milk",
    "capsicum": "bell pepper",
    "scallion": "green onion",
    "spring onion": "green onion",
}

IRREGULAR_PLURALS = {
    "tomatoes": "tomato",
    "potatoes": "potato",
    "mangoes": "mango",
    "avocadoes": "avocado",
    "leaves": "leaf",
    "loaves": "loaf",
    "halves": "half",
    "cookies": "cookie",
    "brownies": "brownie",
    "chilies": "chili",
    "chillies": "chilli",
}

# Words that end in "s" but are already singular (or mass nouns)
FALSE_PLURALS = {
    "hummus", "asparagus", "couscous", "molasses", "swiss", "citrus",
    "brussels", "grits", "oats", "chips", "greens", "bass", "series",
}

_RANGE_RE = re.compile(r"^(.+?)\s*(?:-|–|to)\s*(.+)$")
# "1-1/2" is one and a half, not a range
_DASHED_MIXED_RE = re.compile(r"^\s*(\d+)-(\d+/\d+)\s*(.*)$")
# "1,000" groups thousands; "1,5" is a decimal comma
_THOUSANDS_RE = re.compile(r"^\d{1,3}(?:,\d{3})+(?:\.\d+)?$")
_NUMBER_RE = re.compile(
    r"^\s*(?P<num>\d+\s+\d+/\d+|\d+/\d+|\d{1,3}(?:,\d{3})+(?:\.\d+)?(?!\d)"
    r"|\d+(?:\.\d+|,\d{1,2}(?!\d))?|[.,]\d+)\s*(?P<rest>.*)$"
)


@dataclass(frozen=True)
class ParsedIngredient:
    key: str
    display: str
    quantity: float
    unit: str
    record: IngredientRecord


@dataclass(frozen=True)
class ParseFailure:
    record: IngredientRecord
    reason: str
    key: str
    display: str


def _expand_unicode_fractions(text: str) -> str:
    # "1½" -> "1 1/2" style so the mixed-number path handles it
    out = []
    for ch in text:
        if ch in UNICODE_FRACTIONS:
            val = UNICODE_FRACTIONS[ch]
            out.append(f" {val}")
        else:
            out.append(ch)
    return "".join(out).strip()


def _number(token: str) -> Optional[float]:
    token = token.strip()
    try:
        if " " in token:
            # "1 1/2" or "1 0.5" (from unicode expansion)
            whole, frac = token.split(None, 1)
            return float(whole) + (_number(frac) or 0.0)
        if "/" in token:
            n, d = token.split("/", 1)
            d_val = float(d)
            if d_val == 0:
                return None
            return float(n) / d_val
        if _THOUSANDS_RE.match(token):
            return float(token.replace(",", ""))
        return float(token.replace(",", "."))
    except ValueError:
        return None


def split_amount(amount: Optional[str]) -> tuple[Optional[float], str]:
    """Split free-text amount into (quantity, trailing text).

    Returns (None, text) when there is no leading number.
    """
    if amount is None:
        return None, ""
    text = _expand_unicode_fractions(str(amount).strip())
    if not text:
        return None, ""

    # Mixed number with an expanded unicode fraction: "1 0.5"
    m = re.match(r"^\s*(\d+)\s+(0?\.\d+)\s*(.*)$", text)
    if m:
        return float(m.group(1)) + float(m.group(2)), m.group(3).strip()

    m = _DASHED_MIXED_RE.match(text)
    if m:
        frac = _number(m.group(2))
        if frac is not None:
            return float(m.group(1)) + frac, m.group(3).strip()

    # Ranges: take the upper bound so the list covers the recipe
    rm = _RANGE_RE.match(text)
    if rm and _NUMBER_RE.match(rm.group(1)) and _NUMBER_RE.match(rm.group(2)):
        low = _NUMBER_RE.match(rm.group(1))
        high = _NUMBER_RE.match(rm.group(2))
        if not low.group("rest"):
            hi_val = _number(high.group("num"))
            if hi_val is not None:
                return hi_val, high.group("rest").strip()

    m = _NUMBER_RE.match(text)
    if not m:
        return None, text
    return _number(m.group("num")), m.group("rest").strip()


def parse_quantity(amount: Optional[str]) -> Optional[float]:
    qty, rest = split_amount(amount)
    return qty


def singularize(word: str) -> str:
    if word in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[word]
    if word in FALSE_PLURALS or len(word) <= 3:
        return word
    if word.endswith("ies") and len(word) > 4:
        return word[:-3] + "y"
    if word.endswith(("ches", "shes", "xes")):
        return word[:-2]
    if word.endswith(("ss", "us", "is")):
        return word
    if word.endswith("s"):
        return word[:-1]
    return word


def normalize_name(name: str) -> str:
    """
    Normalize ingredient name to the key used for merging.

    Rules:
    - Lowercase, trim
    - Parentheticals and punctuation removed
    - Preparation/size descriptors removed
    - Alias rewrite
    - Head (last) word singularized
    """
    if not name:
        return ""

    s = name.lower().strip()
    s = re.sub(r"\([^)]*\)", " ", s)
    # Anything after a comma is preparation ("eggs, beaten")
    s = s.split(",", 1)[0]
    s = re.sub(r"[^\w\s-]", " ", s)
    s = s.replace("-", " ").replace("_", " ")
    s = re.sub(r"\s+", " ", s).strip()

    if s in ALIASES:
        s = ALIASES[s]

    words = [w for w in s.split() if w not in DESCRIPTORS and w != "of"]
    if not words:
        # Name was only descriptors; keep what we had
        words = s.split()
    if not words:
        return ""

    words[-1] = singularize(words[-1])
    key = " ".join(words)
    return ALIASES.get(key, key)


def display_name(key: str, fallback: str = "") -> str:
    base = key or (fallback or "").strip().lower()
    return base[:1].upper() + base[1:]


def parse(record: IngredientRecord) -> Union[ParsedIngredient, ParseFailure]:
    key = normalize_name(record.name)
    display = display_name(key, record.name)

    qty, rest = split_amount(record.amount)
    if qty is None:
        reason = "missing_amount" if not (record.amount or "").strip() else "non_numeric_amount"
        logger.warning(f"Unparseable ingredient amount {record.amount!r} for {record.name!r} ({reason})")
        return ParseFailure(record=record, reason=reason, key=key, display=display)

    if qty <= 0:
        logger.warning(f"Non-positive ingredient amount {record.amount!r} for {record.name!r}")
        return ParseFailure(record=record, reason="non_positive_amount", key=key, display=display)

    # Case kept: "T" and "t" are different spoons
    unit = (record.unit or "").strip()
    if not unit and rest:
        # "8 oz" / "100g" typed into the amount field
        unit = rest

    return ParsedIngredient(key=key, display=display, quantity=qty, unit=unit, record=record)
