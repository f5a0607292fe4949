"""
Unit normalization for grocery aggregation.

Maps free-text units onto mass, volume and count dimensions with a fixed
canonical unit per dimension. Units from different dimensions are never
converted into each other.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Dimension(str, Enum):
    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"
    UNKNOWN = "unknown"


CANONICAL_UNITS = {
    Dimension.MASS: "g",
    Dimension.VOLUME: "ml",
    Dimension.COUNT: "piece",
}


@dataclass(frozen=True)
class UnitInfo:
    dimension: Dimension
    canonical_unit: str
    factor: float

    @property
    def mergeable(self) -> bool:
        return self.dimension is not Dimension.UNKNOWN


# --- Data Tables ---

# Normalized unit -> (dimension, factor_to_canonical)
# Canonical units: g (mass), ml (volume), piece (count)
UNITS_DB = {
    # Mass (canonical: g)
    "g": (Dimension.MASS, 1.0),
    "gram": (Dimension.MASS, 1.0),
    "gr": (Dimension.MASS, 1.0),
    "kg": (Dimension.MASS, 1000.0),
    "kilogram": (Dimension.MASS, 1000.0),
    "mg": (Dimension.MASS, 0.001),
    "milligram": (Dimension.MASS, 0.001),
    "oz": (Dimension.MASS, 28.3495),
    "ounce": (Dimension.MASS, 28.3495),
    "lb": (Dimension.MASS, 453.592),
    "lbs": (Dimension.MASS, 453.592),
    "pound": (Dimension.MASS, 453.592),

    # Volume (canonical: ml)
    "ml": (Dimension.VOLUME, 1.0),
    "milliliter": (Dimension.VOLUME, 1.0),
    "millilitre": (Dimension.VOLUME, 1.0),
    "l": (Dimension.VOLUME, 1000.0),
    "liter": (Dimension.VOLUME, 1000.0),
    "litre": (Dimension.VOLUME, 1000.0),
    "tsp": (Dimension.VOLUME, 4.92892),
    "teaspoon": (Dimension.VOLUME, 4.92892),
    "tbsp": (Dimension.VOLUME, 14.7868),
    "tablespoon": (Dimension.VOLUME, 14.7868),
    "fl oz": (Dimension.VOLUME, 29.5735),
    "fluid ounce": (Dimension.VOLUME, 29.5735),
    "c": (Dimension.VOLUME, 236.588),  # US Cup
    "cup": (Dimension.VOLUME, 236.588),
    "pt": (Dimension.VOLUME, 473.176),
    "pint": (Dimension.VOLUME, 473.176),
    "qt": (Dimension.VOLUME, 946.353),
    "quart": (Dimension.VOLUME, 946.353),
    "gal": (Dimension.VOLUME, 3785.41),
    "gallon": (Dimension.VOLUME, 3785.41),

    # Count (canonical: piece)
    "piece": (Dimension.COUNT, 1.0),
    "pc": (Dimension.COUNT, 1.0),
    "pcs": (Dimension.COUNT, 1.0),
    "each": (Dimension.COUNT, 1.0),
    "ea": (Dimension.COUNT, 1.0),
    "whole": (Dimension.COUNT, 1.0),
    "clove": (Dimension.COUNT, 1.0),
    "slice": (Dimension.COUNT, 1.0),
    "can": (Dimension.COUNT, 1.0),
    "stick": (Dimension.COUNT, 1.0),
}

# Case-sensitive shorthands first, then lower-case aliases
SYNONYMS = {
    "t": "tsp",
    "T": "tbsp",
    "tbl": "tbsp",
    "tbs": "tbsp",
    "floz": "fl oz",
    "fl. oz": "fl oz",
    "fluid oz": "fl oz",
}

# Ounces are fluid ounces when the ingredient's head (last) word is one of these
LIQUID_HINTS = (
    "broth", "stock", "milk", "juice", "water", "oil", "vinegar",
    "sauce", "cream", "wine", "syrup", "beer",
)

_OUNCE_UNITS = {"oz", "ounce"}


# --- Core Functions ---

def normalize_unit(unit: Optional[str]) -> Optional[str]:
    """Normalize unit string to key in UNITS_DB."""
    if not unit:
        return None

    # 1. Check strict case synonyms (e.g. 'T' vs 't')
    raw_clean = re.sub(r"\s+", " ", unit.strip().rstrip("."))
    if raw_clean in SYNONYMS:
        return SYNONYMS[raw_clean]

    u = raw_clean.lower()

    # Check direct
    if u in UNITS_DB:
        return u

    # Check synonyms
    if u in SYNONYMS:
        return SYNONYMS[u]

    # Check plural removal ("cups", "pinches" is not a unit we know)
    if u.endswith("es") and u[:-2] in UNITS_DB:
        return u[:-2]
    if u.endswith("s") and u[:-1] in UNITS_DB:
        return u[:-1]
    if u.endswith("s") and u[:-1] in SYNONYMS:
        return SYNONYMS[u[:-1]]

    return None


def is_liquid(ingredient_name: str) -> bool:
    # "cream cheese" and "milk chocolate" are solids
    words = re.findall(r"[a-z]+", (ingredient_name or "").lower())
    return bool(words) and words[-1] in LIQUID_HINTS


def normalize(unit: Optional[str], ingredient_name: str = "") -> UnitInfo:
    """Resolve a raw unit to its dimension, canonical unit and factor.

    Unknown or missing units come back with Dimension.UNKNOWN and the raw
    unit (lower-cased, trimmed) as their canonical unit so they can still be
    displayed.
    """
    norm = normalize_unit(unit)
    if norm is None:
        raw = (unit or "").strip().lower()
        return UnitInfo(Dimension.UNKNOWN, raw, 1.0)

    if norm in _OUNCE_UNITS and is_liquid(ingredient_name):
        norm = "fl oz"

    dimension, factor = UNITS_DB[norm]
    return UnitInfo(dimension, CANONICAL_UNITS[dimension], factor)


def format_quantity(qty: float) -> float:
    """Round a final total for display. Never applied before summing."""
    # Small numbers: 2 decimals
    if qty < 10:
        return round(qty, 2)
    # Medium numbers: 1 decimal
    if qty < 100:
        return round(qty, 1)
    # Large numbers: integer
    return float(round(qty))


def to_display_unit(qty: float, dimension: Dimension, unit: Optional[str]) -> Tuple[float, Optional[str]]:
    """Pick a readable metric unit for a canonical total."""
    if dimension is Dimension.MASS and qty >= 1000:
        return format_quantity(qty / 1000.0), "kg"
    if dimension is Dimension.VOLUME and qty >= 1000:
        return format_quantity(qty / 1000.0), "l"
    return format_quantity(qty), unit
