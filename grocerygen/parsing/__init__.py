from .ingredient_parser import (
    ParsedIngredient,
    ParseFailure,
    normalize_name,
    parse,
    parse_quantity,
)

__all__ = ["ParsedIngredient", "ParseFailure", "normalize_name", "parse", "parse_quantity"]
