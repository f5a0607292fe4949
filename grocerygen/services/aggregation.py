"""
Ingredient aggregation for grocery list generation.

Turns every ingredient of every recipe in a meal plan into a consolidated set
of grocery items. Ingredients are merged only when their normalized names match
and their units share a dimension; everything else is kept as a residual line
so nothing a recipe needs goes missing.
"""

import logging
from typing import Iterator, Optional, Tuple

from ..domain import AggregationResult, GroceryItem, IngredientRecord, MealPlanSnapshot, RecipeSnapshot
from ..parsing.ingredient_parser import ParseFailure, parse
from .categorizer import CATEGORY_ORDER, Category, categorize
from .unit_conversion import Dimension, normalize, to_display_unit, format_quantity

logger = logging.getLogger("grocerygen.aggregation")

MAX_NOTE_RECIPES = 3


def flatten(plan: MealPlanSnapshot) -> Iterator[Tuple[IngredientRecord, RecipeSnapshot]]:
    """Yield (ingredient, recipe) in plan order: day -> meal -> ingredient."""
    for day in plan.days:
        for meal in day.meals:
            if meal.recipe is None:
                continue
            for record in meal.recipe.ingredients:
                yield record, meal.recipe


def determine_priority(category: Category, dimension: Dimension, quantity: Optional[float]) -> str:
    # Perishables first
    if category in (Category.MEAT, Category.DAIRY):
        return "high"
    if category is Category.PRODUCE and dimension is Dimension.COUNT and quantity is not None and quantity <= 2:
        return "high"
    if category is Category.PANTRY:
        return "low"
    return "medium"


def build_notes(recipe_names: list[str]) -> Optional[str]:
    unique = list(dict.fromkeys(recipe_names))
    if len(unique) <= 1:
        return None
    note = f"Used in: {', '.join(unique[:MAX_NOTE_RECIPES])}"
    if len(unique) > MAX_NOTE_RECIPES:
        note += f" and {len(unique) - MAX_NOTE_RECIPES} more"
    return note


def _sort_key(item: GroceryItem):
    return (
        CATEGORY_ORDER.index(Category(item.category)),
        item.display.lower(),
        item.unit or "",
        item.raw[0] if item.raw else "",
    )


def _residual(recipe: RecipeSnapshot, raw: str, key: str, display: str,
              quantity: Optional[float], unit: Optional[str]) -> GroceryItem:
    category = categorize(key)
    return GroceryItem(
        key=key,
        display=display,
        quantity=quantity,
        unit=unit or None,
        category=category.value,
        recipe_ids=[recipe.id],
        raw=[raw],
        is_residual=True,
        priority=determine_priority(category, Dimension.UNKNOWN, quantity),
        display_quantity=format_quantity(quantity) if quantity is not None else None,
        display_unit=unit or None,
    )


def aggregate(plan: MealPlanSnapshot) -> AggregationResult:
    """Aggregate a meal plan into grocery items and residuals.

    Pure and deterministic: the same plan always yields the same ordered output.
    """
    groups: dict[tuple[str, str], dict] = {}
    residuals: list[GroceryItem] = []
    ingredient_count = 0
    recipe_ids: set[str] = set()

    for record, recipe in flatten(plan):
        ingredient_count += 1
        recipe_ids.add(recipe.id)

        parsed = parse(record)
        if isinstance(parsed, ParseFailure):
            unit = (record.unit or "").strip().lower()
            residuals.append(_residual(recipe, record.raw_line(name_first=True), parsed.key, parsed.display, None, unit))
            continue

        info = normalize(parsed.unit, parsed.key)
        if not info.mergeable:
            residuals.append(_residual(recipe, record.raw_line(), parsed.key, parsed.display,
                                       parsed.quantity, info.canonical_unit))
            continue

        group_key = (parsed.key, info.canonical_unit)
        group = groups.get(group_key)
        if group is None:
            group = groups[group_key] = {
                "key": parsed.key,
                "display": parsed.display,
                "dimension": info.dimension,
                "unit": info.canonical_unit,
                "category": categorize(parsed.key),
                "quantity": 0.0,
                "recipe_ids": [],
                "recipe_names": [],
                "raw": [],
            }

        # No rounding until the total is known
        group["quantity"] += parsed.quantity * info.factor
        if recipe.id not in group["recipe_ids"]:
            group["recipe_ids"].append(recipe.id)
        group["recipe_names"].append(recipe.name)
        group["raw"].append(record.raw_line())

    items = []
    for group in groups.values():
        display_qty, display_unit = to_display_unit(group["quantity"], group["dimension"], group["unit"])
        items.append(GroceryItem(
            key=group["key"],
            display=group["display"],
            quantity=group["quantity"],
            unit=group["unit"],
            category=group["category"].value,
            recipe_ids=group["recipe_ids"],
            raw=group["raw"],
            priority=determine_priority(group["category"], group["dimension"], group["quantity"]),
            notes=build_notes(group["recipe_names"]),
            display_quantity=display_qty,
            display_unit=display_unit,
        ))

    items.sort(key=_sort_key)
    residuals.sort(key=_sort_key)

    if residuals:
        logger.info(f"Plan {plan.id}: {len(items)} merged items, {len(residuals)} residual items")

    return AggregationResult(
        items=items,
        residuals=residuals,
        ingredient_count=ingredient_count,
        recipe_count=len(recipe_ids),
    )
