"""Value types passed between the meal-plan loader, the aggregation engine
and the persistence gateway. None of these are ORM objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class IngredientRecord:
    name: str
    amount: Optional[str] = None
    unit: Optional[str] = None

    def raw_line(self, name_first: bool = False) -> str:
        """The ingredient as authored. With name_first, "salt, to taste"
        rather than "to taste salt"."""
        amount = " ".join(p.strip() for p in (self.amount, self.unit) if p and p.strip())
        name = (self.name or "").strip()
        if name_first:
            return ", ".join(p for p in (name, amount) if p)
        return " ".join(p for p in (amount, name) if p)


@dataclass(frozen=True)
class RecipeSnapshot:
    id: str
    name: str
    ingredients: tuple[IngredientRecord, ...] = ()


@dataclass(frozen=True)
class MealSnapshot:
    meal_type: str
    recipe: Optional[RecipeSnapshot] = None


@dataclass(frozen=True)
class DaySnapshot:
    index: int
    meals: tuple[MealSnapshot, ...] = ()


@dataclass(frozen=True)
class MealPlanSnapshot:
    """Fully hydrated meal plan: days -> meals -> recipe -> ingredients."""
    id: str
    name: str
    trainer_id: Optional[str] = None
    days: tuple[DaySnapshot, ...] = ()

    @classmethod
    def empty(cls, plan_id: str, name: str = "") -> "MealPlanSnapshot":
        return cls(id=plan_id, name=name)


@dataclass
class GroceryItem:
    key: str
    display: str
    quantity: Optional[float]
    unit: Optional[str]
    category: str
    recipe_ids: list[str] = field(default_factory=list)
    raw: list[str] = field(default_factory=list)
    is_residual: bool = False
    priority: str = "medium"
    notes: Optional[str] = None
    display_quantity: Optional[float] = None
    display_unit: Optional[str] = None


@dataclass
class AggregationResult:
    items: list[GroceryItem] = field(default_factory=list)
    residuals: list[GroceryItem] = field(default_factory=list)
    ingredient_count: int = 0
    recipe_count: int = 0

    @classmethod
    def empty(cls) -> "AggregationResult":
        return cls()
