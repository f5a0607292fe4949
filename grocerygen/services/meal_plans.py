"""Meal plan access for grocery generation.

Loads a plan with every recipe and ingredient in one go and exposes a
deletion hook so dependent data can be removed in the same transaction as
the plan itself.
"""

import logging
from itertools import groupby
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from .. import models
from ..domain import DaySnapshot, IngredientRecord, MealPlanSnapshot, MealSnapshot, RecipeSnapshot

logger = logging.getLogger("grocerygen.meal_plans")

DeleteHook = Callable[[str], object]


def snapshot_recipe(recipe: models.Recipe) -> RecipeSnapshot:
    return RecipeSnapshot(
        id=recipe.id,
        name=recipe.name,
        ingredients=tuple(
            IngredientRecord(name=ing.name, amount=ing.amount, unit=ing.unit)
            for ing in recipe.ingredients
        ),
    )


def snapshot_plan(plan: models.MealPlan) -> MealPlanSnapshot:
    # entries are ordered by (day_index, position) on the relationship
    days = []
    for day_index, entries in groupby(plan.entries, key=lambda e: e.day_index):
        meals = tuple(
            MealSnapshot(
                meal_type=entry.meal_type,
                recipe=snapshot_recipe(entry.recipe) if entry.recipe else None,
            )
            for entry in entries
        )
        days.append(DaySnapshot(index=day_index, meals=meals))

    return MealPlanSnapshot(
        id=plan.id,
        name=plan.name,
        trainer_id=plan.trainer_id,
        days=tuple(days),
    )


class MealPlanRepository:
    def __init__(self, db: Session):
        self.db = db
        self._delete_hooks: list[DeleteHook] = []

    def get_plan_with_recipes(self, plan_id: str) -> Optional[MealPlanSnapshot]:
        stmt = select(models.MealPlan).options(
            selectinload(models.MealPlan.entries)
            .selectinload(models.MealPlanEntry.recipe)
            .selectinload(models.Recipe.ingredients)
        ).where(models.MealPlan.id == plan_id)

        plan = self.db.execute(stmt).scalar_one_or_none()
        if plan is None:
            return None
        return snapshot_plan(plan)

    def on_delete(self, hook: DeleteHook) -> None:
        """Register a callback run inside the plan deletion transaction."""
        self._delete_hooks.append(hook)

    def delete_plan(self, plan_id: str) -> bool:
        """Delete a plan and everything hooked to it atomically.

        Returns False when the plan does not exist.
        """
        plan = self.db.get(models.MealPlan, plan_id)
        if plan is None:
            return False

        try:
            for hook in self._delete_hooks:
                hook(plan_id)
            self.db.delete(plan)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Deleted meal plan {plan_id} ({len(self._delete_hooks)} hooks)")
        return True
