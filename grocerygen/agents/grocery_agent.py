"""Grocery List Agent.

Reacts to plan assignment and plan deletion. The only collaborators are the
feature flags, the meal plan repository and the grocery list gateway, so the
agent itself holds no state between calls.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..domain import AggregationResult, MealPlanSnapshot
from ..infra.grocery_store import SqlGroceryListGateway
from ..models import GroceryList
from ..services.aggregation import aggregate
from ..services.feature_flags import AUTO_GENERATE_GROCERY_LISTS, UPDATE_EXISTING_LISTS, FeatureFlags
from ..services.meal_plans import MealPlanRepository

logger = logging.getLogger("grocerygen.agent")

REASON_DISABLED = "Auto-generation is disabled"
REASON_PLAN_NOT_FOUND = "Meal plan not found"
REASON_UPDATES_DISABLED = "Grocery list already exists and updates are disabled"


class GenerationAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


@dataclass
class GenerationResult:
    action: GenerationAction
    reason: Optional[str] = None
    grocery_list: Optional[GroceryList] = None
    item_count: int = 0
    residual_count: int = 0
    ingredient_count: int = 0

    @classmethod
    def skipped(cls, reason: str) -> "GenerationResult":
        return cls(action=GenerationAction.SKIPPED, reason=reason)


def list_name(plan: MealPlanSnapshot) -> str:
    return f"Grocery List - {plan.name}"


class GroceryListAgent:
    def __init__(self, flags: FeatureFlags, plans: MealPlanRepository, gateway: SqlGroceryListGateway):
        self.flags = flags
        self.plans = plans
        self.gateway = gateway

    def register(self, plans: Optional[MealPlanRepository] = None) -> None:
        """Delete a plan's grocery lists whenever the plan itself is deleted."""
        (plans or self.plans).on_delete(self.on_plan_deleted)

    def _aggregate(self, plan: MealPlanSnapshot) -> AggregationResult:
        try:
            return aggregate(plan)
        except Exception:
            # A bad recipe must not block the assignment
            logger.exception(f"Aggregation failed for plan {plan.id}, writing empty list")
            return AggregationResult.empty()

    def on_assignment(self, plan_id: str, customer_id: str) -> GenerationResult:
        """Create or refresh the grocery list for a plan assignment.

        Safe to call repeatedly for the same pair. Raises
        GroceryPersistenceError only when the write itself fails.
        """
        if not self.flags.is_enabled(AUTO_GENERATE_GROCERY_LISTS):
            logger.info(f"Skipping grocery list for plan {plan_id} / customer {customer_id}: {REASON_DISABLED}")
            return GenerationResult.skipped(REASON_DISABLED)

        plan = self.plans.get_plan_with_recipes(plan_id)
        if plan is None:
            logger.info(f"Skipping grocery list for plan {plan_id} / customer {customer_id}: {REASON_PLAN_NOT_FOUND}")
            return GenerationResult.skipped(REASON_PLAN_NOT_FOUND)

        result = self._aggregate(plan)
        overwrite = self.flags.is_enabled(UPDATE_EXISTING_LISTS)

        grocery_list, action = self.gateway.upsert_grocery_list(
            plan.id,
            customer_id,
            list_name(plan),
            result.items,
            result.residuals,
            overwrite=overwrite,
        )

        if action == GenerationAction.UNCHANGED.value:
            logger.info(f"Grocery list {grocery_list.id} left as is: {REASON_UPDATES_DISABLED}")
            return GenerationResult(
                action=GenerationAction.UNCHANGED,
                reason=REASON_UPDATES_DISABLED,
                grocery_list=grocery_list,
                item_count=len(grocery_list.items),
                residual_count=len(grocery_list.residuals),
            )

        logger.info(
            f"Grocery list {grocery_list.id} {action} for plan {plan.id} / customer {customer_id}: "
            f"{len(result.items)} items, {len(result.residuals)} residuals "
            f"from {result.ingredient_count} ingredients in {result.recipe_count} recipes"
        )
        return GenerationResult(
            action=GenerationAction(action),
            grocery_list=grocery_list,
            item_count=len(result.items),
            residual_count=len(result.residuals),
            ingredient_count=result.ingredient_count,
        )

    def on_plan_deleted(self, plan_id: str) -> int:
        deleted = self.gateway.delete_grocery_lists_for_plan(plan_id)
        if deleted:
            logger.info(f"Removed {deleted} grocery list(s) with deleted plan {plan_id}")
        return deleted

    def get_grocery_list(self, plan_id: str, customer_id: str) -> Optional[GroceryList]:
        return self.gateway.get_grocery_list(plan_id, customer_id)

    def preview(self, plan_id: str) -> Optional[AggregationResult]:
        plan = self.plans.get_plan_with_recipes(plan_id)
        if plan is None:
            return None
        return aggregate(plan)
