"""FastAPI dependencies for the grocerygen API.

Provides:
- Database session dependency
- Per-request collaborators for the grocery list agent
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from .agents.grocery_agent import GroceryListAgent
from .db import get_db
from .infra.grocery_store import SqlGroceryListGateway
from .infra.redis_client import get_sync_redis
from .services.feature_flags import RedisFeatureFlags
from .services.meal_plans import MealPlanRepository

__all__ = ["get_db", "get_feature_flags", "get_meal_plans", "get_grocery_gateway", "get_grocery_agent"]


def get_feature_flags() -> RedisFeatureFlags:
    return RedisFeatureFlags(get_sync_redis())


def get_meal_plans(db: Session = Depends(get_db)) -> MealPlanRepository:
    return MealPlanRepository(db)


def get_grocery_gateway(db: Session = Depends(get_db)) -> SqlGroceryListGateway:
    return SqlGroceryListGateway(db)


def get_grocery_agent(
    flags: RedisFeatureFlags = Depends(get_feature_flags),
    plans: MealPlanRepository = Depends(get_meal_plans),
    gateway: SqlGroceryListGateway = Depends(get_grocery_gateway),
) -> GroceryListAgent:
    """Agent wired to the request's session, with plan deletion cascading to lists."""
    agent = GroceryListAgent(flags, plans, gateway)
    agent.register()
    return agent
