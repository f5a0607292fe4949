from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..agents.grocery_agent import GroceryListAgent
from ..deps import get_grocery_agent

router = APIRouter()


@router.delete("/plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(
    plan_id: str,
    agent: GroceryListAgent = Depends(get_grocery_agent),
):
    """Delete a meal plan. Its grocery lists go in the same transaction."""
    if not agent.plans.delete_plan(plan_id):
        raise HTTPException(status_code=404, detail="Meal plan not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
