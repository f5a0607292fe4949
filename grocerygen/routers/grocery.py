from fastapi import APIRouter, Depends, HTTPException, Response, status

from .. import schemas
from ..agents.grocery_agent import GenerationResult, GroceryListAgent
from ..deps import get_grocery_agent
from ..infra.grocery_store import GroceryPersistenceError
from ..infra.redis_client import get_sync_redis
from ..worker import enqueue_assignment

router = APIRouter()


def _assignment_response(result: GenerationResult) -> schemas.AssignmentResponse:
    return schemas.AssignmentResponse(
        action=result.action.value,
        reason=result.reason,
        item_count=result.item_count,
        residual_count=result.residual_count,
        list=schemas.GroceryListOut.model_validate(result.grocery_list) if result.grocery_list else None,
    )


@router.post("/assignments", response_model=schemas.AssignmentResponse)
def assign_plan(
    request: schemas.AssignmentRequest,
    response: Response,
    agent: GroceryListAgent = Depends(get_grocery_agent),
):
    """Plan assigned to a customer: build (or refresh) their grocery list."""
    if request.defer:
        enqueue_assignment(get_sync_redis(), request.plan_id, request.customer_id)
        response.status_code = status.HTTP_202_ACCEPTED
        return schemas.AssignmentResponse(action="queued")

    try:
        result = agent.on_assignment(request.plan_id, request.customer_id)
    except GroceryPersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not save grocery list: {e}",
        )
    return _assignment_response(result)


@router.get("/lists/{plan_id}/{customer_id}", response_model=schemas.GroceryListOut)
def get_grocery_list(
    plan_id: str,
    customer_id: str,
    agent: GroceryListAgent = Depends(get_grocery_agent),
):
    grocery_list = agent.get_grocery_list(plan_id, customer_id)
    if not grocery_list:
        raise HTTPException(status_code=404, detail="Grocery list not found")
    return grocery_list


@router.get("/plans/{plan_id}/preview", response_model=schemas.AggregationPreviewOut)
def preview_grocery_list(
    plan_id: str,
    agent: GroceryListAgent = Depends(get_grocery_agent),
):
    """Aggregate a plan without saving anything."""
    result = agent.preview(plan_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Meal plan not found")

    return schemas.AggregationPreviewOut(
        plan_id=plan_id,
        ingredient_count=result.ingredient_count,
        recipe_count=result.recipe_count,
        items=[schemas.GroceryItemPreview.model_validate(i) for i in result.items],
        residuals=[schemas.GroceryItemPreview.model_validate(i) for i in result.residuals],
    )
