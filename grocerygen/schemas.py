from datetime import datetime
from typing import Optional

from pydantic import BaseModel


# --- Grocery ---

class GroceryListItemOut(BaseModel):
    id: str
    key: str
    display: str
    quantity: Optional[float]
    unit: Optional[str]
    display_quantity: Optional[float] = None
    display_unit: Optional[str] = None
    category: str
    priority: str
    notes: Optional[str] = None
    is_residual: bool
    raw: list[str] = []
    sources: list[str] = []
    checked: bool = False

    class Config:
        from_attributes = True


class GroceryListOut(BaseModel):
    id: str
    meal_plan_id: str
    customer_id: str
    name: str
    revision: int
    generated_at: datetime
    items: list[GroceryListItemOut] = []
    residuals: list[GroceryListItemOut] = []

    class Config:
        from_attributes = True


class AssignmentRequest(BaseModel):
    plan_id: str
    customer_id: str
    defer: bool = False  # Hand off to the worker instead of generating inline


class AssignmentResponse(BaseModel):
    action: str  # created | updated | unchanged | skipped | queued
    reason: Optional[str] = None
    item_count: int = 0
    residual_count: int = 0
    list: Optional[GroceryListOut] = None


class GroceryItemPreview(BaseModel):
    key: str
    display: str
    quantity: Optional[float]
    unit: Optional[str]
    display_quantity: Optional[float] = None
    display_unit: Optional[str] = None
    category: str
    priority: str
    notes: Optional[str] = None
    is_residual: bool
    raw: list[str] = []
    recipe_ids: list[str] = []

    class Config:
        from_attributes = True


class AggregationPreviewOut(BaseModel):
    plan_id: str
    ingredient_count: int
    recipe_count: int
    items: list[GroceryItemPreview] = []
    residuals: list[GroceryItemPreview] = []


# --- Feature flags ---

class FeatureFlagOut(BaseModel):
    name: str
    enabled: bool


class FeatureFlagUpdate(BaseModel):
    enabled: bool
