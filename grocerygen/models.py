"""SQLAlchemy ORM models for grocerygen.

Tables:
- recipes / recipe_ingredients: Recipe source data with raw ingredient text
- meal_plans / meal_plan_entries: Trainer-owned plans (day -> meal -> recipe)
- grocery_lists / grocery_list_items: Generated lists, one per (plan, customer)
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Text,
    Integer,
    Boolean,
    Float,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func, false
from sqlalchemy.dialects.postgresql import JSONB

from .db import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Recipe(Base):
    """Recipe referenced by meal plan entries. Read-only for the engine."""
    __tablename__ = "recipes"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    ingredients: Mapped[list["RecipeIngredient"]] = relationship(
        "RecipeIngredient", back_populates="recipe", cascade="all, delete-orphan",
        order_by="RecipeIngredient.position"
    )


class RecipeIngredient(Base):
    """Ingredient line exactly as authored (free-text amount and unit)."""
    __tablename__ = "recipe_ingredients"
    __table_args__ = (
        Index("ix_recipe_ingredients_recipe_id", "recipe_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Relationships
    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="ingredients")


class MealPlan(Base):
    """Meal plan created by a trainer and assigned to customers."""
    __tablename__ = "meal_plans"
    __table_args__ = (
        Index("ix_meal_plans_trainer_id", "trainer_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    trainer_id: Mapped[str] = mapped_column(String(36), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    entries: Mapped[list["MealPlanEntry"]] = relationship(
        "MealPlanEntry", back_populates="meal_plan", cascade="all, delete-orphan",
        order_by="[MealPlanEntry.day_index, MealPlanEntry.position]"
    )


class MealPlanEntry(Base):
    """Single meal slot: day N, meal M -> recipe."""
    __tablename__ = "meal_plan_entries"
    __table_args__ = (
        Index("ix_meal_plan_entries_plan_day", "meal_plan_id", "day_index"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    meal_plan_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("meal_plans.id", ondelete="CASCADE"), nullable=False
    )

    day_index: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    meal_type: Mapped[str] = mapped_column(String(20), nullable=False)  # breakfast | lunch | dinner | snack

    # Null when the recipe was deleted after the plan was built
    recipe_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    meal_plan: Mapped["MealPlan"] = relationship("MealPlan", back_populates="entries")
    recipe: Mapped[Optional["Recipe"]] = relationship("Recipe")


class GroceryList(Base):
    """Grocery list generated from a meal plan for one customer."""
    __tablename__ = "grocery_lists"
    __table_args__ = (
        UniqueConstraint("meal_plan_id", "customer_id", name="uq_grocery_lists_plan_customer"),
        Index("ix_grocery_lists_customer_id", "customer_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    meal_plan_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("meal_plans.id", ondelete="CASCADE"), nullable=False
    )
    customer_id: Mapped[str] = mapped_column(String(36), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    all_items: Mapped[list["GroceryListItem"]] = relationship(
        "GroceryListItem", back_populates="list", cascade="all, delete-orphan",
        order_by="GroceryListItem.position"
    )

    @property
    def items(self) -> list["GroceryListItem"]:
        return [i for i in self.all_items if not i.is_residual]

    @property
    def residuals(self) -> list["GroceryListItem"]:
        return [i for i in self.all_items if i.is_residual]


class GroceryListItem(Base):
    """Line on a grocery list: merged total or residual (unmerged) ingredient."""
    __tablename__ = "grocery_list_items"
    __table_args__ = (
        Index("ix_grocery_list_items_list_id", "list_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    list_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("grocery_lists.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    key: Mapped[str] = mapped_column(String(255), nullable=False)  # Normalized name
    display: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    display_quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    display_unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    category: Mapped[str] = mapped_column(String(50), nullable=False, server_default="other")
    priority: Mapped[str] = mapped_column(String(20), nullable=False, server_default="medium")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_residual: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())

    raw: Mapped[Optional[list]] = mapped_column(JSONB, nullable=True)  # Original ingredient lines
    sources: Mapped[Optional[list]] = mapped_column(JSONB, nullable=True)  # Recipe ids

    checked: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    list: Mapped["GroceryList"] = relationship("GroceryList", back_populates="all_items")
