"""Recipes, meal plans and generated grocery lists

Revision ID: 001_grocery_lists
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_grocery_lists"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Recipes table
    op.create_table(
        "recipes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Recipe ingredients (free text as authored)
    op.create_table(
        "recipe_ingredients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("amount", sa.String(50), nullable=True),
        sa.Column("unit", sa.String(50), nullable=True),
    )
    op.create_index("ix_recipe_ingredients_recipe_id", "recipe_ingredients", ["recipe_id"])

    # Meal plans
    op.create_table(
        "meal_plans",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("trainer_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_meal_plans_trainer_id", "meal_plans", ["trainer_id"])

    op.create_table(
        "meal_plan_entries",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("meal_plan_id", sa.String(36), sa.ForeignKey("meal_plans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_index", sa.Integer, nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("meal_type", sa.String(20), nullable=False),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_meal_plan_entries_plan_day", "meal_plan_entries", ["meal_plan_id", "day_index"])

    # Grocery lists: one per (plan, customer)
    op.create_table(
        "grocery_lists",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("meal_plan_id", sa.String(36), sa.ForeignKey("meal_plans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("customer_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("revision", sa.Integer, nullable=False, server_default="1"),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("meal_plan_id", "customer_id", name="uq_grocery_lists_plan_customer"),
    )
    op.create_index("ix_grocery_lists_customer_id", "grocery_lists", ["customer_id"])

    op.create_table(
        "grocery_list_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("list_id", sa.String(36), sa.ForeignKey("grocery_lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("key", sa.String(255), nullable=False),
        sa.Column("display", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Float, nullable=True),
        sa.Column("unit", sa.String(50), nullable=True),
        sa.Column("display_quantity", sa.Float, nullable=True),
        sa.Column("display_unit", sa.String(50), nullable=True),
        sa.Column("category", sa.String(50), nullable=False, server_default="other"),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("is_residual", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("raw", postgresql.JSONB, nullable=True),
        sa.Column("sources", postgresql.JSONB, nullable=True),
        sa.Column("checked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_grocery_list_items_list_id", "grocery_list_items", ["list_id"])


def downgrade() -> None:
    op.drop_index("ix_grocery_list_items_list_id", table_name="grocery_list_items")
    op.drop_table("grocery_list_items")
    op.drop_index("ix_grocery_lists_customer_id", table_name="grocery_lists")
    op.drop_table("grocery_lists")
    op.drop_index("ix_meal_plan_entries_plan_day", table_name="meal_plan_entries")
    op.drop_table("meal_plan_entries")
    op.drop_index("ix_meal_plans_trainer_id", table_name="meal_plans")
    op.drop_table("meal_plans")
    op.drop_index("ix_recipe_ingredients_recipe_id", table_name="recipe_ingredients")
    op.drop_table("recipe_ingredients")
    op.drop_table("recipes")
