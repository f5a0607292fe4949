"""Grocery list persistence.

All writes to a (meal plan, customer) list go through one
`INSERT ... ON CONFLICT (meal_plan_id, customer_id)` statement plus item
replacement in the same transaction. The unique constraint, not an
application-level lookup, is what keeps concurrent assignments from creating
two lists.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..domain import GroceryItem
from ..models import GroceryList, GroceryListItem, generate_uuid

logger = logging.getLogger("grocerygen.store")

CONFLICT_COLUMNS = ["meal_plan_id", "customer_id"]


class GroceryPersistenceError(RuntimeError):
    """The grocery list store could not complete a write."""


def _item_rows(list_id: str, items: Iterable[GroceryItem], residuals: Iterable[GroceryItem]) -> list[GroceryListItem]:
    rows = []
    for position, item in enumerate([*items, *residuals]):
        rows.append(GroceryListItem(
            list_id=list_id,
            position=position,
            key=item.key,
            display=item.display,
            quantity=item.quantity,
            unit=item.unit,
            display_quantity=item.display_quantity,
            display_unit=item.display_unit,
            category=item.category,
            priority=item.priority,
            notes=item.notes,
            is_residual=item.is_residual,
            raw=list(item.raw),
            sources=list(item.recipe_ids),
        ))
    return rows


class SqlGroceryListGateway:
    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert
        if dialect == "sqlite":
            return sqlite_insert
        raise GroceryPersistenceError(f"Upsert not supported on dialect {dialect!r}")

    def upsert_grocery_list(
        self,
        plan_id: str,
        customer_id: str,
        name: str,
        items: Iterable[GroceryItem],
        residuals: Iterable[GroceryItem],
        *,
        overwrite: bool = True,
    ) -> tuple[GroceryList, str]:
        """Insert or replace the list for (plan_id, customer_id).

        Returns (list, action) where action is "created", "updated", or
        "unchanged" (overwrite=False and a list already existed).
        """
        table = GroceryList.__table__
        now = datetime.now(timezone.utc)

        stmt = self._insert()(table).values(
            id=generate_uuid(),
            meal_plan_id=plan_id,
            customer_id=customer_id,
            name=name,
            revision=1,
            generated_at=now,
            updated_at=now,
        )
        if overwrite:
            stmt = stmt.on_conflict_do_update(
                index_elements=CONFLICT_COLUMNS,
                set_={
                    "name": stmt.excluded.name,
                    "generated_at": stmt.excluded.generated_at,
                    "updated_at": stmt.excluded.updated_at,
                    "revision": table.c.revision + 1,
                },
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=CONFLICT_COLUMNS)
        stmt = stmt.returning(table.c.id, table.c.revision)

        try:
            row = self.db.execute(stmt).first()
            if row is None:
                # Conflict with DO NOTHING: the existing list stays as it is
                self.db.commit()
                existing = self.get_grocery_list(plan_id, customer_id)
                if existing is None:
                    raise GroceryPersistenceError(
                        f"Grocery list for plan {plan_id} / customer {customer_id} vanished during insert"
                    )
                return existing, "unchanged"

            list_id, revision = row
            self.db.execute(
                delete(GroceryListItem)
                .where(GroceryListItem.list_id == list_id)
                .execution_options(synchronize_session=False)
            )
            self.db.add_all(_item_rows(list_id, items, residuals))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Grocery list upsert failed for plan {plan_id} / customer {customer_id}: {e}")
            raise GroceryPersistenceError(str(e)) from e

        grocery_list = self.db.get(GroceryList, list_id)
        return grocery_list, ("created" if revision == 1 else "updated")

    def get_grocery_list(self, plan_id: str, customer_id: str) -> Optional[GroceryList]:
        stmt = select(GroceryList).options(selectinload(GroceryList.all_items)).where(
            GroceryList.meal_plan_id == plan_id,
            GroceryList.customer_id == customer_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def delete_grocery_lists_for_plan(self, plan_id: str) -> int:
        """Delete every list built from plan_id. Runs in the caller's transaction."""
        list_ids = select(GroceryList.id).where(GroceryList.meal_plan_id == plan_id)
        self.db.execute(
            delete(GroceryListItem)
            .where(GroceryListItem.list_id.in_(list_ids))
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(
            delete(GroceryList)
            .where(GroceryList.meal_plan_id == plan_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
