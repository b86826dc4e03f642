"""Line-item encoding and resolution.

A line_items row stores its selection in two mutually exclusive column groups:
catalog_item_id, or (custom_name, custom_cost).  This module is the only place
that knows about that layout; everything else works with CatalogRef /
CustomEntry on the way in and PlanItem on the way out.
"""

import logging
import sqlite3
from typing import Optional, Union

from budget_meals.db.database import Database
from budget_meals.db.models import (
    CUSTOM_ITEM_ID,
    CatalogRef,
    CustomEntry,
    PlanItem,
    Selection,
    money_param,
    parse_money,
    to_money,
)
from budget_meals.errors import ConstraintViolation

logger = logging.getLogger(__name__)


def to_selection(item: Union[PlanItem, CatalogRef, CustomEntry]) -> Selection:
    """Return the Selection a PlanItem (or an existing Selection) stands for.

    A PlanItem with CUSTOM_ITEM_ID becomes a CustomEntry carrying its name and
    cost; any other id becomes a CatalogRef.  Catalog fields on a PlanItem are
    ignored, the catalog row is the source of truth on read.
    """
    if isinstance(item, (CatalogRef, CustomEntry)):
        return item
    if not isinstance(item, PlanItem):
        raise ConstraintViolation(f"Cannot store {type(item).__name__} as a line item")
    if item.id is None:
        raise ConstraintViolation(f"Line item {item.name!r} has neither a catalog id nor the custom marker")
    if item.is_custom:
        if item.name is None or item.cost is None:
            raise ConstraintViolation("A custom line item needs both a name and a cost")
        return CustomEntry(name=item.name, cost=item.cost)
    return CatalogRef(catalog_item_id=item.id)


def encode(selection: Selection) -> tuple[Optional[int], Optional[str], Optional[str]]:
    """Return (catalog_item_id, custom_name, custom_cost) column values for one selection."""
    if isinstance(selection, CatalogRef):
        item_id = selection.catalog_item_id
        if isinstance(item_id, bool) or not isinstance(item_id, int) or item_id < 0:
            raise ConstraintViolation(f"Invalid catalog item id: {item_id!r}")
        return item_id, None, None

    if isinstance(selection, CustomEntry):
        name = selection.name
        if not isinstance(name, str) or not name.strip():
            raise ConstraintViolation("A custom line item needs a non-empty name")
        cost = parse_money(selection.cost, f"cost for custom item {name!r}")
        return None, name, money_param(cost)

    raise ConstraintViolation(f"Cannot store {type(selection).__name__} as a line item")


def insert_lines(conn: sqlite3.Connection, plan_id: int, items) -> None:
    """Insert one line_items row per item, in order.  Must run inside a transaction."""
    for item in items:
        catalog_item_id, custom_name, custom_cost = encode(to_selection(item))
        try:
            conn.execute(
                """INSERT INTO line_items (plan_id, catalog_item_id, custom_name, custom_cost)
                   VALUES (?, ?, ?, ?)""",
                (plan_id, catalog_item_id, custom_name, custom_cost),
            )
        except sqlite3.IntegrityError as exc:
            raise ConstraintViolation(
                f"Catalog item {catalog_item_id} does not exist"
            ) from exc


def _decode(row: sqlite3.Row) -> PlanItem:
    has_ref = row["catalog_item_id"] is not None
    has_custom = row["custom_name"] is not None or row["custom_cost"] is not None

    if has_ref and has_custom:
        raise ConstraintViolation(f"Line item {row['line_id']} holds both a catalog reference and custom fields")

    if has_ref:
        if row["catalog_id"] is None:
            # Dangling reference: keep the line visible but with nothing to show.
            logger.warning("Line item %s references missing catalog item %s",
                           row["line_id"], row["catalog_item_id"])
            return PlanItem(id=row["catalog_item_id"], name=None, cost=None)
        return PlanItem(
            id=row["catalog_id"],
            name=row["name"],
            cost=to_money(row["cost"]),
            category=row["category"],
            calories=row["calories"],
        )

    if row["custom_name"] is None or row["custom_cost"] is None:
        raise ConstraintViolation(f"Line item {row['line_id']} holds neither a catalog reference nor custom fields")
    return PlanItem(id=CUSTOM_ITEM_ID, name=row["custom_name"], cost=to_money(row["custom_cost"]))


def resolve_lines(db: Database, plan_id: int) -> list[PlanItem]:
    """Return the materialized items of a plan, in the order they were saved.

    Returns an empty list for an unknown plan id.
    """
    rows = db.connection.execute(
        """SELECT li.id AS line_id, li.catalog_item_id, li.custom_name, li.custom_cost,
                  ci.id AS catalog_id, ci.name, ci.cost, ci.category, ci.calories
           FROM line_items li
           LEFT JOIN catalog_items ci ON li.catalog_item_id = ci.id
           WHERE li.plan_id = ?
           ORDER BY li.id""",
        (plan_id,),
    ).fetchall()
    return [_decode(row) for row in rows]

