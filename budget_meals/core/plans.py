"""Plan store: one budgeted plan per date key, with its line items.

Uniqueness per date is enforced procedurally: every write goes through
replace_plan_for_date, which deletes whatever exists for the date and inserts
the new plan and its lines in a single transaction.  Dates are opaque strings;
no date arithmetic happens here.
"""

import logging
import sqlite3
from typing import Iterable, Optional, Union

from budget_meals.core.line_items import insert_lines
from budget_meals.db.database import Database
from budget_meals.db.models import CatalogRef, CustomEntry, Plan, PlanItem, money_param, parse_money, to_money
from budget_meals.errors import ConstraintViolation

logger = logging.getLogger(__name__)

PlanInput = Union[PlanItem, CatalogRef, CustomEntry]


def _row_to_plan(row: sqlite3.Row) -> Plan:
    return Plan(id=row["id"], date=row["date"], target_cost=to_money(row["target_cost"]))


def _delete_plans(conn: sqlite3.Connection, where: str, params: tuple) -> int:
    """Delete matching plans and their lines (children first). Returns plans removed."""
    conn.execute(
        f"DELETE FROM line_items WHERE plan_id IN (SELECT id FROM plans WHERE {where})",
        params,
    )
    return conn.execute(f"DELETE FROM plans WHERE {where}", params).rowcount


def replace_plan_for_date(
    db: Database, plan_date: str, target_cost, items: Iterable[PlanInput]
) -> int:
    """Store a plan for plan_date, discarding any previous plan for that date.

    items keep their order.  Each may be a PlanItem (CUSTOM_ITEM_ID marks a
    custom entry), a CatalogRef or a CustomEntry.  Either the whole replacement
    is committed or nothing changes.  Returns the new plan id.
    """
    if not plan_date:
        raise ConstraintViolation("A plan needs a date")
    target = parse_money(target_cost, "target cost")
    items = list(items)

    with db.transaction() as conn:
        replaced = _delete_plans(conn, "date = ?", (plan_date,))
        cursor = conn.execute(
            "INSERT INTO plans (date, target_cost) VALUES (?, ?)",
            (plan_date, money_param(target)),
        )
        plan_id = cursor.lastrowid
        insert_lines(conn, plan_id, items)

    logger.info("Saved plan %d for %s (%d items, replaced %d)", plan_id, plan_date, len(items), replaced)
    return plan_id


def find_plan_by_date(db: Database, plan_date: str) -> Optional[Plan]:
    """Returns the plan for plan_date, or None if there is none."""
    row = db.connection.execute(
        "SELECT * FROM plans WHERE date = ? ORDER BY id LIMIT 1", (plan_date,)
    ).fetchone()
    return _row_to_plan(row) if row else None


def get_plan(db: Database, plan_id: int) -> Optional[Plan]:
    row = db.connection.execute("SELECT * FROM plans WHERE id = ?", (plan_id,)).fetchone()
    return _row_to_plan(row) if row else None


def list_plan_dates(db: Database) -> list[str]:
    """Returns every date with a plan, most recent first, without duplicates."""
    rows = db.connection.execute("SELECT DISTINCT date FROM plans ORDER BY date DESC").fetchall()
    return [r["date"] for r in rows]


def delete_plan(db: Database, plan_id: int) -> None:
    """Delete a plan and all of its lines. Unknown ids are ignored."""
    with db.transaction() as conn:
        deleted = _delete_plans(conn, "id = ?", (plan_id,))
    if deleted:
        logger.info("Deleted plan %d", plan_id)
