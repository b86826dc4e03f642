"""Catalog store: the pre-seeded, read-only list of priced items.

Rows are written once, when the schema is created (see db.database.init_db),
and never updated or deleted afterwards.
"""

import sqlite3
from typing import Optional

from budget_meals.db.database import Database, init_db
from budget_meals.db.models import CatalogItem, to_money


def _row_to_item(row: sqlite3.Row) -> CatalogItem:
    return CatalogItem(
        id=row["id"],
        name=row["name"],
        cost=to_money(row["cost"]),
        category=row["category"],
        calories=row["calories"],
    )


def initialize(db: Database) -> None:
    """Ensure the schema exists and the catalog is seeded, opening db if needed.

    Safe to call repeatedly: seeding only happens when the tables are created.
    """
    if not db.is_open:
        db.open()
    init_db(db)


def get_all(db: Database) -> list[CatalogItem]:
    """Returns every catalog item in insertion order."""
    rows = db.connection.execute("SELECT * FROM catalog_items ORDER BY id").fetchall()
    return [_row_to_item(r) for r in rows]


def get(db: Database, item_id: int) -> Optional[CatalogItem]:
    row = db.connection.execute("SELECT * FROM catalog_items WHERE id = ?", (item_id,)).fetchone()
    return _row_to_item(row) if row else None


def get_by_category(db: Database, category: str) -> list[CatalogItem]:
    rows = db.connection.execute(
        "SELECT * FROM catalog_items WHERE category = ? ORDER BY id", (category,)
    ).fetchall()
    return [_row_to_item(r) for r in rows]


def get_categories(db: Database) -> list[str]:
    """Returns the distinct categories in use, sorted."""
    rows = db.connection.execute(
        "SELECT DISTINCT category FROM catalog_items WHERE category IS NOT NULL ORDER BY category"
    ).fetchall()
    return [r["category"] for r in rows]
