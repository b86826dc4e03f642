import sqlite3
from decimal import Decimal

import pytest

from budget_meals.core import plans
from budget_meals.core.line_items import resolve_lines
from budget_meals.db.models import CUSTOM_ITEM_ID, CatalogRef, CustomEntry, PlanItem
from budget_meals.db.database import Database
from budget_meals.errors import ConstraintViolation, StorageUnavailable


def _names_and_costs(items):
    return [(i.name, i.cost) for i in items]


def test_soup_and_snack_scenario(db):
    plan_id = plans.replace_plan_for_date(db, "2024-01-01", Decimal("20.00"), [
        PlanItem(id=1, name="Soup", cost=Decimal("5.00")),
        PlanItem(id=CUSTOM_ITEM_ID, name="Snack", cost=Decimal("3.00")),
    ])

    plan = plans.find_plan_by_date(db, "2024-01-01")
    assert plan.id == plan_id
    assert plan.target_cost == Decimal("20.00")
    assert _names_and_costs(resolve_lines(db, plan_id)) == [
        ("Soup", Decimal("5.00")),
        ("Snack", Decimal("3.00")),
    ]


def test_replace_twice_keeps_only_second_plan(db, count_lines):
    first = plans.replace_plan_for_date(db, "2024-01-01", Decimal("20"), [
        PlanItem(id=1, name="Soup", cost=Decimal("5")),
        PlanItem.custom("Snack", "3"),
    ])
    second = plans.replace_plan_for_date(db, "2024-01-01", Decimal("15"), [
        PlanItem(id=2, name="Salad", cost=Decimal("7.25")),
    ])

    assert plans.list_plan_dates(db) == ["2024-01-01"]
    assert plans.get_plan(db, first) is None
    assert plans.find_plan_by_date(db, "2024-01-01").target_cost == Decimal("15")
    assert _names_and_costs(resolve_lines(db, second)) == [("Salad", Decimal("7.25"))]
    assert count_lines() == 1
    assert count_lines(first) == 0


def test_replace_does_not_touch_other_dates(db):
    plans.replace_plan_for_date(db, "2024-01-01", Decimal("10"), [CatalogRef(1)])
    other = plans.replace_plan_for_date(db, "2024-01-02", Decimal("12"), [CatalogRef(2)])
    plans.replace_plan_for_date(db, "2024-01-01", Decimal("11"), [CatalogRef(3)])

    assert [i.name for i in resolve_lines(db, other)] == ["Salad"]
    assert plans.find_plan_by_date(db, "2024-01-02").id == other


def test_order_is_preserved_including_repeats(db):
    items = [CatalogRef(2), CustomEntry("Cookie", Decimal("1.10")), CatalogRef(1), CatalogRef(2)]
    plan_id = plans.replace_plan_for_date(db, "2024-02-02", Decimal("30"), items)
    assert [i.name for i in resolve_lines(db, plan_id)] == ["Salad", "Cookie", "Soup", "Salad"]


def test_find_plan_by_date_absent_returns_none(db):
    assert plans.find_plan_by_date(db, "1999-12-31") is None


def test_list_plan_dates_descending_and_distinct(db):
    for d in ["2024-03-01", "2024-01-15", "2024-12-31", "2024-01-15"]:
        plans.replace_plan_for_date(db, d, Decimal("5"), [])
    # Simulate a duplicate written outside replace_plan_for_date.
    db.connection.execute("INSERT INTO plans (date, target_cost) VALUES ('2024-03-01', 9)")

    assert plans.list_plan_dates(db) == ["2024-12-31", "2024-03-01", "2024-01-15"]


def test_find_plan_with_duplicate_rows_prefers_oldest(db):
    first = plans.replace_plan_for_date(db, "2024-03-01", Decimal("5"), [])
    db.connection.execute("INSERT INTO plans (date, target_cost) VALUES ('2024-03-01', 9)")
    assert plans.find_plan_by_date(db, "2024-03-01").id == first


def test_replace_removes_duplicate_rows(db, count_lines):
    plans.replace_plan_for_date(db, "2024-03-01", Decimal("5"), [CatalogRef(1)])
    db.connection.execute("INSERT INTO plans (date, target_cost) VALUES ('2024-03-01', 9)")
    plans.replace_plan_for_date(db, "2024-03-01", Decimal("6"), [CatalogRef(2)])

    count = db.connection.execute("SELECT COUNT(*) FROM plans WHERE date = '2024-03-01'").fetchone()[0]
    assert count == 1
    assert count_lines() == 1


def test_delete_plan_removes_plan_and_lines(db, count_lines):
    plan_id = plans.replace_plan_for_date(db, "2024-01-01", Decimal("20"), [
        CatalogRef(1), CustomEntry("Snack", Decimal("3")),
    ])
    keep = plans.replace_plan_for_date(db, "2024-01-02", Decimal("20"), [CatalogRef(2)])

    plans.delete_plan(db, plan_id)

    assert plans.find_plan_by_date(db, "2024-01-01") is None
    assert count_lines(plan_id) == 0
    assert count_lines() == count_lines(keep) == 1
    assert plans.list_plan_dates(db) == ["2024-01-02"]


def test_delete_absent_plan_is_noop(db):
    plans.delete_plan(db, 12345)
    plan_id = plans.replace_plan_for_date(db, "2024-01-01", Decimal("1"), [])
    plans.delete_plan(db, plan_id)
    plans.delete_plan(db, plan_id)
    assert plans.list_plan_dates(db) == []


def test_failed_replace_keeps_previous_plan(db, count_lines):
    original = plans.replace_plan_for_date(db, "2024-01-01", Decimal("20"), [CatalogRef(1)])

    with pytest.raises(ConstraintViolation):
        plans.replace_plan_for_date(db, "2024-01-01", Decimal("25"), [
            CatalogRef(2),
            CatalogRef(999),  # not in the catalog
        ])

    plan = plans.find_plan_by_date(db, "2024-01-01")
    assert plan.id == original
    assert plan.target_cost == Decimal("20")
    assert [i.name for i in resolve_lines(db, original)] == ["Soup"]
    assert count_lines() == 1


def test_invalid_item_rolls_back_new_date(db, count_lines):
    with pytest.raises(ConstraintViolation):
        plans.replace_plan_for_date(db, "2024-04-04", Decimal("5"), [
            CustomEntry("Snack", Decimal("1")),
            CustomEntry("", Decimal("1")),
        ])
    assert plans.list_plan_dates(db) == []
    assert count_lines() == 0


@pytest.mark.parametrize("target", [Decimal("-1"), None, "abc", Decimal("NaN")])
def test_invalid_target_cost_rejected(db, target):
    with pytest.raises(ConstraintViolation):
        plans.replace_plan_for_date(db, "2024-01-01", target, [])
    assert plans.list_plan_dates(db) == []


def test_empty_date_rejected(db):
    with pytest.raises(ConstraintViolation):
        plans.replace_plan_for_date(db, "", Decimal("1"), [])


def test_date_key_is_opaque(db):
    plans.replace_plan_for_date(db, "Tuesday lunch", Decimal("8"), [])
    assert plans.find_plan_by_date(db, "Tuesday lunch").target_cost == Decimal("8")


def test_failed_commit_restores_previous_plan(db_path, test_catalog):
    db = Database(db_path, seed=test_catalog, timeout=0.05).open()
    try:
        original = plans.replace_plan_for_date(db, "2024-01-01", Decimal("20"), [CatalogRef(1)])

        # A reader holding a SHARED lock makes the writer's COMMIT fail.
        reader = sqlite3.connect(str(db_path), isolation_level=None)
        reader.execute("BEGIN")
        reader.execute("SELECT * FROM plans").fetchall()
        try:
            with pytest.raises(StorageUnavailable):
                plans.replace_plan_for_date(db, "2024-01-01", Decimal("5"), [CatalogRef(2)])
        finally:
            reader.execute("ROLLBACK")
            reader.close()

        assert not db.connection.in_transaction
        plan = plans.find_plan_by_date(db, "2024-01-01")
        assert plan.id == original
        assert plan.target_cost == Decimal("20")
        assert [i.name for i in resolve_lines(db, original)] == ["Soup"]

        plans.delete_plan(db, original)
        assert plans.list_plan_dates(db) == []
    finally:
        db.close()


def test_locked_database_raises_storage_unavailable(db_path, test_catalog):
    db = Database(db_path, seed=test_catalog, timeout=0.05).open()
    writer = sqlite3.connect(str(db_path), isolation_level=None)
    writer.execute("BEGIN IMMEDIATE")
    try:
        with pytest.raises(StorageUnavailable):
            plans.delete_plan(db, 1)
    finally:
        writer.execute("ROLLBACK")
        writer.close()
        db.close()
