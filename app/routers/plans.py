"""Plan routes: save a plan for a date, view it with its budget summary, list and delete.

POST /plans/check answers whether one more item still fits the budget.

Handlers are async so every database call runs on the event loop thread,
one request at a time.
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from app.dependencies import get_db
from budget_meals.core import budget, catalog as catalog_core, line_items, plans as plans_core
from budget_meals.db.database import Database
from budget_meals.db.models import CUSTOM_ITEM_ID, Plan, PlanItem
from budget_meals.errors import ConstraintViolation

router = APIRouter(prefix="/plans", tags=["plans"])


class PlanItemIn(BaseModel):
    id: int
    name: Optional[str] = None
    cost: Optional[Decimal] = None


class PlanIn(BaseModel):
    target_cost: Decimal = Field(ge=0)
    items: list[PlanItemIn]


class AddCheckIn(BaseModel):
    target_cost: Decimal
    items: list[PlanItemIn] = []
    candidate: PlanItemIn


def _money(value: Optional[Decimal]) -> Optional[float]:
    return None if value is None else float(value)


def plan_item_view(item: PlanItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "cost": _money(item.cost),
        "category": item.category,
        "calories": item.calories,
        "custom": item.is_custom,
    }


def _plan_view(db: Database, plan: Plan) -> dict:
    items = line_items.resolve_lines(db, plan.id)
    summary = budget.summarize(plan, items)
    return {
        "id": plan.id,
        "date": plan.date,
        "target_cost": _money(plan.target_cost),
        "items": [plan_item_view(i) for i in items],
        "summary": {
            "total_cost": _money(summary.total_cost),
            "remaining": _money(summary.remaining),
            "over_budget": summary.over_budget,
            "progress": float(summary.progress),
        },
    }


@router.get("")
async def list_plans(db: Database = Depends(get_db)):
    return {"dates": plans_core.list_plan_dates(db)}


@router.get("/{plan_date}")
async def get_plan(plan_date: str, db: Database = Depends(get_db)):
    plan = plans_core.find_plan_by_date(db, plan_date)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found.")
    return _plan_view(db, plan)


@router.put("/{plan_date}")
async def save_plan(plan_date: str, body: PlanIn, db: Database = Depends(get_db)):
    if not body.items:
        raise HTTPException(status_code=422, detail="Please select at least one item.")
    items = [PlanItem(id=i.id, name=i.name, cost=i.cost) for i in body.items]
    plan_id = plans_core.replace_plan_for_date(db, plan_date, body.target_cost, items)
    return _plan_view(db, plans_core.get_plan(db, plan_id))


@router.delete("/{plan_id}", status_code=204)
async def delete_plan(plan_id: int, db: Database = Depends(get_db)):
    plans_core.delete_plan(db, plan_id)
    return Response(status_code=204)


def _priced(db: Database, item: PlanItemIn) -> PlanItem:
    """Price an incoming selection: catalog items from the catalog, custom ones as given."""
    if item.id == CUSTOM_ITEM_ID:
        custom = PlanItem(id=CUSTOM_ITEM_ID, name=item.name, cost=item.cost)
        line_items.encode(line_items.to_selection(custom))
        return custom
    found = catalog_core.get(db, item.id)
    if found is None:
        raise ConstraintViolation(f"Catalog item {item.id} does not exist")
    return PlanItem.from_catalog(found)


@router.post("/check")
async def check_add(body: AddCheckIn, db: Database = Depends(get_db)):
    """Can candidate be added to items without going over target_cost?"""
    current = [_priced(db, i) for i in body.items]
    candidate = _priced(db, body.candidate)
    try:
        budget.check_can_add(body.target_cost, current, candidate)
    except budget.BudgetExceeded as exc:
        return {"allowed": False, "message": str(exc)}
    return {"allowed": True, "message": None}
