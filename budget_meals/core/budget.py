"""Read-side budget arithmetic for plans.

Nothing here touches the database; the storage layer never checks budgets.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from budget_meals.db.models import Plan, PlanItem, to_money

ZERO = Decimal("0")


class BudgetExceeded(ValueError):
    """Adding an item is not allowed under the current budget."""


@dataclass(frozen=True)
class PlanSummary:
    target_cost: Decimal
    total_cost: Decimal
    remaining: Decimal
    over_budget: bool
    progress: Decimal  # total / target, 0 when there is no target


def total_cost(items: Iterable[PlanItem]) -> Decimal:
    """Sum of item costs; unresolved items (cost None) count as zero."""
    return sum((item.cost for item in items if item.cost is not None), ZERO)


def summarize(plan: Plan, items: Iterable[PlanItem]) -> PlanSummary:
    target = plan.target_cost
    total = total_cost(items)
    progress = total / target if target > 0 else ZERO
    return PlanSummary(
        target_cost=target,
        total_cost=total,
        remaining=target - total,
        over_budget=total > target,
        progress=progress,
    )


def check_can_add(target_cost, current_items: Iterable[PlanItem], candidate: PlanItem) -> None:
    """Raise BudgetExceeded if candidate cannot be added to current_items."""
    target = to_money(target_cost) or ZERO
    if target <= 0:
        raise BudgetExceeded("Please set a budget first.")
    cost = candidate.cost if candidate.cost is not None else ZERO
    if total_cost(current_items) + cost > target:
        raise BudgetExceeded("This exceeds your budget.")
