"""Dataclass models for the catalog, plans and plan line items.

CatalogItem and Plan map 1:1 to their tables. Line items are never exposed in
their two-nullable-column storage form: writes take a Selection (CatalogRef or
CustomEntry) and reads return materialized PlanItem objects.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from budget_meals.errors import ConstraintViolation

# Identity carried by a materialized PlanItem that did not come from the catalog.
CUSTOM_ITEM_ID = -1


def to_money(value) -> Optional[Decimal]:
    """Convert a REAL column value (or user input) to Decimal without float noise."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money_param(value: Optional[Decimal]) -> Optional[str]:
    """Bind a Decimal as text; the REAL column affinity stores it as a number.

    REAL is a double, so amounts round-trip exactly up to 15 significant digits.
    """
    return None if value is None else str(value)


@dataclass(frozen=True)
class CatalogItem:
    """A pre-seeded priced offering. Read-only after the catalog is seeded."""
    id: int
    name: str
    cost: Decimal
    category: Optional[str] = None
    calories: Optional[int] = None


@dataclass(frozen=True)
class Plan:
    """A budgeted set of selections for one date key (at most one per date)."""
    id: int
    date: str
    target_cost: Decimal


@dataclass(frozen=True)
class CatalogRef:
    """Selection pointing at a catalog row."""
    catalog_item_id: int


@dataclass(frozen=True)
class CustomEntry:
    """Selection carrying its own name and cost."""
    name: str
    cost: Decimal


Selection = Union[CatalogRef, CustomEntry]


@dataclass(frozen=True)
class PlanItem:
    """A resolved, display-ready line item.

    id is the catalog item id, or CUSTOM_ITEM_ID for custom entries.
    name and cost are None only when a catalog reference could not be resolved.
    """

    id: int
    name: Optional[str]
    cost: Optional[Decimal]
    category: Optional[str] = None
    calories: Optional[int] = None

    @property
    def is_custom(self) -> bool:
        return self.id == CUSTOM_ITEM_ID

    @classmethod
    def from_catalog(cls, item: CatalogItem) -> "PlanItem":
        return cls(
            id=item.id,
            name=item.name,
            cost=item.cost,
            category=item.category,
            calories=item.calories,
        )

    @classmethod
    def custom(cls, name: str, cost) -> "PlanItem":
        return cls(id=CUSTOM_ITEM_ID, name=name, cost=to_money(cost))


def parse_money(value, what: str) -> Decimal:
    """Convert value to a finite, non-negative Decimal or raise ConstraintViolation."""
    try:
        amount = to_money(value)
    except (InvalidOperation, TypeError, ValueError):
        amount = None
    if amount is None or not amount.is_finite() or amount < 0:
        raise ConstraintViolation(f"Invalid {what}: {value!r}")
    return amount
