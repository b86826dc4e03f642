from typing import Optional

from fastapi import APIRouter, Depends

from app.dependencies import get_db
from budget_meals.core import catalog as catalog_core
from budget_meals.db.database import Database
from budget_meals.db.models import CatalogItem

router = APIRouter(prefix="/catalog", tags=["catalog"])


def catalog_item_view(item: CatalogItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "cost": float(item.cost),
        "category": item.category,
        "calories": item.calories,
    }


@router.get("")
async def list_catalog(category: Optional[str] = None, db: Database = Depends(get_db)):
    if category:
        items = catalog_core.get_by_category(db, category)
    else:
        items = catalog_core.get_all(db)
    return {
        "categories": catalog_core.get_categories(db),
        "items": [catalog_item_view(i) for i in items],
    }
