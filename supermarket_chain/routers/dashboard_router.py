from datetime import datetime, time

from fastapi import APIRouter, Depends, HTTPException, Query

from supermarket_chain.core.session import get_chain
from supermarket_chain.core.settings import Settings, get_settings
from supermarket_chain.domain.chain import SupermarketChain
from supermarket_chain.domain.errors import UnknownStoreError
from supermarket_chain.domain.models import Weekday
from supermarket_chain.domain.supermarket import Supermarket

router = APIRouter()


def store_summary(s: Supermarket) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "opening_time": s.opening_time.strftime("%H:%M"),
        "closing_time": s.closing_time.strftime("%H:%M"),
        "open_days": [d.name for d in sorted(s.open_days)],
        "products": len(s),
        "revenue": s.get_total_revenue(),
    }


@router.get("/stores")
def list_stores(chain: SupermarketChain = Depends(get_chain)):
    return {
        "stores": [store_summary(s) for s in chain],
        "available": chain.get_available_supermarkets(),
    }


@router.get("/stores/{store_id}")
def get_store(store_id: int, chain: SupermarketChain = Depends(get_chain)):
    try:
        s = chain.get_supermarket(store_id)
    except UnknownStoreError as e:
        raise HTTPException(status_code=404, detail=str(e))

    summary = store_summary(s)
    summary["inventory"] = [
        {
            "product_id": e.product.id,
            "name": e.product.name,
            "price": e.product.price,
            "on_hand": e.current_quantity,
            "sold": e.sold_quantity,
            "revenue": e.revenue_generated,
        }
        for e in s.get_entries()
    ]
    return summary


@router.get("/kpis")
def get_kpis(chain: SupermarketChain = Depends(get_chain)):
    return {
        "stores": len(chain),
        "revenue": chain.get_total_revenue(),
        "best_store": chain.get_supermarket_with_highest_revenue(),
        "top_products": chain.get_top5_selling_products(),
    }


@router.get("/top-products")
def get_top_products(
    limit: int | None = Query(default=None, ge=1, le=50),
    chain: SupermarketChain = Depends(get_chain),
    settings: Settings = Depends(get_settings),
):
    ranked = chain.get_top_selling_products(limit or settings.top_products_limit)
    return {
        "products": [
            {"product_id": p.product_id, "name": p.name, "units": p.quantity}
            for p in ranked
        ],
        "report": " - ".join(f"{p.name}: {p.quantity}" for p in ranked),
    }


@router.get("/open-stores")
def get_open_stores(
    day: str | None = Query(default=None, description="Weekday, e.g. MONDAY or Mon. Defaults to today."),
    at: str | None = Query(default=None, alias="time", description="HH:MM. Defaults to now."),
    chain: SupermarketChain = Depends(get_chain),
):
    now = datetime.now()
    try:
        weekday = Weekday.from_name(day) if day else Weekday(now.weekday())
        moment = datetime.strptime(at, "%H:%M").time() if at else time(now.hour, now.minute)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "day": weekday.name,
        "time": moment.strftime("%H:%M"),
        "open": [
            {"id": s.id, "name": s.name}
            for s in chain if s.is_open(weekday, moment)
        ],
        "report": chain.get_open_supermarkets(weekday, moment),
    }
