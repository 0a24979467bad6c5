# posai/api/v1/routers/inventory.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import logging

from posai.api.deps import engine_dep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("/alerts")
async def stock_alerts(engine=Depends(engine_dep)):
    feed = await engine.inventory.get_stock_alerts()
    return feed.model_dump(by_alias=True)


@router.get("/alerts/advanced")
async def advanced_alerts(engine=Depends(engine_dep)):
    alerts = await engine.inventory.get_advanced_alerts()
    return [a.model_dump(by_alias=True) for a in alerts]


@router.get("/alerts/critical")
async def critical_alerts(engine=Depends(engine_dep)):
    alerts = await engine.inventory.get_critical_alerts()
    return [a.model_dump(by_alias=True) for a in alerts]


@router.get("/alerts/local")
async def local_alerts(
    product_id: Optional[str] = Query(None, description="Restrict to one product"),
    engine=Depends(engine_dep),
):
    """Velocity-based alerts computed from the catalog, urgent first."""
    if product_id is not None and await engine.inventory.catalog.get(product_id) is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    alerts = await engine.inventory.compute_local_alerts(product_id)
    logger.info("Response: local_alerts product_id=%s count=%s", product_id, len(alerts))
    return [a.model_dump(by_alias=True) for a in alerts]


@router.get("/optimizations")
async def inventory_optimizations(engine=Depends(engine_dep)):
    items = await engine.inventory.get_optimizations()
    return [i.model_dump(by_alias=True) for i in items]
