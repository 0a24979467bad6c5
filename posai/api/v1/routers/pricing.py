# posai/api/v1/routers/pricing.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import logging
import time

from posai.api.deps import engine_dep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.get("/products/{product_id}")
async def optimize_price(product_id: str, engine=Depends(engine_dep)):
    t0 = time.perf_counter()
    optimization = await engine.pricing.optimize(product_id)
    if optimization is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    logger.info(
        "Response: optimize_price product_id=%s current=%s suggested=%s in %.4fs",
        product_id, optimization.current_price, optimization.suggested_price, time.perf_counter() - t0,
    )
    return optimization.model_dump(by_alias=True)


@router.get("/insights")
async def pricing_insights(engine=Depends(engine_dep)):
    items = await engine.pricing.get_insights()
    return [i.model_dump(by_alias=True) for i in items]


@router.get("/dynamic")
async def dynamic_suggestions(
    product_id: Optional[str] = Query(None, description="Restrict to one product"),
    engine=Depends(engine_dep),
):
    """Real-time price suggestions (changes of at least 2%), most urgent first."""
    items = await engine.pricing.get_dynamic_suggestions(product_id)
    logger.info("Response: dynamic_suggestions product_id=%s count=%s", product_id, len(items))
    return [i.model_dump(by_alias=True) for i in items]
