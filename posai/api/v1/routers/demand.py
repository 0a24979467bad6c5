# posai/api/v1/routers/demand.py
from fastapi import APIRouter, Depends, HTTPException, Query
import logging
import time

from posai.api.deps import engine_dep
from posai.api.v1.schemas.engine import BatchPredictIn, BatchPredictOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/demand", tags=["demand"])


@router.get("/products/{product_id}")
async def predict_demand(
    product_id: str,
    days: int = Query(7, ge=1, le=365),
    engine=Depends(engine_dep),
):
    """Unit sales prediction for one product over `days`."""
    t0 = time.perf_counter()
    prediction = await engine.demand.predict(product_id, days)
    if prediction is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    logger.info(
        "Response: predict_demand product_id=%s days=%s predicted=%s in %.4fs",
        product_id, days, prediction.predicted_sales, time.perf_counter() - t0,
    )
    return prediction.model_dump(by_alias=True)


@router.post("/batch")
async def predict_batch(payload: BatchPredictIn, engine=Depends(engine_dep)):
    """Concurrent predictions; unknown or failing products come back as null."""
    t0 = time.perf_counter()
    results = await engine.demand.predict_many(payload.product_ids, payload.days)
    failed = [pid for pid, p in results.items() if p is None]
    logger.info(
        "Response: predict_batch requested=%s failed=%s in %.4fs",
        len(results), len(failed), time.perf_counter() - t0,
    )
    return BatchPredictOut(predictions=results, count=len(results) - len(failed), failed=failed).model_dump(by_alias=True)


@router.get("/forecast")
async def demand_forecast(engine=Depends(engine_dep)):
    items = await engine.demand.get_forecast()
    return [i.model_dump(by_alias=True) for i in items]


@router.get("/hourly")
async def hourly_predictions(engine=Depends(engine_dep)):
    items = await engine.demand.get_hourly_predictions()
    return [i.model_dump(by_alias=True) for i in items]
