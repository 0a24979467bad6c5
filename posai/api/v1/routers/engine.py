# posai/api/v1/routers/engine.py
from fastapi import APIRouter, Depends, Query
from typing import Optional
import logging

from posai.api.deps import engine_dep
from posai.api.v1.schemas.engine import CacheClearOut, ConfigUpdateIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/engine", tags=["engine"])


@router.get("/configuration")
def get_configuration(engine=Depends(engine_dep)):
    return engine.get_configuration().model_dump(by_alias=True)


@router.patch("/configuration")
def update_configuration(payload: ConfigUpdateIn, engine=Depends(engine_dep)):
    logger.info("Request: update_configuration %s", payload.model_dump(exclude_none=True))
    view = engine.update_configuration(
        cache_ttl=payload.cache_ttl,
        enable_cache=payload.enable_cache,
        confidence=payload.confidence,
    )
    return view.model_dump(by_alias=True)


@router.get("/metrics")
def performance_metrics(engine=Depends(engine_dep)):
    return engine.get_performance_metrics().model_dump(by_alias=True)


@router.get("/cache")
def cache_stats(engine=Depends(engine_dep)):
    return engine.get_cache_stats().model_dump(by_alias=True)


@router.delete("/cache")
def clear_cache(
    pattern: Optional[str] = Query(None, description="Only keys containing this substring"),
    engine=Depends(engine_dep),
):
    removed = engine.clear_cache(pattern)
    logger.info("Response: clear_cache pattern=%s removed=%s", pattern, removed)
    return CacheClearOut(removed=removed, pattern=pattern).model_dump()


@router.get("/statistics")
def model_statistics(engine=Depends(engine_dep)):
    return engine.get_model_statistics().model_dump(by_alias=True)


@router.get("/system")
def system_metrics(engine=Depends(engine_dep)):
    return engine.get_system_metrics().model_dump(by_alias=True)


@router.post("/reset")
def reset_model(engine=Depends(engine_dep)):
    return engine.reset_model().model_dump(by_alias=True)


@router.post("/retrain")
def retrain_model(engine=Depends(engine_dep)):
    return engine.retrain_model().model_dump(by_alias=True)
