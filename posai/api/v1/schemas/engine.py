# api/v1/schemas/engine.py
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from posai.domain.models.demand import DemandPrediction


class BatchPredictIn(BaseModel):
    product_ids: List[str] = Field(min_length=1, max_length=100)
    days: int = Field(7, ge=1, le=365)


class BatchPredictOut(BaseModel):
    predictions: Dict[str, Optional[DemandPrediction]]
    count: int
    failed: List[str]


class ConfigUpdateIn(BaseModel):
    cache_ttl: Optional[float] = Field(None, ge=0, description="minutes")
    enable_cache: Optional[bool] = None
    confidence: Optional[float] = Field(None, ge=0, le=1)


class CacheClearOut(BaseModel):
    removed: int
    pattern: Optional[str] = None
