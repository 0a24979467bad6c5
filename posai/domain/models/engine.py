from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HealthStatus = Literal["healthy", "warning", "critical"]


class CamelModel(BaseModel):
    """Base for records exchanged with the AI backend and the UI (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EngineConfig(CamelModel):
    """
    Options object consumed by the engine core.
    cache_ttl is expressed in minutes; 0 disables caching.
    """
    version: str = "4.0.0"
    confidence: float = Field(default=0.94, ge=0, le=1)
    cache_ttl: float = Field(default=5, ge=0)
    enable_cache: bool = True
    random_seed: Optional[int] = None
    training_frequency_days: int = Field(default=7, ge=1)


class CacheStats(CamelModel):
    size: int
    hits: int
    misses: int
    hit_rate: float  # percent


class PerformanceSnapshot(CamelModel):
    request_count: int
    error_count: int
    error_rate: float            # percent
    avg_response_time: float     # milliseconds
    cache: CacheStats
    uptime: float                # seconds since creation or last reset


class CacheConfigView(CamelModel):
    enabled: bool
    ttl_minutes: float


class EngineConfigView(CamelModel):
    version: str
    confidence: float
    use_backend: bool
    base_url: str
    cache: CacheConfigView
    modules: List[str] = []


class PerformanceSummary(CamelModel):
    requests: int
    errors: int
    error_rate: float
    avg_response_time: float


class ModelStatistics(CamelModel):
    version: str
    confidence: float
    last_training: datetime
    performance: PerformanceSummary
    cache: CacheStats
    modules: List[str]


class SystemMetrics(CamelModel):
    version: str
    uptime: float
    performance: PerformanceSummary
    cache: CacheStats
    modules: List[str]
    health: HealthStatus


class MaintenanceResult(CamelModel):
    success: bool = True
    message: str
    timestamp: datetime
    next_training: Optional[datetime] = None
