# posai/domain/engine/facade.py

from __future__ import annotations
from datetime import datetime, timedelta
from typing import Callable, Optional
import logging
import random
import time

import httpx

from posai.domain.engine.core import DEFAULT_TIMEOUT_S, EngineCore
from posai.domain.models.engine import (
    CacheStats,
    EngineConfig,
    EngineConfigView,
    MaintenanceResult,
    ModelStatistics,
    PerformanceSnapshot,
    PerformanceSummary,
    SystemMetrics,
)
from posai.domain.repositories.product_repo import InMemoryProductRepo, ProductCatalog
from posai.domain.repositories.sample_catalog import SAMPLE_PRODUCTS
from posai.domain.repositories.token_repo import TokenRepo
from posai.domain.services.demand_svc import DemandPredictionService, TurnoverEstimator
from posai.domain.services.inventory_svc import InventoryManagementService
from posai.domain.services.pricing_svc import PricingOptimizationService

logger = logging.getLogger(__name__)

MODULES = ["pricing", "demand", "inventory"]

# health thresholds: (warning, critical)
ERROR_RATE_THRESHOLDS = (5.0, 10.0)           # percent
RESPONSE_TIME_THRESHOLDS = (1000.0, 3000.0)   # milliseconds


class AIEngine:
    """
    Single entry point grouping the engine core and the three AI services.
    Build it with `build_engine`; services are ready on construction.
    """

    def __init__(
        self,
        core: EngineCore,
        pricing: PricingOptimizationService,
        demand: DemandPredictionService,
        inventory: InventoryManagementService,
    ):
        self.core = core
        self.pricing = pricing
        self.demand = demand
        self.inventory = inventory
        self.last_training = core.now()

    # ---------- configuration -----------------------------------------------------

    def get_configuration(self) -> EngineConfigView:
        view = self.core.get_config()
        view.modules = list(MODULES)
        return view

    def update_configuration(
        self,
        *,
        cache_ttl: Optional[float] = None,
        enable_cache: Optional[bool] = None,
        confidence: Optional[float] = None,
    ) -> EngineConfigView:
        self.core.update_config(cache_ttl=cache_ttl, enable_cache=enable_cache, confidence=confidence)
        return self.get_configuration()

    # ---------- diagnostics -------------------------------------------------------

    def get_performance_metrics(self) -> PerformanceSnapshot:
        return self.core.get_performance_snapshot()

    def get_cache_stats(self) -> CacheStats:
        return self.core.get_cache_stats()

    def get_model_statistics(self) -> ModelStatistics:
        snapshot = self.core.get_performance_snapshot()
        return ModelStatistics(
            version=self.core.version,
            confidence=self.core.confidence,
            last_training=self.last_training,
            performance=_summary(snapshot),
            cache=snapshot.cache,
            modules=list(MODULES),
        )

    def get_system_metrics(self) -> SystemMetrics:
        snapshot = self.core.get_performance_snapshot()
        return SystemMetrics(
            version=self.core.version,
            uptime=snapshot.uptime,
            performance=_summary(snapshot),
            cache=snapshot.cache,
            modules=list(MODULES),
            health=health_status(snapshot.error_rate, snapshot.avg_response_time),
        )

    # ---------- maintenance -------------------------------------------------------

    def reset_model(self) -> MaintenanceResult:
        self.core.reset_metrics()
        removed = self.core.clear_cache()
        self.last_training = self.core.now()
        logger.info("engine.reset metrics reset, cache cleared removed=%s", removed)
        return MaintenanceResult(message="Model reset", timestamp=self.last_training)

    def retrain_model(self) -> MaintenanceResult:
        self.core.reset_metrics()
        self.last_training = self.core.now()
        next_training = self.last_training + timedelta(days=self.core.config.training_frequency_days)
        logger.info("engine.retrain done next_training=%s", next_training.isoformat())
        return MaintenanceResult(
            message="Model retrained",
            timestamp=self.last_training,
            next_training=next_training,
        )

    def clear_cache(self, pattern: Optional[str] = None) -> int:
        return self.core.clear_cache(pattern)

    async def aclose(self) -> None:
        await self.core.aclose()


def health_status(error_rate: float, avg_response_time: float) -> str:
    if error_rate > ERROR_RATE_THRESHOLDS[1] or avg_response_time > RESPONSE_TIME_THRESHOLDS[1]:
        return "critical"
    if error_rate > ERROR_RATE_THRESHOLDS[0] or avg_response_time > RESPONSE_TIME_THRESHOLDS[0]:
        return "warning"
    return "healthy"


def _summary(snapshot: PerformanceSnapshot) -> PerformanceSummary:
    return PerformanceSummary(
        requests=snapshot.request_count,
        errors=snapshot.error_count,
        error_rate=snapshot.error_rate,
        avg_response_time=snapshot.avg_response_time,
    )


def build_engine(
    config: Optional[EngineConfig] = None,
    *,
    base_url: str = "",
    use_backend: bool = False,
    http_client: Optional[httpx.AsyncClient] = None,
    token_repo: Optional[TokenRepo] = None,
    catalog: Optional[ProductCatalog] = None,
    rng: Optional[random.Random] = None,
    clock: Callable[[], float] = time.monotonic,
    now: Callable[[], datetime] = datetime.now,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    turnover_estimator: Optional[TurnoverEstimator] = None,
) -> AIEngine:
    """
    Wire a core and its services. Without a catalog the in-memory sample catalog is used.
    """
    core = EngineCore(
        config,
        base_url=base_url,
        use_backend=use_backend,
        http_client=http_client,
        token_repo=token_repo,
        rng=rng,
        clock=clock,
        now=now,
        timeout_s=timeout_s,
    )
    catalog = catalog if catalog is not None else InMemoryProductRepo(SAMPLE_PRODUCTS)

    demand = DemandPredictionService(core, catalog, turnover_estimator=turnover_estimator)
    pricing = PricingOptimizationService(core, catalog)
    inventory = InventoryManagementService(core, catalog, demand)

    logger.info(
        "engine.build version=%s backend=%s base_url=%s cache=%s ttl=%smin",
        core.version, use_backend, core.base_url or "-", core.cache.enabled, core.config.cache_ttl,
    )
    return AIEngine(core, pricing, demand, inventory)
