# posai/domain/engine/legacy.py

from __future__ import annotations
from typing import Any, Optional
import warnings

from posai.domain.engine.facade import AIEngine


def _deprecated(old: str, new: str) -> None:
    warnings.warn(f"{old}() is deprecated, use engine.{new}() instead", DeprecationWarning, stacklevel=3)


class LegacyAIEngine:
    """
    Flat method names kept for older callers.
    Every call warns and returns exactly what the service returns.
    Anything else is looked up on the wrapped engine.
    """

    def __init__(self, engine: AIEngine):
        self._engine = engine

    def __getattr__(self, name: str) -> Any:
        return getattr(self._engine, name)

    # demand
    async def predict_demand(self, product_id: str, days: int = 7):
        _deprecated("predict_demand", "demand.predict")
        return await self._engine.demand.predict(product_id, days)

    async def get_demand_forecast(self):
        _deprecated("get_demand_forecast", "demand.get_forecast")
        return await self._engine.demand.get_forecast()

    async def get_hourly_predictions(self):
        _deprecated("get_hourly_predictions", "demand.get_hourly_predictions")
        return await self._engine.demand.get_hourly_predictions()

    # pricing
    async def optimize_price(self, product_id: str):
        _deprecated("optimize_price", "pricing.optimize")
        return await self._engine.pricing.optimize(product_id)

    async def get_pricing_insights(self):
        _deprecated("get_pricing_insights", "pricing.get_insights")
        return await self._engine.pricing.get_insights()

    async def get_dynamic_price_suggestions(self, product_id: Optional[str] = None):
        _deprecated("get_dynamic_price_suggestions", "pricing.get_dynamic_suggestions")
        return await self._engine.pricing.get_dynamic_suggestions(product_id)

    # inventory
    async def get_stock_alerts(self):
        _deprecated("get_stock_alerts", "inventory.get_stock_alerts")
        return await self._engine.inventory.get_stock_alerts()

    async def get_critical_alerts(self):
        _deprecated("get_critical_alerts", "inventory.get_critical_alerts")
        return await self._engine.inventory.get_critical_alerts()

    async def get_inventory_optimizations(self):
        _deprecated("get_inventory_optimizations", "inventory.get_optimizations")
        return await self._engine.inventory.get_optimizations()

    async def get_advanced_stock_alerts(self):
        _deprecated("get_advanced_stock_alerts", "inventory.get_advanced_alerts")
        return await self._engine.inventory.get_advanced_alerts()
