# posai/domain/services/demand_svc.py

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional
import asyncio
import logging
import time

from posai.domain.engine.core import EngineCore
from posai.domain.models.demand import (
    DayTrend,
    DemandFactors,
    DemandForecastItem,
    DemandPrediction,
    HourlyPrediction,
    ProfitImpact,
)
from posai.domain.models.product import Product
from posai.domain.repositories.product_repo import ProductCatalog
from posai.domain.services.constants import (
    BASE_DEMAND_FACTOR,
    DEFAULT_DAILY_BASELINE,
    DEFAULT_HORIZON_DAYS,
    FORECAST_PRODUCTS,
    MONITOR_CLOSELY_DAYS,
    NO_STOCKOUT_DAYS,
    OPENING_HOURS,
    TURNOVER_RANGE,
    WEEKDAYS,
    WEEKLY_JITTER,
    hourly_demand_factor,
    round_half_up,
    seasonal_factor,
    trend_multiplier,
)

logger = logging.getLogger(__name__)

TurnoverEstimator = Callable[[Product], float]


class DemandPredictionService:
    """
    Demand forecasts per product, decomposed into seasonal, trend and hourly factors.

    The local computation is a closed-form heuristic over stock, quality score,
    category season and demand trend. Turnover is simulated unless a real
    estimator is injected.
    """

    def __init__(
        self,
        core: EngineCore,
        catalog: ProductCatalog,
        *,
        turnover_estimator: Optional[TurnoverEstimator] = None,
    ):
        self.core = core
        self.catalog = catalog
        self.turnover_estimator = turnover_estimator or self._simulated_turnover

    # ---------- Public API --------------------------------------------------------

    async def predict(self, product_id: str, horizon_days: int = DEFAULT_HORIZON_DAYS) -> Optional[DemandPrediction]:
        """
        Predict unit sales for `product_id` over `horizon_days`.
        Returns None when the product does not exist.
        """
        t0 = time.perf_counter()
        product_id = str(product_id)

        async def local() -> Optional[DemandPrediction]:
            product = await self.catalog.get(product_id)
            if not product:
                logger.info("demand.predict product not found product_id=%s", product_id)
                return None
            return self.compute_prediction(product, horizon_days)

        result = await self.core.perform_request(
            "/ai/predict",
            {"method": "POST", "body": {"productId": product_id, "days": horizon_days}},
            local,
            shape=DemandPrediction.model_validate,
            cache_key=f"demand:{product_id}:{horizon_days}",
        )
        logger.debug("demand.predict done product_id=%s days=%s time=%.3fs",
                     product_id, horizon_days, time.perf_counter() - t0)
        return result

    async def predict_many(
        self, product_ids: List[str], horizon_days: int = DEFAULT_HORIZON_DAYS
    ) -> Dict[str, Optional[DemandPrediction]]:
        """
        Run predictions concurrently. A failing prediction is logged and
        reported as None; it never cancels the others.
        """
        ids = [str(pid) for pid in dict.fromkeys(product_ids)]
        results = await asyncio.gather(
            *(self.predict(pid, horizon_days) for pid in ids),
            return_exceptions=True,
        )
        out: Dict[str, Optional[DemandPrediction]] = {}
        for pid, res in zip(ids, results):
            if isinstance(res, BaseException):
                logger.error("demand.predict_many failed product_id=%s err=%r", pid, res)
                out[pid] = None
            else:
                out[pid] = res
        return out

    async def get_forecast(self) -> List[DemandForecastItem]:
        """30-day demand outlook: upstream sales insight when available, else per product."""

        async def local() -> List[DemandForecastItem]:
            products = await self.catalog.list_products(limit=FORECAST_PRODUCTS)
            forecasts = []
            for product in products:
                prediction = await self.predict(product.product_id, 30)
                if prediction:
                    forecasts.append(DemandForecastItem(
                        product=product.name,
                        category=product.category,
                        predicted_demand=prediction.predicted_sales,
                        confidence=prediction.confidence,
                    ))
            return forecasts

        return await self.core.perform_request(
            "/ai/insights", {"method": "GET"}, local, shape=_forecast_from_insights,
        )

    async def get_hourly_predictions(self) -> List[HourlyPrediction]:
        """
        Hourly series for today's opening hours (08:00-19:00).
        Hours already started carry a simulated actual at 80-110% of the prediction.
        """
        daily_baseline = await self.core.perform_request(
            "/ai/insights", {"method": "GET"}, lambda: DEFAULT_DAILY_BASELINE, shape=_baseline_from_insights,
        )

        rng = self.core.rng
        current_hour = self.core.now().hour
        predictions = []
        for hour in OPENING_HOURS:
            factor = hourly_demand_factor(hour)
            predicted = round_half_up(daily_baseline / len(OPENING_HOURS) * factor)
            actual = round_half_up(predicted * (0.8 + rng.random() * 0.3)) if hour <= current_hour else None
            predictions.append(HourlyPrediction(
                hour=f"{hour}:00",
                predicted=predicted,
                actual=actual,
                confidence=85 + rng.randrange(10),
                trend="high" if factor > 1.2 else "low" if factor < 0.8 else "medium",
            ))
        return predictions

    # ---------- Local computation -------------------------------------------------

    def compute_prediction(self, product: Product, horizon_days: int = DEFAULT_HORIZON_DAYS) -> DemandPrediction:
        now = self.core.now()
        season = seasonal_factor(product.category, now.month)
        trend = trend_multiplier(product.demand_trend)
        reorder_point = product.effective_reorder_point

        base = product.stock * BASE_DEMAND_FACTOR * product.ai_score * season * trend
        predicted_sales = round_half_up(base * (horizon_days / 7))
        daily = base / 7
        if product.stock == 0:
            days_to_stockout = 0  # already out of stock
        elif daily > 0:
            days_to_stockout = round_half_up(product.stock / daily)
        else:
            days_to_stockout = NO_STOCKOUT_DAYS

        if product.stock <= reorder_point:
            recommendation = "reorder"
        elif days_to_stockout <= MONITOR_CLOSELY_DAYS:
            recommendation = "monitor_closely"
        else:
            recommendation = "monitor"

        return DemandPrediction(
            product_id=product.product_id,
            product_name=product.name,
            predicted_sales=predicted_sales,
            confidence=round_half_up(product.ai_score * 100),
            recommendation=recommendation,
            days_to_stockout=days_to_stockout,
            weekly_trend=self._weekly_trend(base, horizon_days),
            turnover_rate=round(self.turnover_estimator(product), 2),
            profit_impact=_profit_impact(product, predicted_sales, reorder_point),
            factors=DemandFactors(
                ai_score=product.ai_score,
                seasonal_factor=season,
                trend_multiplier=trend,
                current_stock=product.stock,
                reorder_point=reorder_point,
            ),
            generated_at=now,
        )

    def _weekly_trend(self, base: float, horizon_days: int) -> List[DayTrend]:
        rng = self.core.rng
        points = []
        for i in range(min(horizon_days, 7)):
            jitter = (rng.random() - 0.5) * 2 * WEEKLY_JITTER * base
            points.append(DayTrend(
                day=WEEKDAYS[i],
                prediction=max(0, round_half_up(base / 7 + jitter)),
                confidence=round(0.85 + rng.random() * 0.1, 3),
            ))
        return points

    def _simulated_turnover(self, product: Product) -> float:
        low, high = TURNOVER_RANGE
        return self.core.rng.uniform(low, high)


# ---------- helpers ---------------------------------------------------------------

def _profit_impact(product: Product, predicted_sales: int, reorder_point: int) -> ProfitImpact:
    unit_profit = product.unit_profit
    margin = (unit_profit / product.price * 100) if product.price else 0.0
    return ProfitImpact(
        expected_profit=round(unit_profit * predicted_sales, 2),
        margin_percent=round(margin, 1),
        risk_level="high" if product.stock <= reorder_point else "low",
    )


def _forecast_from_insights(insights: Any) -> List[DemandForecastItem]:
    """Upstream /ai/insights -> single aggregate forecast. Raises when no sales insight is present."""
    if not isinstance(insights, list):
        raise ValueError("insights payload is not a list")
    for insight in insights:
        if isinstance(insight, dict) and insight.get("type") == "sales_prediction" and insight.get("detailedData"):
            return [DemandForecastItem(
                product="General sales",
                category="General",
                predicted_demand=float(insight.get("estimatedValue") or 0),
                confidence=int(float(str(insight.get("confidence", 0)).rstrip("%"))),
            )]
    raise ValueError("no sales_prediction insight in payload")


def _baseline_from_insights(insights: Any) -> float:
    """Daily baseline = sum of upstream sales_prediction metrics; default when none predict sales."""
    if not isinstance(insights, list):
        raise ValueError("insights payload is not a list")
    total = 0.0
    for insight in insights:
        if isinstance(insight, dict) and insight.get("type") == "sales_prediction":
            metrics = insight.get("metrics") or {}
            if not isinstance(metrics, dict):
                raise ValueError("sales_prediction metrics is not an object")
            total += float(metrics.get("predicted") or 0)
    return total if total > 0 else DEFAULT_DAILY_BASELINE
