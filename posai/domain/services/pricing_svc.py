# posai/domain/services/pricing_svc.py

from __future__ import annotations
from datetime import timedelta
from typing import Any, List, Optional, Tuple
import logging
import time

from posai.domain.engine.core import EngineCore
from posai.domain.models.pricing import (
    CompetitorPricing,
    DemandElasticity,
    DemandMetrics,
    MarketConditions,
    PriceOptimization,
    PriceSuggestion,
    PricingInsight,
    RealTimeMarket,
)
from posai.domain.models.product import DemandTrend, Product
from posai.domain.repositories.product_repo import ProductCatalog
from posai.domain.services.constants import (
    COMPETITOR_VARIANCE,
    INSIGHT_PRODUCTS,
    MAX_SUGGESTION_CONFIDENCE,
    MIN_DYNAMIC_CHANGE,
    SUGGESTION_VALIDITY_HOURS,
    URGENCY_ORDER,
    elasticity_coefficient,
    hourly_demand_factor,
    is_peak_hour,
    round_half_up,
)

logger = logging.getLogger(__name__)

# First matching rule wins: (multiplier, reasoning)
RULE_DEMAND_LOW_STOCK = (1.08, "High demand with low stock detected")
RULE_LOW_DEMAND = (0.95, "Lower price to accelerate turnover on falling demand")
RULE_EXCESS_STOCK = (0.92, "Reduce excess inventory")
RULE_BELOW_MARKET = (1.06, "Align with market price")
RULE_MAINTAIN = (1.0, "Maintain current price")


def _pct(new: float, old: float) -> float:
    return round((new - old) / old * 100, 1) if old else 0.0


def _margin(price: float, cost: float) -> float:
    return round((price - cost) / price * 100, 1) if price else 0.0


class PricingOptimizationService:
    """
    Price recommendations from demand trend, stock pressure and simulated market data.
    """

    def __init__(self, core: EngineCore, catalog: ProductCatalog):
        self.core = core
        self.catalog = catalog

    # ---------- Public API --------------------------------------------------------

    async def optimize(self, product_id: str) -> Optional[PriceOptimization]:
        """Suggested price for one product, None when the product does not exist."""
        product_id = str(product_id)

        async def local() -> Optional[PriceOptimization]:
            product = await self.catalog.get(product_id)
            if not product:
                logger.info("pricing.optimize product not found product_id=%s", product_id)
                return None
            market = await self.analyze_market_conditions(product.category)
            return self.compute_optimization(product, market)

        return await self.core.perform_request(
            "/ai/optimize-price",
            {"method": "POST", "body": {"productId": product_id}},
            local,
            shape=PriceOptimization.model_validate,
            cache_key=f"pricing:{product_id}",
        )

    async def get_insights(self) -> List[PricingInsight]:
        """Top pricing opportunities (4 products)."""

        async def local() -> List[PricingInsight]:
            insights = []
            for product in await self.catalog.list_products(limit=INSIGHT_PRODUCTS):
                optimization = await self.optimize(product.product_id)
                if optimization:
                    insights.append(PricingInsight(
                        product=product.name,
                        current_price=product.price,
                        suggested_price=optimization.suggested_price,
                        reasoning=optimization.reasoning,
                        impact=optimization.potential_increase,
                    ))
            return insights

        return await self.core.perform_request(
            "/ai/pricing-suggestions", {"method": "GET"}, local, shape=_insights_from_upstream,
        )

    async def get_dynamic_suggestions(self, product_id: Optional[str] = None) -> List[PriceSuggestion]:
        """
        Real-time suggestions across the catalog (or one product).
        Only changes of at least 2% are emitted, sorted by urgency then |expected impact|.
        """
        t0 = time.perf_counter()
        if product_id is not None:
            product = await self.catalog.get(str(product_id))
            products = [product] if product else []
        else:
            products = await self.catalog.list_products()

        now = self.core.now()
        suggestions = []
        for product in products:
            suggestion = self.compute_dynamic_suggestion(product, now=now)
            if suggestion is not None:
                suggestions.append(suggestion)

        suggestions.sort(key=lambda s: (-URGENCY_ORDER[s.urgency], -abs(s.expected_impact)))
        logger.info("pricing.dynamic done products=%s suggestions=%s time=%.3fs",
                    len(products), len(suggestions), time.perf_counter() - t0)
        return suggestions

    # ---------- Local computation -------------------------------------------------

    def compute_optimization(self, product: Product, market: MarketConditions) -> PriceOptimization:
        multiplier, reasoning = self.select_rule(product, market)
        suggested = max(0, round_half_up(product.price * multiplier)) if multiplier != 1.0 else product.price
        competitor = product.price * (1 + self.core.rng.uniform(-COMPETITOR_VARIANCE, COMPETITOR_VARIANCE))

        return PriceOptimization(
            product_id=product.product_id,
            product_name=product.name,
            current_price=product.price,
            suggested_price=suggested,
            potential_increase=_pct(suggested, product.price),
            reasoning=reasoning,
            market_conditions=market,
            demand_elasticity=self.demand_elasticity(product),
            competitor_price=round_half_up(competitor),
            current_margin=_margin(product.price, product.cost),
            new_margin=_margin(suggested, product.cost),
            confidence=round_half_up(product.ai_score * 100),
            generated_at=self.core.now(),
        )

    @staticmethod
    def select_rule(product: Product, market: MarketConditions) -> Tuple[float, str]:
        reorder_point = product.effective_reorder_point
        if product.demand_trend == DemandTrend.UP and product.stock <= reorder_point:
            return RULE_DEMAND_LOW_STOCK
        if product.demand_trend == DemandTrend.DOWN:
            return RULE_LOW_DEMAND
        if product.stock > reorder_point * 3:
            return RULE_EXCESS_STOCK
        if market.average_price > product.price * 1.1:
            return RULE_BELOW_MARKET
        return RULE_MAINTAIN

    async def analyze_market_conditions(self, category: str) -> MarketConditions:
        """Simulated market snapshot; the average price anchors on the category's first product."""
        rng = self.core.rng
        reference = await self.catalog.first_in_category(category)
        average = reference.price * (0.95 + rng.random() * 0.1) if reference else 0.0
        return MarketConditions(
            demand="high" if rng.random() > 0.5 else "medium",
            competition="high" if rng.random() > 0.3 else "medium",
            average_price=round(average, 2),
            price_volatility=round(rng.random() * 0.2, 3),
            market_growth=round((rng.random() - 0.3) * 0.4, 3),
        )

    @staticmethod
    def demand_elasticity(product: Product) -> DemandElasticity:
        coefficient = elasticity_coefficient(product.category)
        elastic = abs(coefficient) > 1
        return DemandElasticity(
            coefficient=coefficient,
            interpretation="elastic" if elastic else "inelastic",
            price_flexibility="high" if elastic else "low",
        )

    def compute_dynamic_suggestion(self, product: Product, *, now=None) -> Optional[PriceSuggestion]:
        now = now or self.core.now()
        demand = self.real_time_demand(product, now.hour)
        market = self.real_time_market()
        competitors = self.competitor_pricing(product)

        price = product.price
        if price <= 0:
            return None

        suggested = float(price)
        confidence = 0.75
        reasoning: List[str] = []
        expected_impact = 0.0

        # 1) real-time demand vs average
        if demand.current_demand > demand.avg_demand * 1.3:
            m = min(1.15, 1 + (demand.demand_ratio - 1) * 0.5)
            suggested *= m
            confidence += 0.1
            reasoning.append(f"High demand detected (+{(m - 1) * 100:.1f}%)")
            expected_impact += (m - 1) * product.stock * price
        elif demand.current_demand < demand.avg_demand * 0.7:
            m = max(0.88, 1 - (1 - demand.demand_ratio) * 0.4)
            suggested *= m
            confidence += 0.05
            reasoning.append(f"Low demand detected (-{(1 - m) * 100:.1f}%)")
            expected_impact += (m - 1) * product.stock * price

        # 2) stock pressure
        reorder_point = product.effective_reorder_point
        if reorder_point:
            stock_ratio = product.stock / reorder_point
        else:
            # out of stock is never excess inventory, even without a reorder point
            stock_ratio = float("inf") if product.stock else 0.0
        if stock_ratio <= 1.2 and demand.trend == "increasing":
            suggested *= 1.08
            confidence += 0.08
            reasoning.append("Critical stock with rising demand (+8%)")
        elif stock_ratio >= 3 and demand.trend != "increasing":
            suggested *= 0.93
            confidence += 0.06
            reasoning.append("Excess inventory (-7%)")

        # 3) peak hour surcharge
        if is_peak_hour(now.hour):
            suggested *= 1.03
            reasoning.append("Peak hour (+3%)")

        # 4) competitor gap
        if competitors.average_price > price * 1.1:
            m = min(1.08, competitors.average_price / price * 0.95)
            suggested *= m
            confidence += 0.05
            reasoning.append(f"Competitive adjustment (+{(m - 1) * 100:.1f}%)")

        suggested_price = round_half_up(suggested)
        change = (suggested_price - price) / price
        if abs(change) < MIN_DYNAMIC_CHANGE:
            return None

        return PriceSuggestion(
            product_id=product.product_id,
            product_name=product.name,
            category=product.category,
            current_price=price,
            suggested_price=suggested_price,
            price_change=round(change * 100, 1),
            reasoning=", ".join(reasoning),
            confidence=round(min(MAX_SUGGESTION_CONFIDENCE, confidence), 2),
            demand_metrics=demand,
            market_conditions=market,
            expected_impact=round_half_up(expected_impact),
            urgency=price_urgency(demand, stock_ratio),
            valid_until=now + timedelta(hours=SUGGESTION_VALIDITY_HOURS),
            timestamp=now,
        )

    def real_time_demand(self, product: Product, hour: int) -> DemandMetrics:
        rng = self.core.rng
        factor = hourly_demand_factor(hour)
        sales_30 = product.sales_30_days or rng.randint(5, 24)
        avg_hourly = sales_30 / (30 * 12)
        current = avg_hourly * factor * (0.8 + rng.random() * 0.4)
        if rng.random() > 0.6:
            trend = "increasing"
        elif rng.random() > 0.3:
            trend = "stable"
        else:
            trend = "decreasing"
        return DemandMetrics(
            current_demand=round(current, 1),
            avg_demand=round(avg_hourly, 1),
            demand_ratio=current / avg_hourly if avg_hourly else 1.0,
            trend=trend,
            peak_factor=factor,
        )

    def real_time_market(self) -> RealTimeMarket:
        rng = self.core.rng
        return RealTimeMarket(
            volatility=round(rng.random() * 0.3, 3),
            competitiveness="high" if rng.random() > 0.5 else "medium",
            market_growth=round((rng.random() - 0.4) * 0.3, 3),
            demand_strength="strong" if rng.random() > 0.3 else "weak",
            price_flexibility="high" if rng.random() > 0.5 else "medium",
        )

    def competitor_pricing(self, product: Product) -> CompetitorPricing:
        rng = self.core.rng
        base = product.price
        return CompetitorPricing(
            average_price=round_half_up(base * (1 + (rng.random() - 0.5) * 0.15)),
            min_price=round_half_up(base * (0.9 + rng.random() * 0.1)),
            max_price=round_half_up(base * (1.1 + rng.random() * 0.1)),
            our_position="competitive" if rng.random() > 0.5 else "premium",
        )


def price_urgency(demand: DemandMetrics, stock_ratio: float) -> str:
    if demand.trend == "increasing" and stock_ratio <= 1.2:
        return "high"
    if demand.demand_ratio > 1.5 or stock_ratio <= 0.8:
        return "high"
    if demand.demand_ratio > 1.2 or stock_ratio <= 1.0:
        return "medium"
    return "low"


def _insights_from_upstream(items: Any) -> List[PricingInsight]:
    if not isinstance(items, list):
        raise ValueError("pricing suggestions payload is not a list")
    return [
        PricingInsight(
            product=item["productName"],
            current_price=item["currentPrice"],
            suggested_price=item["suggestedPrice"],
            reasoning=item.get("reason", ""),
            impact=float(item.get("priceChange") or 0),
        )
        for item in items[:INSIGHT_PRODUCTS]
    ]
