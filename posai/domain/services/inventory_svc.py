# posai/domain/services/inventory_svc.py

from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging
import math
import time

from posai.domain.engine.core import EngineCore
from posai.domain.models.inventory import (
    PRIORITY_ORDER,
    AlertSummary,
    CriticalAlert,
    InventoryOptimization,
    SalesVelocity,
    StockAlert,
    StockAlertFeed,
)
from posai.domain.models.product import Product
from posai.domain.repositories.product_repo import ProductCatalog
from posai.domain.services.constants import (
    DEFAULT_COST_RATIO,
    LEAD_TIME_DAYS,
    LOSS_HORIZON_DAYS,
    NO_LOSS_AFTER_DAYS,
    OPTIMIZATION_PRODUCTS,
    SAFETY_STOCK_DAYS,
    STOCK_ALERT_DAYS,
    TRAILING_WEEK_SHARE,
    VELOCITY_BAND,
    round_half_up,
)
from posai.domain.services.demand_svc import DemandPredictionService

logger = logging.getLogger(__name__)


class InventoryManagementService:
    """
    Stock alerts and reorder recommendations.
    Upstream stock-alert feed is the source of truth; a local velocity-based
    algorithm covers the simpler call paths.
    """

    def __init__(self, core: EngineCore, catalog: ProductCatalog, demand: DemandPredictionService):
        self.core = core
        self.catalog = catalog
        self.demand = demand

    # ---------- Public API --------------------------------------------------------

    async def get_stock_alerts(self) -> StockAlertFeed:
        """Raw upstream feed. Empty feed when the backend is unavailable."""
        return await self.core.perform_request(
            "/ai/stock-alerts", {"method": "GET"}, StockAlertFeed, shape=_feed_from_upstream,
        )

    async def get_advanced_alerts(self) -> List[StockAlert]:
        """
        Upstream alerts normalised into StockAlert records, sorted urgent > critical > warning.
        No synthetic alerts: an empty feed gives an empty list.
        """
        feed = await self.get_stock_alerts()
        if not feed or not feed.data:
            return []

        now = self.core.now()
        alerts = []
        for item in feed.data:
            try:
                alerts.append(_alert_from_upstream(item, now))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("inventory.advanced skipping malformed alert item=%s err=%s", item, e)
        return sort_alerts(alerts)

    async def get_critical_alerts(self) -> List[CriticalAlert]:
        """Critical-level alerts only; locally one summary alert for products at/below reorder point."""

        async def local() -> List[CriticalAlert]:
            products = await self.catalog.list_products()
            low = [p for p in products if p.stock <= p.effective_reorder_point]
            if not low:
                return []
            return [CriticalAlert(
                title="Critical stock",
                message=f"{len(low)} products with low stock",
                timestamp=self.core.now(),
            )]

        def shape(payload: Any) -> List[CriticalAlert]:
            feed = _feed_from_upstream(payload)
            now = self.core.now()
            return [
                CriticalAlert(
                    title=item.get("message") or "Critical stock",
                    message=item.get("recommendation") or "",
                    timestamp=now,
                )
                for item in feed.data
                if item.get("level") == "critical"
            ]

        return await self.core.perform_request("/ai/stock-alerts", {"method": "GET"}, local, shape=shape)

    async def get_optimizations(self) -> List[InventoryOptimization]:
        """Reorder opportunities: upstream 'inventory_critical' items or products predicted to need a reorder."""

        async def local() -> List[InventoryOptimization]:
            out = []
            for product in await self.catalog.list_products(limit=OPTIMIZATION_PRODUCTS):
                prediction = await self.demand.predict(product.product_id, 30)
                if prediction and prediction.recommendation == "reorder":
                    out.append(InventoryOptimization(
                        product=product.name,
                        suggestion=f"Restock: {prediction.days_to_stockout} days remaining",
                        impact="high",
                        potential_savings=round_half_up(product.price * product.effective_reorder_point * 0.1),
                    ))
            return out

        return await self.core.perform_request(
            "/ai/opportunities", {"method": "GET"}, local, shape=_optimizations_from_upstream,
        )

    async def compute_local_alerts(self, product_id: Optional[str] = None) -> List[StockAlert]:
        """Velocity-based alerts computed from the catalog alone."""
        t0 = time.perf_counter()
        if product_id is not None:
            product = await self.catalog.get(str(product_id))
            products = [product] if product else []
        else:
            products = await self.catalog.list_products()

        now = self.core.now()
        alerts = [a for a in (self.build_local_alert(p, now) for p in products) if a is not None]
        logger.info("inventory.local_alerts done products=%s alerts=%s time=%.3fs",
                    len(products), len(alerts), time.perf_counter() - t0)
        return sort_alerts(alerts)

    # ---------- Local computation -------------------------------------------------

    def build_local_alert(self, product: Product, now) -> Optional[StockAlert]:
        velocity = self.sales_velocity(product)
        reorder_point = product.effective_reorder_point
        days = round(product.stock / velocity.daily_rate, 1) if velocity.daily_rate > 0 else None

        level = alert_level(days, product.stock, reorder_point)
        if level is None:
            return None

        order_qty = optimal_order_quantity(product, velocity)
        return StockAlert(
            id=f"alert_{product.product_id}_{int(now.timestamp())}",
            product_id=product.product_id,
            product_name=product.name,
            category=product.category or "Uncategorized",
            current_stock=product.stock,
            minimum_stock=product.min_stock if product.min_stock is not None else reorder_point,
            reorder_point=reorder_point,
            days_until_stockout=days,
            sales_velocity=velocity,
            trend=velocity.trend,
            priority=level,
            level=level,
            title=alert_title(level, product.name),
            message=alert_message(level, days, velocity),
            recommended_action=recommended_action(level, reorder_point, velocity),
            recommended_order=order_qty,
            estimated_cost=round(order_qty * (product.cost or product.price * DEFAULT_COST_RATIO), 2),
            predicted_loss=potential_loss(product, days, velocity),
            timestamp=now,
        )

    def sales_velocity(self, product: Product) -> SalesVelocity:
        sales_30 = product.sales_30_days
        if sales_30 is None:
            sales_30 = self.core.rng.randint(5, 24)
        sales_7 = product.sales_7_days
        if sales_7 is None:
            sales_7 = math.floor(sales_30 * TRAILING_WEEK_SHARE)
        sales_7 = min(sales_7, sales_30)

        daily = sales_30 / 30
        recent = sales_7 / 7
        older = (sales_30 - sales_7) / 23
        if recent > older * (1 + VELOCITY_BAND):
            trend = "increasing"
        elif recent < older * (1 - VELOCITY_BAND):
            trend = "decreasing"
        else:
            trend = "stable"

        return SalesVelocity(
            daily_rate=round(daily, 1),
            weekly_rate=round(daily * 7, 1),
            monthly_rate=sales_30,
            trend=trend,
            acceleration=round(recent - older, 2),
        )


# ---------- rules -------------------------------------------------------------------

def sort_alerts(alerts: List[StockAlert]) -> List[StockAlert]:
    return sorted(alerts, key=lambda a: -PRIORITY_ORDER.get(a.level, 0))


def alert_level(days_to_stockout: Optional[float], stock: int, reorder_point: int) -> Optional[str]:
    if days_to_stockout is not None:
        if days_to_stockout <= STOCK_ALERT_DAYS["urgent"]:
            return "urgent"
        if days_to_stockout <= STOCK_ALERT_DAYS["critical"]:
            return "critical"
        if days_to_stockout <= STOCK_ALERT_DAYS["warning"]:
            return "warning"
    if stock <= reorder_point:
        return "warning"
    return None


def alert_title(level: str, product_name: str) -> str:
    return {
        "urgent": f"CRITICAL STOCK: {product_name}",
        "critical": f"STOCK ALERT: {product_name}",
        "warning": f"MONITOR: {product_name}",
    }[level]


def alert_message(level: str, days: Optional[float], velocity: SalesVelocity) -> str:
    if level == "urgent":
        return f"Stock runs out in {days} days. Current velocity: {velocity.daily_rate} units/day"
    if level == "critical":
        return f"{days} days of stock left. Trend: {velocity.trend}"
    return "Low stock detected. Watch upcoming sales closely"


def recommended_action(level: str, reorder_point: int, velocity: SalesVelocity) -> str:
    if level == "urgent":
        return f"IMMEDIATE RESTOCK: order {reorder_point * 2} units today"
    if level == "critical":
        qty = max(reorder_point, math.ceil(velocity.weekly_rate * 2))
        return f"Schedule restock this week: {qty} units"
    return "Prepare a purchase order for next week"


def potential_loss(product: Product, days: Optional[float], velocity: SalesVelocity) -> float:
    """Profit lost during the days of the coming week the product is out of stock."""
    if days is None or days >= NO_LOSS_AFTER_DAYS:
        return 0
    missed_units = velocity.daily_rate * max(0, LOSS_HORIZON_DAYS - days)
    unit_profit = product.price - (product.cost or product.price * DEFAULT_COST_RATIO)
    return round_half_up(missed_units * unit_profit)


def optimal_order_quantity(product: Product, velocity: SalesVelocity) -> int:
    safety_stock = math.ceil(velocity.daily_rate * SAFETY_STOCK_DAYS)
    lead_time_stock = math.ceil(velocity.daily_rate * LEAD_TIME_DAYS)
    return max(product.effective_reorder_point, lead_time_stock + safety_stock)


# ---------- upstream payloads ---------------------------------------------------------

def _feed_from_upstream(payload: Any) -> StockAlertFeed:
    # The core already unwrapped `data`, so a bare list is the usual shape.
    if isinstance(payload, list):
        return StockAlertFeed(
            data=payload,
            summary=AlertSummary(
                total=len(payload),
                critical=sum(1 for i in payload if isinstance(i, dict) and i.get("priority") in ("urgent", "critical")),
                warning=sum(1 for i in payload if isinstance(i, dict) and i.get("priority") == "warning"),
            ),
        )
    return StockAlertFeed.model_validate(payload)


def _alert_from_upstream(item: Dict[str, Any], now) -> StockAlert:
    priority = item["priority"]
    if priority not in PRIORITY_ORDER:
        raise ValueError(f"unknown priority {priority!r}")
    name = item["productName"]
    stock = int(item["currentStock"])
    days = item.get("daysToStockout")
    qty = int(item.get("reorderQuantity") or 0)
    runout = f"Runs out in {days} days" if days is not None else "Stock-out date not estimated"
    velocity = item.get("salesVelocity")
    if isinstance(velocity, (int, float)):
        velocity = {"dailyRate": velocity, "weeklyRate": round(velocity * 7, 1), "monthlyRate": round_half_up(velocity * 30)}

    return StockAlert(
        id=str(item.get("id") or f"alert_{item['productId']}_{int(now.timestamp())}"),
        product_id=str(item["productId"]),
        product_name=name,
        category=item.get("category") or "Uncategorized",
        current_stock=stock,
        minimum_stock=item.get("minStock"),
        reorder_point=item.get("minStock"),
        days_until_stockout=days,
        sales_velocity=velocity or None,
        trend=item.get("trend") or "stable",
        priority=priority,
        level=priority,
        title=f"{name} - {'Urgent' if priority == 'urgent' else 'Low'} stock",
        message=f"Current stock: {stock} units. {runout}",
        recommended_action=f"Order {qty} units",
        recommended_order=qty,
        estimated_cost=item.get("estimatedCost") or 0,
        predicted_loss=item.get("potentialLoss") or 0,
        timestamp=now,
    )


def _optimizations_from_upstream(items: Any) -> List[InventoryOptimization]:
    if not isinstance(items, list):
        raise ValueError("opportunities payload is not a list")
    return [
        InventoryOptimization(
            product=opp["title"].removeprefix("Order ").strip(),
            suggestion=opp.get("description", ""),
            impact=opp.get("impact", "medium"),
            potential_savings=float(opp.get("estimatedValue") or 0),
        )
        for opp in items
        if isinstance(opp, dict) and opp.get("type") == "inventory_critical"
    ][:OPTIMIZATION_PRODUCTS]
