from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from posai.domain.models.engine import CamelModel

AlertLevel = Literal["urgent", "critical", "warning"]
VelocityTrend = Literal["increasing", "decreasing", "stable"]

# urgent > critical > warning
PRIORITY_ORDER: Dict[str, int] = {"urgent": 3, "critical": 2, "warning": 1}


class SalesVelocity(CamelModel):
    daily_rate: float
    weekly_rate: float
    monthly_rate: int
    trend: VelocityTrend = "stable"
    acceleration: float = 0.0


class StockAlert(CamelModel):
    id: str
    product_id: str
    product_name: str
    category: str = "Uncategorized"
    current_stock: int
    minimum_stock: Optional[int] = None
    reorder_point: Optional[int] = None
    days_until_stockout: Optional[float] = None
    sales_velocity: Optional[SalesVelocity] = None
    trend: str = "stable"
    priority: AlertLevel
    level: AlertLevel
    title: str
    message: str
    recommended_action: str
    recommended_order: int = 0
    supplier: str = "Main supplier"
    estimated_cost: float = 0
    predicted_loss: float = 0
    confidence: int = 90
    timestamp: datetime
    ai_generated: bool = True


class AlertSummary(CamelModel):
    total: int = 0
    critical: int = 0
    warning: int = 0


class StockAlertFeed(CamelModel):
    """Raw upstream stock-alert feed: records are normalised by the inventory service."""
    data: List[Dict[str, Any]] = Field(default_factory=list)
    summary: AlertSummary = Field(default_factory=AlertSummary)


class CriticalAlert(CamelModel):
    title: str
    message: str
    severity: Literal["high", "medium", "low"] = "high"
    timestamp: datetime
    type: str = "inventory"


class InventoryOptimization(CamelModel):
    product: str
    suggestion: str
    impact: str
    potential_savings: float
