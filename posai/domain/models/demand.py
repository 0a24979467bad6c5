from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from posai.domain.models.engine import CamelModel

Recommendation = Literal["reorder", "monitor_closely", "monitor"]
RiskLevel = Literal["high", "low"]
HourTrend = Literal["high", "medium", "low"]


class DayTrend(CamelModel):
    day: str
    prediction: int
    confidence: float = Field(ge=0, le=1)


class ProfitImpact(CamelModel):
    expected_profit: float
    margin_percent: float
    risk_level: RiskLevel


class DemandFactors(CamelModel):
    ai_score: float
    seasonal_factor: float
    trend_multiplier: float
    current_stock: int
    reorder_point: int


class DemandPrediction(CamelModel):
    product_id: str
    product_name: str
    predicted_sales: int = Field(ge=0)
    confidence: int = Field(ge=0, le=100)
    recommendation: Recommendation
    days_to_stockout: int = Field(ge=0)
    weekly_trend: List[DayTrend] = Field(default_factory=list, max_length=7)
    turnover_rate: float
    profit_impact: ProfitImpact
    factors: Optional[DemandFactors] = None
    generated_at: datetime


class DemandForecastItem(CamelModel):
    product: str
    category: str
    predicted_demand: float
    confidence: int


class HourlyPrediction(CamelModel):
    hour: str
    predicted: int
    actual: Optional[int] = None
    confidence: int
    trend: HourTrend
