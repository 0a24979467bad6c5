from datetime import datetime
from typing import Literal

from pydantic import Field

from posai.domain.models.engine import CamelModel

Urgency = Literal["high", "medium", "low"]
DemandDirection = Literal["increasing", "stable", "decreasing"]


class MarketConditions(CamelModel):
    demand: Literal["high", "medium"]
    competition: Literal["high", "medium"]
    average_price: float
    price_volatility: float
    market_growth: float


class DemandElasticity(CamelModel):
    """|coefficient| > 1 means demand is sensitive to price."""
    coefficient: float
    interpretation: Literal["elastic", "inelastic"]
    price_flexibility: Literal["high", "low"]


class PriceOptimization(CamelModel):
    product_id: str
    product_name: str
    current_price: float
    suggested_price: float = Field(ge=0)
    potential_increase: float        # percent change
    reasoning: str
    market_conditions: MarketConditions
    demand_elasticity: DemandElasticity
    competitor_price: float
    current_margin: float            # percent
    new_margin: float                # percent
    confidence: int = Field(ge=0, le=100)
    generated_at: datetime


class PricingInsight(CamelModel):
    product: str
    current_price: float
    suggested_price: float
    reasoning: str
    impact: float


class DemandMetrics(CamelModel):
    current_demand: float
    avg_demand: float
    demand_ratio: float
    trend: DemandDirection
    peak_factor: float


class RealTimeMarket(CamelModel):
    volatility: float
    competitiveness: Literal["high", "medium"]
    market_growth: float
    demand_strength: Literal["strong", "weak"]
    price_flexibility: Literal["high", "medium"]


class CompetitorPricing(CamelModel):
    average_price: float
    min_price: float
    max_price: float
    our_position: Literal["competitive", "premium"]


class PriceSuggestion(CamelModel):
    product_id: str
    product_name: str
    category: str
    current_price: float
    suggested_price: float
    price_change: float              # percent
    reasoning: str
    confidence: float = Field(ge=0, le=0.95)
    demand_metrics: DemandMetrics
    market_conditions: RealTimeMarket
    expected_impact: int
    urgency: Urgency
    valid_until: datetime
    timestamp: datetime
    source: str = "dynamic_ai"
