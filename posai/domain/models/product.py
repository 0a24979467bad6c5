import math
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from posai.domain.models.engine import CamelModel

DEFAULT_REORDER_RATIO = 0.2  # 20% of max stock when no reorder point is set


class DemandTrend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Product(CamelModel):
    """Catalog entry as read from the POS backend. Read-only for the engine."""
    product_id: str
    name: str
    category: str = ""
    price: float = Field(ge=0)
    cost: float = Field(default=0, ge=0)
    stock: int = Field(default=0, ge=0)
    reorder_point: Optional[int] = Field(default=None, ge=0)
    min_stock: Optional[int] = Field(default=None, ge=0)
    max_stock: Optional[int] = Field(default=None, ge=0)
    sales_30_days: Optional[int] = Field(default=None, ge=0, alias="sales30Days")
    sales_7_days: Optional[int] = Field(default=None, ge=0, alias="sales7Days")
    demand_trend: DemandTrend = DemandTrend.STABLE
    ai_score: float = Field(default=0.75, ge=0, le=1)

    model_config = {"frozen": True}

    @field_validator("product_id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        # Mongo documents may store numeric ids
        return str(v) if v is not None else v

    @property
    def effective_reorder_point(self) -> int:
        if self.reorder_point:
            return self.reorder_point
        if self.min_stock:
            return self.min_stock
        return math.floor((self.max_stock or self.stock) * DEFAULT_REORDER_RATIO)

    @property
    def unit_profit(self) -> float:
        return self.price - self.cost
