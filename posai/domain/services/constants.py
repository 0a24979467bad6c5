# Business rules shared by the demand, pricing and inventory services.
import math
import unicodedata

# Demand prediction
BASE_DEMAND_FACTOR = 0.3          # share of current stock expected to sell per week
DEFAULT_HORIZON_DAYS = 7
MONITOR_CLOSELY_DAYS = 14
NO_STOCKOUT_DAYS = 999            # reported when predicted demand is zero
WEEKLY_JITTER = 0.15              # +/- share of the weekly base per daily point
WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
TURNOVER_RANGE = (2.0, 14.0)      # simulated times per year

TREND_MULTIPLIERS = {"up": 1.2, "down": 0.8, "stable": 1.0}

# Opening hours 08:00-19:00, multiplier of the average hourly demand
HOURLY_DEMAND_FACTORS = {
    8: 0.6, 9: 0.8, 10: 1.2, 11: 1.1, 12: 0.9, 13: 0.7,
    14: 1.0, 15: 1.4, 16: 1.6, 17: 1.5, 18: 1.2, 19: 0.8,
}
DEFAULT_HOURLY_FACTOR = 0.5
OPENING_HOURS = list(range(8, 20))
DEFAULT_DAILY_BASELINE = 2000
PEAK_HOURS = [10, 15, 16, 17]

# Pricing
COMPETITOR_VARIANCE = 0.05        # +/- 5%
MIN_DYNAMIC_CHANGE = 0.02         # suggestions below 2% are dropped
SUGGESTION_VALIDITY_HOURS = 2
MAX_SUGGESTION_CONFIDENCE = 0.95
PRICE_ELASTICITY = {
    "neumaticos": -1.2,
    "filtros": -0.8,
    "accesorios": -1.5,
    "transmision": -0.9,
    "frenos": -0.7,
    "aceites": -0.9,
    "baterias": -1.1,
}
DEFAULT_ELASTICITY = -1.0
URGENCY_ORDER = {"high": 3, "medium": 2, "low": 1}

# Inventory
STOCK_ALERT_DAYS = {"urgent": 3, "critical": 7, "warning": 14}
LOSS_HORIZON_DAYS = 7
NO_LOSS_AFTER_DAYS = 30
LEAD_TIME_DAYS = 7
SAFETY_STOCK_DAYS = 3
DEFAULT_COST_RATIO = 0.7          # unit cost assumed when the product has none
VELOCITY_BAND = 0.1               # +/- 10% before a velocity trend is reported
TRAILING_WEEK_SHARE = 0.3         # sales_7_days estimate when only 30-day sales are known

# Catalog slices used by the aggregate endpoints
FORECAST_PRODUCTS = 6
INSIGHT_PRODUCTS = 4
OPTIMIZATION_PRODUCTS = 5


def round_half_up(x: float) -> int:
    """Commercial rounding (2.5 -> 3), unlike Python's banker's round()."""
    return int(math.floor(x + 0.5))


def normalize_category(category: str) -> str:
    """'Neumáticos' -> 'neumaticos'."""
    folded = unicodedata.normalize("NFKD", category or "")
    return "".join(c for c in folded if not unicodedata.combining(c)).strip().lower()


def seasonal_factor(category: str, month: int) -> float:
    """Demand multiplier for a category in a calendar month (1-12)."""
    cat = normalize_category(category)
    if cat == "neumaticos":
        return 1.3 if 3 <= month <= 5 else 1.0
    if cat == "filtros":
        return 1.2 if 9 <= month <= 11 else 1.0
    if cat == "accesorios":
        return 1.4 if month in (12, 1) else 1.0
    if cat == "frenos":
        return 1.2 if month in (12, 1, 2) else 1.0
    return 1.0


def trend_multiplier(trend) -> float:
    key = getattr(trend, "value", trend)
    return TREND_MULTIPLIERS.get(key, 1.0)


def hourly_demand_factor(hour: int) -> float:
    return HOURLY_DEMAND_FACTORS.get(hour, DEFAULT_HOURLY_FACTOR)


def is_peak_hour(hour: int) -> bool:
    return hour in PEAK_HOURS


def elasticity_coefficient(category: str) -> float:
    return PRICE_ELASTICITY.get(normalize_category(category), DEFAULT_ELASTICITY)
