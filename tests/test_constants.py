import pytest

from posai.core.config import Settings
from posai.domain.models.product import Product
from posai.domain.services.constants import (
    elasticity_coefficient,
    normalize_category,
    round_half_up,
    seasonal_factor,
)


@pytest.mark.parametrize("x, expected", [(2.5, 3), (2.49, 2), (-0.5, 0), (108.00000000000001, 108)])
def test_round_half_up(x, expected):
    assert round_half_up(x) == expected


def test_normalize_category_folds_accents():
    assert normalize_category("Neumáticos") == "neumaticos"
    assert normalize_category(" Transmisión ") == "transmision"
    assert normalize_category(None) == ""


@pytest.mark.parametrize("category, month, factor", [
    ("Neumáticos", 4, 1.3),
    ("neumaticos", 6, 1.0),
    ("Filtros", 10, 1.2),
    ("Accesorios", 1, 1.4),
    ("Frenos", 2, 1.2),
    ("Frenos", 3, 1.0),
    ("Cascos", 12, 1.0),
])
def test_seasonal_factor(category, month, factor):
    assert seasonal_factor(category, month) == factor


def test_elasticity_uses_normalized_category():
    assert elasticity_coefficient("Transmisión") == -0.9
    assert elasticity_coefficient("unknown") == -1.0


def test_effective_reorder_point_fallbacks():
    assert Product(product_id=1, name="a", price=1, stock=40, reorder_point=7).effective_reorder_point == 7
    assert Product(product_id="b", name="b", price=1, stock=40, min_stock=4).effective_reorder_point == 4
    assert Product(product_id="c", name="c", price=1, stock=40, max_stock=60).effective_reorder_point == 12
    assert Product(product_id="d", name="d", price=1, stock=40).effective_reorder_point == 8


def test_product_accepts_camel_case_documents():
    p = Product.model_validate({"productId": 7, "name": "x", "price": 10, "sales30Days": 12, "demandTrend": "down"})
    assert p.product_id == "7"
    assert p.sales_30_days == 12
    assert p.demand_trend.value == "down"


def test_settings_build_engine_config():
    cfg = Settings(ai_cache_ttl_minutes=2, ai_random_seed=3, ai_base_confidence=0.9).engine_config()
    assert (cfg.cache_ttl, cfg.random_seed, cfg.confidence, cfg.version) == (2, 3, 0.9, "4.0.0")
