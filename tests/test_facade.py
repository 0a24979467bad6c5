from datetime import timedelta

import pytest

from posai.domain.engine.facade import MODULES, build_engine, health_status
from posai.domain.engine.legacy import LegacyAIEngine
from posai.domain.models.engine import EngineConfig


def test_build_engine_wires_services(engine):
    assert engine.demand.core is engine.core
    assert engine.pricing.catalog is engine.demand.catalog
    assert engine.inventory.demand is engine.demand


@pytest.mark.asyncio
async def test_default_catalog_is_sample_catalog():
    engine = build_engine(EngineConfig(random_seed=1))
    products = await engine.demand.catalog.list_products()
    assert [p.product_id for p in products] == ["1", "2", "3", "4", "5", "6"]


def test_configuration_lists_modules(engine):
    view = engine.get_configuration()
    assert view.modules == MODULES
    assert view.version == "4.0.0"
    assert view.use_backend is False
    assert view.cache.ttl_minutes == 5


def test_update_configuration(engine):
    view = engine.update_configuration(cache_ttl=10, enable_cache=False)
    assert view.cache.ttl_minutes == 10
    assert view.cache.enabled is False
    assert view.confidence == 0.94


@pytest.mark.parametrize("error_rate, response_ms, expected", [
    (0, 0, "healthy"),
    (5, 1000, "healthy"),
    (5.1, 0, "warning"),
    (0, 1001, "warning"),
    (10.1, 0, "critical"),
    (0, 3001, "critical"),
])
def test_health_status(error_rate, response_ms, expected):
    assert health_status(error_rate, response_ms) == expected


@pytest.mark.asyncio
async def test_model_and_system_metrics(engine):
    await engine.demand.predict("1")
    await engine.demand.predict("1")
    stats = engine.get_model_statistics()
    assert stats.performance.requests == 2
    assert stats.cache.hits == 1
    system = engine.get_system_metrics()
    assert system.health == "healthy"
    assert system.modules == MODULES


@pytest.mark.asyncio
async def test_reset_model_clears_cache_and_counters(engine, clock, fixed_now):
    await engine.pricing.optimize("1")
    result = engine.reset_model()
    assert result.success
    assert result.timestamp == fixed_now
    perf = engine.get_performance_metrics()
    assert perf.request_count == 0
    assert perf.cache.size == 0


@pytest.mark.asyncio
async def test_retrain_schedules_next_training(engine, fixed_now):
    await engine.pricing.optimize("1")
    result = engine.retrain_model()
    assert result.next_training == fixed_now + timedelta(days=7)
    assert engine.get_performance_metrics().request_count == 0
    # retraining keeps cached results
    assert engine.get_cache_stats().size == 1
    assert engine.get_model_statistics().last_training == fixed_now


@pytest.mark.asyncio
async def test_clear_cache_by_pattern(engine):
    await engine.demand.predict("1")
    await engine.pricing.optimize("1")
    assert engine.clear_cache("pricing:") == 1
    assert engine.get_cache_stats().size == 1


@pytest.mark.asyncio
async def test_legacy_methods_warn_and_delegate(engine):
    legacy = LegacyAIEngine(engine)
    expected = await engine.demand.predict("2", 7)
    with pytest.warns(DeprecationWarning, match="predict_demand"):
        assert await legacy.predict_demand("2", 7) == expected
    with pytest.warns(DeprecationWarning):
        assert await legacy.get_advanced_stock_alerts() == []
    with pytest.warns(DeprecationWarning):
        assert len(await legacy.get_pricing_insights()) == 4


def test_legacy_passes_other_attributes_through(engine):
    legacy = LegacyAIEngine(engine)
    assert legacy.core is engine.core
    assert legacy.get_configuration() == engine.get_configuration()
