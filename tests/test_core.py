from unittest.mock import AsyncMock
import json

import httpx
import pytest

from posai.domain.models.engine import EngineConfig
from posai.domain.repositories.token_repo import TokenRepo

BASE = "http://ai.test/api/v1"


@pytest.mark.asyncio
async def test_local_mode_runs_fallback_without_network(make_core, mock_http):
    def handler(request):
        raise AssertionError("no network call expected in local mode")

    core = make_core(http_client=mock_http(handler))
    assert await core.perform_request("/ai/predict", {"method": "POST"}, lambda: "local") == "local"
    assert core.request_count == 1
    assert core.error_count == 0


@pytest.mark.asyncio
async def test_async_fallback_is_awaited(core):
    async def fallback():
        return [1, 2]

    assert await core.perform_request("/x", None, fallback) == [1, 2]


@pytest.mark.asyncio
async def test_no_fallback_returns_none(core):
    assert await core.perform_request("/x") is None


@pytest.mark.asyncio
async def test_backend_success_unwraps_data_and_sends_bearer(make_core, mock_http):
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "data": {"value": 7}})

    redis = AsyncMock()
    redis.get.return_value = "secret"
    core = make_core(
        base_url=BASE, use_backend=True,
        http_client=mock_http(handler), token_repo=TokenRepo(redis),
    )
    result = await core.perform_request(
        "/ai/predict", {"method": "POST", "body": {"productId": "1"}}, lambda: "local",
    )
    assert result == {"value": 7}
    assert seen == {"auth": "Bearer secret", "url": f"{BASE}/ai/predict", "body": {"productId": "1"}}
    assert core.error_count == 0


@pytest.mark.asyncio
async def test_no_token_means_no_authorization_header(make_core, mock_http):
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=[1])

    core = make_core(base_url=BASE, use_backend=True, http_client=mock_http(handler))
    assert await core.perform_request("/ai/insights", None, list) == [1]
    assert seen["auth"] is None


@pytest.mark.asyncio
async def test_http_error_falls_back_and_counts(make_core, mock_http):
    core = make_core(
        base_url=BASE, use_backend=True,
        http_client=mock_http(lambda request: httpx.Response(500, json={"error": "boom"})),
    )
    assert await core.perform_request("/ai/predict", None, lambda: "local") == "local"
    assert core.error_count == 1
    assert core.get_performance_snapshot().error_rate == 100.0


@pytest.mark.asyncio
async def test_transport_error_falls_back(make_core, mock_http):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    core = make_core(base_url=BASE, use_backend=True, http_client=mock_http(handler))
    assert await core.perform_request("/ai/predict", None, lambda: "local") == "local"
    assert core.error_count == 1


@pytest.mark.asyncio
async def test_payload_rejected_by_shape_falls_back(make_core, mock_http):
    def shape(payload):
        raise ValueError("bad payload")

    core = make_core(
        base_url=BASE, use_backend=True,
        http_client=mock_http(lambda request: httpx.Response(200, json={"data": {"x": 1}})),
    )
    assert await core.perform_request("/x", None, lambda: "local", shape=shape) == "local"
    assert core.error_count == 1


@pytest.mark.asyncio
async def test_fallback_errors_propagate(core):
    def boom():
        raise RuntimeError("fallback failed")

    with pytest.raises(RuntimeError):
        await core.perform_request("/x", None, boom)


@pytest.mark.asyncio
async def test_cached_result_skips_fallback(core, clock):
    calls = []

    def fallback():
        calls.append(1)
        return {"v": 1}

    first = await core.perform_request("/x", None, fallback, cache_key="k")
    second = await core.perform_request("/x", None, fallback, cache_key="k")
    assert first == second == {"v": 1}
    assert len(calls) == 1
    assert core.request_count == 2

    stats = core.get_cache_stats()
    assert (stats.size, stats.hits, stats.misses, stats.hit_rate) == (1, 1, 1, 50.0)

    clock.advance(5 * 60 + 1)
    await core.perform_request("/x", None, fallback, cache_key="k")
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_none_result_is_not_cached(core):
    await core.perform_request("/x", None, lambda: None, cache_key="k")
    assert core.get_cache_stats().size == 0


@pytest.mark.asyncio
async def test_zero_ttl_disables_caching(make_core):
    core = make_core(EngineConfig(cache_ttl=0))
    calls = []
    for _ in range(2):
        await core.perform_request("/x", None, lambda: calls.append(1) or "v", cache_key="k")
    assert len(calls) == 2
    stats = core.get_cache_stats()
    assert (stats.size, stats.hits, stats.misses) == (0, 0, 2)


@pytest.mark.asyncio
async def test_reset_metrics(core, clock):
    await core.perform_request("/x", None, lambda: 1, cache_key="k")
    clock.advance(30)
    core.reset_metrics()
    snap = core.get_performance_snapshot()
    assert (snap.request_count, snap.error_count, snap.uptime) == (0, 0, 0)
    assert (snap.cache.hits, snap.cache.misses, snap.cache.size) == (0, 0, 1)


def test_update_config(core):
    core.update_config(cache_ttl=0, confidence=0.8)
    view = core.get_config()
    assert view.cache.ttl_minutes == 0
    assert view.confidence == 0.8
    assert not core.cache.active
    assert core.config.cache_ttl == 0


def test_snapshot_without_requests(core):
    snap = core.get_performance_snapshot()
    assert snap.error_rate == 0.0
    assert snap.avg_response_time == 0.0


@pytest.mark.asyncio
async def test_token_repo_decodes_bytes_and_tolerates_errors():
    redis = AsyncMock()
    redis.get.return_value = b"abc"
    assert await TokenRepo(redis).get_token() == "abc"

    redis.get.side_effect = ConnectionError("redis down")
    assert await TokenRepo(redis).get_token() is None
    assert await TokenRepo(None).get_token() is None


@pytest.mark.asyncio
async def test_request_timeout_falls_back(make_core, mock_http):
    def handler(request):
        raise httpx.ReadTimeout("upstream too slow", request=request)

    core = make_core(base_url=BASE, use_backend=True, http_client=mock_http(handler))
    assert await core.perform_request("/ai/predict", None, lambda: "local") == "local"
    assert core.error_count == 1
    assert core.total_response_time == 0.0
