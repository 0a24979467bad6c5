# posai/domain/engine/core.py

from __future__ import annotations
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional, Union
import inspect
import logging
import random
import threading
import time

import httpx

from posai.domain.models.engine import (
    CacheConfigView,
    CacheStats,
    EngineConfig,
    EngineConfigView,
    PerformanceSnapshot,
)
from posai.domain.repositories.token_repo import TokenRepo
from posai.utils.cache import MemoryCache

logger = logging.getLogger(__name__)

Fallback = Callable[[], Union[Any, Awaitable[Any]]]
Shape = Callable[[Any], Any]

DEFAULT_TIMEOUT_S = 10.0


class EngineCore:
    """
    Shared infrastructure for the AI services: network requests with local
    fallback, response cache and performance counters.
    No business semantics here.

    Collaborators are injected so tests can build isolated, deterministic cores:
      - http_client: httpx.AsyncClient (owns the request timeout)
      - token_repo:  persisted key-value store holding the bearer token
      - rng:         random.Random used by every simulated figure
      - clock:       monotonic seconds for cache expiry and timings
      - now:         wall clock for calendar/hour dependent heuristics
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        base_url: str = "",
        use_backend: bool = False,
        http_client: Optional[httpx.AsyncClient] = None,
        token_repo: Optional[TokenRepo] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ):
        self.config = config or EngineConfig()
        self.version = self.config.version
        self.confidence = self.config.confidence
        self.base_url = base_url.rstrip("/")
        self.use_backend = use_backend
        self.token_repo = token_repo or TokenRepo(None)
        self.rng = rng or random.Random(self.config.random_seed)
        self.clock = clock
        self.now = now

        self._owns_http = http_client is None
        self.http = http_client or httpx.AsyncClient(timeout=timeout_s)

        self.cache = MemoryCache(
            self.config.cache_ttl * 60,  # minutes -> seconds
            enabled=self.config.enable_cache,
            clock=clock,
        )

        self._lock = threading.Lock()
        self.request_count = 0
        self.error_count = 0
        self.total_response_time = 0.0  # milliseconds
        self.started_at = clock()

    # ------------------------------------------------------------------ requests

    async def perform_request(
        self,
        endpoint: str,
        options: Optional[Dict[str, Any]] = None,
        fallback: Optional[Fallback] = None,
        *,
        shape: Optional[Shape] = None,
        cache_key: Optional[str] = None,
        ttl: Optional[float] = None,
    ) -> Any:
        """
        Call `base_url + endpoint`, falling back to the local computation.

        - local-only mode: the fallback runs immediately, no network I/O.
        - transport errors, non-2xx statuses and payloads rejected by `shape`
          are counted and replaced by the fallback result; they never propagate.
        - errors raised by the fallback itself do propagate.
        - non-None results are cached under `cache_key` when given.
        """
        options = options or {}
        with self._lock:
            self.request_count += 1

        if cache_key is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("core cache_hit key=%s", cache_key)
                return cached

        if not self.use_backend:
            logger.debug("core local computation for %s", endpoint)
            result = await self._run_fallback(fallback)
        else:
            result = await self._request_with_fallback(endpoint, options, fallback, shape)

        if cache_key is not None and result is not None:
            self.cache.set(cache_key, result, ttl=ttl)
        return result

    async def _request_with_fallback(
        self,
        endpoint: str,
        options: Dict[str, Any],
        fallback: Optional[Fallback],
        shape: Optional[Shape],
    ) -> Any:
        t0 = time.perf_counter()
        method = options.get("method", "GET").upper()
        url = f"{self.base_url}{endpoint}"
        try:
            headers = {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
            if token := await self.token_repo.get_token():
                headers["Authorization"] = f"Bearer {token}"
            headers.update(options.get("headers") or {})

            resp = await self.http.request(method, url, json=options.get("body"), headers=headers)
            resp.raise_for_status()
            payload = resp.json()

            data = payload.get("data") if isinstance(payload, dict) else None
            result = data if data is not None else payload
            if shape is not None:
                result = shape(result)
        except Exception as e:
            with self._lock:
                self.error_count += 1
            logger.warning("core request failed %s %s, using local computation: %s", method, endpoint, e)
            return await self._run_fallback(fallback)

        dt_ms = (time.perf_counter() - t0) * 1000.0
        with self._lock:
            self.total_response_time += dt_ms
        logger.debug("core request ok %s %s time=%.1fms", method, endpoint, dt_ms)
        return result

    @staticmethod
    async def _run_fallback(fallback: Optional[Fallback]) -> Any:
        if fallback is None:
            return None
        result = fallback()
        if inspect.isawaitable(result):
            result = await result
        return result

    # ------------------------------------------------------------------ cache

    def clear_cache(self, pattern: Optional[str] = None) -> int:
        return self.cache.clear(pattern)

    def get_cache_stats(self) -> CacheStats:
        return CacheStats(
            size=len(self.cache),
            hits=self.cache.hits,
            misses=self.cache.misses,
            hit_rate=round(self.cache.hit_rate(), 2),
        )

    # ------------------------------------------------------------------ metrics

    def get_performance_snapshot(self) -> PerformanceSnapshot:
        with self._lock:
            requests = self.request_count
            errors = self.error_count
            total_ms = self.total_response_time
            started_at = self.started_at

        return PerformanceSnapshot(
            request_count=requests,
            error_count=errors,
            error_rate=round(errors / requests * 100, 2) if requests else 0.0,
            avg_response_time=round(total_ms / requests, 1) if requests else 0.0,
            cache=self.get_cache_stats(),
            uptime=round(self.clock() - started_at, 3),
        )

    def reset_metrics(self) -> None:
        with self._lock:
            self.request_count = 0
            self.error_count = 0
            self.total_response_time = 0.0
            self.started_at = self.clock()
            self.cache.reset_stats()

    # ------------------------------------------------------------------ config

    def update_config(
        self,
        *,
        cache_ttl: Optional[float] = None,
        enable_cache: Optional[bool] = None,
        confidence: Optional[float] = None,
    ) -> None:
        """cache_ttl in minutes, like EngineConfig."""
        updates: Dict[str, Any] = {}
        if cache_ttl is not None:
            self.cache.default_ttl = cache_ttl * 60
            updates["cache_ttl"] = cache_ttl
        if enable_cache is not None:
            self.cache.enabled = enable_cache
            updates["enable_cache"] = enable_cache
        if confidence is not None:
            self.confidence = confidence
            updates["confidence"] = confidence
        if updates:
            self.config = self.config.model_copy(update=updates)
            logger.info("core config updated %s", updates)

    def get_config(self) -> EngineConfigView:
        return EngineConfigView(
            version=self.version,
            confidence=self.confidence,
            use_backend=self.use_backend,
            base_url=self.base_url,
            cache=CacheConfigView(
                enabled=self.cache.enabled,
                ttl_minutes=self.cache.default_ttl / 60,
            ),
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()
