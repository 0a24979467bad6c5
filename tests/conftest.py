from datetime import datetime
import random

import httpx
import pytest

from posai.domain.engine.core import EngineCore
from posai.domain.engine.facade import build_engine
from posai.domain.models.engine import EngineConfig
from posai.domain.repositories.product_repo import InMemoryProductRepo
from posai.domain.repositories.sample_catalog import SAMPLE_PRODUCTS

# June (no seasonal boost for any category), 09:30 (opening hours, not a peak hour)
FIXED_NOW = datetime(2024, 6, 12, 9, 30)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.t = start

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return InMemoryProductRepo(SAMPLE_PRODUCTS)


@pytest.fixture
def make_core(clock):
    def _make(config=None, **kwargs):
        kwargs.setdefault("rng", random.Random(42))
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("now", lambda: FIXED_NOW)
        return EngineCore(config or EngineConfig(), **kwargs)
    return _make


@pytest.fixture
def core(make_core):
    return make_core()


@pytest.fixture
def mock_http():
    """httpx client whose requests are answered by `handler(request)`."""
    def _make(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def engine(catalog, clock):
    return build_engine(
        EngineConfig(random_seed=42),
        catalog=catalog,
        clock=clock,
        now=lambda: FIXED_NOW,
    )
