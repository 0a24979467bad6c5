import pytest
from fastapi.testclient import TestClient

from posai.api.deps import engine_dep
from posai.main import app


@pytest.fixture
def client(engine):
    # no lifespan: the test engine replaces the one built at startup
    app.dependency_overrides[engine_dep] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["checks"]["mongodb"] == "skipped"
    assert body["checks"]["redis"] == "skipped"
    assert body["checks"]["engine"] == "healthy"


def test_predict_demand(client):
    resp = client.get("/ai/demand/products/2", params={"days": 30})
    assert resp.status_code == 200
    body = resp.json()
    assert body["productId"] == "2"
    assert body["predictedSales"] == 12
    assert body["recommendation"] == "reorder"


def test_unknown_product_is_404(client):
    assert client.get("/ai/demand/products/999").status_code == 404
    assert client.get("/ai/pricing/products/999").status_code == 404
    assert client.get("/ai/inventory/alerts/local", params={"product_id": "999"}).status_code == 404


def test_invalid_horizon_is_rejected(client):
    assert client.get("/ai/demand/products/2", params={"days": 0}).status_code == 422


def test_batch_prediction(client):
    body = client.post("/ai/demand/batch", json={"product_ids": ["1", "999", "2"]}).json()
    assert body["count"] == 2
    assert body["failed"] == ["999"]
    assert body["predictions"]["1"]["productId"] == "1"


def test_forecast_and_hourly(client):
    assert len(client.get("/ai/demand/forecast").json()) == 6
    assert len(client.get("/ai/demand/hourly").json()) == 12


def test_pricing_routes(client):
    body = client.get("/ai/pricing/products/2").json()
    assert body["suggestedPrice"] == 60480
    assert len(client.get("/ai/pricing/insights").json()) == 4
    assert isinstance(client.get("/ai/pricing/dynamic").json(), list)


def test_inventory_routes(client):
    assert client.get("/ai/inventory/alerts").json()["summary"]["total"] == 0
    assert client.get("/ai/inventory/alerts/advanced").json() == []
    assert len(client.get("/ai/inventory/alerts/critical").json()) == 1
    levels = [a["level"] for a in client.get("/ai/inventory/alerts/local").json()]
    assert levels == sorted(levels, key=["urgent", "critical", "warning"].index)
    assert len(client.get("/ai/inventory/optimizations").json()) == 2


def test_engine_routes(client):
    client.get("/ai/demand/products/1")
    client.get("/ai/demand/products/1")

    assert client.get("/ai/engine/cache").json()["hits"] == 1
    assert client.get("/ai/engine/metrics").json()["requestCount"] == 2
    assert client.get("/ai/engine/statistics").json()["modules"] == ["pricing", "demand", "inventory"]
    assert client.get("/ai/engine/system").json()["health"] == "healthy"

    assert client.delete("/ai/engine/cache", params={"pattern": "demand:"}).json()["removed"] == 1

    updated = client.patch("/ai/engine/configuration", json={"cache_ttl": 0}).json()
    assert updated["cache"]["ttlMinutes"] == 0
    assert client.get("/ai/engine/configuration").json()["cache"]["ttlMinutes"] == 0

    assert client.post("/ai/engine/reset").json()["success"] is True
    assert client.post("/ai/engine/retrain").json()["nextTraining"] is not None
