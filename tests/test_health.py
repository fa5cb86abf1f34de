import pytest


@pytest.mark.anyio("asyncio")
async def test_healthcheck(client):
    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["version"] == "1.0.0"
    assert payload["environment"] == "test"
    assert payload["db_status"] == "ok"
    assert payload["migrations_status"] == "up_to_date"
    assert payload["db_ok"] is True
    assert payload["migrations_ok"] is True


@pytest.mark.anyio("asyncio")
async def test_health_degrades_on_db_failure(monkeypatch, client):
    class BrokenEngine:
        def connect(self):  # pragma: no cover - simple stub
            raise RuntimeError("DB down")

    monkeypatch.setattr("ledger.routers.health.get_engine", lambda: BrokenEngine())

    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["db_status"] == "error"
    assert payload["migrations_status"] == "unknown"
    assert payload["db_ok"] is False
    assert payload["migrations_ok"] is False


@pytest.mark.anyio("asyncio")
async def test_health_status_degraded_when_migrations_behind(monkeypatch, client):
    from ledger.routers import health as health_module

    monkeypatch.setattr(health_module, "_expected_migration_head", lambda: "some_future_revision")

    response = await client.get("/health")
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["migrations_status"] == "out_of_date"


@pytest.mark.anyio("asyncio")
async def test_service_descriptor(client):
    response = await client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "apexfin-ledger"
    assert body["endpoints"]["webhooks"]["transaction_update"] == "POST /v1/webhooks/transaction-update"


@pytest.mark.anyio("asyncio")
async def test_metrics_endpoint_exposed(client):
    await client.get("/health")

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "starlette_requests_total" in response.text
