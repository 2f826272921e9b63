"""App-level behavior: health check, error envelope, request ids."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_request_id_is_generated_and_echoed(authed_client: AsyncClient):
    generated = await authed_client.get("/api/pipelines")
    assert generated.headers["X-Request-ID"]

    echoed = await authed_client.get("/api/pipelines", headers={"X-Request-ID": "req-123"})
    assert echoed.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_unknown_route_uses_message_envelope(authed_client: AsyncClient):
    response = await authed_client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


@pytest.mark.asyncio
async def test_pipeline_create_seeds_default_stages(authed_client: AsyncClient):
    response = await authed_client.post("/api/pipelines", json={"name": "Vendas"})
    assert response.status_code == 201
    data = response.json()
    assert [(s["title"], s["position"], s["isDefault"]) for s in data["stages"]] == [
        ("Prospecção", 0, True),
        ("Qualificação", 1, True),
        ("Proposta", 2, True),
        ("Fechamento", 3, True),
    ]


@pytest.mark.asyncio
async def test_pipeline_create_with_explicit_empty_stages(authed_client: AsyncClient):
    response = await authed_client.post("/api/pipelines", json={"name": "Blank", "stages": []})
    assert response.status_code == 201
    assert response.json()["stages"] == []


@pytest.mark.asyncio
async def test_pipeline_update_and_list(authed_client: AsyncClient, pipeline):
    response = await authed_client.put(
        f"/api/pipelines/{pipeline.id}", json={"description": "Inbound leads"}
    )
    assert response.status_code == 200
    assert response.json()["description"] == "Inbound leads"
    assert response.json()["name"] == "Sales"

    listed = (await authed_client.get("/api/pipelines")).json()
    assert [p["name"] for p in listed] == ["Sales"]
    assert [s["title"] for s in listed[0]["stages"]] == ["Prospecting", "Proposal"]
