"""Activity CRUD and ownership tests."""

import pytest
from httpx import AsyncClient

from crm.db.enums import Role


@pytest.mark.asyncio
async def test_create_activity_attributed_to_caller(authed_client: AsyncClient, test_user, pipeline):
    deal = (await authed_client.post(
        "/api/deals", json={"title": "Acme", "pipelineId": pipeline.id}
    )).json()

    response = await authed_client.post(
        "/api/activities",
        json={"type": "call", "title": "Intro call", "dealId": deal["id"], "dueDate": "2026-11-01T14:00:00Z"},
    )
    assert response.status_code == 201
    activity = response.json()
    assert activity["userId"] == test_user.id
    assert activity["completed"] is False
    assert activity["deal"] == {"id": deal["id"], "title": "Acme", "stage": "Prospecting"}


@pytest.mark.asyncio
async def test_stage_move_does_not_log_activity(authed_client: AsyncClient, pipeline):
    deal = (await authed_client.post(
        "/api/deals", json={"title": "Acme", "pipelineId": pipeline.id}
    )).json()
    await authed_client.put(f"/api/deals/{deal['id']}", json={"stage": "Proposal"})

    response = await authed_client.get(f"/api/activities?dealId={deal['id']}")
    assert response.json() == []


@pytest.mark.asyncio
async def test_activity_type_is_validated(authed_client: AsyncClient):
    response = await authed_client.post("/api/activities", json={"type": "fax", "title": "Old school"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_complete_and_delete_activity(authed_client: AsyncClient):
    activity = (await authed_client.post(
        "/api/activities", json={"type": "task", "title": "Send proposal"}
    )).json()

    response = await authed_client.put(f"/api/activities/{activity['id']}", json={"completed": True})
    assert response.status_code == 200
    assert response.json()["completed"] is True
    assert response.json()["title"] == "Send proposal"

    assert (await authed_client.delete(f"/api/activities/{activity['id']}")).status_code == 204
    assert (await authed_client.get(f"/api/activities/{activity['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_vendedor_sees_only_own_activities(authed_client: AsyncClient, client_for_role):
    seller, seller_user = client_for_role(Role.VENDEDOR)
    admin_note = (await authed_client.post(
        "/api/activities", json={"type": "note", "title": "Admin note"}
    )).json()
    await seller.post("/api/activities", json={"type": "note", "title": "Seller note"})

    listed = (await seller.get("/api/activities")).json()
    assert [a["title"] for a in listed] == ["Seller note"]
    assert listed[0]["userId"] == seller_user.id

    assert (await seller.get(f"/api/activities/{admin_note['id']}")).status_code == 404
    assert len((await authed_client.get("/api/activities")).json()) == 2
