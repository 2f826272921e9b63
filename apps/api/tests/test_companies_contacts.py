"""Companies and contacts CRUD, search, pagination and bulk import."""

import pytest
from httpx import AsyncClient

from crm.db.models import Contact


# =============================================================================
# Companies
# =============================================================================


@pytest.mark.asyncio
async def test_company_crud(authed_client: AsyncClient):
    created = await authed_client.post(
        "/api/companies", json={"name": "Acme", "sector": "Varejo", "location": "São Paulo"}
    )
    assert created.status_code == 201
    company = created.json()
    assert company["sector"] == "Varejo"
    assert "createdAt" in company

    updated = await authed_client.put(f"/api/companies/{company['id']}", json={"location": "Recife"})
    assert updated.status_code == 200
    assert updated.json()["location"] == "Recife"
    assert updated.json()["name"] == "Acme"

    deleted = await authed_client.delete(f"/api/companies/{company['id']}")
    assert deleted.status_code == 204
    missing = await authed_client.get(f"/api/companies/{company['id']}")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Company not found"}


@pytest.mark.asyncio
async def test_company_search_and_pagination(authed_client: AsyncClient):
    for name in ("Alpha Tech", "Beta Foods", "alphaville", "Gamma"):
        await authed_client.post("/api/companies", json={"name": name})

    response = await authed_client.get("/api/companies?search=ALPHA")
    data = response.json()
    assert data["total"] == 2
    assert {c["name"] for c in data["companies"]} == {"Alpha Tech", "alphaville"}

    page = (await authed_client.get("/api/companies?limit=2&offset=2")).json()
    assert page["total"] == 4
    assert len(page["companies"]) == 2


@pytest.mark.asyncio
async def test_company_limit_is_capped(authed_client: AsyncClient):
    response = await authed_client.get("/api/companies?limit=500")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_deleting_company_keeps_contacts(authed_client: AsyncClient, db):
    company = (await authed_client.post("/api/companies", json={"name": "Acme"})).json()
    contact = (await authed_client.post(
        "/api/contacts", json={"name": "Ana", "companyId": company["id"]}
    )).json()

    await authed_client.delete(f"/api/companies/{company['id']}")

    db.expire_all()
    fetched = (await authed_client.get(f"/api/contacts/{contact['id']}")).json()
    assert fetched["companyId"] is None
    assert fetched["company"] is None


# =============================================================================
# Contacts
# =============================================================================


@pytest.mark.asyncio
async def test_contact_defaults_and_embedded_company(authed_client: AsyncClient):
    company = (await authed_client.post("/api/companies", json={"name": "Acme"})).json()

    response = await authed_client.post(
        "/api/contacts",
        json={"name": "Ana", "email": "ana@acme.com", "companyId": company["id"], "zipCode": "01000-000"},
    )
    assert response.status_code == 201
    contact = response.json()
    assert contact["status"] == "active"
    assert contact["source"] == "manual"
    assert contact["country"] == "Brasil"
    assert contact["tags"] == []
    assert contact["zipCode"] == "01000-000"
    assert contact["company"] == {"id": company["id"], "name": "Acme"}


@pytest.mark.asyncio
async def test_contact_rejects_bad_email(authed_client: AsyncClient):
    response = await authed_client.post("/api/contacts", json={"name": "Ana", "email": "not-an-email"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_contact_list_filters(authed_client: AsyncClient):
    company = (await authed_client.post("/api/companies", json={"name": "Acme"})).json()
    await authed_client.post("/api/contacts", json={"name": "Ana", "companyId": company["id"]})
    await authed_client.post("/api/contacts", json={"name": "Bruno", "email": "bruno@ana.org"})
    await authed_client.post("/api/contacts", json={"name": "Carla"})

    by_search = (await authed_client.get("/api/contacts?search=ana")).json()
    assert by_search["total"] == 2

    by_company = (await authed_client.get(f"/api/contacts?companyId={company['id']}")).json()
    assert [c["name"] for c in by_company["contacts"]] == ["Ana"]


@pytest.mark.asyncio
async def test_contact_partial_update(authed_client: AsyncClient):
    contact = (await authed_client.post(
        "/api/contacts", json={"name": "Ana", "tags": ["vip"]}
    )).json()

    response = await authed_client.put(
        f"/api/contacts/{contact['id']}", json={"status": "prospect", "city": "Recife"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "prospect"
    assert data["city"] == "Recife"
    assert data["tags"] == ["vip"]


# =============================================================================
# Import
# =============================================================================


@pytest.mark.asyncio
async def test_import_reports_bad_rows_and_keeps_good_ones(authed_client: AsyncClient, db, pipeline):
    response = await authed_client.post(
        "/api/contacts/import",
        json={
            "contacts": [
                {"name": "Ana", "tags": ["lead"]},
                {"email": "missing-name@test.com"},
                {"name": "Bruno", "companyId": 9999},
                {"name": "Carla", "email": "carla@test.com"},
            ],
            "pipelineId": pipeline.id,
            "tags": ["feira-2026", "lead"],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] == 2
    assert len(data["errors"]) == 2
    assert data["errors"][0].startswith("Row 2")
    assert data["errors"][1].startswith("Row 3")

    imported = db.query(Contact).order_by(Contact.id).all()
    assert [c.name for c in imported] == ["Ana", "Carla"]
    assert all(c.source == "import" for c in imported)
    assert all(c.pipeline_id == pipeline.id for c in imported)
    assert imported[0].tags == ["lead", "feira-2026"]


@pytest.mark.asyncio
async def test_import_unknown_pipeline_rejected(authed_client: AsyncClient):
    response = await authed_client.post(
        "/api/contacts/import", json={"contacts": [{"name": "Ana"}], "pipelineId": 404}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_tags(authed_client: AsyncClient):
    await authed_client.post("/api/contacts", json={"name": "Ana", "tags": ["vip", "lead"]})
    await authed_client.post("/api/contacts", json={"name": "Bruno", "tags": ["lead"]})

    response = await authed_client.get("/api/contacts/tags")
    assert response.json() == ["lead", "vip"]
