"""
Stage ordering tests.

Covers:
- Listing by position
- Append-at-end creation and the 12 stage cap
- Full-replace reorder (atomic, validated)
- Re-sequencing after delete
- Rename propagation to linked deals
"""

import pytest
from httpx import AsyncClient

from crm.core.stage_definitions import MAX_STAGES_PER_PIPELINE, STAGE_LIMIT_MESSAGE
from crm.db.models import Deal, PipelineStage
from crm.services import pipeline_service
from crm.services.pipeline_service import StageLimitError, StageReorderError


def _titles(stages) -> list[str]:
    return [s["title"] if isinstance(s, dict) else s.title for s in stages]


# =============================================================================
# Listing & creation
# =============================================================================


@pytest.mark.asyncio
async def test_list_stages_ordered_by_position(authed_client: AsyncClient, pipeline):
    response = await authed_client.get(f"/api/pipeline-stages?pipelineId={pipeline.id}")
    assert response.status_code == 200
    data = response.json()
    assert _titles(data) == ["Prospecting", "Proposal"]
    assert [s["position"] for s in data] == [0, 1]
    assert data[0]["pipelineId"] == pipeline.id
    assert data[0]["isDefault"] is False


@pytest.mark.asyncio
async def test_list_stages_without_pipeline_returns_all(authed_client: AsyncClient, db, pipeline):
    pipeline_service.create_pipeline(db, name="Other")

    response = await authed_client.get("/api/pipeline-stages")
    assert response.status_code == 200
    assert len(response.json()) == 2 + 4


@pytest.mark.asyncio
async def test_create_stage_appends_after_last(authed_client: AsyncClient, pipeline):
    response = await authed_client.post(
        "/api/pipeline-stages",
        json={"pipelineId": pipeline.id, "title": "Closing", "color": "#10b981"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["position"] == 2
    assert data["color"] == "#10b981"


@pytest.mark.asyncio
async def test_create_stage_ignores_client_position(authed_client: AsyncClient, pipeline):
    response = await authed_client.post(
        "/api/pipeline-stages",
        json={"pipelineId": pipeline.id, "title": "Closing", "posicaoestagio": 0},
    )
    assert response.status_code == 201
    assert response.json()["position"] == 2


def test_first_stage_of_empty_pipeline_gets_position_zero(db):
    empty = pipeline_service.create_pipeline(db, name="Empty", stages=[])
    assert empty.stages == []

    stage = pipeline_service.create_stage(db, empty.id, "First")
    assert stage.position == 0
    assert stage.color == "#3b82f6"


def test_position_follows_max_not_count(db, pipeline):
    """A gap in positions does not cause a collision for the next stage."""
    last = pipeline_service.list_stages(db, pipeline.id)[-1]
    last.position = 7
    db.commit()

    stage = pipeline_service.create_stage(db, pipeline.id, "Closing")
    assert stage.position == 8


@pytest.mark.asyncio
async def test_thirteenth_stage_rejected(authed_client: AsyncClient, db, pipeline):
    for i in range(MAX_STAGES_PER_PIPELINE - 2):
        response = await authed_client.post(
            "/api/pipeline-stages",
            json={"pipelineId": pipeline.id, "title": f"Stage {i}"},
        )
        assert response.status_code == 201

    response = await authed_client.post(
        "/api/pipeline-stages",
        json={"pipelineId": pipeline.id, "title": "One too many"},
    )
    assert response.status_code == 400
    assert response.json() == {"message": STAGE_LIMIT_MESSAGE}
    assert pipeline_service.count_stages(db, pipeline.id) == MAX_STAGES_PER_PIPELINE


def test_pipeline_create_with_too_many_stages_rejected(db):
    with pytest.raises(StageLimitError):
        pipeline_service.create_pipeline(
            db,
            name="Huge",
            stages=[{"title": f"S{i}"} for i in range(MAX_STAGES_PER_PIPELINE + 1)],
        )


@pytest.mark.asyncio
async def test_create_stage_unknown_pipeline_404(authed_client: AsyncClient):
    response = await authed_client.post(
        "/api/pipeline-stages", json={"pipelineId": 999, "title": "Nowhere"}
    )
    assert response.status_code == 404
    assert response.json() == {"message": "Pipeline not found"}


def test_new_stage_links_deals_already_carrying_its_title(db, pipeline):
    deal = Deal(title="Early", stage="Closing", pipeline_id=pipeline.id)
    db.add(deal)
    db.commit()

    stage = pipeline_service.create_stage(db, pipeline.id, "Closing")
    db.refresh(deal)
    assert deal.stage_id == stage.id


# =============================================================================
# Reorder
# =============================================================================


@pytest.mark.asyncio
async def test_reorder_swaps_stages(authed_client: AsyncClient, pipeline):
    """[Prospecting, Proposal] reordered to [Proposal, Prospecting]."""
    prospecting, proposal = pipeline.stages

    response = await authed_client.put(
        "/api/pipeline-stages/positions",
        json={"stages": [
            {"id": proposal.id, "position": 0},
            {"id": prospecting.id, "position": 1},
        ]},
    )
    assert response.status_code == 204

    listed = (await authed_client.get(f"/api/pipeline-stages?pipelineId={pipeline.id}")).json()
    assert [(s["title"], s["position"]) for s in listed] == [("Proposal", 0), ("Prospecting", 1)]


def test_reorder_applies_submitted_permutation(db):
    pipeline = pipeline_service.create_pipeline(
        db, name="Six", stages=[{"title": t} for t in "ABCDEF"]
    )
    by_title = {s.title: s.id for s in pipeline.stages}
    permutation = ["D", "A", "F", "C", "B", "E"]

    stages = pipeline_service.reorder_stages(
        db, [(by_title[t], position) for position, t in enumerate(permutation)]
    )

    assert _titles(stages) == permutation
    assert [s.position for s in stages] == list(range(6))


def test_reorder_normalizes_sparse_positions(db, pipeline):
    prospecting, proposal = pipeline.stages

    stages = pipeline_service.reorder_stages(db, [(prospecting.id, 40), (proposal.id, 10)])

    assert [(s.title, s.position) for s in stages] == [("Proposal", 0), ("Prospecting", 1)]


@pytest.mark.asyncio
async def test_reorder_accepts_legacy_position_field(authed_client: AsyncClient, pipeline):
    prospecting, proposal = pipeline.stages

    response = await authed_client.put(
        "/api/pipeline-stages/positions",
        json={"stages": [
            {"id": prospecting.id, "posicaoestagio": 1},
            {"id": proposal.id, "posicaoestagio": 0},
        ]},
    )
    assert response.status_code == 204

    listed = (await authed_client.get(f"/api/pipeline-stages?pipelineId={pipeline.id}")).json()
    assert _titles(listed) == ["Proposal", "Prospecting"]


@pytest.mark.asyncio
async def test_reorder_with_unknown_id_writes_nothing(authed_client: AsyncClient, db, pipeline):
    prospecting, proposal = pipeline.stages

    response = await authed_client.put(
        "/api/pipeline-stages/positions",
        json={"stages": [
            {"id": proposal.id, "position": 0},
            {"id": 9999, "position": 1},
        ]},
    )
    assert response.status_code == 400
    assert "9999" in response.json()["message"]

    assert _titles(pipeline_service.list_stages(db, pipeline.id)) == ["Prospecting", "Proposal"]


def test_reorder_rejects_stages_from_two_pipelines(db, pipeline):
    other = pipeline_service.create_pipeline(db, name="Other")

    with pytest.raises(StageReorderError):
        pipeline_service.reorder_stages(
            db, [(pipeline.stages[0].id, 0), (other.stages[0].id, 1)]
        )


def test_reorder_rejects_duplicates_and_empty(db, pipeline):
    stage_id = pipeline.stages[0].id

    with pytest.raises(StageReorderError):
        pipeline_service.reorder_stages(db, [(stage_id, 0), (stage_id, 1)])

    with pytest.raises(StageReorderError):
        pipeline_service.reorder_stages(db, [])


# =============================================================================
# Update & delete
# =============================================================================


@pytest.mark.asyncio
async def test_rename_stage_carries_linked_deals(authed_client: AsyncClient, db, pipeline):
    prospecting = pipeline.stages[0]
    created = await authed_client.post(
        "/api/deals",
        json={"title": "Acme", "pipelineId": pipeline.id, "stage": "Prospecting"},
    )
    deal_id = created.json()["id"]

    response = await authed_client.put(
        f"/api/pipeline-stages/{prospecting.id}", json={"title": "Discovery"}
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Discovery"

    deal = (await authed_client.get(f"/api/deals/{deal_id}")).json()
    assert deal["stage"] == "Discovery"
    assert deal["stageId"] == prospecting.id


@pytest.mark.asyncio
async def test_delete_stage_resequences_remaining(authed_client: AsyncClient, db):
    pipeline = pipeline_service.create_pipeline(
        db, name="Four", stages=[{"title": t} for t in ("A", "B", "C", "D")]
    )
    b_id = pipeline.stages[1].id

    response = await authed_client.delete(f"/api/pipeline-stages/{b_id}")
    assert response.status_code == 204

    stages = pipeline_service.list_stages(db, pipeline.id)
    assert [(s.title, s.position) for s in stages] == [("A", 0), ("C", 1), ("D", 2)]
    assert db.query(PipelineStage).filter(PipelineStage.id == b_id).first() is None


@pytest.mark.asyncio
async def test_delete_unknown_stage_404(authed_client: AsyncClient):
    response = await authed_client.delete("/api/pipeline-stages/12345")
    assert response.status_code == 404


def test_rename_links_deals_already_carrying_new_title(db, pipeline):
    proposal = pipeline.stages[1]
    deal = Deal(title="Early", stage="Won", pipeline_id=pipeline.id)
    db.add(deal)
    db.commit()

    pipeline_service.update_stage(db, proposal, title="Won")
    db.refresh(deal)
    assert deal.stage_id == proposal.id

    pipeline_service.update_stage(db, proposal, title="Closed Won")
    db.refresh(deal)
    assert deal.stage == "Closed Won"
