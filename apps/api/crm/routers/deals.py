"""Deals router - opportunities, stage moves and the by-stage board.

Salespeople ("vendedor") only see and change their own deals.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from crm.core.deps import get_current_session, get_db, owner_scope, require_permission
from crm.core.policies import POLICIES
from crm.schemas.auth import UserSession
from crm.schemas.deal import (
    DealCreate,
    DealRead,
    DealStageBucket,
    DealStageMove,
    DealUpdate,
)
from crm.services import deal_service, pipeline_service
from crm.utils.pagination import PaginationParams, get_pagination

router = APIRouter(
    prefix="/deals",
    tags=["Deals"],
    dependencies=[Depends(require_permission(POLICIES["deals"].default))],
)


def _get_deal_or_404(db: Session, deal_id: int, session: UserSession):
    deal = deal_service.get_deal(db, deal_id, owner_id=owner_scope(session))
    if not deal:
        raise HTTPException(status_code=404, detail="Deal not found")
    return deal


@router.get("", response_model=list[DealRead])
def list_deals(
    stage: str | None = Query(None),
    pipeline_id: int | None = Query(None, alias="pipelineId"),
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    deals, _ = deal_service.list_deals(
        db,
        pagination,
        stage=stage,
        pipeline_id=pipeline_id,
        owner_id=owner_scope(session),
    )
    return deals


# Must be registered before /{deal_id}
@router.get("/by-stage", response_model=list[DealStageBucket])
def get_deals_by_stage(
    pipeline_id: int | None = Query(None, alias="pipelineId"),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """
    Kanban board: one bucket per stage with count, total value and deals.

    Without pipelineId the four default stage titles are used.
    """
    if pipeline_id is not None and not pipeline_service.get_pipeline(db, pipeline_id):
        raise HTTPException(status_code=404, detail="Pipeline not found")
    return deal_service.deals_by_stage(db, pipeline_id=pipeline_id, owner_id=owner_scope(session))


@router.get("/{deal_id}", response_model=DealRead)
def get_deal(
    deal_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    return _get_deal_or_404(db, deal_id, session)


@router.post(
    "",
    response_model=DealRead,
    status_code=201,
    dependencies=[Depends(require_permission(POLICIES["deals"].actions["create"]))],
)
def create_deal(
    data: DealCreate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Create a deal; without a stage it lands in the pipeline's first stage."""
    if not pipeline_service.get_pipeline(db, data.pipeline_id):
        raise HTTPException(status_code=400, detail="Pipeline not found")
    if owner_scope(session) is not None:
        # Salespeople cannot create deals for someone else
        data.owner_id = session.user_id
    return deal_service.create_deal(db, data, owner_id=session.user_id)


@router.put(
    "/{deal_id}",
    response_model=DealRead,
    dependencies=[Depends(require_permission(POLICIES["deals"].actions["edit"]))],
)
def update_deal(
    deal_id: int,
    data: DealUpdate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Partial update; a `stage` value moves the deal to that label."""
    deal = _get_deal_or_404(db, deal_id, session)
    if data.pipeline_id is not None and not pipeline_service.get_pipeline(db, data.pipeline_id):
        raise HTTPException(status_code=400, detail="Pipeline not found")
    if owner_scope(session) is not None and "owner_id" in data.model_fields_set:
        raise HTTPException(status_code=403, detail="Cannot reassign deal owner")
    return deal_service.update_deal(db, deal, data)


@router.put(
    "/{deal_id}/stage",
    response_model=DealRead,
    dependencies=[Depends(require_permission(POLICIES["deals"].actions["edit"]))],
)
def move_deal_to_stage(
    deal_id: int,
    data: DealStageMove,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Move a deal to a stage of its pipeline by stage id."""
    deal = _get_deal_or_404(db, deal_id, session)
    stage = pipeline_service.get_stage(db, data.stage_id)
    if not stage:
        raise HTTPException(status_code=404, detail="Stage not found")
    try:
        return deal_service.move_deal_to_stage(db, deal, stage)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete(
    "/{deal_id}",
    status_code=204,
    dependencies=[Depends(require_permission(POLICIES["deals"].actions["delete"]))],
)
def delete_deal(
    deal_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    deal = _get_deal_or_404(db, deal_id, session)
    deal_service.delete_deal(db, deal)
    return None
