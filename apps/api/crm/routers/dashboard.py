"""Dashboard router - headline metrics."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from crm.core.deps import get_current_session, get_db, owner_scope, require_permission
from crm.core.policies import POLICIES
from crm.schemas.auth import UserSession
from crm.schemas.dashboard import DashboardMetrics
from crm.services import dashboard_service

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(require_permission(POLICIES["dashboard"].default))],
)


@router.get("/metrics", response_model=DashboardMetrics)
def get_metrics(
    pipeline_id: int | None = Query(None, alias="pipelineId"),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """
    Counts and totals for the dashboard cards.

    Deal figures are limited to the caller's own deals for salespeople.
    """
    return dashboard_service.get_metrics(
        db, pipeline_id=pipeline_id, owner_id=owner_scope(session)
    )
