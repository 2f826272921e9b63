"""Dashboard service - headline counts and per-stage totals."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from crm.core.stage_definitions import FALLBACK_STAGE_TITLES
from crm.db.models import Company, Contact, Deal
from crm.services import pipeline_service
from crm.services.deal_service import money


def _stage_order(db: Session, pipeline_id: int | None) -> dict[str, int]:
    """Label -> rank, following the pipeline's stages or the default stages."""
    if pipeline_id is not None:
        titles = [stage.title for stage in pipeline_service.list_stages(db, pipeline_id)]
    else:
        titles = FALLBACK_STAGE_TITLES
    order: dict[str, int] = {}
    for rank, title in enumerate(titles):
        order.setdefault(title, rank)
    return order


def get_metrics(
    db: Session,
    pipeline_id: int | None = None,
    owner_id: str | None = None,
) -> dict:
    """
    Dashboard metrics.

    Deal figures honour the pipeline and owner filters; contact and company
    totals are global. There is no won/lost state, so every deal is open.

    Stage metrics follow stage order; labels matching no stage come last,
    sorted by label.
    """
    total_contacts = db.query(func.count(Contact.id)).scalar() or 0
    active_companies = db.query(func.count(Company.id)).scalar() or 0

    filters = []
    if pipeline_id is not None:
        filters.append(Deal.pipeline_id == pipeline_id)
    if owner_id is not None:
        filters.append(Deal.owner_id == owner_id)

    open_deals, projected = (
        db.query(func.count(Deal.id), func.coalesce(func.sum(Deal.value), 0))
        .filter(*filters)
        .one()
    )

    stage_rows = (
        db.query(Deal.stage, func.count(Deal.id), func.coalesce(func.sum(Deal.value), 0))
        .filter(*filters)
        .group_by(Deal.stage)
        .all()
    )
    order = _stage_order(db, pipeline_id)
    stage_rows.sort(key=lambda row: (order.get(row[0], len(order)), row[0]))

    return {
        "total_contacts": total_contacts,
        "active_companies": active_companies,
        "open_deals": open_deals,
        "projected_revenue": money(projected),
        "stage_metrics": [
            {"stage": stage, "count": count, "total_value": money(total)}
            for stage, count, total in stage_rows
        ],
    }
