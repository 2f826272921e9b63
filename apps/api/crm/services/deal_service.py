"""Deal service - CRUD, stage transitions and the by-stage board.

A deal's `stage` is a free-text label. Moving a deal overwrites the label
without checking that a matching stage exists; `stage_id` is re-resolved by
exact title match in the deal's pipeline and is None when nothing matches.
A deal whose label matches no stage appears in no bucket of the board.
"""

import logging
from collections import defaultdict
from decimal import Decimal

from sqlalchemy.orm import Session

from crm.core.stage_definitions import (
    DEFAULT_DEAL_STAGE,
    DEFAULT_STAGES,
    DEFAULT_STAGE_COLOR,
)
from crm.db.models import Deal, PipelineStage
from crm.schemas.deal import DealCreate, DealUpdate
from crm.services import pipeline_service
from crm.services.pipeline_service import StagePipelineMismatchError
from crm.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

# Columns that cannot be cleared through a partial update
REQUIRED_FIELDS = ("title", "stage", "pipeline_id")


def money(value) -> Decimal:
    """Normalize a sum to two decimal places (None counts as zero)."""
    return Decimal(str(value or 0)).quantize(CENTS)


def _deal_query(db: Session, owner_id: str | None = None):
    query = db.query(Deal)
    if owner_id is not None:
        query = query.filter(Deal.owner_id == owner_id)
    return query


def list_deals(
    db: Session,
    pagination: PaginationParams,
    stage: str | None = None,
    pipeline_id: int | None = None,
    owner_id: str | None = None,
) -> tuple[list[Deal], int]:
    """List deals newest first, optionally filtered by label, pipeline and owner."""
    query = _deal_query(db, owner_id)
    if stage is not None:
        query = query.filter(Deal.stage == stage)
    if pipeline_id is not None:
        query = query.filter(Deal.pipeline_id == pipeline_id)
    query = query.order_by(Deal.created_at.desc(), Deal.id.desc())
    return paginate_query(query, pagination)


def get_deal(db: Session, deal_id: int, owner_id: str | None = None) -> Deal | None:
    """Get a deal by id; with `owner_id`, deals of other owners are not found."""
    return _deal_query(db, owner_id).filter(Deal.id == deal_id).first()


def _resolve_stage_id(db: Session, pipeline_id: int, label: str) -> int | None:
    stage = pipeline_service.find_stage_by_title(db, pipeline_id, label)
    return stage.id if stage else None


def create_deal(db: Session, data: DealCreate, owner_id: str | None = None) -> Deal:
    """
    Create a deal.

    Without a stage the deal lands in the pipeline's first stage, or in
    DEFAULT_DEAL_STAGE when the pipeline has no stages. `owner_id` is the
    fallback owner when the payload names none.
    """
    values = data.model_dump()
    if values["owner_id"] is None:
        values["owner_id"] = owner_id

    if values["stage"] is None:
        first = pipeline_service.get_first_stage(db, data.pipeline_id)
        values["stage"] = first.title if first else DEFAULT_DEAL_STAGE
        values["stage_id"] = first.id if first else None
    else:
        values["stage_id"] = _resolve_stage_id(db, data.pipeline_id, values["stage"])

    deal = Deal(**values)
    db.add(deal)
    db.commit()
    db.refresh(deal)
    logger.info(f"Created deal {deal.id} in pipeline {deal.pipeline_id} at stage '{deal.stage}'")
    return deal


def update_deal(db: Session, deal: Deal, data: DealUpdate) -> Deal:
    """
    Partial update.

    A `stage` value moves the deal (same rules as move_deal); a pipeline
    change re-resolves the stage link against the new pipeline.
    """
    changes = data.model_dump(exclude_unset=True)
    new_stage = changes.pop("stage", None)

    for field, value in changes.items():
        if field in REQUIRED_FIELDS and value is None:
            continue
        setattr(deal, field, value)

    if new_stage is not None:
        _apply_move(db, deal, new_stage)
    elif "pipeline_id" in changes:
        deal.stage_id = _resolve_stage_id(db, deal.pipeline_id, deal.stage)

    db.commit()
    db.refresh(deal)
    return deal


def _apply_move(db: Session, deal: Deal, stage_label: str) -> None:
    previous = deal.stage
    deal.stage = stage_label
    deal.stage_id = _resolve_stage_id(db, deal.pipeline_id, stage_label)
    logger.info(
        f"Deal {deal.id} moved '{previous}' -> '{stage_label}'"
        + ("" if deal.stage_id else " (no matching stage)")
    )


def move_deal(db: Session, deal: Deal, stage_label: str) -> Deal:
    """
    Move a deal to a stage label.

    Any string is accepted; an unknown label leaves the deal orphaned.
    No activity is recorded.
    """
    _apply_move(db, deal, stage_label)
    db.commit()
    db.refresh(deal)
    return deal


def move_deal_to_stage(db: Session, deal: Deal, stage: PipelineStage) -> Deal:
    """
    Move a deal to a stage by reference, setting both label and link.

    Raises:
        StagePipelineMismatchError: Stage belongs to another pipeline
    """
    if stage.pipeline_id != deal.pipeline_id:
        raise StagePipelineMismatchError("Stage does not belong to the deal's pipeline")

    previous = deal.stage
    deal.stage = stage.title
    deal.stage_id = stage.id
    db.commit()
    db.refresh(deal)
    logger.info(f"Deal {deal.id} moved '{previous}' -> '{stage.title}' (stage {stage.id})")
    return deal


def delete_deal(db: Session, deal: Deal) -> None:
    deal_id = deal.id
    db.delete(deal)
    db.commit()
    logger.info(f"Deleted deal {deal_id}")


# =============================================================================
# Board aggregation
# =============================================================================

def deals_by_stage(
    db: Session,
    pipeline_id: int | None = None,
    owner_id: str | None = None,
) -> list[dict]:
    """
    Group deals into one bucket per stage.

    With a pipeline id, buckets follow the pipeline's stages in position
    order and only that pipeline's deals are considered. Without one, the
    four default stage titles are used across all pipelines.

    A deal falls in a bucket iff its label equals the bucket's title
    exactly. Deals matching no bucket are left out.
    """
    if pipeline_id is not None:
        columns = [
            {
                "stage": stage.title,
                "stage_id": stage.id,
                "color": stage.color,
                "position": stage.position,
            }
            for stage in pipeline_service.list_stages(db, pipeline_id)
        ]
    else:
        columns = [
            {
                "stage": stage["title"],
                "stage_id": None,
                "color": stage.get("color", DEFAULT_STAGE_COLOR),
                "position": position,
            }
            for position, stage in enumerate(DEFAULT_STAGES)
        ]

    query = _deal_query(db, owner_id).filter(Deal.stage.in_([c["stage"] for c in columns]))
    if pipeline_id is not None:
        query = query.filter(Deal.pipeline_id == pipeline_id)
    deals = query.order_by(Deal.created_at.desc(), Deal.id.desc()).all()

    grouped: dict[str, list[Deal]] = defaultdict(list)
    for deal in deals:
        grouped[deal.stage].append(deal)

    buckets = []
    for column in columns:
        # Two stages sharing a title both show the same deals
        bucket_deals = grouped.get(column["stage"], [])
        buckets.append({
            **column,
            "count": len(bucket_deals),
            "total_value": money(sum((d.value or Decimal(0) for d in bucket_deals), Decimal(0))),
            "deals": bucket_deals,
        })
    return buckets
