"""Pipeline service - pipelines and their ordered kanban stages.

Stage ordering policy:
- Stages are listed by position, ties broken by id
- New stages are appended (max position + 1, or 0 for an empty pipeline)
- Reorder is a full replace applied in one transaction
- At most MAX_STAGES_PER_PIPELINE stages per pipeline
- Deleting a stage re-sequences the remaining ones to 0..n-1

Deals reference stages by label (`Deal.stage`) and, when the label matches a
stage of the deal's pipeline, by id (`Deal.stage_id`). Renaming a stage
rewrites the label of every deal holding its id.
"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from crm.core.stage_definitions import (
    DEFAULT_STAGE_COLOR,
    MAX_STAGES_PER_PIPELINE,
    STAGE_LIMIT_MESSAGE,
    get_default_stage_defs,
)
from crm.db.models import Deal, Pipeline, PipelineStage

logger = logging.getLogger(__name__)


class StageLimitError(ValueError):
    """Pipeline already holds the maximum number of stages."""

    def __init__(self, message: str = STAGE_LIMIT_MESSAGE):
        super().__init__(message)


class StageReorderError(ValueError):
    """Reorder request is empty, oversized, or references foreign stages."""


class StagePipelineMismatchError(ValueError):
    """Stage does not belong to the pipeline it was used with."""


# =============================================================================
# Pipelines
# =============================================================================

def list_pipelines(db: Session) -> list[Pipeline]:
    """List all pipelines by name."""
    return db.query(Pipeline).order_by(Pipeline.name, Pipeline.id).all()


def get_pipeline(db: Session, pipeline_id: int) -> Pipeline | None:
    return db.query(Pipeline).filter(Pipeline.id == pipeline_id).first()


def create_pipeline(
    db: Session,
    name: str,
    description: str | None = None,
    stages: list[dict] | None = None,
) -> Pipeline:
    """
    Create a pipeline with its initial stages.

    Seeds the default stages when `stages` is None; an explicit empty list
    creates a pipeline without stages.

    Raises:
        StageLimitError: More than MAX_STAGES_PER_PIPELINE stages supplied
    """
    stage_defs = get_default_stage_defs() if stages is None else stages
    if len(stage_defs) > MAX_STAGES_PER_PIPELINE:
        raise StageLimitError()

    pipeline = Pipeline(name=name, description=description)
    db.add(pipeline)
    db.flush()

    db.add_all([
        PipelineStage(
            pipeline_id=pipeline.id,
            title=stage["title"],
            color=stage.get("color") or DEFAULT_STAGE_COLOR,
            position=position,
            is_default=stage.get("is_default", False),
        )
        for position, stage in enumerate(stage_defs)
    ])
    db.commit()
    db.refresh(pipeline)
    logger.info(f"Created pipeline {pipeline.id} with {len(stage_defs)} stages")
    return pipeline


def update_pipeline(
    db: Session,
    pipeline: Pipeline,
    name: str | None = None,
    description: str | None = None,
) -> Pipeline:
    if name is not None:
        pipeline.name = name
    if description is not None:
        pipeline.description = description
    db.commit()
    db.refresh(pipeline)
    return pipeline


def delete_pipeline(db: Session, pipeline: Pipeline) -> None:
    """Delete a pipeline together with its stages and deals."""
    pipeline_id = pipeline.id
    db.delete(pipeline)
    db.commit()
    logger.info(f"Deleted pipeline {pipeline_id}")


# =============================================================================
# Stages
# =============================================================================

def list_stages(db: Session, pipeline_id: int | None = None) -> list[PipelineStage]:
    """
    Stages ordered by position.

    Without a pipeline id, returns the stages of every pipeline grouped by pipeline.
    """
    query = db.query(PipelineStage)
    if pipeline_id is not None:
        query = query.filter(PipelineStage.pipeline_id == pipeline_id)
        return query.order_by(PipelineStage.position, PipelineStage.id).all()
    return query.order_by(
        PipelineStage.pipeline_id, PipelineStage.position, PipelineStage.id
    ).all()


def get_stage(db: Session, stage_id: int) -> PipelineStage | None:
    return db.query(PipelineStage).filter(PipelineStage.id == stage_id).first()


def count_stages(db: Session, pipeline_id: int) -> int:
    return db.query(PipelineStage).filter(PipelineStage.pipeline_id == pipeline_id).count()


def get_first_stage(db: Session, pipeline_id: int) -> PipelineStage | None:
    """The stage new deals land in when none is given."""
    return (
        db.query(PipelineStage)
        .filter(PipelineStage.pipeline_id == pipeline_id)
        .order_by(PipelineStage.position, PipelineStage.id)
        .first()
    )


def find_stage_by_title(db: Session, pipeline_id: int, title: str) -> PipelineStage | None:
    """Exact, case-sensitive title lookup within one pipeline."""
    return (
        db.query(PipelineStage)
        .filter(PipelineStage.pipeline_id == pipeline_id, PipelineStage.title == title)
        .order_by(PipelineStage.position, PipelineStage.id)
        .first()
    )


def create_stage(
    db: Session,
    pipeline_id: int,
    title: str,
    color: str | None = None,
    is_default: bool = False,
) -> PipelineStage:
    """
    Append a stage to the end of a pipeline.

    Deals in the pipeline already labelled with this title and not linked
    to any stage are linked to the new one.

    Raises:
        StageLimitError: Pipeline already has MAX_STAGES_PER_PIPELINE stages
    """
    if count_stages(db, pipeline_id) >= MAX_STAGES_PER_PIPELINE:
        raise StageLimitError()

    max_position = (
        db.query(func.max(PipelineStage.position))
        .filter(PipelineStage.pipeline_id == pipeline_id)
        .scalar()
    )
    stage = PipelineStage(
        pipeline_id=pipeline_id,
        title=title,
        color=color or DEFAULT_STAGE_COLOR,
        position=0 if max_position is None else max_position + 1,
        is_default=is_default,
    )
    db.add(stage)
    db.flush()

    linked = _link_unlinked_deals(db, pipeline_id, title, stage.id)
    db.commit()
    db.refresh(stage)
    logger.info(
        f"Created stage {stage.id} '{title}' at position {stage.position} "
        f"in pipeline {pipeline_id} (linked {linked} deals)"
    )
    return stage


def update_stage(
    db: Session,
    stage: PipelineStage,
    title: str | None = None,
    color: str | None = None,
    is_default: bool | None = None,
) -> PipelineStage:
    """
    Update stage title, color, or default flag.

    A new title is propagated to every deal linked to the stage in the same
    transaction, and unlinked deals of the pipeline already carrying the new
    title are linked to the stage.
    """
    if title is not None and title != stage.title:
        previous = stage.title
        stage.title = title
        updated = sync_deal_labels(db, stage.id, title)
        linked = _link_unlinked_deals(db, stage.pipeline_id, title, stage.id)
        logger.info(
            f"Renamed stage {stage.id} '{previous}' -> '{title}' "
            f"({updated} deals, linked {linked})"
        )

    if color is not None:
        stage.color = color

    if is_default is not None:
        stage.is_default = is_default

    db.commit()
    db.refresh(stage)
    return stage


def _link_unlinked_deals(db: Session, pipeline_id: int, title: str, stage_id: int) -> int:
    """Link deals of the pipeline carrying `title` but no stage to `stage_id`."""
    return (
        db.query(Deal)
        .filter(
            Deal.pipeline_id == pipeline_id,
            Deal.stage == title,
            Deal.stage_id.is_(None),
        )
        .update({Deal.stage_id: stage_id}, synchronize_session="fetch")
    )


def sync_deal_labels(db: Session, stage_id: int, new_label: str) -> int:
    """
    Rewrite Deal.stage for every deal linked to a stage.

    Does not commit; the caller owns the transaction.
    Returns number of deals updated.
    """
    return (
        db.query(Deal)
        .filter(Deal.stage_id == stage_id)
        .update({Deal.stage: new_label}, synchronize_session="fetch")
    )


def delete_stage(db: Session, stage: PipelineStage) -> int:
    """
    Delete a stage and close the gap in positions.

    Deals keep their label (and so drop out of every bucket) but lose
    their stage link. Returns the number of deals orphaned.
    """
    pipeline_id = stage.pipeline_id
    stage_id = stage.id

    orphaned = (
        db.query(Deal)
        .filter(Deal.stage_id == stage_id)
        .update({Deal.stage_id: None}, synchronize_session="fetch")
    )
    db.delete(stage)
    db.flush()

    _resequence(db, pipeline_id)
    db.commit()
    logger.info(f"Deleted stage {stage_id} from pipeline {pipeline_id} ({orphaned} deals orphaned)")
    return orphaned


def _resequence(db: Session, pipeline_id: int) -> None:
    """Renumber a pipeline's stages 0..n-1 keeping their current order."""
    for position, stage in enumerate(list_stages(db, pipeline_id)):
        if stage.position != position:
            stage.position = position


def reorder_stages(db: Session, entries: list[tuple[int, int]]) -> list[PipelineStage]:
    """
    Apply a full ordering submitted as (stage_id, position) pairs.

    Entries are sorted by submitted position (stable on submission order)
    and each stage's position is rewritten to its index in that order.
    All rows are written in one commit; nothing is written on error.

    Returns:
        The pipeline's stages in their new order

    Raises:
        StageReorderError: Empty or oversized list, duplicate or unknown ids,
            or stages from more than one pipeline
    """
    if not entries:
        raise StageReorderError("No stages to reorder")
    if len(entries) > MAX_STAGES_PER_PIPELINE:
        raise StageReorderError(STAGE_LIMIT_MESSAGE)

    stage_ids = [stage_id for stage_id, _ in entries]
    if len(set(stage_ids)) != len(stage_ids):
        raise StageReorderError("Duplicate stage ids in reorder request")

    stages = db.query(PipelineStage).filter(PipelineStage.id.in_(stage_ids)).all()
    stage_map = {s.id: s for s in stages}
    missing = [stage_id for stage_id in stage_ids if stage_id not in stage_map]
    if missing:
        raise StageReorderError(f"Stage not found: {missing[0]}")

    pipeline_ids = {s.pipeline_id for s in stages}
    if len(pipeline_ids) != 1:
        raise StageReorderError("Stages must belong to a single pipeline")

    ordered = sorted(enumerate(entries), key=lambda item: (item[1][1], item[0]))
    for index, (_, (stage_id, _)) in enumerate(ordered):
        stage_map[stage_id].position = index

    db.commit()
    pipeline_id = pipeline_ids.pop()
    logger.info(f"Reordered {len(entries)} stages in pipeline {pipeline_id}")
    return list_stages(db, pipeline_id)
