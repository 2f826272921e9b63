"""Pipeline stages router - kanban columns and their ordering."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from crm.core.deps import get_db, require_permission
from crm.core.policies import POLICIES
from crm.schemas.pipeline import (
    StageCreate,
    StageRead,
    StageReorderRequest,
    StageUpdate,
)
from crm.services import pipeline_service

router = APIRouter(
    prefix="/pipeline-stages",
    tags=["Pipelines"],
    dependencies=[Depends(require_permission(POLICIES["pipelines"].default))],
)

EDIT_PIPELINES = Depends(require_permission(POLICIES["pipelines"].actions["edit"]))


@router.get("", response_model=list[StageRead])
def list_stages(
    pipeline_id: int | None = Query(None, alias="pipelineId"),
    db: Session = Depends(get_db),
):
    """Stages ordered by position (all pipelines when no pipelineId is given)."""
    return pipeline_service.list_stages(db, pipeline_id)


@router.post("", response_model=StageRead, status_code=201, dependencies=[EDIT_PIPELINES])
def create_stage(data: StageCreate, db: Session = Depends(get_db)):
    """
    Append a stage to a pipeline.

    Rejected once the pipeline holds 12 stages.
    """
    if not pipeline_service.get_pipeline(db, data.pipeline_id):
        raise HTTPException(status_code=404, detail="Pipeline not found")
    try:
        return pipeline_service.create_stage(
            db,
            pipeline_id=data.pipeline_id,
            title=data.title,
            color=data.color,
            is_default=data.is_default,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# Must be registered before /{stage_id}
@router.put("/positions", status_code=204, dependencies=[EDIT_PIPELINES])
def reorder_stages(data: StageReorderRequest, db: Session = Depends(get_db)):
    """Replace the order of a pipeline's stages in one transaction."""
    try:
        pipeline_service.reorder_stages(db, [(s.id, s.position) for s in data.stages])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return None


@router.put("/{stage_id}", response_model=StageRead, dependencies=[EDIT_PIPELINES])
def update_stage(stage_id: int, data: StageUpdate, db: Session = Depends(get_db)):
    """Rename or recolor a stage; linked deals follow a rename."""
    stage = pipeline_service.get_stage(db, stage_id)
    if not stage:
        raise HTTPException(status_code=404, detail="Stage not found")
    return pipeline_service.update_stage(
        db,
        stage,
        title=data.title,
        color=data.color,
        is_default=data.is_default,
    )


@router.delete("/{stage_id}", status_code=204, dependencies=[EDIT_PIPELINES])
def delete_stage(stage_id: int, db: Session = Depends(get_db)):
    """Delete a stage; remaining stages are renumbered from 0."""
    stage = pipeline_service.get_stage(db, stage_id)
    if not stage:
        raise HTTPException(status_code=404, detail="Stage not found")
    pipeline_service.delete_stage(db, stage)
    return None
