"""Pipelines router - API endpoints for sales pipelines."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from crm.core.deps import get_db, require_permission
from crm.core.policies import POLICIES
from crm.schemas.pipeline import PipelineCreate, PipelineRead, PipelineUpdate
from crm.services import pipeline_service

router = APIRouter(
    prefix="/pipelines",
    tags=["Pipelines"],
    dependencies=[Depends(require_permission(POLICIES["pipelines"].default))],
)


@router.get("", response_model=list[PipelineRead])
def list_pipelines(db: Session = Depends(get_db)):
    """List all pipelines with their ordered stages."""
    return pipeline_service.list_pipelines(db)


@router.get("/{pipeline_id}", response_model=PipelineRead)
def get_pipeline(pipeline_id: int, db: Session = Depends(get_db)):
    pipeline = pipeline_service.get_pipeline(db, pipeline_id)
    if not pipeline:
        raise HTTPException(status_code=404, detail="Pipeline not found")
    return pipeline


@router.post(
    "",
    response_model=PipelineRead,
    status_code=201,
    dependencies=[Depends(require_permission(POLICIES["pipelines"].actions["create"]))],
)
def create_pipeline(data: PipelineCreate, db: Session = Depends(get_db)):
    """
    Create a pipeline.

    Seeds the four default stages when `stages` is not sent.
    """
    stages = [s.model_dump() for s in data.stages] if data.stages is not None else None
    try:
        return pipeline_service.create_pipeline(
            db,
            name=data.name,
            description=data.description,
            stages=stages,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put(
    "/{pipeline_id}",
    response_model=PipelineRead,
    dependencies=[Depends(require_permission(POLICIES["pipelines"].actions["edit"]))],
)
def update_pipeline(pipeline_id: int, data: PipelineUpdate, db: Session = Depends(get_db)):
    pipeline = pipeline_service.get_pipeline(db, pipeline_id)
    if not pipeline:
        raise HTTPException(status_code=404, detail="Pipeline not found")
    return pipeline_service.update_pipeline(
        db, pipeline, name=data.name, description=data.description
    )


@router.delete(
    "/{pipeline_id}",
    status_code=204,
    dependencies=[Depends(require_permission(POLICIES["pipelines"].actions["delete"]))],
)
def delete_pipeline(pipeline_id: int, db: Session = Depends(get_db)):
    """Delete a pipeline with its stages and deals."""
    pipeline = pipeline_service.get_pipeline(db, pipeline_id)
    if not pipeline:
        raise HTTPException(status_code=404, detail="Pipeline not found")
    pipeline_service.delete_pipeline(db, pipeline)
    return None
