"""Pipeline and stage schemas."""

from datetime import datetime

from pydantic import AliasChoices, Field

from crm.schemas.base import CamelModel

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

# Older clients send the stage position as `posicaoestagio`
POSITION_ALIASES = AliasChoices("position", "posicaoestagio")


# =============================================================================
# Stages
# =============================================================================

class StageRead(CamelModel):
    id: int
    pipeline_id: int
    title: str
    position: int
    color: str | None
    is_default: bool
    created_at: datetime
    updated_at: datetime


class StageCreate(CamelModel):
    """
    New stage; always appended after the current last stage.

    A submitted position is accepted but ignored.
    """
    pipeline_id: int
    title: str = Field(min_length=1, max_length=100)
    color: str | None = Field(None, pattern=COLOR_PATTERN)
    is_default: bool = False
    position: int | None = Field(None, validation_alias=POSITION_ALIASES)


class StageUpdate(CamelModel):
    """Rename / recolor a stage. Position changes go through the reorder endpoint."""
    title: str | None = Field(None, min_length=1, max_length=100)
    color: str | None = Field(None, pattern=COLOR_PATTERN)
    is_default: bool | None = None


class StagePosition(CamelModel):
    id: int
    position: int = Field(validation_alias=POSITION_ALIASES)


class StageReorderRequest(CamelModel):
    """Full replacement of a pipeline's stage order."""
    stages: list[StagePosition]


# =============================================================================
# Pipelines
# =============================================================================

class PipelineStageSeed(CamelModel):
    """Stage supplied inline when creating a pipeline."""
    title: str = Field(min_length=1, max_length=100)
    color: str | None = Field(None, pattern=COLOR_PATTERN)
    is_default: bool = False


class PipelineCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    stages: list[PipelineStageSeed] | None = None  # Uses defaults if not provided


class PipelineUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None


class PipelineRead(CamelModel):
    id: int
    name: str
    description: str | None
    stages: list[StageRead]
    created_at: datetime
    updated_at: datetime
