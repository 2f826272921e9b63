"""Deal schemas, including the by-stage board buckets."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from crm.schemas.base import CamelModel
from crm.schemas.company import CompanySummary
from crm.schemas.contact import ContactSummary


class DealCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    value: Decimal | None = Field(None, max_digits=12, decimal_places=2)
    stage: str | None = Field(None, min_length=1, max_length=100)  # First stage of the pipeline if omitted
    pipeline_id: int
    contact_id: int | None = None
    company_id: int | None = None
    owner_id: str | None = None
    expected_close_date: datetime | None = None
    description: str | None = None


class DealUpdate(CamelModel):
    """Partial update. A `stage` value moves the deal to that label."""
    title: str | None = Field(None, min_length=1, max_length=255)
    value: Decimal | None = Field(None, max_digits=12, decimal_places=2)
    stage: str | None = Field(None, min_length=1, max_length=100)
    pipeline_id: int | None = None
    contact_id: int | None = None
    company_id: int | None = None
    owner_id: str | None = None
    expected_close_date: datetime | None = None
    description: str | None = None


class DealStageMove(CamelModel):
    """Move a deal to a stage of its own pipeline by id."""
    stage_id: int


class DealRead(CamelModel):
    id: int
    title: str
    value: Decimal | None
    stage: str
    stage_id: int | None
    pipeline_id: int
    contact_id: int | None
    company_id: int | None
    owner_id: str | None
    expected_close_date: datetime | None
    description: str | None
    contact: ContactSummary | None = None
    company: CompanySummary | None = None
    created_at: datetime
    updated_at: datetime


class DealSummary(CamelModel):
    """Embedded in activity responses."""
    id: int
    title: str
    stage: str


class DealStageBucket(CamelModel):
    """One kanban column: the stage and the deals whose label matches it."""
    stage: str
    stage_id: int | None
    color: str | None
    position: int
    count: int
    total_value: Decimal
    deals: list[DealRead]
