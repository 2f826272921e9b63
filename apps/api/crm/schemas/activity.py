"""Activity schemas."""

from datetime import datetime

from pydantic import Field

from crm.db.enums import ActivityType
from crm.schemas.base import CamelModel
from crm.schemas.company import CompanySummary
from crm.schemas.contact import ContactSummary
from crm.schemas.deal import DealSummary


class ActivityCreate(CamelModel):
    model_config = {"use_enum_values": True}

    type: ActivityType
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    contact_id: int | None = None
    deal_id: int | None = None
    company_id: int | None = None
    due_date: datetime | None = None
    completed: bool = False


class ActivityUpdate(CamelModel):
    model_config = {"use_enum_values": True}

    type: ActivityType | None = None
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    contact_id: int | None = None
    deal_id: int | None = None
    company_id: int | None = None
    due_date: datetime | None = None
    completed: bool | None = None


class ActivityRead(CamelModel):
    id: int
    type: ActivityType
    title: str
    description: str | None
    contact_id: int | None
    deal_id: int | None
    company_id: int | None
    user_id: str | None
    due_date: datetime | None
    completed: bool
    contact: ContactSummary | None = None
    deal: DealSummary | None = None
    company: CompanySummary | None = None
    created_at: datetime
    updated_at: datetime
