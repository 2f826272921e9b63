"""Contact schemas, including bulk import."""

from datetime import datetime
from typing import Any

from pydantic import EmailStr, Field

from crm.db.enums import ContactSource, ContactStatus
from crm.schemas.base import CamelModel
from crm.schemas.company import CompanySummary


class ContactBase(CamelModel):
    model_config = {"use_enum_values": True}

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    position: str | None = Field(None, max_length=255)
    company_id: int | None = None
    pipeline_id: int | None = None
    tags: list[str] = Field(default_factory=list)
    status: ContactStatus = ContactStatus.ACTIVE.value
    source: ContactSource = ContactSource.MANUAL.value
    street: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=255)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str | None = Field("Brasil", max_length=100)


class ContactCreate(ContactBase):
    pass


class ContactUpdate(CamelModel):
    """Partial update; omitted fields are left untouched."""
    model_config = {"use_enum_values": True}

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    position: str | None = Field(None, max_length=255)
    company_id: int | None = None
    pipeline_id: int | None = None
    tags: list[str] | None = None
    status: ContactStatus | None = None
    street: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=255)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, max_length=100)


class ContactRead(CamelModel):
    id: int
    name: str
    email: str | None
    phone: str | None
    position: str | None
    company_id: int | None
    pipeline_id: int | None
    tags: list[str]
    status: ContactStatus
    source: ContactSource
    street: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    country: str | None
    company: CompanySummary | None = None
    created_at: datetime
    updated_at: datetime


class ContactSummary(CamelModel):
    """Embedded in deal and activity responses."""
    id: int
    name: str
    email: str | None
    phone: str | None


class ContactListResponse(CamelModel):
    contacts: list[ContactRead]
    total: int


# =============================================================================
# Import
# =============================================================================

class ContactImportRequest(CamelModel):
    """
    Rows are validated one at a time so a bad row does not sink the batch.

    `pipelineId` and `tags` apply to every imported row.
    """
    contacts: list[dict[str, Any]] = Field(min_length=1)
    pipeline_id: int | None = None
    tags: list[str] = Field(default_factory=list)


class ContactImportResponse(CamelModel):
    success: int
    errors: list[str]
