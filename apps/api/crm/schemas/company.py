"""Company schemas."""

from datetime import datetime

from pydantic import Field

from crm.schemas.base import CamelModel


class CompanyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    sector: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=255)


class CompanyUpdate(CamelModel):
    """Partial update; omitted fields are left untouched."""
    name: str | None = Field(None, min_length=1, max_length=255)
    sector: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=255)


class CompanySummary(CamelModel):
    """Embedded in contact and deal responses."""
    id: int
    name: str


class CompanyRead(CamelModel):
    id: int
    name: str
    sector: str | None
    location: str | None
    created_at: datetime
    updated_at: datetime


class CompanyListResponse(CamelModel):
    companies: list[CompanyRead]
    total: int
