"""SQLAlchemy ORM models for users, companies, contacts, pipelines and deals."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crm.db.base import Base
from crm.db.enums import (
    DEFAULT_CONTACT_SOURCE,
    DEFAULT_CONTACT_STATUS,
    DEFAULT_ROLE,
)


# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )


# =============================================================================
# Users
# =============================================================================

class User(TimestampMixin, Base):
    """
    A CRM user.

    The id is the subject claim issued by the external session provider;
    rows are created on first authenticated request.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_ROLE.value, server_default=DEFAULT_ROLE.value, nullable=False
    )


# =============================================================================
# Companies & Contacts
# =============================================================================

class Company(TimestampMixin, Base):
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sector: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)


class Contact(TimestampMixin, Base):
    __tablename__ = "contacts"
    __table_args__ = (
        Index("idx_contacts_company", "company_id"),
        Index("idx_contacts_name", "name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    position: Mapped[str | None] = mapped_column(String(255), nullable=True)  # Job title
    company_id: Mapped[int | None] = mapped_column(
        ForeignKey("companies.id", ondelete="SET NULL"), nullable=True
    )
    pipeline_id: Mapped[int | None] = mapped_column(
        ForeignKey("pipelines.id", ondelete="SET NULL"), nullable=True
    )
    tags: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_CONTACT_STATUS.value, nullable=False
    )
    source: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_CONTACT_SOURCE.value, nullable=False
    )

    # Address
    street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(255), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), default="Brasil", nullable=True)

    company: Mapped["Company | None"] = relationship(lazy="joined")


# =============================================================================
# Pipelines, Stages & Deals
# =============================================================================

class Pipeline(TimestampMixin, Base):
    """
    A named sales process.

    Deleting a pipeline removes its stages and every deal in it.
    """
    __tablename__ = "pipelines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    stages: Mapped[list["PipelineStage"]] = relationship(
        back_populates="pipeline",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: (PipelineStage.position, PipelineStage.id),
    )
    deals: Mapped[list["Deal"]] = relationship(
        back_populates="pipeline",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class PipelineStage(TimestampMixin, Base):
    """
    A kanban column inside a pipeline.

    - position: 0-based ordering key within the pipeline (not unique in the DB)
    - title: matched by exact string equality against Deal.stage
    """
    __tablename__ = "pipeline_stages"
    __table_args__ = (
        Index("idx_stage_pipeline_position", "pipeline_id", "position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pipeline_id: Mapped[int] = mapped_column(
        ForeignKey("pipelines.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    color: Mapped[str | None] = mapped_column(String(20), default="#3b82f6", nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    pipeline: Mapped["Pipeline"] = relationship(back_populates="stages")


class Deal(TimestampMixin, Base):
    """
    A sales opportunity.

    `stage` is the label the board groups by. `stage_id` is the strong
    reference kept in sync when the label matches a stage of the deal's
    pipeline; it lets stage renames carry their deals along.
    """
    __tablename__ = "deals"
    __table_args__ = (
        Index("idx_deals_pipeline_stage", "pipeline_id", "stage"),
        Index("idx_deals_owner", "owner_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    stage: Mapped[str] = mapped_column(String(100), nullable=False)
    stage_id: Mapped[int | None] = mapped_column(
        ForeignKey("pipeline_stages.id", ondelete="SET NULL"), nullable=True
    )
    pipeline_id: Mapped[int] = mapped_column(
        ForeignKey("pipelines.id", ondelete="CASCADE"), nullable=False
    )
    expected_close_date: Mapped[datetime | None] = mapped_column(nullable=True)
    contact_id: Mapped[int | None] = mapped_column(
        ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True
    )
    company_id: Mapped[int | None] = mapped_column(
        ForeignKey("companies.id", ondelete="SET NULL"), nullable=True
    )
    owner_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    pipeline: Mapped["Pipeline"] = relationship(back_populates="deals")
    contact: Mapped["Contact | None"] = relationship(lazy="joined")
    company: Mapped["Company | None"] = relationship(lazy="joined")


# =============================================================================
# Activities
# =============================================================================

class Activity(TimestampMixin, Base):
    """Calls, emails, meetings, notes and tasks logged against CRM records."""
    __tablename__ = "activities"
    __table_args__ = (
        Index("idx_activities_deal", "deal_id"),
        Index("idx_activities_contact", "contact_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_id: Mapped[int | None] = mapped_column(
        ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True
    )
    deal_id: Mapped[int | None] = mapped_column(
        ForeignKey("deals.id", ondelete="SET NULL"), nullable=True
    )
    company_id: Mapped[int | None] = mapped_column(
        ForeignKey("companies.id", ondelete="SET NULL"), nullable=True
    )
    user_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    due_date: Mapped[datetime | None] = mapped_column(nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    contact: Mapped["Contact | None"] = relationship(lazy="joined")
    deal: Mapped["Deal | None"] = relationship(lazy="joined")
    company: Mapped["Company | None"] = relationship(lazy="joined")
    user: Mapped["User | None"] = relationship(lazy="joined")
