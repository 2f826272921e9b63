"""Contact service - CRUD, bulk import and tag listing."""

import logging

from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crm.db.enums import ContactSource
from crm.db.models import Contact
from crm.schemas.contact import ContactCreate, ContactUpdate
from crm.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)


def list_contacts(
    db: Session,
    pagination: PaginationParams,
    search: str | None = None,
    company_id: int | None = None,
) -> tuple[list[Contact], int]:
    """
    List contacts, newest first.

    `search` matches name or email (case-insensitive).
    """
    query = db.query(Contact)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Contact.name.ilike(pattern), Contact.email.ilike(pattern)))
    if company_id is not None:
        query = query.filter(Contact.company_id == company_id)
    query = query.order_by(Contact.created_at.desc(), Contact.id.desc())
    return paginate_query(query, pagination)


def get_contact(db: Session, contact_id: int) -> Contact | None:
    return db.query(Contact).filter(Contact.id == contact_id).first()


def create_contact(db: Session, data: ContactCreate) -> Contact:
    contact = Contact(**data.model_dump())
    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


def update_contact(db: Session, contact: Contact, data: ContactUpdate) -> Contact:
    """Apply only the fields present in the request."""
    for field, value in data.model_dump(exclude_unset=True).items():
        if field in ("name", "tags", "status") and value is None:
            continue
        setattr(contact, field, value)
    db.commit()
    db.refresh(contact)
    return contact


def delete_contact(db: Session, contact: Contact) -> None:
    db.delete(contact)
    db.commit()


def import_contacts(
    db: Session,
    rows: list[dict],
    pipeline_id: int | None = None,
    tags: list[str] | None = None,
) -> tuple[int, list[str]]:
    """
    Insert each row independently.

    A row that fails validation or violates a constraint is reported and
    skipped; the rows before and after it are still imported.

    Returns:
        (imported_count, error_messages)
    """
    imported = 0
    errors: list[str] = []
    extra_tags = tags or []

    for index, row in enumerate(rows, start=1):
        try:
            data = ContactCreate.model_validate(row)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            errors.append(f"Row {index}: invalid data ({fields})")
            continue

        values = data.model_dump()
        values["source"] = ContactSource.IMPORT.value
        if pipeline_id is not None:
            values["pipeline_id"] = pipeline_id
        values["tags"] = list(dict.fromkeys([*values["tags"], *extra_tags]))

        try:
            db.add(Contact(**values))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            errors.append(f"Row {index}: {e.__class__.__name__}")
            continue
        imported += 1

    logger.info(f"Contact import finished: {imported} imported, {len(errors)} failed")
    return imported, errors


def list_tags(db: Session) -> list[str]:
    """Distinct tags used across all contacts, sorted."""
    found: set[str] = set()
    for (tags,) in db.query(Contact.tags).all():
        found.update(tags or [])
    return sorted(found)
