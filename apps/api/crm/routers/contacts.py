"""Contacts router, including bulk import."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from crm.core.deps import get_db, require_permission
from crm.core.policies import POLICIES
from crm.schemas.contact import (
    ContactCreate,
    ContactImportRequest,
    ContactImportResponse,
    ContactListResponse,
    ContactRead,
    ContactUpdate,
)
from crm.services import contact_service, pipeline_service
from crm.utils.pagination import PaginationParams, get_pagination

router = APIRouter(
    prefix="/contacts",
    tags=["Contacts"],
    dependencies=[Depends(require_permission(POLICIES["contacts"].default))],
)

CREATE_CONTACTS = Depends(require_permission(POLICIES["contacts"].actions["create"]))


@router.get("", response_model=ContactListResponse)
def list_contacts(
    search: str | None = Query(None, max_length=255),
    company_id: int | None = Query(None, alias="companyId"),
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    contacts, total = contact_service.list_contacts(
        db, pagination, search=search, company_id=company_id
    )
    return ContactListResponse(contacts=contacts, total=total)


@router.get("/tags", response_model=list[str])
def list_tags(db: Session = Depends(get_db)):
    """Every tag in use, for import and filter pickers."""
    return contact_service.list_tags(db)


@router.post("/import", response_model=ContactImportResponse, dependencies=[CREATE_CONTACTS])
def import_contacts(data: ContactImportRequest, db: Session = Depends(get_db)):
    """
    Bulk import.

    Each row is inserted on its own; failures are reported per row.
    """
    if data.pipeline_id is not None and not pipeline_service.get_pipeline(db, data.pipeline_id):
        raise HTTPException(status_code=400, detail="Pipeline not found")
    imported, errors = contact_service.import_contacts(
        db, data.contacts, pipeline_id=data.pipeline_id, tags=data.tags
    )
    return ContactImportResponse(success=imported, errors=errors)


@router.get("/{contact_id}", response_model=ContactRead)
def get_contact(contact_id: int, db: Session = Depends(get_db)):
    contact = contact_service.get_contact(db, contact_id)
    if not contact:
        raise HTTPException(status_code=404, detail="Contact not found")
    return contact


@router.post("", response_model=ContactRead, status_code=201, dependencies=[CREATE_CONTACTS])
def create_contact(data: ContactCreate, db: Session = Depends(get_db)):
    return contact_service.create_contact(db, data)


@router.put(
    "/{contact_id}",
    response_model=ContactRead,
    dependencies=[Depends(require_permission(POLICIES["contacts"].actions["edit"]))],
)
def update_contact(contact_id: int, data: ContactUpdate, db: Session = Depends(get_db)):
    contact = contact_service.get_contact(db, contact_id)
    if not contact:
        raise HTTPException(status_code=404, detail="Contact not found")
    return contact_service.update_contact(db, contact, data)


@router.delete(
    "/{contact_id}",
    status_code=204,
    dependencies=[Depends(require_permission(POLICIES["contacts"].actions["delete"]))],
)
def delete_contact(contact_id: int, db: Session = Depends(get_db)):
    contact = contact_service.get_contact(db, contact_id)
    if not contact:
        raise HTTPException(status_code=404, detail="Contact not found")
    contact_service.delete_contact(db, contact)
    return None
