"""Companies router."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from crm.core.deps import get_db, require_permission
from crm.core.policies import POLICIES
from crm.schemas.company import (
    CompanyCreate,
    CompanyListResponse,
    CompanyRead,
    CompanyUpdate,
)
from crm.services import company_service
from crm.utils.pagination import PaginationParams, get_pagination

router = APIRouter(
    prefix="/companies",
    tags=["Companies"],
    dependencies=[Depends(require_permission(POLICIES["companies"].default))],
)


@router.get("", response_model=CompanyListResponse)
def list_companies(
    search: str | None = Query(None, max_length=255),
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    companies, total = company_service.list_companies(db, pagination, search=search)
    return CompanyListResponse(companies=companies, total=total)


@router.get("/{company_id}", response_model=CompanyRead)
def get_company(company_id: int, db: Session = Depends(get_db)):
    company = company_service.get_company(db, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company


@router.post(
    "",
    response_model=CompanyRead,
    status_code=201,
    dependencies=[Depends(require_permission(POLICIES["companies"].actions["create"]))],
)
def create_company(data: CompanyCreate, db: Session = Depends(get_db)):
    return company_service.create_company(db, data)


@router.put(
    "/{company_id}",
    response_model=CompanyRead,
    dependencies=[Depends(require_permission(POLICIES["companies"].actions["edit"]))],
)
def update_company(company_id: int, data: CompanyUpdate, db: Session = Depends(get_db)):
    company = company_service.get_company(db, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company_service.update_company(db, company, data)


@router.delete(
    "/{company_id}",
    status_code=204,
    dependencies=[Depends(require_permission(POLICIES["companies"].actions["delete"]))],
)
def delete_company(company_id: int, db: Session = Depends(get_db)):
    company = company_service.get_company(db, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    company_service.delete_company(db, company)
    return None
