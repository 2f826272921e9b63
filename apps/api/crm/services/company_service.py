"""Company service - CRUD for companies."""

from sqlalchemy.orm import Session

from crm.db.models import Company
from crm.schemas.company import CompanyCreate, CompanyUpdate
from crm.utils.pagination import PaginationParams, paginate_query


def list_companies(
    db: Session,
    pagination: PaginationParams,
    search: str | None = None,
) -> tuple[list[Company], int]:
    """List companies by name, optionally filtered by a case-insensitive name search."""
    query = db.query(Company)
    if search:
        query = query.filter(Company.name.ilike(f"%{search}%"))
    query = query.order_by(Company.name, Company.id)
    return paginate_query(query, pagination)


def get_company(db: Session, company_id: int) -> Company | None:
    return db.query(Company).filter(Company.id == company_id).first()


def create_company(db: Session, data: CompanyCreate) -> Company:
    company = Company(**data.model_dump())
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def update_company(db: Session, company: Company, data: CompanyUpdate) -> Company:
    """Apply only the fields present in the request."""
    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "name" and value is None:
            continue
        setattr(company, field, value)
    db.commit()
    db.refresh(company)
    return company


def delete_company(db: Session, company: Company) -> None:
    """Delete a company. Contacts and deals keep their rows with company cleared."""
    db.delete(company)
    db.commit()
