"""Company endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cemse.api.deps import get_db, require_operation
from cemse.core.security import Identity
from cemse.schemas.company import (
    CompanyCreate,
    CompanyCredentialsReveal,
    CompanyDeleteResponse,
    CompanyListItem,
    CompanyListMetadata,
    CompanyListResponse,
    CompanyResponse,
    CompanyUpdate,
)
from cemse.services import companies as company_service

router = APIRouter()


@router.post("", response_model=CompanyCredentialsReveal, status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: CompanyCreate,
    identity: Identity = Depends(require_operation("company:create")),
    db: AsyncSession = Depends(get_db),
):
    """
    Register a company together with its login user.

    The response is the only place the chosen password is ever returned.
    """
    company = await company_service.create_company(db, payload, identity)
    data = CompanyResponse.model_validate(company).model_dump()
    return CompanyCredentialsReveal.model_validate({**data, "password": payload.password})


@router.get("", response_model=CompanyListResponse)
async def list_companies(
    identity: Identity = Depends(require_operation("company:read")),
    db: AsyncSession = Depends(get_db),
):
    """List companies with job offer counts."""
    rows = await company_service.list_companies(db)

    items = []
    for company, total, active in rows:
        item = CompanyListItem.model_validate(company)
        item.job_offers_count = total
        item.active_job_offers = active
        items.append(item)

    total_active = sum(1 for item in items if item.is_active)
    return CompanyListResponse(
        companies=items,
        total=len(items),
        metadata=CompanyListMetadata(
            total_active=total_active,
            total_inactive=len(items) - total_active,
            total_job_offers=sum(item.job_offers_count for item in items),
        ),
    )


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: str,
    identity: Identity = Depends(require_operation("company:read")),
    db: AsyncSession = Depends(get_db),
):
    """Get company by ID."""
    return await company_service.get_company(db, company_id)


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: str,
    payload: CompanyUpdate,
    identity: Identity = Depends(require_operation("company:update")),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a company; a new password is hashed before storing."""
    return await company_service.update_company(db, company_id, payload)


@router.delete("/{company_id}", response_model=CompanyDeleteResponse)
async def delete_company(
    company_id: str,
    identity: Identity = Depends(require_operation("company:delete")),
    db: AsyncSession = Depends(get_db),
):
    name, deleted_offers = await company_service.delete_company(db, company_id)
    return CompanyDeleteResponse(
        message="Company deleted successfully",
        company_name=name,
        deleted_job_offers=deleted_offers,
    )
