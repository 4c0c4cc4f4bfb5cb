"""Municipality endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cemse.api.deps import get_db, require_operation
from cemse.core.security import Identity
from cemse.models.municipality import Municipality
from cemse.schemas.municipality import MunicipalityListResponse, MunicipalityResponse

router = APIRouter()


@router.get("", response_model=MunicipalityListResponse)
async def list_municipalities(
    identity: Identity = Depends(require_operation("municipality:read")),
    db: AsyncSession = Depends(get_db),
):
    """List active municipalities by name."""
    result = await db.execute(
        select(Municipality)
        .options(selectinload(Municipality.creator))
        .where(Municipality.is_active.is_(True))
        .order_by(Municipality.name)
    )
    return MunicipalityListResponse(
        municipalities=[MunicipalityResponse.model_validate(m) for m in result.scalars().all()]
    )
