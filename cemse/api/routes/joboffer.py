"""Job offer endpoints."""

import json
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from cemse.api.deps import get_db, get_optional_identity, require_operation
from cemse.core.exceptions import ValidationError
from cemse.core.security import Identity
from cemse.schemas.auth import MessageResponse
from cemse.schemas.job_offer import JobOfferListResponse, JobOfferResponse
from cemse.services import job_offers as job_offer_service

router = APIRouter()

# Form fields that may repeat or carry a JSON array
_LIST_FORM_FIELDS = ("skillsRequired", "desiredSkills", "benefits", "requirements")


async def read_job_offer_payload(request: Request) -> Tuple[Dict[str, Any], int]:
    """Read a JSON or multipart/form-data body.

    Returns the field mapping and the number of attached image files.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        data: Dict[str, Any] = {}
        images = 0
        for key in form.keys():
            values = form.getlist(key)
            files = [v for v in values if isinstance(v, UploadFile)]
            if files:
                images += len(files)
                continue
            if key in _LIST_FORM_FIELDS and len(values) > 1:
                data[key] = list(values)
            else:
                data[key] = values[-1]
        return data, images

    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data, 0


@router.post("", response_model=JobOfferResponse, status_code=status.HTTP_201_CREATED)
async def create_job_offer(
    request: Request,
    identity: Identity = Depends(require_operation("joboffer:create")),
    db: AsyncSession = Depends(get_db),
):
    """
    Publish a job offer.

    Accepts JSON or multipart form data. Uploaded images are counted but
    not stored; ``images`` is always empty on creation.
    """
    data, images = await read_job_offer_payload(request)
    return await job_offer_service.create_job_offer(db, data, identity, attached_images=images)


@router.get("", response_model=JobOfferListResponse)
async def list_job_offers(
    status: Optional[str] = Query(None, description="Filter by status (ACTIVE, PAUSED, CLOSED, DRAFT)"),
    category: Optional[str] = Query(None, description="Filter by category (partial match)"),
    municipality: Optional[str] = Query(None, description="Filter by municipality (partial match)"),
    company_id: Optional[str] = Query(None, alias="companyId", description="Filter by company ID"),
    db: AsyncSession = Depends(get_db),
):
    """
    List job offers, newest first.

    Without `companyId` only active offers are listed. With it, every offer
    of that company is returned.
    """
    offers = await job_offer_service.list_job_offers(
        db,
        status=status,
        category=category,
        municipality=municipality,
        company_id=company_id,
    )
    return JobOfferListResponse(
        job_offers=[JobOfferResponse.model_validate(offer) for offer in offers],
        total=len(offers),
    )


@router.get("/{offer_id}", response_model=JobOfferResponse)
async def get_job_offer(
    offer_id: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db),
):
    return await job_offer_service.get_job_offer(db, offer_id, identity)


@router.put("/{offer_id}", response_model=JobOfferResponse)
async def update_job_offer(
    offer_id: str,
    request: Request,
    identity: Identity = Depends(require_operation("joboffer:update")),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a job offer owned by the caller's company."""
    data, _ = await read_job_offer_payload(request)
    return await job_offer_service.update_job_offer(db, offer_id, data, identity)


@router.delete("/{offer_id}", response_model=MessageResponse)
async def delete_job_offer(
    offer_id: str,
    identity: Identity = Depends(require_operation("joboffer:delete")),
    db: AsyncSession = Depends(get_db),
):
    await job_offer_service.delete_job_offer(db, offer_id, identity)
    return MessageResponse(message="Job offer deleted successfully")
