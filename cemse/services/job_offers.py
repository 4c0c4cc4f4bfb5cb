"""Job offer publishing and browsing."""

from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cemse.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from cemse.core.security import Identity
from cemse.models.company import Company
from cemse.models.job_offer import (
    ContractType,
    ExperienceLevel,
    JobOffer,
    JobStatus,
    WorkModality,
)
from cemse.models.user import UserRole
from cemse.services.provisioning import ensure_company_for_identity
from cemse.utils.validators import (
    is_blank,
    missing_fields,
    parse_bool,
    parse_optional_datetime,
    parse_optional_number,
    parse_string_list,
    validate_choice,
)

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = (
    "title",
    "description",
    "requirements",
    "location",
    "contractType",
    "workSchedule",
    "workModality",
    "experienceLevel",
    "municipality",
    "companyId",
)

# wire name -> column name
TEXT_FIELDS = {
    "title": "title",
    "description": "description",
    "location": "location",
    "category": "category",
    "workSchedule": "work_schedule",
    "municipality": "municipality",
    "department": "department",
    "salaryCurrency": "salary_currency",
}
CHOICE_FIELDS = {
    "contractType": ("contract_type", ContractType),
    "workModality": ("work_modality", WorkModality),
    "experienceLevel": ("experience_level", ExperienceLevel),
    "status": ("status", JobStatus),
}
LIST_FIELDS = {
    "skillsRequired": "skills_required",
    "desiredSkills": "desired_skills",
    "benefits": "benefits",
}
NUMBER_FIELDS = {
    "salaryMin": "salary_min",
    "salaryMax": "salary_max",
}
BOOL_FIELDS = {
    "featured": "featured",
    "isActive": "is_active",
}


def normalize_job_offer_input(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Validate a JSON or form payload and map it to column values.

    ``applicationDeadline`` that is empty or not a real point in time is
    stored as null instead of failing the request.
    """
    if not partial:
        missing = missing_fields(data, REQUIRED_FIELDS)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

    values: Dict[str, Any] = {}

    for wire, column in TEXT_FIELDS.items():
        if wire in data:
            if wire in REQUIRED_FIELDS and is_blank(data[wire]):
                raise ValidationError(f"{wire} cannot be empty", field=wire)
            values[column] = None if is_blank(data[wire]) else str(data[wire]).strip()

    if "requirements" in data:
        requirements = data["requirements"]
        # Older clients send requirements as a list of lines
        if isinstance(requirements, list):
            requirements = "\n".join(str(item).strip() for item in requirements if str(item).strip())
        if is_blank(requirements):
            raise ValidationError("requirements cannot be empty", field="requirements")
        values["requirements"] = str(requirements).strip()

    for wire, (column, enum_class) in CHOICE_FIELDS.items():
        if wire in data and not (wire == "status" and is_blank(data[wire])):
            values[column] = validate_choice(data[wire], enum_class, wire)

    for wire, column in LIST_FIELDS.items():
        if wire in data:
            values[column] = parse_string_list(data[wire])

    for wire, column in NUMBER_FIELDS.items():
        if wire in data:
            values[column] = parse_optional_number(data[wire], wire)

    for wire, column in BOOL_FIELDS.items():
        if wire in data:
            values[column] = parse_bool(data[wire])

    if "applicationDeadline" in data:
        deadline = parse_optional_datetime(data["applicationDeadline"])
        if deadline is None and not is_blank(data["applicationDeadline"]):
            logger.info("application_deadline_discarded", value=str(data["applicationDeadline"])[:64])
        values["application_deadline"] = deadline

    if "companyId" in data and not is_blank(data["companyId"]):
        values["company_id"] = str(data["companyId"]).strip()

    return values


def _check_salary_range(salary_min: Optional[float], salary_max: Optional[float]) -> None:
    if salary_min is not None and salary_min < 0:
        raise ValidationError("salaryMin cannot be negative", field="salaryMin")
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise ValidationError("salaryMin cannot be greater than salaryMax", field="salaryMin")


def _can_manage(identity: Identity, offer_company_id: str) -> bool:
    return (
        identity.is_development
        or identity.role == UserRole.SUPERADMIN.value
        or identity.id == offer_company_id
    )


def _job_offer_query():
    return select(JobOffer).options(selectinload(JobOffer.company))


async def _load_job_offer(db: AsyncSession, offer_id: str) -> Optional[JobOffer]:
    result = await db.execute(
        _job_offer_query().where(JobOffer.id == offer_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_job_offer(
    db: AsyncSession,
    data: Dict[str, Any],
    identity: Identity,
    attached_images: int = 0,
) -> JobOffer:
    values = normalize_job_offer_input(data)
    company_id = values.pop("company_id")
    _check_salary_range(values.get("salary_min"), values.get("salary_max"))

    is_company_user = identity.role == UserRole.COMPANIES.value and not identity.is_development
    if is_company_user and company_id != identity.id:
        raise AuthorizationError(
            "Companies can only publish job offers for themselves",
            user_role=identity.role,
            allowed_roles=[UserRole.SUPERADMIN.value],
        )

    try:
        result = await db.execute(select(Company).where(Company.id == company_id))
        company = result.scalar_one_or_none()
        if company is None:
            if not is_company_user:
                raise ValidationError("Company not found", field="companyId")
            company = await ensure_company_for_identity(db, identity)

        values.setdefault("status", JobStatus.ACTIVE.value)
        values.setdefault("is_active", True)
        offer = JobOffer(
            **values,
            company_id=company.id,
            # Attachments are accepted but not stored yet
            images=[],
            published_at=datetime.utcnow(),
        )
        db.add(offer)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "job_offer_created",
        job_offer_id=offer.id,
        company_id=company.id,
        attached_images=attached_images,
        has_deadline=offer.application_deadline is not None,
    )
    return await _load_job_offer(db, offer.id)


async def list_job_offers(
    db: AsyncSession,
    status: Optional[str] = None,
    category: Optional[str] = None,
    municipality: Optional[str] = None,
    company_id: Optional[str] = None,
) -> List[JobOffer]:
    """Public listing unless company_id is given.

    Without a company id only active offers are returned; with one, every
    offer of that company regardless of its active flag.
    """
    filters = []

    if company_id:
        filters.append(JobOffer.company_id == company_id)
    else:
        filters.append(JobOffer.is_active.is_(True))

    if status:
        filters.append(JobOffer.status == status)

    if category:
        filters.append(JobOffer.category.ilike(f"%{category}%"))

    if municipality:
        filters.append(JobOffer.municipality.ilike(f"%{municipality}%"))

    result = await db.execute(
        _job_offer_query().where(and_(*filters)).order_by(JobOffer.created_at.desc())
    )
    return list(result.scalars().all())


async def get_job_offer(db: AsyncSession, offer_id: str, identity: Optional[Identity] = None) -> JobOffer:
    offer = await _load_job_offer(db, offer_id)
    if offer is None:
        raise NotFoundError("Job offer not found")

    # Inactive offers are only visible to their company and superadmins
    if not offer.is_active and (identity is None or not _can_manage(identity, offer.company_id)):
        raise NotFoundError("Job offer not found")
    return offer


async def _get_managed_job_offer(db: AsyncSession, offer_id: str, identity: Identity) -> JobOffer:
    offer = await _load_job_offer(db, offer_id)
    if offer is None:
        raise NotFoundError("Job offer not found")
    if not _can_manage(identity, offer.company_id):
        raise AuthorizationError(
            "Only the publishing company can modify this job offer",
            user_role=identity.role,
            allowed_roles=[UserRole.SUPERADMIN.value, UserRole.COMPANIES.value],
        )
    return offer


async def update_job_offer(db: AsyncSession, offer_id: str, data: Dict[str, Any], identity: Identity) -> JobOffer:
    offer = await _get_managed_job_offer(db, offer_id, identity)
    values = normalize_job_offer_input(data, partial=True)
    # Offers never move between companies
    values.pop("company_id", None)

    _check_salary_range(
        values.get("salary_min", offer.salary_min),
        values.get("salary_max", offer.salary_max),
    )

    try:
        for column, value in values.items():
            setattr(offer, column, value)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("job_offer_updated", job_offer_id=offer.id, fields=sorted(values))
    return await _load_job_offer(db, offer.id)


async def delete_job_offer(db: AsyncSession, offer_id: str, identity: Identity) -> None:
    offer = await _get_managed_job_offer(db, offer_id, identity)
    try:
        await db.delete(offer)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("job_offer_deleted", job_offer_id=offer_id)
