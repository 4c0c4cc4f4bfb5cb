"""Company registration and management."""

from typing import List, Optional, Tuple

import structlog
from sqlalchemy import case, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cemse.core.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
    conflict_from_integrity_error,
)
from cemse.core.security import Identity, get_password_hash
from cemse.models.company import Company
from cemse.models.job_offer import JobOffer, JobStatus
from cemse.models.municipality import Municipality
from cemse.models.user import Profile, User, UserRole
from cemse.schemas.company import CompanyCreate, CompanyUpdate
from cemse.services.provisioning import (
    DEFAULT_MUNICIPALITIES,
    ensure_identity_user,
    ensure_municipality,
)
from cemse.utils.validators import require_fields, validate_email

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("name", "email", "municipalityId", "username", "password")

# Fields a partial update may clear by sending null
NULLABLE_FIELDS = (
    "description",
    "business_sector",
    "company_size",
    "founded_year",
    "website",
    "phone",
    "address",
)


def _company_query():
    return select(Company).options(
        selectinload(Company.municipality),
        selectinload(Company.creator),
    )


async def get_company(db: AsyncSession, company_id: str) -> Company:
    result = await db.execute(
        _company_query().where(Company.id == company_id).execution_options(populate_existing=True)
    )
    company = result.scalar_one_or_none()
    if company is None:
        raise NotFoundError("Company not found")
    return company


async def _check_municipality_reference(db: AsyncSession, municipality_id: str) -> None:
    if municipality_id in DEFAULT_MUNICIPALITIES:
        return
    result = await db.execute(select(Municipality.id).where(Municipality.id == municipality_id))
    if result.scalar_one_or_none() is None:
        raise ValidationError("Municipality not found", field="municipalityId")


async def _check_unique_credentials(
    db: AsyncSession,
    username: Optional[str] = None,
    email: Optional[str] = None,
    exclude_id: Optional[str] = None,
) -> None:
    """Friendly duplicate checks before the store gets a chance to reject the write."""
    if username:
        user_query = select(User.id).where(User.username == username)
        company_query = select(Company.id).where(Company.username == username)
        if exclude_id:
            user_query = user_query.where(User.id != exclude_id)
            company_query = company_query.where(Company.id != exclude_id)
        if (await db.execute(user_query)).first() or (await db.execute(company_query)).first():
            raise ConflictError("Username already exists", field="username")

    if email:
        email_query = select(Company.id).where(or_(Company.email == email, Company.login_email == email))
        if exclude_id:
            email_query = email_query.where(Company.id != exclude_id)
        if (await db.execute(email_query)).first():
            raise ConflictError("Email already exists", field="email")


async def create_company(db: AsyncSession, payload: CompanyCreate, identity: Identity) -> Company:
    """Create the login user and the company in one transaction.

    The user and the company share one id. Returns the company with its
    municipality and creator loaded.
    """
    require_fields(payload.model_dump(by_alias=True), REQUIRED_FIELDS)

    email = payload.email.strip()
    username = payload.username.strip()
    if not validate_email(email):
        raise ValidationError("email is invalid", field="email")

    await _check_municipality_reference(db, payload.municipality_id)
    await _check_unique_credentials(db, username=username, email=email)

    try:
        creator = await ensure_identity_user(db, identity)
        municipality = await ensure_municipality(db, payload.municipality_id)

        user = User(
            username=username,
            password_hash=get_password_hash(payload.password),
            role=UserRole.COMPANIES.value,
            is_active=True,
        )
        db.add(user)
        await db.flush()

        company = Company(
            id=user.id,
            name=payload.name.strip(),
            description=payload.description,
            business_sector=payload.business_sector,
            company_size=payload.company_size,
            founded_year=payload.founded_year,
            website=payload.website,
            email=email,
            phone=payload.phone,
            address=payload.address,
            username=username,
            login_email=email,
            password_hash=user.password_hash,
            municipality_id=municipality.id,
            created_by=creator.id if creator else None,
            is_active=True,
        )
        db.add(company)
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("company_create_conflict", username=username, error=str(exc.orig))
        raise conflict_from_integrity_error(exc)
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "company_created",
        company_id=company.id,
        username=username,
        municipality_id=municipality.id,
        created_by=identity.id,
    )
    return await get_company(db, company.id)


async def list_companies(db: AsyncSession) -> List[Tuple[Company, int, int]]:
    """Companies newest first, with total and active job offer counts."""
    counts = (
        select(
            JobOffer.company_id.label("company_id"),
            func.count(JobOffer.id).label("total"),
            func.sum(case((JobOffer.status == JobStatus.ACTIVE.value, 1), else_=0)).label("active"),
        )
        .group_by(JobOffer.company_id)
        .subquery()
    )
    result = await db.execute(
        _company_query()
        .add_columns(counts.c.total, counts.c.active)
        .outerjoin(counts, counts.c.company_id == Company.id)
        .order_by(Company.created_at.desc())
    )
    return [(company, int(total or 0), int(active or 0)) for company, total, active in result.all()]


async def update_company(db: AsyncSession, company_id: str, payload: CompanyUpdate) -> Company:
    company = await get_company(db, company_id)
    changes = payload.model_dump(exclude_unset=True)

    for field in ("name", "email", "username"):
        if field in changes and not (changes[field] or "").strip():
            raise ValidationError(f"{field} cannot be empty", field=field)

    email = changes["email"].strip() if changes.get("email") else None
    username = changes["username"].strip() if changes.get("username") else None
    if email and not validate_email(email):
        raise ValidationError("email is invalid", field="email")

    if changes.get("municipality_id"):
        await _check_municipality_reference(db, changes["municipality_id"])
    await _check_unique_credentials(db, username=username, email=email, exclude_id=company.id)

    try:
        if changes.get("municipality_id"):
            municipality = await ensure_municipality(db, changes["municipality_id"])
            company.municipality_id = municipality.id

        if "name" in changes:
            company.name = changes["name"].strip()
        for field in NULLABLE_FIELDS:
            if field in changes:
                setattr(company, field, changes[field])
        if changes.get("is_active") is not None:
            company.is_active = changes["is_active"]

        login_user = await db.get(User, company.id)
        if email:
            company.email = email
            company.login_email = email
        if username:
            company.username = username
            if login_user is not None:
                login_user.username = username
        if changes.get("password"):
            company.password_hash = get_password_hash(changes["password"])
            if login_user is not None:
                login_user.password_hash = company.password_hash
        if changes.get("is_active") is not None and login_user is not None:
            login_user.is_active = changes["is_active"]

        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise conflict_from_integrity_error(exc)
    except Exception:
        await db.rollback()
        raise

    logger.info("company_updated", company_id=company.id, fields=sorted(k for k in changes if k != "password"))
    return await get_company(db, company.id)


async def delete_company(db: AsyncSession, company_id: str) -> Tuple[str, int]:
    """Delete the company, its job offers and its login user atomically."""
    company = await get_company(db, company_id)
    name = company.name

    try:
        offers = await db.execute(delete(JobOffer).where(JobOffer.company_id == company_id))
        deleted_offers = offers.rowcount or 0
        await db.execute(delete(Company).where(Company.id == company_id))

        # The login user shares the company id
        await db.execute(delete(Profile).where(Profile.user_id == company_id))
        await db.execute(
            delete(User).where(User.id == company_id, User.role == UserRole.COMPANIES.value)
        )

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("company_deleted", company_id=company_id, deleted_job_offers=deleted_offers)
    return name, deleted_offers
