"""
Entity auto-provisioning.

Some writes reference rows that may not exist yet: one of the default
municipalities, the login-backed company of a COMPANIES user, or the user
behind the development identity. The helpers here create those rows inside
the caller's transaction, each in its own savepoint, so that a concurrent
request inserting the same row first only costs a re-read.
"""

import secrets
from typing import Dict, List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cemse.config import settings
from cemse.core.exceptions import ValidationError, conflict_from_integrity_error
from cemse.core.security import DEVELOPMENT_USER_ID, DEVELOPMENT_USERNAME, Identity, get_password_hash
from cemse.models.company import Company
from cemse.models.municipality import Municipality
from cemse.models.user import User, UserRole

logger = structlog.get_logger(__name__)

PLACEHOLDER_COMPANY_NAME = "Mi Empresa"

# Well-known municipality ids that may be synthesized on demand
DEFAULT_MUNICIPALITIES: Dict[str, Dict[str, str]] = {
    "municipality_1": {
        "name": "Municipio de Cochabamba",
        "department": "Cochabamba",
        "region": "Valle",
        "address": "Plaza Principal 14 de Septiembre",
        "website": "https://cochabamba.gob.bo",
        "email": "info@cochabamba.gob.bo",
        "phone": "+591 4 4222222",
        "primary_color": "#1E40AF",
        "secondary_color": "#F59E0B",
        "username": "cochabamba_muni",
    },
    "municipality_2": {
        "name": "Municipio de La Paz",
        "department": "La Paz",
        "region": "Altiplano",
        "address": "Plaza Murillo",
        "website": "https://lapaz.gob.bo",
        "email": "info@lapaz.gob.bo",
        "phone": "+591 2 2200000",
        "primary_color": "#DC2626",
        "secondary_color": "#FCD34D",
        "username": "lapaz_muni",
    },
}


def _unusable_password_hash() -> str:
    return get_password_hash(secrets.token_urlsafe(32))


async def _find_municipality(db: AsyncSession, municipality_id: str) -> Optional[Municipality]:
    result = await db.execute(select(Municipality).where(Municipality.id == municipality_id))
    return result.scalar_one_or_none()


async def _find_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def _find_company(db: AsyncSession, company_id: str) -> Optional[Company]:
    result = await db.execute(select(Company).where(Company.id == company_id))
    return result.scalar_one_or_none()


async def _ensure_catalog_user(db: AsyncSession, defaults: Dict[str, str]) -> User:
    """The municipal user a synthesized municipality is created by."""
    user = await _find_user_by_username(db, defaults["username"])
    if user is not None:
        return user

    user = User(
        username=defaults["username"],
        password_hash=_unusable_password_hash(),
        role=UserRole.MUNICIPAL_GOVERNMENTS.value,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    return user


async def ensure_municipality(db: AsyncSession, municipality_id: str) -> Municipality:
    """Return the municipality, synthesizing it from the default catalog if absent.

    Raises:
        ValidationError: the id is unknown and not in the default catalog
    """
    municipality = await _find_municipality(db, municipality_id)
    if municipality is not None:
        return municipality

    defaults = DEFAULT_MUNICIPALITIES.get(municipality_id)
    if defaults is None:
        raise ValidationError("Municipality not found", field="municipalityId")

    try:
        async with db.begin_nested():
            creator = await _ensure_catalog_user(db, defaults)
            municipality = Municipality(
                id=municipality_id,
                created_by=creator.id,
                institution_type="MUNICIPALITY",
                is_active=True,
                **{k: v for k, v in defaults.items() if k != "username"},
            )
            db.add(municipality)
            await db.flush()
    except IntegrityError:
        # Another transaction inserted the same default row first
        logger.info("municipality_provision_race", municipality_id=municipality_id)
        municipality = await _find_municipality(db, municipality_id)
        if municipality is None:
            raise
        return municipality

    logger.info("municipality_provisioned", municipality_id=municipality_id, creator_id=creator.id)
    return municipality


async def ensure_default_municipalities(db: AsyncSession) -> List[Municipality]:
    """Idempotently seed every catalog municipality."""
    return [await ensure_municipality(db, municipality_id) for municipality_id in DEFAULT_MUNICIPALITIES]


async def ensure_identity_user(db: AsyncSession, identity: Identity) -> Optional[User]:
    """Back the development identity with a real user row so foreign keys resolve."""
    result = await db.execute(select(User).where(User.id == identity.id))
    user = result.scalar_one_or_none()
    if user is not None or not identity.is_development:
        return user

    try:
        async with db.begin_nested():
            user = User(
                id=DEVELOPMENT_USER_ID,
                username=DEVELOPMENT_USERNAME,
                password_hash=_unusable_password_hash(),
                role=UserRole.SUPERADMIN.value,
                is_active=True,
            )
            db.add(user)
            await db.flush()
    except IntegrityError:
        result = await db.execute(select(User).where(User.id == identity.id))
        user = result.scalar_one_or_none()
        if user is None:
            raise
        return user

    logger.warning("development_user_provisioned", user_id=user.id)
    return user


async def ensure_company_for_identity(db: AsyncSession, identity: Identity) -> Company:
    """Return the company of a COMPANIES user, creating it under the user's own id."""
    company = await _find_company(db, identity.id)
    if company is not None:
        return company

    result = await db.execute(
        select(User).options(selectinload(User.profile)).where(User.id == identity.id)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise ValidationError("Company not found", field="companyId")

    profile = user.profile
    municipality = await ensure_municipality(db, settings.DEFAULT_MUNICIPALITY_ID)
    email = (profile.email if profile else None) or f"{user.username}@{settings.PLACEHOLDER_EMAIL_DOMAIN}"

    try:
        async with db.begin_nested():
            company = Company(
                id=user.id,
                name=(profile and (profile.company_name or profile.first_name)) or PLACEHOLDER_COMPANY_NAME,
                description=profile.company_description if profile else None,
                business_sector=profile.business_sector if profile else None,
                website=profile.website if profile else None,
                phone=profile.phone if profile else None,
                address=profile.address if profile else None,
                email=email,
                login_email=email,
                username=user.username,
                password_hash=user.password_hash,
                municipality_id=municipality.id,
                created_by=user.id,
                is_active=True,
            )
            db.add(company)
            await db.flush()
    except IntegrityError as exc:
        company = await _find_company(db, identity.id)
        if company is None:
            raise conflict_from_integrity_error(exc)
        return company

    logger.info("company_provisioned", company_id=company.id, from_profile=profile is not None)
    return company
