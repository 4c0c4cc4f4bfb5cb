"""Auto-provisioning of default municipalities, company rows and the development user."""

import pytest
from sqlalchemy import select

from cemse.core.exceptions import ValidationError
from cemse.core.security import DEVELOPMENT_USER_ID, Identity, development_identity
from cemse.models import Company, Municipality, User, UserRole
from cemse.services import provisioning
from cemse.services.provisioning import (
    DEFAULT_MUNICIPALITIES,
    PLACEHOLDER_COMPANY_NAME,
    ensure_company_for_identity,
    ensure_default_municipalities,
    ensure_identity_user,
    ensure_municipality,
)


async def test_default_municipality_is_synthesized_with_its_creator(db, count_rows):
    municipality = await ensure_municipality(db, "municipality_1")
    await db.commit()

    assert municipality.id == "municipality_1"
    assert municipality.name == "Municipio de Cochabamba"
    creator = await db.get(User, municipality.created_by)
    assert creator.role == UserRole.MUNICIPAL_GOVERNMENTS.value
    assert creator.username == "cochabamba_muni"
    assert await count_rows(Municipality) == 1


async def test_unknown_municipality_is_rejected(db, count_rows):
    with pytest.raises(ValidationError) as excinfo:
        await ensure_municipality(db, "municipality_99")

    assert excinfo.value.message == "Municipality not found"
    assert await count_rows(Municipality) == 0


async def test_seeding_is_idempotent(session_factory, count_rows):
    for _ in range(2):
        async with session_factory() as session:
            await ensure_default_municipalities(session)
            await session.commit()

    assert await count_rows(Municipality) == len(DEFAULT_MUNICIPALITIES)


async def test_losing_a_provisioning_race_reuses_the_winning_row(session_factory, count_rows, monkeypatch):
    # The winner commits first
    async with session_factory() as session:
        await ensure_municipality(session, "municipality_2")
        await session.commit()

    # The loser looked before the winner committed
    real_find = provisioning._find_municipality
    calls = []

    async def stale_find(db, municipality_id):
        calls.append(municipality_id)
        if len(calls) == 1:
            return None
        return await real_find(db, municipality_id)

    monkeypatch.setattr(provisioning, "_find_municipality", stale_find)

    async with session_factory() as session:
        municipality = await ensure_municipality(session, "municipality_2")
        await session.commit()

    assert municipality.id == "municipality_2"
    assert len(calls) == 2
    assert await count_rows(Municipality) == 1


async def test_company_is_provisioned_from_profile(db, create_user):
    user = await create_user(
        "empresa_perfil",
        UserRole.COMPANIES,
        profile={"company_name": "Panaderia Sol", "email": "sol@example.bo", "phone": "777"},
    )

    company = await ensure_company_for_identity(db, Identity(id=user.id, role=user.role))
    await db.commit()

    assert company.id == user.id
    assert company.name == "Panaderia Sol"
    assert company.email == "sol@example.bo"
    assert company.phone == "777"
    assert company.username == "empresa_perfil"
    assert company.municipality_id == "municipality_1"


async def test_company_without_profile_gets_placeholders(db, create_user, count_rows):
    user = await create_user("sin_perfil", UserRole.COMPANIES)
    identity = Identity(id=user.id, role=user.role)

    company = await ensure_company_for_identity(db, identity)
    await db.commit()
    again = await ensure_company_for_identity(db, identity)

    assert company.name == PLACEHOLDER_COMPANY_NAME
    assert company.email == "sin_perfil@cemse.dev"
    assert again.id == company.id
    assert await count_rows(Company) == 1


async def test_development_identity_is_backed_by_a_user_row(db):
    user = await ensure_identity_user(db, development_identity())
    await db.commit()

    assert user.id == DEVELOPMENT_USER_ID
    assert user.role == UserRole.SUPERADMIN.value
    result = await db.execute(select(User).where(User.id == DEVELOPMENT_USER_ID))
    assert result.scalar_one() is not None


async def test_real_identities_are_never_provisioned(db):
    assert await ensure_identity_user(db, Identity(id="ghost", role="SUPERADMIN")) is None
