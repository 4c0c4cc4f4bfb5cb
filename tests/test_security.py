"""Credential verification across the three accepted token formats."""

import time
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from cemse.config import AuthMode, RetiredKey
from cemse.core.security import (
    DEVELOPMENT_USER_ID,
    KeyRing,
    TokenVerifier,
    create_access_token,
    get_password_hash,
    verify_password,
)
from cemse.models import UserRole


def _key_ring(**retired) -> KeyRing:
    return KeyRing(active_kid="k2", active_secret="active-secret", retired=retired)


def _verifier(mode=AuthMode.PRODUCTION, key_ring=None, **kwargs) -> TokenVerifier:
    return TokenVerifier(mode=mode, key_ring=key_ring or _key_ring(), **kwargs)


def _legacy_token(role: str, user_id: str, issued_at: datetime) -> str:
    return f"auth-token-{role}-{user_id}-{int(issued_at.timestamp() * 1000)}"


def test_password_hash_round_trip():
    hashed = get_password_hash("S3cure-pass")
    assert hashed != "S3cure-pass"
    assert verify_password("S3cure-pass", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("S3cure-pass", None)


async def test_signed_token_resolves_identity_with_role_from_database(db, create_user):
    user = await create_user("ana", UserRole.INSTRUCTOR)
    key_ring = _key_ring()
    token = create_access_token({"sub": user.id, "role": "SUPERADMIN"}, key_ring=key_ring)

    verification = await _verifier(key_ring=key_ring).verify(token, db)

    assert verification.identity is not None
    assert verification.identity.id == user.id
    assert verification.identity.role == UserRole.INSTRUCTOR.value
    assert verification.identity.exp is not None
    assert not verification.identity.is_development


async def test_signed_token_carries_kid_header():
    token = create_access_token({"sub": "someone"}, key_ring=_key_ring())
    assert jwt.get_unverified_header(token)["kid"] == "k2"


async def test_frontend_style_id_claim_is_accepted(db, create_user):
    user = await create_user("beto", UserRole.COMPANIES)
    token = jwt.encode(
        {"id": user.id, "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        "active-secret",
        algorithm="HS256",
    )

    verification = await _verifier().verify(token, db)

    assert verification.identity.id == user.id


async def test_signed_token_without_exp_is_rejected(db, create_user):
    user = await create_user("bruno", UserRole.SUPERADMIN)
    token = jwt.encode({"sub": user.id}, "active-secret", algorithm="HS256", headers={"kid": "k2"})

    verification = await _verifier().verify(token, db)

    assert verification.identity is None
    assert not verification.expired


async def test_token_signed_with_retired_key_verifies_until_retirement(db, create_user):
    user = await create_user("carla", UserRole.SUPERADMIN)
    old_ring = KeyRing(active_kid="k1", active_secret="old-secret")
    token = create_access_token({"sub": user.id}, key_ring=old_ring)

    still_valid = _key_ring(
        k1=RetiredKey(secret="old-secret", retire_at=datetime.now(timezone.utc) + timedelta(days=1))
    )
    retired = _key_ring(
        k1=RetiredKey(secret="old-secret", retire_at=datetime.now(timezone.utc) - timedelta(seconds=1))
    )

    assert (await _verifier(key_ring=still_valid).verify(token, db)).identity.id == user.id
    assert (await _verifier(key_ring=retired).verify(token, db)).identity is None


async def test_unknown_kid_is_rejected(db, create_user):
    user = await create_user("dario")
    token = create_access_token(
        {"sub": user.id}, key_ring=KeyRing(active_kid="rogue", active_secret="active-secret")
    )

    assert (await _verifier().verify(token, db)).identity is None


async def test_bad_signature_is_rejected(db, create_user):
    user = await create_user("elena")
    token = create_access_token({"sub": user.id}, key_ring=KeyRing(active_kid="k2", active_secret="other"))

    verification = await _verifier().verify(token, db)

    assert verification.identity is None
    assert not verification.expired


async def test_expired_signed_token_is_flagged(db, create_user):
    user = await create_user("fabio")
    key_ring = _key_ring()
    token = create_access_token({"sub": user.id}, expires_delta=timedelta(seconds=-10), key_ring=key_ring)

    verification = await _verifier(key_ring=key_ring).verify(token, db)

    assert verification.identity is None
    assert verification.expired


async def test_inactive_or_missing_user_is_rejected(db, create_user):
    inactive = await create_user("gina", is_active=False)
    key_ring = _key_ring()

    for subject in (inactive.id, "no-such-user"):
        token = create_access_token({"sub": subject}, key_ring=key_ring)
        assert (await _verifier(key_ring=key_ring).verify(token, db)).identity is None


async def test_legacy_token_role_comes_from_database(db, create_user):
    user = await create_user("hugo", UserRole.COMPANIES)
    token = _legacy_token("SUPERADMIN", user.id, datetime.now(timezone.utc))

    verification = await _verifier().verify(token, db)

    assert verification.identity.id == user.id
    assert verification.identity.role == UserRole.COMPANIES.value


async def test_legacy_token_expires_after_max_age(db, create_user):
    user = await create_user("ines")
    token = _legacy_token("SUPERADMIN", user.id, datetime.now(timezone.utc) - timedelta(hours=25))

    verification = await _verifier(legacy_max_age=timedelta(hours=24)).verify(token, db)

    assert verification.identity is None
    assert verification.expired


async def test_legacy_tokens_can_be_disabled(db, create_user):
    user = await create_user("juan")
    token = f"auth-token-SUPERADMIN-{user.id}-{int(time.time() * 1000)}"

    assert (await _verifier(accept_legacy=False).verify(token, db)).identity is None


async def test_mock_token_only_recognized_in_development(db):
    production = await _verifier(AuthMode.PRODUCTION).verify("mock-dev-token-123", db)
    development = await _verifier(AuthMode.DEVELOPMENT).verify("mock-dev-token-123", db)

    assert production.identity is None
    assert development.identity.id == DEVELOPMENT_USER_ID
    assert development.identity.role == UserRole.SUPERADMIN.value
    assert development.identity.is_development


@pytest.mark.parametrize("token", [None, "", "garbage", "auth-token-bad", "a.b.c"])
async def test_unrecognized_credentials_yield_no_identity(db, token):
    verification = await _verifier().verify(token, db)
    assert verification.identity is None
    assert not verification.expired
