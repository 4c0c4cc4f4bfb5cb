"""Authentication endpoints."""

from datetime import datetime, timedelta, timezone

import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cemse.api.deps import get_current_identity, get_db, get_settings, get_token_verifier
from cemse.config import Settings
from cemse.core.exceptions import AuthorizationError, InvalidCredentialsError
from cemse.core.security import Identity, TokenVerifier, create_access_token, verify_password
from cemse.models.user import User, UserRole
from cemse.schemas.auth import (
    IdentityResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    UserResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


def _set_auth_cookie(response: Response, token: str, config: Settings) -> None:
    response.set_cookie(
        key=config.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=config.is_production,
        samesite="lax",
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    verifier: TokenVerifier = Depends(get_token_verifier),
    config: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    """Login with username and password; the signed token is set as a cookie."""
    result = await db.execute(select(User).where(User.username == request.username.strip()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(request.password, user.password_hash):
        logger.info("login_failed", username=request.username)
        raise InvalidCredentialsError()

    if not user.is_active:
        raise AuthorizationError("User account is inactive", user_role=user.role)

    expires_delta = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    token = create_access_token(
        {"sub": user.id, "role": user.role, "username": user.username},
        expires_delta=expires_delta,
        key_ring=verifier.key_ring,
    )
    _set_auth_cookie(response, token, config)
    logger.info("login_succeeded", user_id=user.id, role=user.role)

    user_data = UserResponse.model_validate(user)
    if user.role == UserRole.COMPANIES.value:
        user_data.company_id = user.id

    return LoginResponse(
        user=user_data,
        role=user.role,
        expires_at=datetime.now(timezone.utc) + expires_delta,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, config: Settings = Depends(get_settings)):
    """Clear the auth cookie."""
    response.delete_cookie(key=config.AUTH_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=MeResponse)
async def me(identity: Identity = Depends(get_current_identity)):
    """Get the identity behind the current cookie."""
    return MeResponse(
        user=IdentityResponse(
            id=identity.id,
            username=identity.username,
            role=identity.role,
            expires_at=identity.exp,
            is_development=identity.is_development,
        )
    )
