"""
API Dependencies
Common dependencies for API endpoints (authentication, authorization, etc.)
"""

from typing import AsyncGenerator, Optional

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cemse.config import Settings
from cemse.core.exceptions import AuthenticationError
from cemse.core.permissions import authorize
from cemse.core.security import Identity, TokenVerifier
from cemse.db.session import get_db as get_db_session


# Re-export get_db for convenience
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async for session in get_db_session():
        yield session


def get_settings(request: Request) -> Settings:
    """Settings the running app was built with."""
    return request.app.state.settings


def get_token_verifier(request: Request) -> TokenVerifier:
    """The verifier built once at startup for the configured AuthMode."""
    return request.app.state.token_verifier


async def get_current_identity(
    request: Request,
    config: Settings = Depends(get_settings),
    verifier: TokenVerifier = Depends(get_token_verifier),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """
    Get the authenticated identity from the auth cookie
    """
    token = request.cookies.get(config.AUTH_COOKIE_NAME)
    verification = await verifier.verify(token, db)
    if verification.identity is None:
        raise AuthenticationError(expired=verification.expired)

    structlog.contextvars.bind_contextvars(
        user_id=verification.identity.id,
        role=verification.identity.role,
    )
    return verification.identity


async def get_optional_identity(
    request: Request,
    config: Settings = Depends(get_settings),
    verifier: TokenVerifier = Depends(get_token_verifier),
    db: AsyncSession = Depends(get_db),
) -> Optional[Identity]:
    """
    Identity if a valid cookie is present, None otherwise (public endpoints)
    """
    token = request.cookies.get(config.AUTH_COOKIE_NAME)
    verification = await verifier.verify(token, db)
    return verification.identity


def require_operation(operation: str):
    """Dependency to check the identity against the operation's allow-list."""

    async def operation_checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        authorize(identity, operation)
        return identity

    return operation_checker
