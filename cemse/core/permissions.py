"""Role allow-lists for sensitive operations."""

from typing import Dict, FrozenSet

import structlog

from cemse.core.exceptions import AuthorizationError
from cemse.core.security import Identity
from cemse.models.user import UserRole

logger = structlog.get_logger(__name__)

_COMPANY_MANAGERS = frozenset(
    {UserRole.SUPERADMIN, UserRole.MUNICIPAL_GOVERNMENTS, UserRole.INSTRUCTOR}
)
_JOB_PUBLISHERS = frozenset({UserRole.SUPERADMIN, UserRole.COMPANIES})

OPERATION_ROLES: Dict[str, FrozenSet[UserRole]] = {
    "company:create": frozenset({UserRole.SUPERADMIN, UserRole.MUNICIPAL_GOVERNMENTS}),
    "company:read": _COMPANY_MANAGERS,
    "company:update": _COMPANY_MANAGERS,
    "company:delete": frozenset({UserRole.SUPERADMIN}),
    "joboffer:create": _JOB_PUBLISHERS,
    "joboffer:update": _JOB_PUBLISHERS,
    "joboffer:delete": _JOB_PUBLISHERS,
    "municipality:read": frozenset({UserRole.SUPERADMIN, UserRole.MUNICIPAL_GOVERNMENTS}),
}


def allowed_roles(operation: str) -> FrozenSet[UserRole]:
    # Unknown operations have an empty allow-list and are always denied
    return OPERATION_ROLES.get(operation, frozenset())


def is_allowed(role: str, operation: str) -> bool:
    return role in {r.value for r in allowed_roles(operation)}


def authorize(identity: Identity, operation: str) -> None:
    """Raise AuthorizationError unless the identity may perform the operation."""
    if identity.is_development:
        logger.warning("development_identity_bypass", operation=operation)
        return

    if is_allowed(identity.role, operation):
        return

    required = [r.value for r in allowed_roles(operation)]
    logger.info("operation_denied", operation=operation, role=identity.role, required=required)
    raise AuthorizationError(
        f"Insufficient permissions for {operation}",
        user_role=identity.role,
        allowed_roles=required,
    )
