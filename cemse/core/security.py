"""Security utilities: password hashing, JWT signing keys, credential verification."""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

import structlog
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cemse.config import AuthMode, RetiredKey, Settings, settings
from cemse.models.user import User, UserRole

logger = structlog.get_logger(__name__)

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

MOCK_TOKEN_PREFIX = "mock-dev-token-"
LEGACY_TOKEN_PREFIX = "auth-token-"
# auth-token-{role}-{userId}-{timestampMs}; user ids may themselves contain dashes
LEGACY_TOKEN_PATTERN = re.compile(
    r"^auth-token-(?P<role>[A-Za-z_]+)-(?P<user_id>.+)-(?P<issued_at>\d+)$"
)

DEVELOPMENT_USER_ID = "mock-user-id"
DEVELOPMENT_USERNAME = "dev_superadmin"


def get_password_hash(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class Identity:
    """Normalized principal behind a verified credential."""

    id: str
    role: str
    username: Optional[str] = None
    exp: Optional[datetime] = None
    is_development: bool = False


@dataclass
class Verification:
    """Outcome of checking a credential. No identity means unauthenticated."""

    identity: Optional[Identity] = None
    expired: bool = False


def development_identity() -> Identity:
    return Identity(
        id=DEVELOPMENT_USER_ID,
        role=UserRole.SUPERADMIN.value,
        username=DEVELOPMENT_USERNAME,
        exp=_utcnow() + timedelta(hours=1),
        is_development=True,
    )


class KeyRing:
    """Signing keys addressed by the ``kid`` token header.

    New tokens are always signed with the active key. Retired keys keep
    verifying old tokens until their ``retire_at`` instant.
    """

    def __init__(
        self,
        active_kid: str,
        active_secret: str,
        algorithm: str = "HS256",
        retired: Optional[Dict[str, RetiredKey]] = None,
    ):
        self.active_kid = active_kid
        self.active_secret = active_secret
        self.algorithm = algorithm
        self.retired = dict(retired or {})

    @classmethod
    def from_settings(cls, config: Settings) -> "KeyRing":
        return cls(
            active_kid=config.JWT_KEY_ID,
            active_secret=config.SECRET_KEY,
            algorithm=config.ALGORITHM,
            retired=config.JWT_RETIRED_KEYS,
        )

    def signing_key(self) -> Tuple[str, str]:
        return self.active_kid, self.active_secret

    def verification_key(self, kid: Optional[str], now: Optional[datetime] = None) -> Optional[str]:
        if kid is None or kid == self.active_kid:
            return self.active_secret

        retired = self.retired.get(kid)
        if retired is None:
            return None

        if _as_utc(retired.retire_at) <= (now or _utcnow()):
            logger.info("retired_signing_key_rejected", kid=kid)
            return None
        return retired.secret


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    key_ring: Optional[KeyRing] = None,
) -> str:
    """Create JWT access token signed with the active key."""
    key_ring = key_ring or KeyRing.from_settings(settings)
    to_encode = data.copy()
    if expires_delta:
        expire = _utcnow() + expires_delta
    else:
        expire = _utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    kid, secret = key_ring.signing_key()
    return jwt.encode(to_encode, secret, algorithm=key_ring.algorithm, headers={"kid": kid})


async def _load_active_user(db: AsyncSession, user_id: Optional[str]) -> Optional[User]:
    if not user_id:
        return None
    result = await db.execute(select(User).where(User.id == str(user_id)))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        return None
    return user


class TokenVerifier:
    """Turns the auth cookie value into an Identity.

    Never raises for bad credentials; callers decide on the HTTP status.
    """

    def __init__(
        self,
        mode: AuthMode,
        key_ring: KeyRing,
        accept_legacy: bool = True,
        legacy_max_age: timedelta = timedelta(hours=24),
    ):
        self.mode = mode
        self.key_ring = key_ring
        self.accept_legacy = accept_legacy
        self.legacy_max_age = legacy_max_age

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenVerifier":
        return cls(
            mode=config.AUTH_MODE,
            key_ring=KeyRing.from_settings(config),
            accept_legacy=config.ACCEPT_LEGACY_TOKENS,
            legacy_max_age=timedelta(hours=config.LEGACY_TOKEN_MAX_AGE_HOURS),
        )

    async def verify(self, token: Optional[str], db: AsyncSession) -> Verification:
        if not token:
            return Verification()

        if self.mode == AuthMode.DEVELOPMENT and token.startswith(MOCK_TOKEN_PREFIX):
            return Verification(identity=development_identity())

        if token.startswith(LEGACY_TOKEN_PREFIX):
            if not self.accept_legacy:
                return Verification()
            return await self._verify_legacy(token, db)

        return await self._verify_signed(token, db)

    async def _verify_legacy(self, token: str, db: AsyncSession) -> Verification:
        match = LEGACY_TOKEN_PATTERN.match(token)
        if not match:
            return Verification()

        try:
            issued_at = datetime.fromtimestamp(int(match.group("issued_at")) / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return Verification()
        expires_at = issued_at + self.legacy_max_age
        if expires_at <= _utcnow():
            return Verification(expired=True)

        user = await _load_active_user(db, match.group("user_id"))
        if user is None:
            return Verification()

        # Role comes from the database, never from the token string
        return Verification(
            identity=Identity(id=user.id, role=user.role, username=user.username, exp=expires_at)
        )

    async def _verify_signed(self, token: str, db: AsyncSession) -> Verification:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            return Verification()

        key = self.key_ring.verification_key(header.get("kid"))
        if key is None:
            return Verification()

        try:
            payload = jwt.decode(
                token,
                key,
                algorithms=[self.key_ring.algorithm],
                options={"require_exp": True},
            )
        except ExpiredSignatureError:
            return Verification(expired=True)
        except JWTError:
            return Verification()

        user = await _load_active_user(db, payload.get("sub") or payload.get("id"))
        if user is None:
            return Verification()

        exp = payload.get("exp")
        return Verification(
            identity=Identity(
                id=user.id,
                role=user.role,
                username=user.username,
                exp=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
            )
        )
