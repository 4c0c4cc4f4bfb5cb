"""Authentication schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from cemse.schemas.base import CamelModel, IsoDatetime


class LoginRequest(BaseModel):
    """Login request schema."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """User response schema."""

    id: str
    username: str
    role: str
    is_active: bool
    company_id: Optional[str] = None
    created_at: IsoDatetime


class LoginResponse(CamelModel):
    """Login response schema. The token itself travels in the auth cookie."""

    success: bool = True
    user: UserResponse
    role: str
    expires_at: IsoDatetime


class IdentityResponse(CamelModel):
    id: str
    username: Optional[str] = None
    role: str
    expires_at: Optional[IsoDatetime] = None
    is_development: bool = False


class MeResponse(CamelModel):
    user: IdentityResponse


class MessageResponse(BaseModel):
    message: str

