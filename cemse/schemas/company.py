"""Company schemas."""

from typing import List, Optional

from pydantic import Field

from cemse.schemas.base import CamelModel, IsoDatetime


class MunicipalityBrief(CamelModel):
    id: str
    name: str
    department: str


class CreatorBrief(CamelModel):
    id: str
    username: str
    role: str


class CompanyCreate(CamelModel):
    """Company registration payload. Required fields are checked by the service."""

    name: Optional[str] = None
    email: Optional[str] = None
    municipality_id: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    description: Optional[str] = None
    business_sector: Optional[str] = None
    company_size: Optional[str] = None
    founded_year: Optional[int] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class CompanyUpdate(CamelModel):
    """Partial company update; omitted fields keep their value."""

    name: Optional[str] = None
    email: Optional[str] = None
    municipality_id: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    description: Optional[str] = None
    business_sector: Optional[str] = None
    company_size: Optional[str] = None
    founded_year: Optional[int] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


class CompanyResponse(CamelModel):
    """Company as returned by every read. Never carries a password."""

    id: str
    name: str
    description: Optional[str] = None
    business_sector: Optional[str] = None
    company_size: Optional[str] = None
    founded_year: Optional[int] = None
    website: Optional[str] = None
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    username: str
    login_email: str
    municipality_id: str
    municipality: Optional[MunicipalityBrief] = None
    creator: Optional[CreatorBrief] = None
    created_at: IsoDatetime
    updated_at: IsoDatetime


class CompanyCredentialsReveal(CompanyResponse):
    """One-shot creation response.

    Echoes the plaintext password chosen at registration so an administrator
    can hand the credentials over. Only the create endpoint returns this.
    """

    password: str


class CompanyListItem(CompanyResponse):
    job_offers_count: int = 0
    active_job_offers: int = 0


class CompanyListMetadata(CamelModel):
    total_active: int
    total_inactive: int
    total_job_offers: int


class CompanyListResponse(CamelModel):
    companies: List[CompanyListItem] = Field(default_factory=list)
    total: int
    metadata: CompanyListMetadata


class CompanyDeleteResponse(CamelModel):
    message: str
    company_name: str
    deleted_job_offers: int
