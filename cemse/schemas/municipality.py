"""Municipality schemas."""

from typing import List, Optional

from cemse.schemas.base import CamelModel, IsoDatetime
from cemse.schemas.company import CreatorBrief


class MunicipalityResponse(CamelModel):
    id: str
    name: str
    department: str
    region: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    institution_type: str
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    is_active: bool
    creator: Optional[CreatorBrief] = None
    created_at: IsoDatetime
    updated_at: IsoDatetime


class MunicipalityListResponse(CamelModel):
    municipalities: List[MunicipalityResponse]
