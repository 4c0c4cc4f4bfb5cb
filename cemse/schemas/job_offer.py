"""Job offer schemas."""

from typing import List, Optional

from pydantic import Field

from cemse.schemas.base import CamelModel, IsoDatetime


class CompanyBrief(CamelModel):
    """Brief company information."""

    id: str
    name: str
    email: str


class JobOfferResponse(CamelModel):
    id: str
    title: str
    description: str
    requirements: str
    location: str
    category: Optional[str] = None
    contract_type: str
    work_schedule: str
    work_modality: str
    experience_level: str
    municipality: str
    department: Optional[str] = None
    skills_required: List[str] = Field(default_factory=list)
    desired_skills: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_currency: Optional[str] = None
    application_deadline: Optional[IsoDatetime] = None
    status: str
    is_active: bool
    featured: bool = False
    view_count: int = 0
    application_count: int = 0
    published_at: IsoDatetime
    company_id: str
    company: Optional[CompanyBrief] = None
    created_at: IsoDatetime
    updated_at: IsoDatetime


class JobOfferListResponse(CamelModel):
    """Response for job offer list."""

    job_offers: List[JobOfferResponse]
    total: int
