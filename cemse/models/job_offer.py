"""Job offer model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from cemse.db.base import Base, JSONList


class ContractType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"
    VOLUNTEER = "VOLUNTEER"
    FREELANCE = "FREELANCE"


class WorkModality(str, Enum):
    ON_SITE = "ON_SITE"
    REMOTE = "REMOTE"
    HYBRID = "HYBRID"


class ExperienceLevel(str, Enum):
    NO_EXPERIENCE = "NO_EXPERIENCE"
    ENTRY_LEVEL = "ENTRY_LEVEL"
    MID_LEVEL = "MID_LEVEL"
    SENIOR_LEVEL = "SENIOR_LEVEL"
    EXECUTIVE = "EXECUTIVE"


class JobStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    CLOSED = "CLOSED"
    DRAFT = "DRAFT"


class JobOffer(Base):
    """Job offer published by a company."""

    __tablename__ = "job_offers"

    title = Column(String(500), nullable=False, index=True)
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=False)
    location = Column(String(255), nullable=False)
    category = Column(String(150), index=True)

    # Classification
    contract_type = Column(String(30), nullable=False)
    work_schedule = Column(String(255), nullable=False)
    work_modality = Column(String(30), nullable=False)
    experience_level = Column(String(30), nullable=False)
    municipality = Column(String(255), nullable=False, index=True)
    department = Column(String(150), default="Cochabamba")

    # Array fields
    skills_required = Column(JSONList, default=list)
    desired_skills = Column(JSONList, default=list)
    benefits = Column(JSONList, default=list)
    images = Column(JSONList, default=list)

    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_currency = Column(String(10), default="BOB")
    application_deadline = Column(DateTime, nullable=True)

    # Status
    status = Column(String(20), default=JobStatus.ACTIVE.value, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    featured = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Stats
    view_count = Column(Integer, default=0)
    application_count = Column(Integer, default=0)

    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)

    # Relationships
    company = relationship("Company", back_populates="job_offers")

    def __repr__(self):
        return f"<JobOffer {self.title} at {self.company_id}>"
