"""Database models."""

# Import all models in dependency order to ensure proper relationship initialization

# Base models (no foreign keys)
from cemse.models.user import Profile, User, UserRole

# Models with foreign keys to base models
from cemse.models.municipality import Municipality
from cemse.models.company import Company

# Models with foreign keys to other models
from cemse.models.job_offer import (
    ContractType,
    ExperienceLevel,
    JobOffer,
    JobStatus,
    WorkModality,
)

# Export all models
__all__ = [
    "User",
    "UserRole",
    "Profile",
    "Municipality",
    "Company",
    "JobOffer",
    "ContractType",
    "ExperienceLevel",
    "JobStatus",
    "WorkModality",
]
