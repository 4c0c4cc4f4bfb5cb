"""User and profile models."""

from enum import Enum

from sqlalchemy import Boolean, Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from cemse.db.base import Base


class UserRole(str, Enum):
    """User roles."""

    YOUTH = "YOUTH"
    ADOLESCENTS = "ADOLESCENTS"
    COMPANIES = "COMPANIES"
    MUNICIPAL_GOVERNMENTS = "MUNICIPAL_GOVERNMENTS"
    TRAINING_CENTERS = "TRAINING_CENTERS"
    NGOS_AND_FOUNDATIONS = "NGOS_AND_FOUNDATIONS"
    INSTRUCTOR = "INSTRUCTOR"
    SUPERADMIN = "SUPERADMIN"


class User(Base):
    """User model for authentication."""

    __tablename__ = "users"

    username = Column(String(150), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(40), nullable=False, default=UserRole.YOUTH.value)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.username} ({self.role})>"


class Profile(Base):
    """Profile-like data attached to a user."""

    __tablename__ = "profiles"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name = Column(String(150))
    last_name = Column(String(150))
    email = Column(String(255))
    phone = Column(String(50))

    # Company users fill these in before their company row exists
    company_name = Column(String(255))
    company_description = Column(Text)
    business_sector = Column(String(150))
    website = Column(String(500))
    address = Column(String(500))

    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<Profile {self.user_id}>"
