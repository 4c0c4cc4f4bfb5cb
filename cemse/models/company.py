"""Company model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from cemse.db.base import Base


class Company(Base):
    """Company model.

    A company shares its id with the COMPANIES-role user it logs in as.
    """

    __tablename__ = "companies"

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text)
    business_sector = Column(String(150))
    company_size = Column(String(50))  # MICRO, SMALL, MEDIUM, LARGE
    founded_year = Column(Integer)
    website = Column(String(500))
    email = Column(String(255), nullable=False)
    phone = Column(String(50))
    address = Column(String(500))

    # Login credentials
    username = Column(String(150), unique=True, index=True, nullable=False)
    login_email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    municipality_id = Column(String(36), ForeignKey("municipalities.id"), nullable=False, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    municipality = relationship("Municipality", back_populates="companies")
    creator = relationship("User", foreign_keys=[created_by])
    job_offers = relationship("JobOffer", back_populates="company", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Company {self.name}>"
