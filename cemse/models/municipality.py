"""Municipality model."""

from sqlalchemy import Boolean, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from cemse.db.base import Base


class Municipality(Base):
    """Municipal government (or other institution) that companies belong to."""

    __tablename__ = "municipalities"

    name = Column(String(255), nullable=False, index=True)
    department = Column(String(150), nullable=False)
    region = Column(String(150))
    address = Column(String(500))
    website = Column(String(500))
    email = Column(String(255))
    phone = Column(String(50))
    institution_type = Column(String(40), default="MUNICIPALITY", nullable=False)

    # Branding
    primary_color = Column(String(20), default="#1E40AF")
    secondary_color = Column(String(20), default="#F59E0B")

    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    # Relationships
    creator = relationship("User", foreign_keys=[created_by])
    companies = relationship("Company", back_populates="municipality")

    def __repr__(self):
        return f"<Municipality {self.name}>"
