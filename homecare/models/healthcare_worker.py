"""Healthcare worker model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from homecare.database import Base


class HealthcareWorker(Base):
    """Represents a healthcare worker profile linked to an auth user."""
    __tablename__ = "healthcare_workers"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("auth_users.id"), unique=True, nullable=False)
    full_name = Column(String(100), nullable=False)
    phone = Column(String, nullable=False)
    email = Column(String, index=True, nullable=False)
    position = Column(String, nullable=False)

    availabilities = relationship("Availability", back_populates="healthcare_worker", cascade="all, delete")
