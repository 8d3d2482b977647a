"""Patient model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from homecare.database import Base


class Patient(Base):
    """Represents a patient profile linked to an auth user."""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("auth_users.id"), unique=True, nullable=False)
    full_name = Column(String(100), nullable=False)
    address = Column(String(200), nullable=False)
    phone = Column(String, nullable=False)
    email = Column(String, index=True, nullable=False)
    birth_date = Column(Date, nullable=False)

    appointments = relationship("Appointment", back_populates="patient", cascade="all, delete")
