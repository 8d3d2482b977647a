"""Availability model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Integer, Time
from sqlalchemy.orm import relationship
from homecare.database import Base


class Availability(Base):
    """Represents one worker's offer of time on one calendar day."""
    __tablename__ = "availabilities"

    id = Column(Integer, primary_key=True)
    healthcare_worker_id = Column(Integer, ForeignKey("healthcare_workers.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    # null start/end means the whole day is offered
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)

    healthcare_worker = relationship("HealthcareWorker", back_populates="availabilities")
    appointment = relationship("Appointment", back_populates="availability", uselist=False, cascade="all, delete")

    @property
    def is_booked(self) -> bool:
        return self.appointment is not None
