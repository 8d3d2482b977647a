"""Appointment model definitions."""

import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Time
from sqlalchemy.orm import relationship
from homecare.database import Base

TASK_PENDING = "Pending"


class AppointmentStatus(str, enum.Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"
    cancelled = "Cancelled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Appointment(Base):
    """Represents a patient's booking of one availability."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    # unique: at most one appointment per availability
    availability_id = Column(Integer, ForeignKey("availabilities.id"), unique=True, nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    status = Column(
        Enum(
            AppointmentStatus,
            name="appointment_status",
            native_enum=False,
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        default=AppointmentStatus.pending,
        nullable=False,
    )
    service_type = Column(String, nullable=False, default="")
    visit_note = Column(String, nullable=True)
    requested_local_time = Column(DateTime, nullable=True)
    selected_start_time = Column(Time, nullable=True)
    selected_end_time = Column(Time, nullable=True)

    availability = relationship("Availability", back_populates="appointment")
    patient = relationship("Patient", back_populates="appointments")
    tasks = relationship(
        "AppointmentTask",
        back_populates="appointment",
        cascade="all, delete-orphan",
        order_by="AppointmentTask.id",
    )


class AppointmentTask(Base):
    """Represents one task to carry out during an appointment."""
    __tablename__ = "appointment_tasks"

    id = Column(Integer, primary_key=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False, index=True)
    description = Column(String, nullable=False)
    status = Column(String, nullable=False, default=TASK_PENDING)
    done = Column(Boolean, nullable=False, default=False)

    appointment = relationship("Appointment", back_populates="tasks")
