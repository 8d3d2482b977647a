"""Auth user model definitions."""

import uuid

from sqlalchemy import Column, String
from homecare.database import Base

ADMIN_ROLE = "Admin"
WORKER_ROLE = "Worker"
PATIENT_ROLE = "Patient"
ROLES = (ADMIN_ROLE, WORKER_ROLE, PATIENT_ROLE)


def _new_user_id() -> str:
    return str(uuid.uuid4())


class AuthUser(Base):
    """Represents a login identity."""
    __tablename__ = "auth_users"

    id = Column(String, primary_key=True, default=_new_user_id)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String(120), nullable=False, default="")
    role = Column(String(40), nullable=False, default=PATIENT_ROLE)  # Admin/Worker/Patient
