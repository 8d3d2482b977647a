from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from homecare.models.user import ADMIN_ROLE, PATIENT_ROLE, WORKER_ROLE, AuthUser
from homecare.repositories import healthcare_worker_repository, patient_repository


def ensure_patient_access(db: Session, current_user: AuthUser, patient_id: int) -> None:
    """Admins see every patient; a patient sees only their own records."""
    if current_user.role == ADMIN_ROLE:
        return
    if current_user.role == PATIENT_ROLE:
        own_profile = patient_repository.get_by_user_id(db, current_user.id)
        if own_profile is not None and own_profile.id == patient_id:
            return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail='Patients can only access their own records.',
    )


def ensure_worker_access(db: Session, current_user: AuthUser, worker_id: int) -> None:
    """Admins see every worker; a worker sees only their own records."""
    if current_user.role == ADMIN_ROLE:
        return
    if current_user.role == WORKER_ROLE:
        own_profile = healthcare_worker_repository.get_by_user_id(db, current_user.id)
        if own_profile is not None and own_profile.id == worker_id:
            return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail='Healthcare workers can only access their own records.',
    )
