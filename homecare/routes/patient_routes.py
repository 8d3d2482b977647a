from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from homecare.auth.dependencies import require_roles
from homecare.database import get_db
from homecare.models.user import ADMIN_ROLE, PATIENT_ROLE, WORKER_ROLE, AuthUser
from homecare.repositories import patient_repository
from homecare.routes.access import ensure_patient_access
from homecare.routes.errors import REPOSITORY_ERRORS, to_http_error
from homecare.schemas.appointment import MessageResponse
from homecare.schemas.profiles import PatientCreate, PatientResponse, PatientUpdate

router = APIRouter(tags=['patients'])

admin_only = require_roles(ADMIN_ROLE)
view_patients = require_roles(ADMIN_ROLE, WORKER_ROLE)
view_patient = require_roles(ADMIN_ROLE, WORKER_ROLE, PATIENT_ROLE)
edit_patient = require_roles(ADMIN_ROLE, PATIENT_ROLE)


def ensure_can_view_patient(db: Session, current_user: AuthUser, patient_id: int) -> None:
    """Workers read any patient profile; patients only their own."""
    if current_user.role == WORKER_ROLE:
        return
    ensure_patient_access(db, current_user, patient_id)


@router.get('', response_model=list[PatientResponse])
def list_patients(
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(view_patients),
):
    try:
        return patient_repository.list_all(db)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error retrieving patients') from exc


@router.get('/email/{email}', response_model=PatientResponse)
def get_patient_by_email(
    email: str,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(view_patient),
):
    try:
        patient = patient_repository.get_by_email(db, email)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error retrieving patient') from exc

    ensure_can_view_patient(db, current_user, patient.id)
    return patient


@router.get('/{patient_id}', response_model=PatientResponse)
def get_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(view_patient),
):
    ensure_can_view_patient(db, current_user, patient_id)

    try:
        return patient_repository.get(db, patient_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error retrieving patient') from exc


@router.post('', response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def add_patient(
    data: PatientCreate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(admin_only),
):
    try:
        return patient_repository.add(db, data)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error adding patient') from exc


@router.put('/{patient_id}', response_model=PatientResponse)
def update_patient(
    patient_id: int,
    data: PatientUpdate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(edit_patient),
):
    if patient_id != data.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='ID mismatch')

    ensure_patient_access(db, current_user, patient_id)

    try:
        return patient_repository.update(db, patient_id, data)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error updating patient') from exc


@router.delete('/{patient_id}', response_model=MessageResponse)
def delete_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(admin_only),
):
    try:
        patient_repository.delete(db, patient_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error deleting patient') from exc

    return MessageResponse(message=f'Patient with ID {patient_id} deleted successfully.')
