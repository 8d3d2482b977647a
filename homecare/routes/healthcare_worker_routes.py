from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from homecare.auth.dependencies import get_current_user, require_roles
from homecare.database import get_db
from homecare.models.user import ADMIN_ROLE, AuthUser
from homecare.repositories import healthcare_worker_repository
from homecare.routes.errors import REPOSITORY_ERRORS, to_http_error
from homecare.schemas.appointment import MessageResponse
from homecare.schemas.profiles import (
    HealthcareWorkerCreate,
    HealthcareWorkerResponse,
    HealthcareWorkerUpdate,
)

router = APIRouter(tags=['healthcare-workers'])

admin_only = require_roles(ADMIN_ROLE)


@router.get('', response_model=list[HealthcareWorkerResponse])
def list_healthcare_workers(
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        return healthcare_worker_repository.list_all(db)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error retrieving healthcare workers') from exc


@router.get('/email/{email}', response_model=HealthcareWorkerResponse)
def get_healthcare_worker_by_email(
    email: str,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        return healthcare_worker_repository.get_by_email(db, email)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error retrieving healthcare worker') from exc


@router.get('/{worker_id}', response_model=HealthcareWorkerResponse)
def get_healthcare_worker(
    worker_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        return healthcare_worker_repository.get(db, worker_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error retrieving healthcare worker') from exc


@router.post('', response_model=HealthcareWorkerResponse, status_code=status.HTTP_201_CREATED)
def add_healthcare_worker(
    data: HealthcareWorkerCreate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(admin_only),
):
    try:
        return healthcare_worker_repository.create_with_account(db, data)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error adding healthcare worker') from exc


@router.put('/{worker_id}', response_model=HealthcareWorkerResponse)
def update_healthcare_worker(
    worker_id: int,
    data: HealthcareWorkerUpdate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(admin_only),
):
    if worker_id != data.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='ID mismatch')

    try:
        return healthcare_worker_repository.update(db, worker_id, data)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error updating healthcare worker') from exc


@router.delete('/{worker_id}', response_model=MessageResponse)
def delete_healthcare_worker(
    worker_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(admin_only),
):
    try:
        healthcare_worker_repository.delete(db, worker_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error deleting healthcare worker') from exc

    return MessageResponse(message=f'Healthcare worker with ID {worker_id} deleted successfully.')
