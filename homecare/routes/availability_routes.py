from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from homecare.auth.dependencies import get_current_user, require_roles
from homecare.database import get_db
from homecare.models.user import ADMIN_ROLE, WORKER_ROLE, AuthUser
from homecare.repositories import availability_repository
from homecare.routes.access import ensure_worker_access
from homecare.routes.errors import REPOSITORY_ERRORS, to_http_error
from homecare.schemas.appointment import MessageResponse
from homecare.schemas.availability import (
    AvailabilityBatchResponse,
    AvailabilityCreate,
    AvailabilityResponse,
    AvailabilityUpdate,
)

router = APIRouter(tags=['availabilities'])

manage_availability = require_roles(WORKER_ROLE, ADMIN_ROLE)


@router.get('', response_model=list[AvailabilityResponse])
def list_availabilities(
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        return availability_repository.list_all(db)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error retrieving availabilities') from exc


@router.get('/unbooked', response_model=list[AvailabilityResponse])
def list_unbooked_availabilities(
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        return availability_repository.list_unbooked(db)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error retrieving unbooked availabilities') from exc


@router.get('/worker/{worker_id}', response_model=list[AvailabilityResponse])
def list_worker_availabilities(
    worker_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        return availability_repository.list_by_worker(db, worker_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error retrieving worker availabilities') from exc


@router.post('', response_model=AvailabilityBatchResponse)
def add_availabilities(
    items: list[AvailabilityCreate],
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(manage_availability),
):
    if not items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='No availabilities provided.',
        )

    for worker_id in {item.healthcare_worker_id for item in items}:
        ensure_worker_access(db, current_user, worker_id)

    created, errors = availability_repository.add_many(db, items)

    if not created:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                'message': 'No availabilities could be added.',
                'errors': [error.model_dump(mode='json') for error in errors],
            },
        )

    return AvailabilityBatchResponse(
        message=f'{len(created)} availability(ies) added successfully.',
        created=created,
        errors=errors or None,
    )


@router.put('/{availability_id}', response_model=AvailabilityResponse)
def update_availability(
    availability_id: int,
    data: AvailabilityUpdate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(manage_availability),
):
    try:
        existing = availability_repository.get(db, availability_id)
        ensure_worker_access(db, current_user, existing.healthcare_worker_id)
        return availability_repository.update(db, availability_id, data)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error updating availability') from exc


@router.delete('/{availability_id}', response_model=MessageResponse)
def delete_availability(
    availability_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(manage_availability),
):
    try:
        existing = availability_repository.get(db, availability_id)
        ensure_worker_access(db, current_user, existing.healthcare_worker_id)
        availability_repository.delete(db, availability_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error deleting availability') from exc

    return MessageResponse(message=f'Availability with id {availability_id} deleted successfully.')
