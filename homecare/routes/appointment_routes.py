from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from homecare.auth.dependencies import get_current_user, require_roles
from homecare.database import get_db
from homecare.models.appointment import Appointment
from homecare.models.user import ADMIN_ROLE, PATIENT_ROLE, WORKER_ROLE, AuthUser
from homecare.repositories import appointment_repository
from homecare.routes.access import ensure_patient_access, ensure_worker_access
from homecare.routes.errors import REPOSITORY_ERRORS, to_http_error
from homecare.schemas.appointment import (
    AdminAppointmentResponse,
    AppointmentActionResponse,
    AppointmentCreate,
    AppointmentCreatedResponse,
    AppointmentResponse,
    AppointmentUpdate,
    AppointmentUpdatedResponse,
    AvailabilitySummary,
    MessageResponse,
    WorkerAppointmentResponse,
)

router = APIRouter(tags=['appointments'])

book_appointments = require_roles(PATIENT_ROLE, ADMIN_ROLE)
admin_only = require_roles(ADMIN_ROLE)
view_worker_appointments = require_roles(WORKER_ROLE, ADMIN_ROLE)


def to_worker_view(appointment: Appointment) -> WorkerAppointmentResponse:
    return WorkerAppointmentResponse(
        id=appointment.id,
        status=appointment.status,
        service_type=appointment.service_type,
        date=appointment.availability.date,
        worker_name=appointment.availability.healthcare_worker.full_name,
        patient_id=appointment.patient_id,
        selected_start_time=appointment.selected_start_time,
    )


def to_admin_view(appointment: Appointment) -> AdminAppointmentResponse:
    availability = appointment.availability
    worker = availability.healthcare_worker if availability else None
    patient = appointment.patient

    return AdminAppointmentResponse(
        id=appointment.id,
        status=appointment.status,
        service_type=appointment.service_type,
        patient_id=appointment.patient_id,
        patient_name=patient.full_name if patient else 'Unknown',
        patient_email=patient.email if patient else '',
        worker_name=worker.full_name if worker else 'Unknown',
        worker_email=worker.email if worker else '',
        date=availability.date if availability else None,
        selected_start_time=appointment.selected_start_time,
        created_at=appointment.created_at,
        availability_id=appointment.availability_id,
        availability=AvailabilitySummary.model_validate(availability) if availability else None,
    )


def ensure_appointment_access(db: Session, current_user: AuthUser, appointment_id: int) -> AppointmentResponse:
    appointment = appointment_repository.get(db, appointment_id)
    if current_user.role == WORKER_ROLE:
        ensure_worker_access(db, current_user, appointment.availability.healthcare_worker_id)
    else:
        ensure_patient_access(db, current_user, appointment.patient_id)
    return appointment


@router.post('', response_model=AppointmentCreatedResponse)
def create_appointment(
    data: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(book_appointments),
):
    ensure_patient_access(db, current_user, data.patient_id)

    try:
        created = appointment_repository.create(db, data)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error creating appointment') from exc

    return AppointmentCreatedResponse(message='Appointment created successfully', created=created)


@router.get('', response_model=list[AdminAppointmentResponse])
def list_appointments(
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(admin_only),
):
    try:
        appointments = appointment_repository.list_all(db)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error fetching appointments') from exc

    if not appointments:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='No appointments found.')

    return [to_admin_view(appointment) for appointment in appointments]


@router.get('/patient/{patient_id}', response_model=list[AppointmentResponse])
def list_patient_appointments(
    patient_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(book_appointments),
):
    ensure_patient_access(db, current_user, patient_id)

    try:
        appointments = appointment_repository.list_by_patient(db, patient_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error fetching appointments') from exc

    return [AppointmentResponse.model_validate(appointment) for appointment in appointments]


@router.get('/worker/{worker_id}', response_model=list[WorkerAppointmentResponse])
def list_worker_appointments(
    worker_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(view_worker_appointments),
):
    ensure_worker_access(db, current_user, worker_id)

    try:
        appointments = appointment_repository.list_by_worker(db, worker_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error fetching worker appointments') from exc

    if not appointments:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='No appointments found for this worker.',
        )

    return [to_worker_view(appointment) for appointment in appointments]


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        return ensure_appointment_access(db, current_user, appointment_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error fetching appointment') from exc


@router.put('/{appointment_id}', response_model=AppointmentUpdatedResponse)
def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(book_appointments),
):
    try:
        ensure_appointment_access(db, current_user, appointment_id)
        updated = appointment_repository.update(db, appointment_id, data)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error updating appointment') from exc

    return AppointmentUpdatedResponse(message='Appointment updated successfully', updated=updated)


@router.delete('/{appointment_id}', response_model=MessageResponse)
def delete_appointment(
    appointment_id: int,
    role: Literal['Admin', 'Patient'] | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(book_appointments),
):
    if role is not None and role != current_user.role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='The role parameter must match the signed-in user.',
        )

    try:
        ensure_appointment_access(db, current_user, appointment_id)
        appointment_repository.delete(db, appointment_id, role)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error deleting appointment') from exc

    return MessageResponse(message='Appointment deleted successfully')


@router.post('/{appointment_id}/approve', response_model=AppointmentActionResponse)
def approve_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(admin_only),
):
    try:
        appointment = appointment_repository.approve(db, appointment_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error approving appointment') from exc

    return AppointmentActionResponse(message='Appointment approved successfully', appointment=appointment)


@router.post('/{appointment_id}/reject', response_model=AppointmentActionResponse)
def reject_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(admin_only),
):
    try:
        appointment = appointment_repository.reject(db, appointment_id)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error rejecting appointment') from exc

    return AppointmentActionResponse(
        message='Appointment rejected and slot released successfully',
        appointment=appointment,
    )
