"""Appointment booking and its status transitions.

A booking holds exactly one availability. The application checks the slot
before inserting, but the unique index on ``appointments.availability_id`` is
what actually keeps two concurrent bookings off the same slot: a losing
insert surfaces as ``IntegrityError`` and is reported as "already booked".

Ending a booking has several flavours, each with its own persistence effect:

* ``approve``         status -> Approved, row kept
* ``reject``          row and tasks deleted, slot free again
* ``admin_cancel``    status -> Rejected, row kept, slot stays taken
* ``patient_cancel``  status -> Cancelled, row kept, slot stays taken
* ``hard_delete``     row and tasks deleted, slot free again
"""

import enum
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from homecare.models.appointment import Appointment, AppointmentStatus, AppointmentTask
from homecare.models.availability import Availability
from homecare.models.patient import Patient
from homecare.models.user import ADMIN_ROLE, PATIENT_ROLE
from homecare.repositories import rules
from homecare.repositories.errors import NotFoundError, RuleViolationError, StorageError
from homecare.schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentUpdate

logger = logging.getLogger(__name__)

ALREADY_BOOKED_MESSAGE = 'This availability is already booked.'


class AppointmentAction(enum.Enum):
    approve = 'approve'
    reject = 'reject'
    admin_cancel = 'admin_cancel'
    patient_cancel = 'patient_cancel'
    hard_delete = 'hard_delete'


DELETE_ACTIONS_BY_ROLE = {
    ADMIN_ROLE: AppointmentAction.admin_cancel,
    PATIENT_ROLE: AppointmentAction.patient_cancel,
    None: AppointmentAction.hard_delete,
}

_STATUS_BY_ACTION = {
    AppointmentAction.approve: AppointmentStatus.approved,
    AppointmentAction.admin_cancel: AppointmentStatus.rejected,
    AppointmentAction.patient_cancel: AppointmentStatus.cancelled,
}

_REMOVING_ACTIONS = {AppointmentAction.reject, AppointmentAction.hard_delete}


def action_for_delete_role(role: str | None) -> AppointmentAction:
    try:
        return DELETE_ACTIONS_BY_ROLE[role]
    except KeyError:
        raise RuleViolationError(f'Unsupported role for delete: {role}') from None


def _with_details(query):
    return query.options(
        joinedload(Appointment.availability).joinedload(Availability.healthcare_worker),
        joinedload(Appointment.patient),
        selectinload(Appointment.tasks),
    )


def _load(db: Session, appointment_id: int) -> Appointment:
    appointment = _with_details(db.query(Appointment)).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise NotFoundError('Appointment not found')
    return appointment


def _snapshot(appointment: Appointment) -> AppointmentResponse:
    return AppointmentResponse.model_validate(appointment)


def _build_tasks(descriptions: list[str]) -> list[AppointmentTask]:
    return [AppointmentTask(description=description) for description in descriptions]


def get(db: Session, appointment_id: int) -> AppointmentResponse:
    try:
        return _snapshot(_load(db, appointment_id))
    except SQLAlchemyError as exc:
        logger.exception('Error fetching appointment %s', appointment_id)
        raise StorageError('Database error occurred while fetching appointment.') from exc


def list_by_patient(db: Session, patient_id: int) -> list[Appointment]:
    try:
        return _with_details(db.query(Appointment)).filter(Appointment.patient_id == patient_id).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching appointments for patient %s', patient_id)
        raise StorageError('Database error occurred while fetching patient appointments.') from exc


def list_by_worker(db: Session, worker_id: int) -> list[Appointment]:
    try:
        return (
            _with_details(db.query(Appointment))
            .join(Appointment.availability)
            .filter(Availability.healthcare_worker_id == worker_id)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception('Error fetching appointments for worker %s', worker_id)
        raise StorageError('Database error occurred while fetching worker appointments.') from exc


def list_all(db: Session) -> list[Appointment]:
    try:
        return _with_details(db.query(Appointment)).order_by(Appointment.created_at.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching appointments')
        raise StorageError('Database error occurred while fetching appointments.') from exc


def create(db: Session, data: AppointmentCreate) -> AppointmentResponse:
    try:
        availability = (
            db.query(Availability)
            .options(joinedload(Availability.appointment))
            .filter(Availability.id == data.availability_id)
            .first()
        )
        if availability is None:
            raise RuleViolationError('Availability not found.')
        if availability.appointment is not None:
            raise RuleViolationError(ALREADY_BOOKED_MESSAGE)

        if db.get(Patient, data.patient_id) is None:
            raise RuleViolationError(f'Patient with ID {data.patient_id} not found.')

        appointment = Appointment(
            availability_id=data.availability_id,
            patient_id=data.patient_id,
            status=AppointmentStatus.pending,
            service_type=data.service_type,
            created_at=datetime.now(timezone.utc),
            requested_local_time=data.requested_local_time,
            selected_start_time=rules.parse_time_of_day(data.selected_start_time),
            selected_end_time=rules.parse_time_of_day(data.selected_end_time),
            tasks=_build_tasks(data.tasks),
        )
        db.add(appointment)
        db.commit()

        logger.info('Appointment %s booked on availability %s', appointment.id, data.availability_id)
        return _snapshot(_load(db, appointment.id))
    except RuleViolationError as exc:
        logger.warning('Booking rejected for availability %s: %s', data.availability_id, exc)
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning('Concurrent booking lost the race for availability %s', data.availability_id)
        raise RuleViolationError(ALREADY_BOOKED_MESSAGE) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Database error while creating appointment')
        raise StorageError('Database error occurred while creating appointment.') from exc


def update(db: Session, appointment_id: int, data: AppointmentUpdate) -> AppointmentResponse:
    try:
        appointment = _load(db, appointment_id)

        if data.availability_id is not None:
            new_availability = (
                db.query(Availability)
                .options(joinedload(Availability.appointment))
                .filter(Availability.id == data.availability_id)
                .first()
            )
            if new_availability is None:
                raise RuleViolationError('New availability not found.')
            booked_by = new_availability.appointment
            if booked_by is not None and booked_by.id != appointment.id:
                raise RuleViolationError("This worker's availability is already booked.")
            appointment.availability = new_availability

        if data.status is not None:
            appointment.status = data.status
        if data.service_type is not None:
            appointment.service_type = data.service_type
        if data.visit_note is not None:
            appointment.visit_note = data.visit_note
        if data.tasks:
            appointment.tasks = _build_tasks(data.tasks)

        selected_start_time = rules.parse_time_of_day(data.selected_start_time)
        if selected_start_time is not None:
            appointment.selected_start_time = selected_start_time
        selected_end_time = rules.parse_time_of_day(data.selected_end_time)
        if selected_end_time is not None:
            appointment.selected_end_time = selected_end_time

        db.commit()
        return _snapshot(_load(db, appointment_id))
    except RuleViolationError as exc:
        db.rollback()
        logger.warning('Appointment %s update rejected: %s', appointment_id, exc)
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning('Appointment %s lost a concurrent re-booking', appointment_id)
        raise RuleViolationError("This worker's availability is already booked.") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Database error while updating appointment %s', appointment_id)
        raise StorageError('Database error occurred while updating appointment.') from exc


def apply_action(db: Session, appointment_id: int, action: AppointmentAction) -> AppointmentResponse:
    """Apply one status transition and return the appointment as it was left.

    For removing actions the returned snapshot describes the deleted row.
    """
    try:
        appointment = _load(db, appointment_id)

        if action in _REMOVING_ACTIONS:
            snapshot = _snapshot(appointment)
            # tasks are removed by the cascade on Appointment.tasks
            db.delete(appointment)
            db.commit()
            logger.info('Appointment %s removed (%s), availability %s released',
                        appointment_id, action.value, snapshot.availability_id)
            return snapshot

        appointment.status = _STATUS_BY_ACTION[action]
        db.commit()
        logger.info('Appointment %s set to %s', appointment_id, appointment.status.value)
        return _snapshot(_load(db, appointment_id))
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Database error while applying %s to appointment %s', action.value, appointment_id)
        raise StorageError('Database error occurred while updating appointment.') from exc


def approve(db: Session, appointment_id: int) -> AppointmentResponse:
    return apply_action(db, appointment_id, AppointmentAction.approve)


def reject(db: Session, appointment_id: int) -> AppointmentResponse:
    return apply_action(db, appointment_id, AppointmentAction.reject)


def delete(db: Session, appointment_id: int, role: str | None = None) -> AppointmentResponse:
    return apply_action(db, appointment_id, action_for_delete_role(role))
