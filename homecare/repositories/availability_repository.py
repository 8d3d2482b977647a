"""Availability slots published by healthcare workers.

Every write goes through the booking window check, and ``add`` refuses a
second slot for the same worker on the same day.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from homecare.models.appointment import Appointment
from homecare.models.availability import Availability
from homecare.models.healthcare_worker import HealthcareWorker
from homecare.repositories import rules
from homecare.repositories.errors import NotFoundError, RuleViolationError, StorageError
from homecare.schemas.availability import (
    AvailabilityCreate,
    AvailabilityItemError,
    AvailabilityResponse,
    AvailabilityUpdate,
)

logger = logging.getLogger(__name__)


def to_response(availability: Availability, include_worker: bool = False) -> AvailabilityResponse:
    response = AvailabilityResponse(
        id=availability.id,
        healthcare_worker_id=availability.healthcare_worker_id,
        date=availability.date,
        start_time=availability.start_time,
        end_time=availability.end_time,
        is_booked=availability.is_booked,
    )
    if include_worker and availability.healthcare_worker is not None:
        response.healthcare_worker_name = availability.healthcare_worker.full_name
        response.healthcare_worker_position = availability.healthcare_worker.position
    return response


def get(db: Session, availability_id: int) -> Availability:
    try:
        availability = db.get(Availability, availability_id)
    except SQLAlchemyError as exc:
        logger.exception('Error fetching availability %s', availability_id)
        raise StorageError('Database error occurred while fetching availability.') from exc
    if availability is None:
        raise NotFoundError(f'Availability with id {availability_id} not found.')
    return availability


def list_all(db: Session) -> list[AvailabilityResponse]:
    try:
        availabilities = db.query(Availability).options(selectinload(Availability.appointment)).all()
        return [to_response(availability) for availability in availabilities]
    except SQLAlchemyError as exc:
        logger.exception('Error fetching availabilities')
        raise StorageError('Database error occurred while fetching availabilities.') from exc


def list_unbooked(db: Session) -> list[AvailabilityResponse]:
    try:
        availabilities = (
            db.query(Availability)
            .outerjoin(Availability.appointment)
            .options(joinedload(Availability.healthcare_worker))
            .filter(
                Appointment.id.is_(None),
                Availability.date >= rules.today(),
            )
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception('Error fetching unbooked availabilities')
        raise StorageError('Database error occurred while fetching unbooked availabilities.') from exc

    availabilities.sort(key=lambda availability: rules.slot_sort_key(availability.date, availability.start_time))
    return [to_response(availability, include_worker=True) for availability in availabilities]


def list_by_worker(db: Session, worker_id: int) -> list[AvailabilityResponse]:
    try:
        availabilities = (
            db.query(Availability)
            .options(selectinload(Availability.appointment))
            .filter(Availability.healthcare_worker_id == worker_id)
            .order_by(Availability.date.asc())
            .all()
        )
        return [to_response(availability) for availability in availabilities]
    except SQLAlchemyError as exc:
        logger.exception('Error fetching availabilities for worker %s', worker_id)
        raise StorageError('Database error occurred while fetching worker availabilities.') from exc


def add(db: Session, data: AvailabilityCreate) -> AvailabilityResponse:
    try:
        slot_date = rules.ensure_add_date_in_window(data.date)

        worker = db.get(HealthcareWorker, data.healthcare_worker_id)
        if worker is None:
            raise RuleViolationError(f'Healthcare worker with ID {data.healthcare_worker_id} not found.')

        exists = db.query(Availability.id).filter(
            Availability.healthcare_worker_id == data.healthcare_worker_id,
            Availability.date == slot_date,
        ).first()
        if exists:
            raise RuleViolationError(f'Availability already exists for date: {slot_date.isoformat()}')

        availability = Availability(
            healthcare_worker_id=data.healthcare_worker_id,
            date=slot_date,
            start_time=data.start_time,
            end_time=data.end_time,
        )
        db.add(availability)
        db.commit()
        db.refresh(availability)

        return to_response(availability)
    except RuleViolationError as exc:
        logger.warning('Availability rejected for worker %s: %s', data.healthcare_worker_id, exc)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Database error while adding availability')
        raise StorageError('Database error occurred while adding availability.') from exc


def add_many(
    db: Session,
    items: list[AvailabilityCreate],
) -> tuple[list[AvailabilityResponse], list[AvailabilityItemError]]:
    """Add each slot on its own. One bad item never blocks the others."""
    created: list[AvailabilityResponse] = []
    errors: list[AvailabilityItemError] = []

    for item in items:
        try:
            created.append(add(db, item))
        except RuleViolationError as exc:
            errors.append(AvailabilityItemError(date=item.date, error=str(exc)))
        except StorageError as exc:
            errors.append(AvailabilityItemError(date=item.date, error=f'Error: {exc}'))

    return created, errors


def update(db: Session, availability_id: int, data: AvailabilityUpdate) -> AvailabilityResponse:
    try:
        availability = (
            db.query(Availability)
            .options(joinedload(Availability.appointment))
            .filter(Availability.id == availability_id)
            .first()
        )
        if availability is None:
            raise NotFoundError(f'Availability with id {availability_id} not found.')

        # same-day duplicates are only checked on add
        new_date = rules.ensure_update_date_in_window(data.date or availability.date)

        availability.date = new_date
        if data.start_time is not None:
            availability.start_time = data.start_time
        if data.end_time is not None:
            availability.end_time = data.end_time

        db.commit()
        db.refresh(availability)

        return to_response(availability)
    except RuleViolationError as exc:
        logger.warning('Availability %s update rejected: %s', availability_id, exc)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Database error while updating availability %s', availability_id)
        raise StorageError('Database error occurred while updating availability.') from exc


def delete(db: Session, availability_id: int) -> None:
    try:
        availability = db.get(Availability, availability_id)
        if availability is None:
            raise NotFoundError(f'Availability with id {availability_id} not found.')

        db.delete(availability)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Database error while deleting availability %s', availability_id)
        raise StorageError('Database error occurred while deleting availability.') from exc
