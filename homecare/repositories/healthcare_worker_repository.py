import logging

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homecare.models.healthcare_worker import HealthcareWorker
from homecare.models.user import WORKER_ROLE
from homecare.repositories import user_repository
from homecare.repositories.errors import NotFoundError, RuleViolationError, StorageError
from homecare.schemas.profiles import HealthcareWorkerCreate, HealthcareWorkerUpdate

logger = logging.getLogger(__name__)


def list_all(db: Session) -> list[HealthcareWorker]:
    try:
        return db.query(HealthcareWorker).order_by(HealthcareWorker.full_name.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching healthcare workers')
        raise StorageError('Database error occurred while fetching healthcare workers.') from exc


def get(db: Session, worker_id: int) -> HealthcareWorker:
    try:
        worker = db.get(HealthcareWorker, worker_id)
    except SQLAlchemyError as exc:
        logger.exception('Error fetching healthcare worker by ID')
        raise StorageError('Database error occurred while fetching healthcare worker.') from exc
    if worker is None:
        raise NotFoundError(f'Healthcare worker with ID {worker_id} not found.')
    return worker


def get_by_email(db: Session, email: str) -> HealthcareWorker:
    try:
        worker = db.query(HealthcareWorker).filter(HealthcareWorker.email == email).first()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching healthcare worker by email')
        raise StorageError('Database error occurred while fetching healthcare worker.') from exc
    if worker is None:
        raise NotFoundError(f'Healthcare worker with email {email} not found.')
    return worker


def get_by_user_id(db: Session, user_id: str) -> HealthcareWorker | None:
    return db.query(HealthcareWorker).filter(HealthcareWorker.user_id == user_id).first()


def _ensure_unique(db: Session, user_id: str, data: HealthcareWorkerCreate) -> None:
    duplicate = db.query(HealthcareWorker.id).filter(
        or_(
            HealthcareWorker.user_id == user_id,
            func.lower(HealthcareWorker.email) == str(data.email).lower(),
            HealthcareWorker.phone == data.phone,
            func.lower(HealthcareWorker.full_name) == data.full_name.lower(),
        )
    ).first()
    if duplicate:
        raise RuleViolationError(
            'A healthcare worker with the same UserId, email, phone, or name already exists.'
        )


def _stage_worker(db: Session, user_id: str, data: HealthcareWorkerCreate) -> HealthcareWorker:
    _ensure_unique(db, user_id, data)
    worker = HealthcareWorker(
        user_id=user_id,
        full_name=data.full_name,
        phone=data.phone,
        email=str(data.email),
        position=data.position,
    )
    db.add(worker)
    return worker


def add(db: Session, data: HealthcareWorkerCreate, user_id: str) -> HealthcareWorker:
    """Create a profile for an identity that already exists."""
    try:
        if user_repository.get_by_id(db, user_id) is None:
            raise RuleViolationError(f'AuthUser with ID {user_id} not found.')

        worker = _stage_worker(db, user_id, data)
        db.commit()
        db.refresh(worker)
        return worker
    except RuleViolationError as exc:
        db.rollback()
        logger.warning('Duplicate healthcare worker detected or invalid UserId: %s', exc)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error adding healthcare worker')
        raise StorageError('Database error occurred while adding healthcare worker.') from exc


def create_with_account(db: Session, data: HealthcareWorkerCreate) -> HealthcareWorker:
    """Provision the worker's login identity and profile in one transaction."""
    try:
        if not data.password:
            raise RuleViolationError('Password is required and must be at least 6 characters')

        user = user_repository.stage_user(
            db,
            email=str(data.email),
            password=data.password,
            full_name=data.full_name,
            role=WORKER_ROLE,
        )
        worker = _stage_worker(db, user.id, data)
        db.commit()
        db.refresh(worker)
        logger.info('Healthcare worker %s created', worker.id)
        return worker
    except RuleViolationError as exc:
        db.rollback()
        logger.warning('Healthcare worker creation rejected: %s', exc)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error adding healthcare worker')
        raise StorageError('Database error occurred while adding healthcare worker.') from exc


def update(db: Session, worker_id: int, data: HealthcareWorkerUpdate) -> HealthcareWorker:
    worker = get(db, worker_id)
    try:
        worker.full_name = data.full_name
        worker.phone = data.phone
        worker.email = str(data.email)
        worker.position = data.position
        db.commit()
        db.refresh(worker)
        return worker
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error updating healthcare worker')
        raise StorageError('Database error occurred while updating healthcare worker.') from exc


def delete(db: Session, worker_id: int) -> None:
    """Remove the worker, its availabilities, any appointments booked on them, and its login identity."""
    worker = get(db, worker_id)
    try:
        user = user_repository.get_by_id(db, worker.user_id)
        db.delete(worker)
        db.flush()
        if user is not None:
            db.delete(user)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error deleting healthcare worker')
        raise StorageError('Database error occurred while deleting healthcare worker.') from exc
