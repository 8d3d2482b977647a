import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homecare.models.patient import Patient
from homecare.models.user import PATIENT_ROLE
from homecare.repositories import user_repository
from homecare.repositories.errors import NotFoundError, RuleViolationError, StorageError
from homecare.schemas.auth import PatientRegisterRequest
from homecare.schemas.profiles import PatientCreate, PatientUpdate

logger = logging.getLogger(__name__)


def list_all(db: Session) -> list[Patient]:
    try:
        return db.query(Patient).order_by(Patient.full_name.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching patients from database')
        raise StorageError('Database error occurred while fetching patients.') from exc


def get(db: Session, patient_id: int) -> Patient:
    try:
        patient = db.get(Patient, patient_id)
    except SQLAlchemyError as exc:
        logger.exception('Error fetching patient by ID')
        raise StorageError('Database error occurred while fetching patient.') from exc
    if patient is None:
        raise NotFoundError(f'Patient with ID {patient_id} not found.')
    return patient


def get_by_email(db: Session, email: str) -> Patient:
    try:
        patient = db.query(Patient).filter(Patient.email == email).first()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching patient by email')
        raise StorageError('Database error occurred while fetching patient.') from exc
    if patient is None:
        raise NotFoundError(f'Patient with email {email} not found.')
    return patient


def get_by_user_id(db: Session, user_id: str) -> Patient | None:
    return db.query(Patient).filter(Patient.user_id == user_id).first()


def _stage_patient(db: Session, user_id: str, data) -> Patient:
    if db.query(Patient.id).filter(Patient.user_id == user_id).first():
        raise RuleViolationError('A patient record already exists for this user.')

    patient = Patient(
        user_id=user_id,
        full_name=data.full_name,
        address=data.address,
        phone=data.phone,
        email=str(data.email),
        birth_date=data.birth_date,
    )
    db.add(patient)
    return patient


def add(db: Session, data: PatientCreate) -> Patient:
    """Create a profile for an identity that already exists and has the Patient role."""
    try:
        if not data.user_id:
            raise RuleViolationError(
                'UserId is required. Patients must register via the authentication endpoint first.'
            )

        user = user_repository.get_by_id(db, data.user_id)
        if user is None:
            raise RuleViolationError(f'AuthUser with ID {data.user_id} not found.')
        if user.role != PATIENT_ROLE:
            raise RuleViolationError(f'User {data.user_id} is not registered as a Patient.')

        patient = _stage_patient(db, user.id, data)
        db.commit()
        db.refresh(patient)
        return patient
    except RuleViolationError as exc:
        db.rollback()
        logger.warning('Duplicate patient detected or invalid UserId: %s', exc)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error adding patient')
        raise StorageError('Database error occurred while adding patient.') from exc


def register(db: Session, data: PatientRegisterRequest) -> Patient:
    """Self-registration: the identity and the profile are created together."""
    try:
        user = user_repository.stage_user(
            db,
            email=str(data.email),
            password=data.password,
            full_name=data.full_name,
            role=PATIENT_ROLE,
        )
        patient = _stage_patient(db, user.id, data)
        db.commit()
        db.refresh(patient)
        logger.info('Patient %s registered', patient.id)
        return patient
    except RuleViolationError as exc:
        db.rollback()
        logger.warning('Patient registration rejected for %s: %s', data.email, exc)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error occurred during patient registration')
        raise StorageError('Database error occurred while registering patient.') from exc


def update(db: Session, patient_id: int, data: PatientUpdate) -> Patient:
    patient = get(db, patient_id)
    try:
        patient.full_name = data.full_name
        patient.address = data.address
        patient.phone = data.phone
        patient.email = str(data.email)
        patient.birth_date = data.birth_date
        db.commit()
        db.refresh(patient)
        return patient
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error updating patient')
        raise StorageError('Database error occurred while updating patient.') from exc


def delete(db: Session, patient_id: int) -> None:
    """Remove the patient, its appointments with their tasks, and its login identity."""
    patient = get(db, patient_id)
    try:
        user = user_repository.get_by_id(db, patient.user_id)
        db.delete(patient)
        db.flush()
        if user is not None:
            db.delete(user)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error deleting patient')
        raise StorageError('Database error occurred while deleting patient.') from exc
