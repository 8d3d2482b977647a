"""Seed a small set of demo records: one admin, one worker, one patient.

Usage:
    python -m homecare.seed_demo_data

Running it again leaves existing records alone.
"""
import logging
from datetime import date, time, timedelta

from sqlalchemy.orm import Session

from homecare.database import Base, SessionLocal, engine, ensure_booking_schema
from homecare.models.appointment import Appointment, AppointmentStatus, AppointmentTask
from homecare.models.availability import Availability
from homecare.models.healthcare_worker import HealthcareWorker
from homecare.models.patient import Patient
from homecare.models.user import ADMIN_ROLE, PATIENT_ROLE, WORKER_ROLE, AuthUser
from homecare.repositories import user_repository

logger = logging.getLogger(__name__)

DEMO_PASSWORD = 'demo123'

ADMIN_EMAIL = 'admin@homecare.local'
WORKER_EMAIL = 'nurse@homecare.local'
PATIENT_EMAIL = 'patient@homecare.local'

SEED_DAYS = 14


def _ensure_user(db: Session, email: str, full_name: str, role: str) -> AuthUser:
    user = user_repository.get_by_email(db, email)
    if user is None:
        user = user_repository.stage_user(db, email=email, password=DEMO_PASSWORD, full_name=full_name, role=role)
        logger.info('Seeded %s user %s', role, email)
    return user


def _ensure_worker(db: Session, user: AuthUser) -> HealthcareWorker:
    worker = db.query(HealthcareWorker).filter(HealthcareWorker.user_id == user.id).first()
    if worker is None:
        worker = HealthcareWorker(
            user_id=user.id,
            full_name=user.full_name,
            phone='40000001',
            email=user.email,
            position='Nurse',
        )
        db.add(worker)
        db.flush()
    return worker


def _ensure_patient(db: Session, user: AuthUser) -> Patient:
    patient = db.query(Patient).filter(Patient.user_id == user.id).first()
    if patient is None:
        patient = Patient(
            user_id=user.id,
            full_name=user.full_name,
            address='Storgata 1, 0155 Oslo',
            phone='40000002',
            email=user.email,
            birth_date=date(1950, 5, 17),
        )
        db.add(patient)
        db.flush()
    return patient


def _ensure_availabilities(db: Session, worker: HealthcareWorker, start: date) -> list[Availability]:
    existing = {
        availability.date: availability
        for availability in db.query(Availability).filter(Availability.healthcare_worker_id == worker.id)
    }

    slots = []
    for offset in range(1, SEED_DAYS + 1):
        slot_date = start + timedelta(days=offset)
        if slot_date.weekday() >= 5:
            continue
        availability = existing.get(slot_date)
        if availability is None:
            availability = Availability(
                healthcare_worker_id=worker.id,
                date=slot_date,
                start_time=time(9, 0),
                end_time=time(15, 0),
            )
            db.add(availability)
        slots.append(availability)

    # one all-day slot on the first weekend after the seeded weekdays
    all_day_date = start + timedelta(days=SEED_DAYS + 1)
    while all_day_date.weekday() < 5:
        all_day_date += timedelta(days=1)
    if all_day_date not in existing:
        db.add(Availability(healthcare_worker_id=worker.id, date=all_day_date))

    db.flush()
    return slots


def _ensure_appointment(db: Session, patient: Patient, slots: list[Availability]) -> None:
    if db.query(Appointment.id).filter(Appointment.patient_id == patient.id).first():
        return

    free_slot = next((slot for slot in slots if slot.appointment is None), None)
    if free_slot is None:
        return

    db.add(
        Appointment(
            availability_id=free_slot.id,
            patient_id=patient.id,
            status=AppointmentStatus.pending,
            service_type='Medication review',
            selected_start_time=time(10, 0),
            selected_end_time=time(11, 0),
            tasks=[AppointmentTask(description='Check blood pressure')],
        )
    )


def seed_demo_data(db: Session | None = None, today: date | None = None) -> None:
    owns_session = db is None
    db = db or SessionLocal()
    try:
        _ensure_user(db, ADMIN_EMAIL, 'Demo Admin', ADMIN_ROLE)
        worker_user = _ensure_user(db, WORKER_EMAIL, 'Nina Nurse', WORKER_ROLE)
        patient_user = _ensure_user(db, PATIENT_EMAIL, 'Paul Patient', PATIENT_ROLE)

        worker = _ensure_worker(db, worker_user)
        patient = _ensure_patient(db, patient_user)
        slots = _ensure_availabilities(db, worker, today or date.today())
        _ensure_appointment(db, patient, slots)

        db.commit()
        logger.info('Demo data is in place')
    except Exception:
        db.rollback()
        logger.exception('Seeding demo data failed')
        raise
    finally:
        if owns_session:
            db.close()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    ensure_booking_schema()
    seed_demo_data()


if __name__ == "__main__":
    main()
