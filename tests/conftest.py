import os
from datetime import date, time, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')

from homecare.database import Base  # noqa: E402
from homecare.models.appointment import Appointment, AppointmentStatus, AppointmentTask  # noqa: E402
from homecare.models.availability import Availability  # noqa: E402
from homecare.models.healthcare_worker import HealthcareWorker  # noqa: E402
from homecare.models.patient import Patient  # noqa: E402
from homecare.models.user import ADMIN_ROLE, PATIENT_ROLE, WORKER_ROLE, AuthUser  # noqa: E402
from homecare.repositories import user_repository  # noqa: E402


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    counter = {'value': 0}

    def _make_user(role: str = PATIENT_ROLE, email: str | None = None, full_name: str = 'Test User') -> AuthUser:
        counter['value'] += 1
        user = user_repository.stage_user(
            db,
            email=email or f'user{counter["value"]}@example.com',
            password='secret123',
            full_name=full_name,
            role=role,
        )
        db.commit()
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user) -> AuthUser:
    return make_user(ADMIN_ROLE, email='admin@example.com', full_name='Ada Admin')


@pytest.fixture
def make_worker(db, make_user):
    counter = {'value': 0}

    def _make_worker(full_name: str | None = None) -> HealthcareWorker:
        counter['value'] += 1
        user = make_user(WORKER_ROLE, email=f'worker{counter["value"]}@example.com')
        worker = HealthcareWorker(
            user_id=user.id,
            full_name=full_name or f'Worker {counter["value"]}',
            phone=f'9000000{counter["value"]}',
            email=user.email,
            position='Nurse',
        )
        db.add(worker)
        db.commit()
        db.refresh(worker)
        return worker

    return _make_worker


@pytest.fixture
def make_patient(db, make_user):
    counter = {'value': 0}

    def _make_patient(full_name: str | None = None) -> Patient:
        counter['value'] += 1
        user = make_user(PATIENT_ROLE, email=f'patient{counter["value"]}@example.com')
        patient = Patient(
            user_id=user.id,
            full_name=full_name or f'Patient {counter["value"]}',
            address='Main Street 1',
            phone=f'4000000{counter["value"]}',
            email=user.email,
            birth_date=date(1950, 1, 1),
        )
        db.add(patient)
        db.commit()
        db.refresh(patient)
        return patient

    return _make_patient


@pytest.fixture
def make_availability(db):
    def _make_availability(
        worker: HealthcareWorker,
        days_ahead: int = 1,
        start_time: time | None = time(9, 0),
        end_time: time | None = time(12, 0),
    ) -> Availability:
        availability = Availability(
            healthcare_worker_id=worker.id,
            date=date.today() + timedelta(days=days_ahead),
            start_time=start_time,
            end_time=end_time,
        )
        db.add(availability)
        db.commit()
        db.refresh(availability)
        return availability

    return _make_availability


@pytest.fixture
def make_appointment(db):
    def _make_appointment(
        availability: Availability,
        patient: Patient,
        status: AppointmentStatus = AppointmentStatus.pending,
        tasks: list[str] | None = None,
    ) -> Appointment:
        appointment = Appointment(
            availability_id=availability.id,
            patient_id=patient.id,
            status=status,
            service_type='Wound care',
            tasks=[AppointmentTask(description=task) for task in tasks or []],
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make_appointment
