from datetime import date, time, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from homecare.models.appointment import Appointment, AppointmentStatus, AppointmentTask
from homecare.repositories import appointment_repository, availability_repository
from homecare.repositories.appointment_repository import AppointmentAction, action_for_delete_role
from homecare.repositories.errors import NotFoundError, RuleViolationError
from homecare.schemas.appointment import AppointmentCreate, AppointmentUpdate
from homecare.schemas.availability import AvailabilityCreate


def _book(db, availability_id: int, patient_id: int, **extra):
    return appointment_repository.create(
        db,
        AppointmentCreate(availability_id=availability_id, patient_id=patient_id, **extra),
    )


def test_create_books_pending_appointment_with_tasks(db, make_worker, make_patient, make_availability) -> None:
    availability = make_availability(make_worker())
    patient = make_patient()

    created = _book(
        db,
        availability.id,
        patient.id,
        service_type='Wound care',
        selected_start_time='09:30',
        selected_end_time='not a time',
        tasks=['Change dressing', 'Check temperature'],
    )

    assert created.status == AppointmentStatus.pending
    assert created.selected_start_time == time(9, 30)
    assert created.selected_end_time is None
    assert [task.description for task in created.tasks] == ['Change dressing', 'Check temperature']
    assert all(task.status == 'Pending' and task.done is False for task in created.tasks)
    assert created.availability.healthcare_worker is not None


def test_create_then_list_by_patient_shows_one_pending(db, make_worker, make_patient, make_availability) -> None:
    availability = make_availability(make_worker())
    patient = make_patient()

    _book(db, availability.id, patient.id)

    appointments = appointment_repository.list_by_patient(db, patient.id)
    assert len(appointments) == 1
    assert appointments[0].status == AppointmentStatus.pending


def test_create_rejects_booked_availability(db, make_worker, make_availability, make_patient) -> None:
    availability = make_availability(make_worker())
    _book(db, availability.id, make_patient().id)

    with pytest.raises(RuleViolationError) as exception_info:
        _book(db, availability.id, make_patient().id)

    assert str(exception_info.value) == 'This availability is already booked.'
    assert db.query(Appointment).count() == 1


def test_create_rejects_missing_availability(db, make_patient) -> None:
    with pytest.raises(RuleViolationError) as exception_info:
        _book(db, 999, make_patient().id)

    assert str(exception_info.value) == 'Availability not found.'


def test_create_rejects_missing_patient(db, make_worker, make_availability) -> None:
    availability = make_availability(make_worker())

    with pytest.raises(RuleViolationError):
        _book(db, availability.id, 999)


def test_unique_index_blocks_second_booking_written_directly(
    db, make_worker, make_patient, make_availability, make_appointment
) -> None:
    availability = make_availability(make_worker())
    make_appointment(availability, make_patient())

    db.add(Appointment(availability_id=availability.id, patient_id=make_patient().id))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_approve_sets_status(db, make_worker, make_patient, make_availability) -> None:
    created = _book(db, make_availability(make_worker()).id, make_patient().id)

    approved = appointment_repository.approve(db, created.id)

    assert approved.status == AppointmentStatus.approved
    assert db.get(Appointment, created.id).status == AppointmentStatus.approved


def test_approve_missing_appointment_is_not_found(db) -> None:
    with pytest.raises(NotFoundError):
        appointment_repository.approve(db, 12345)


def test_reject_removes_row_and_frees_slot(db, make_worker, make_patient, make_availability) -> None:
    availability = make_availability(make_worker())
    created = _book(db, availability.id, make_patient().id, tasks=['Shopping'])

    rejected = appointment_repository.reject(db, created.id)

    assert rejected.id == created.id
    assert db.query(Appointment).count() == 0
    assert db.query(AppointmentTask).count() == 0
    assert availability.id in [item.id for item in availability_repository.list_unbooked(db)]


@pytest.mark.parametrize(
    ('role', 'expected_status'),
    [('Admin', AppointmentStatus.rejected), ('Patient', AppointmentStatus.cancelled)],
)
def test_delete_with_role_keeps_row_with_new_status(
    db, make_worker, make_patient, make_availability, role: str, expected_status: AppointmentStatus
) -> None:
    availability = make_availability(make_worker())
    created = _book(db, availability.id, make_patient().id)

    appointment_repository.delete(db, created.id, role)

    kept = db.get(Appointment, created.id)
    assert kept.status == expected_status
    assert availability.id not in [item.id for item in availability_repository.list_unbooked(db)]


def test_delete_without_role_removes_row_and_tasks(db, make_worker, make_patient, make_availability) -> None:
    created = _book(db, make_availability(make_worker()).id, make_patient().id, tasks=['Laundry', 'Meds'])

    appointment_repository.delete(db, created.id)

    assert db.get(Appointment, created.id) is None
    assert db.query(AppointmentTask).count() == 0


def test_action_for_delete_role_maps_roles() -> None:
    assert action_for_delete_role('Admin') is AppointmentAction.admin_cancel
    assert action_for_delete_role('Patient') is AppointmentAction.patient_cancel
    assert action_for_delete_role(None) is AppointmentAction.hard_delete

    with pytest.raises(RuleViolationError):
        action_for_delete_role('Worker')


def test_update_applies_only_supplied_fields(db, make_worker, make_patient, make_availability) -> None:
    created = _book(
        db,
        make_availability(make_worker()).id,
        make_patient().id,
        service_type='Wound care',
        tasks=['Original task'],
    )

    updated = appointment_repository.update(
        db,
        created.id,
        AppointmentUpdate(visit_note='Patient was asleep', status='', selected_start_time='bogus'),
    )

    assert updated.visit_note == 'Patient was asleep'
    assert updated.service_type == 'Wound care'
    assert updated.status == AppointmentStatus.pending
    assert [task.description for task in updated.tasks] == ['Original task']


def test_update_replaces_tasks_when_list_given(db, make_worker, make_patient, make_availability) -> None:
    created = _book(db, make_availability(make_worker()).id, make_patient().id, tasks=['Old'])

    updated = appointment_repository.update(db, created.id, AppointmentUpdate(tasks=['New one', 'New two']))

    assert [task.description for task in updated.tasks] == ['New one', 'New two']
    assert db.query(AppointmentTask).count() == 2


def test_update_moves_to_free_availability(db, make_worker, make_patient, make_availability) -> None:
    worker = make_worker()
    original = make_availability(worker, days_ahead=1)
    target = make_availability(worker, days_ahead=2)
    created = _book(db, original.id, make_patient().id)

    updated = appointment_repository.update(db, created.id, AppointmentUpdate(availability_id=target.id))

    assert updated.availability_id == target.id
    assert original.id in [item.id for item in availability_repository.list_unbooked(db)]


def test_update_rejects_moving_to_booked_availability(db, make_worker, make_patient, make_availability) -> None:
    worker = make_worker()
    first = make_availability(worker, days_ahead=1)
    second = make_availability(worker, days_ahead=2)
    created = _book(db, first.id, make_patient().id)
    _book(db, second.id, make_patient().id)

    with pytest.raises(RuleViolationError) as exception_info:
        appointment_repository.update(db, created.id, AppointmentUpdate(availability_id=second.id))

    assert str(exception_info.value) == "This worker's availability is already booked."


def test_update_rejects_missing_new_availability(db, make_worker, make_patient, make_availability) -> None:
    created = _book(db, make_availability(make_worker()).id, make_patient().id)

    with pytest.raises(RuleViolationError) as exception_info:
        appointment_repository.update(db, created.id, AppointmentUpdate(availability_id=999))

    assert str(exception_info.value) == 'New availability not found.'


def test_list_by_worker_only_returns_that_workers_bookings(
    db, make_worker, make_patient, make_availability
) -> None:
    worker, other = make_worker(), make_worker()
    patient = make_patient()
    mine = _book(db, make_availability(worker).id, patient.id)
    _book(db, make_availability(other).id, patient.id)

    assert [item.id for item in appointment_repository.list_by_worker(db, worker.id)] == [mine.id]


def test_worker_slot_can_be_rebooked_after_rejection(db, make_worker, make_patient) -> None:
    worker = make_worker()
    first_patient, second_patient = make_patient(), make_patient()
    created, errors = availability_repository.add_many(
        db,
        [AvailabilityCreate(healthcare_worker_id=worker.id, date=date.today() + timedelta(days=offset))
         for offset in (1, 2)],
    )
    assert errors == []
    slot = created[0]

    booking = _book(db, slot.id, first_patient.id)
    with pytest.raises(RuleViolationError) as exception_info:
        _book(db, slot.id, second_patient.id)
    assert str(exception_info.value) == 'This availability is already booked.'

    appointment_repository.reject(db, booking.id)
    rebooked = _book(db, slot.id, second_patient.id)

    assert rebooked.patient_id == second_patient.id
    assert rebooked.status == AppointmentStatus.pending
