import pytest
from fastapi import HTTPException

from homecare.models.appointment import Appointment, AppointmentStatus
from homecare.models.user import AuthUser
from homecare.routes.appointment_routes import (
    approve_appointment,
    create_appointment,
    delete_appointment,
    get_appointment,
    list_appointments,
    list_patient_appointments,
    list_worker_appointments,
    reject_appointment,
    update_appointment,
)
from homecare.schemas.appointment import AppointmentCreate, AppointmentUpdate


def _owner(db, profile) -> AuthUser:
    return db.get(AuthUser, profile.user_id)


def test_create_appointment_returns_message_and_created(db, admin_user, make_worker, make_patient, make_availability) -> None:
    availability = make_availability(make_worker())
    patient = make_patient()

    response = create_appointment(
        AppointmentCreate(availability_id=availability.id, patient_id=patient.id, tasks=['Bathing']),
        db=db,
        current_user=admin_user,
    )

    assert response.message == 'Appointment created successfully'
    assert response.created.status == AppointmentStatus.pending


def test_create_appointment_maps_booked_slot_to_bad_request(
    db, admin_user, make_worker, make_patient, make_availability, make_appointment
) -> None:
    availability = make_availability(make_worker())
    make_appointment(availability, make_patient())

    with pytest.raises(HTTPException) as exception_info:
        create_appointment(
            AppointmentCreate(availability_id=availability.id, patient_id=make_patient().id),
            db=db,
            current_user=admin_user,
        )

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'This availability is already booked.'


def test_patient_cannot_book_for_someone_else(db, make_worker, make_patient, make_availability) -> None:
    availability = make_availability(make_worker())
    me, other = make_patient(), make_patient()

    with pytest.raises(HTTPException) as exception_info:
        create_appointment(
            AppointmentCreate(availability_id=availability.id, patient_id=other.id),
            db=db,
            current_user=_owner(db, me),
        )

    assert exception_info.value.status_code == 403


def test_get_appointment_missing_returns_not_found(db, admin_user) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_appointment(appointment_id=404, db=db, current_user=admin_user)

    assert exception_info.value.status_code == 404


def test_list_appointments_returns_not_found_when_empty(db, admin_user) -> None:
    with pytest.raises(HTTPException) as exception_info:
        list_appointments(db=db, current_user=admin_user)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'No appointments found.'


def test_list_appointments_enriches_with_names(
    db, admin_user, make_worker, make_patient, make_availability, make_appointment
) -> None:
    worker = make_worker(full_name='Wendy Worker')
    patient = make_patient(full_name='Peter Patient')
    make_appointment(make_availability(worker), patient)

    rows = list_appointments(db=db, current_user=admin_user)

    assert len(rows) == 1
    assert rows[0].patient_name == 'Peter Patient'
    assert rows[0].patient_email == patient.email
    assert rows[0].worker_name == 'Wendy Worker'
    assert rows[0].worker_email == worker.email


def test_list_worker_appointments_returns_not_found_when_empty(db, make_worker) -> None:
    worker = make_worker()

    with pytest.raises(HTTPException) as exception_info:
        list_worker_appointments(worker_id=worker.id, db=db, current_user=_owner(db, worker))

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'No appointments found for this worker.'


def test_worker_sees_own_appointments_but_not_others(
    db, make_worker, make_patient, make_availability, make_appointment
) -> None:
    worker, other = make_worker(full_name='Walter Worker'), make_worker()
    make_appointment(make_availability(worker), make_patient())

    rows = list_worker_appointments(worker_id=worker.id, db=db, current_user=_owner(db, worker))
    assert [row.worker_name for row in rows] == ['Walter Worker']

    with pytest.raises(HTTPException) as exception_info:
        list_worker_appointments(worker_id=worker.id, db=db, current_user=_owner(db, other))
    assert exception_info.value.status_code == 403


def test_patient_lists_own_appointments(db, make_worker, make_patient, make_availability, make_appointment) -> None:
    patient = make_patient()
    make_appointment(make_availability(make_worker()), patient)

    rows = list_patient_appointments(patient_id=patient.id, db=db, current_user=_owner(db, patient))

    assert len(rows) == 1


def test_update_appointment_returns_updated(
    db, admin_user, make_worker, make_patient, make_availability, make_appointment
) -> None:
    appointment = make_appointment(make_availability(make_worker()), make_patient())

    response = update_appointment(
        appointment_id=appointment.id,
        data=AppointmentUpdate(status='Approved', visit_note='All good'),
        db=db,
        current_user=admin_user,
    )

    assert response.message == 'Appointment updated successfully'
    assert response.updated.status == AppointmentStatus.approved
    assert response.updated.visit_note == 'All good'


def test_delete_appointment_rejects_role_that_does_not_match_caller(
    db, admin_user, make_worker, make_patient, make_availability, make_appointment
) -> None:
    appointment = make_appointment(make_availability(make_worker()), make_patient())

    with pytest.raises(HTTPException) as exception_info:
        delete_appointment(appointment_id=appointment.id, role='Patient', db=db, current_user=admin_user)

    assert exception_info.value.status_code == 403


def test_patient_cancel_keeps_row_as_cancelled(
    db, make_worker, make_patient, make_availability, make_appointment
) -> None:
    patient = make_patient()
    appointment = make_appointment(make_availability(make_worker()), patient)

    response = delete_appointment(
        appointment_id=appointment.id,
        role='Patient',
        db=db,
        current_user=_owner(db, patient),
    )

    assert response.message == 'Appointment deleted successfully'
    assert db.get(Appointment, appointment.id).status == AppointmentStatus.cancelled


def test_approve_and_reject_appointment(
    db, admin_user, make_worker, make_patient, make_availability, make_appointment
) -> None:
    worker = make_worker()
    approved_id = make_appointment(make_availability(worker, days_ahead=1), make_patient()).id
    rejected_id = make_appointment(make_availability(worker, days_ahead=2), make_patient()).id

    approve_response = approve_appointment(appointment_id=approved_id, db=db, current_user=admin_user)
    reject_response = reject_appointment(appointment_id=rejected_id, db=db, current_user=admin_user)

    assert approve_response.message == 'Appointment approved successfully'
    assert approve_response.appointment.status == AppointmentStatus.approved
    assert reject_response.message == 'Appointment rejected and slot released successfully'
    assert reject_response.appointment.id == rejected_id
    assert db.get(Appointment, rejected_id) is None


def test_approve_missing_appointment_returns_not_found(db, admin_user) -> None:
    with pytest.raises(HTTPException) as exception_info:
        approve_appointment(appointment_id=999, db=db, current_user=admin_user)

    assert exception_info.value.status_code == 404
