import datetime as dt

from pydantic import BaseModel, field_validator

from homecare.models.appointment import AppointmentStatus


class AppointmentCreate(BaseModel):
    availability_id: int
    patient_id: int
    service_type: str = ''
    requested_local_time: dt.datetime | None = None
    # "HH:mm" or "HH:mm:ss"; anything unparsable is stored as null
    selected_start_time: str | None = None
    selected_end_time: str | None = None
    tasks: list[str] = []


class AppointmentUpdate(BaseModel):
    availability_id: int | None = None
    status: AppointmentStatus | None = None
    service_type: str | None = None
    visit_note: str | None = None
    tasks: list[str] | None = None
    selected_start_time: str | None = None
    selected_end_time: str | None = None

    @field_validator('status', 'service_type', mode='before')
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AppointmentTaskResponse(BaseModel):
    id: int
    description: str
    status: str
    done: bool

    class Config:
        from_attributes = True


class WorkerSummary(BaseModel):
    id: int
    full_name: str
    email: str
    position: str

    class Config:
        from_attributes = True


class AvailabilitySummary(BaseModel):
    id: int
    healthcare_worker_id: int
    date: dt.date
    start_time: dt.time | None = None
    end_time: dt.time | None = None
    healthcare_worker: WorkerSummary | None = None

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: int
    availability_id: int
    patient_id: int
    status: AppointmentStatus
    service_type: str
    visit_note: str | None = None
    created_at: dt.datetime
    requested_local_time: dt.datetime | None = None
    selected_start_time: dt.time | None = None
    selected_end_time: dt.time | None = None
    tasks: list[AppointmentTaskResponse] = []
    availability: AvailabilitySummary | None = None

    class Config:
        from_attributes = True


class WorkerAppointmentResponse(BaseModel):
    id: int
    status: AppointmentStatus
    service_type: str
    date: dt.date
    worker_name: str
    patient_id: int
    selected_start_time: dt.time | None = None


class AdminAppointmentResponse(BaseModel):
    id: int
    status: AppointmentStatus
    service_type: str
    patient_id: int
    patient_name: str
    patient_email: str
    worker_name: str
    worker_email: str
    date: dt.date | None = None
    selected_start_time: dt.time | None = None
    created_at: dt.datetime
    availability_id: int
    availability: AvailabilitySummary | None = None


class AppointmentCreatedResponse(BaseModel):
    message: str
    created: AppointmentResponse


class AppointmentUpdatedResponse(BaseModel):
    message: str
    updated: AppointmentResponse


class AppointmentActionResponse(BaseModel):
    message: str
    appointment: AppointmentResponse


class MessageResponse(BaseModel):
    message: str
