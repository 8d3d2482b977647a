import datetime as dt

from pydantic import BaseModel


class AvailabilityCreate(BaseModel):
    healthcare_worker_id: int
    date: dt.date | None = None
    start_time: dt.time | None = None
    end_time: dt.time | None = None


class AvailabilityUpdate(BaseModel):
    date: dt.date | None = None
    start_time: dt.time | None = None
    end_time: dt.time | None = None


class AvailabilityResponse(BaseModel):
    id: int
    healthcare_worker_id: int
    date: dt.date
    start_time: dt.time | None = None
    end_time: dt.time | None = None
    is_booked: bool
    healthcare_worker_name: str | None = None
    healthcare_worker_position: str | None = None

    class Config:
        from_attributes = True


class AvailabilityItemError(BaseModel):
    date: dt.date | None = None
    error: str


class AvailabilityBatchResponse(BaseModel):
    message: str
    created: list[AvailabilityResponse]
    errors: list[AvailabilityItemError] | None = None
