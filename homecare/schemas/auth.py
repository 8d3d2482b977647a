import datetime as dt

from pydantic import BaseModel, EmailStr, Field, field_validator

from homecare.schemas.profiles import MIN_PASSWORD_LENGTH, validate_birth_date, validate_phone


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    token: str
    role: str
    email: str
    full_name: str


class PatientRegisterRequest(BaseModel):
    full_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=100)
    address: str = Field(min_length=1, max_length=200)
    phone: str
    birth_date: dt.date

    @field_validator('phone')
    @classmethod
    def check_phone(cls, value: str) -> str:
        return validate_phone(value)

    @field_validator('birth_date')
    @classmethod
    def check_birth_date(cls, value: dt.date) -> dt.date:
        return validate_birth_date(value)


class CurrentUserResponse(BaseModel):
    id: str
    email: str
    full_name: str
    role: str
    patient_id: int | None = None
    healthcare_worker_id: int | None = None
