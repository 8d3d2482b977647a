import datetime as dt
import re

from pydantic import BaseModel, EmailStr, Field, field_validator

PHONE_PATTERN = re.compile(r'^\d{8}$')
EARLIEST_BIRTH_DATE = dt.date(1900, 1, 1)
MIN_PASSWORD_LENGTH = 6


def validate_phone(value: str) -> str:
    normalized = value.strip()
    if not PHONE_PATTERN.match(normalized):
        raise ValueError('Phone number must be 8 digits')
    return normalized


def validate_birth_date(value: dt.date) -> dt.date:
    if value > dt.date.today():
        raise ValueError('Birth date cannot be in the future.')
    if value < EARLIEST_BIRTH_DATE:
        raise ValueError('Birth date is not realistic.')
    return value


class PatientBase(BaseModel):
    full_name: str = Field(min_length=1, max_length=100)
    address: str = Field(min_length=1, max_length=200)
    phone: str
    email: EmailStr
    birth_date: dt.date

    @field_validator('phone')
    @classmethod
    def check_phone(cls, value: str) -> str:
        return validate_phone(value)

    @field_validator('birth_date')
    @classmethod
    def check_birth_date(cls, value: dt.date) -> dt.date:
        return validate_birth_date(value)


class PatientCreate(PatientBase):
    user_id: str | None = None


class PatientUpdate(PatientBase):
    id: int


class PatientResponse(BaseModel):
    id: int
    user_id: str
    full_name: str
    address: str
    phone: str
    email: str
    birth_date: dt.date

    class Config:
        from_attributes = True


class HealthcareWorkerBase(BaseModel):
    full_name: str = Field(min_length=1, max_length=100)
    phone: str
    email: EmailStr
    position: str = Field(min_length=1)

    @field_validator('phone')
    @classmethod
    def check_phone(cls, value: str) -> str:
        return validate_phone(value)


class HealthcareWorkerCreate(HealthcareWorkerBase):
    password: str | None = None

    @field_validator('password')
    @classmethod
    def check_password(cls, value: str | None) -> str | None:
        if value is not None and len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
        return value


class HealthcareWorkerUpdate(HealthcareWorkerBase):
    id: int


class HealthcareWorkerResponse(BaseModel):
    id: int
    user_id: str
    full_name: str
    phone: str
    email: str
    position: str

    class Config:
        from_attributes = True
