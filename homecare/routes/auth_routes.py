import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from homecare.auth import jwt_handler
from homecare.auth.dependencies import get_current_user
from homecare.database import get_db
from homecare.models.user import AuthUser
from homecare.repositories import healthcare_worker_repository, patient_repository, user_repository
from homecare.routes.errors import REPOSITORY_ERRORS, to_http_error
from homecare.schemas.auth import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    PatientRegisterRequest,
)
from homecare.schemas.profiles import PatientResponse

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


def issue_login(user: AuthUser) -> LoginResponse:
    token = jwt_handler.create_access_token(
        subject=user.email,
        role=user.role,
        uid=user.id,
        full_name=user.full_name,
    )
    return LoginResponse(token=token, role=user.role, email=user.email, full_name=user.full_name)


@router.post('/login', response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = user_repository.authenticate(db, str(data.email), data.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid email or password')

    logger.info('User %s signed in as %s', user.email, user.role)
    return issue_login(user)


@router.post('/register-patient', response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def register_patient(data: PatientRegisterRequest, db: Session = Depends(get_db)):
    try:
        return patient_repository.register(db, data)
    except REPOSITORY_ERRORS as exc:
        raise to_http_error(exc, 'Error registering patient') from exc


@router.get('/me', response_model=CurrentUserResponse)
def me(
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    patient = patient_repository.get_by_user_id(db, current_user.id)
    worker = healthcare_worker_repository.get_by_user_id(db, current_user.id)

    return CurrentUserResponse(
        id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        role=current_user.role,
        patient_id=patient.id if patient else None,
        healthcare_worker_id=worker.id if worker else None,
    )
