import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from homecare.core import config
from homecare.database import Base, engine, ensure_booking_schema
from homecare.models import appointment, availability, healthcare_worker, patient, user  # noqa: F401
from homecare.routes import (
    appointment_routes,
    auth_routes,
    availability_routes,
    healthcare_worker_routes,
    patient_routes,
)


def configure_logging() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


configure_logging()

app = FastAPI(title='Homecare Scheduling API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_booking_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        return

    if config.SEED_DEMO_DATA:
        from homecare.seed_demo_data import seed_demo_data

        seed_demo_data()


@app.get('/')
def root():
    return {'status': 'Homecare Scheduling API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(availability_routes.router, prefix='/availabilities')
app.include_router(patient_routes.router, prefix='/patients')
app.include_router(healthcare_worker_routes.router, prefix='/healthcare-workers')
