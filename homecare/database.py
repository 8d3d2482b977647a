from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from homecare.core import config


def _connect_args(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(config.DATABASE_URL, connect_args=_connect_args(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_booking_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_booking_schema(bind=None) -> None:
    """Bring an older database up to the current booking schema.

    Adds columns that earlier versions did not have and creates the unique
    index that allows at most one appointment per availability.
    """
    global _booking_schema_checked

    if _booking_schema_checked:
        return

    bind = bind or engine

    with _schema_lock:
        if _booking_schema_checked:
            return

        inspector = inspect(bind)
        table_names = set(inspector.get_table_names())

        if 'appointments' not in table_names or 'availabilities' not in table_names:
            _booking_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('selected_start_time', 'ALTER TABLE appointments ADD COLUMN selected_start_time TIME'),
            ('selected_end_time', 'ALTER TABLE appointments ADD COLUMN selected_end_time TIME'),
            ('visit_note', 'ALTER TABLE appointments ADD COLUMN visit_note VARCHAR'),
            ('requested_local_time', 'ALTER TABLE appointments ADD COLUMN requested_local_time TIMESTAMP'),
        ]

        with bind.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text(
                    'CREATE UNIQUE INDEX IF NOT EXISTS ux_appointments_availability_id '
                    'ON appointments(availability_id)'
                )
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_patient ON appointments(patient_id)')
            )
            connection.execute(
                text(
                    'CREATE INDEX IF NOT EXISTS idx_availabilities_worker_date '
                    'ON availabilities(healthcare_worker_id, date)'
                )
            )

        _booking_schema_checked = True
