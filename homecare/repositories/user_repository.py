import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from homecare.auth.passwords import hash_password, verify_password
from homecare.models.user import AuthUser, ROLES
from homecare.repositories.errors import ConflictError, RuleViolationError

logger = logging.getLogger(__name__)


def get_by_email(db: Session, email: str) -> AuthUser | None:
    return db.query(AuthUser).filter(func.lower(AuthUser.email) == email.strip().lower()).first()


def get_by_id(db: Session, user_id: str) -> AuthUser | None:
    return db.get(AuthUser, user_id)


def stage_user(db: Session, email: str, password: str, full_name: str, role: str) -> AuthUser:
    """Add a new identity to the session and flush it so its id is known.

    The caller owns the transaction and decides when to commit.
    """
    if role not in ROLES:
        raise RuleViolationError(f"Role must be one of: {', '.join(ROLES)}.")
    if get_by_email(db, email) is not None:
        raise ConflictError('Email is already registered')

    user = AuthUser(
        email=email.strip(),
        hashed_password=hash_password(password),
        full_name=full_name,
        role=role,
    )
    db.add(user)
    db.flush()
    return user


def authenticate(db: Session, email: str, password: str) -> AuthUser | None:
    user = get_by_email(db, email)
    if user is None:
        logger.warning('Login attempt with unknown email: %s', email)
        return None
    if not verify_password(password, user.hashed_password):
        logger.warning('Invalid password attempt for user: %s', email)
        return None
    return user
