from datetime import datetime, timedelta, timezone

import jwt

from homecare.core import config

ROLE_CLAIM = "role"


def create_access_token(
    subject: str,
    role: str,
    uid: str | None = None,
    full_name: str = "",
    expires_minutes: int | None = None,
) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    issued_at = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        ROLE_CLAIM: role,
        "uid": uid,
        "fullName": full_name,
        "exp": issued_at + timedelta(minutes=expire_minutes),
        "iat": issued_at,
    }
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
