from datetime import datetime, timedelta, timezone

import jwt

from clinic_backend.core import config

ADMIN_SUBJECT = "admin"


def create_access_token(subject: str, expires_hours: int | None = None) -> str:
    expire_hours = expires_hours or config.ADMIN_SESSION_HOURS
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + timedelta(hours=expire_hours)
    payload = {"sub": subject, "exp": expire, "iat": issued_at}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def create_admin_session_token() -> str:
    return create_access_token(subject=ADMIN_SUBJECT)


def is_admin_session_token(token: str | None) -> bool:
    if not token:
        return False
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        return False
    return payload.get("sub") == ADMIN_SUBJECT
