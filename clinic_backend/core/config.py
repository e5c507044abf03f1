import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
IS_PRODUCTION = APP_ENV.lower() == "production"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/appointments.db")
DATABASE_ECHO = _get_bool(os.getenv("DATABASE_ECHO"), default=False)

ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
ADMIN_COOKIE_NAME = "admin_session"
ADMIN_SESSION_HOURS = int(os.getenv("ADMIN_SESSION_HOURS", "8"))
ADMIN_COOKIE_SECURE = _get_bool(os.getenv("ADMIN_COOKIE_SECURE"), default=IS_PRODUCTION)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

CLINIC_TIMEZONE = os.getenv("CLINIC_TIMEZONE", "America/New_York")

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def validate_runtime_config() -> None:
    try:
        ZoneInfo(CLINIC_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"CLINIC_TIMEZONE is not a known time zone: {CLINIC_TIMEZONE!r}.") from exc

    if not IS_PRODUCTION:
        return
    if JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if not ADMIN_PASSWORD:
        raise RuntimeError("ADMIN_PASSWORD must be set in production.")
