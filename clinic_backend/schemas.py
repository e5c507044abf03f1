from datetime import datetime

from pydantic import BaseModel, field_validator

MAX_REASON_LENGTH = 600


def _strip_required(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip()


def _strip_optional(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


class TimeSlot(BaseModel):
    time: str
    datetime: datetime
    available: bool


class CreateAppointmentRequest(BaseModel):
    """Raw booking input.

    Every field is optional here so that missing values are reported by the
    booking workflow in a fixed order instead of by pydantic.
    """
    patient_type: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    email: str | None = None
    insurance_provider: str | None = None
    insurance_id: str | None = None
    reason: str | None = None
    appointment_dt: str | None = None

    @field_validator('patient_type', 'first_name', 'last_name', 'phone', 'reason', 'appointment_dt')
    @classmethod
    def strip_required_fields(cls, value: str | None) -> str | None:
        return _strip_required(value)

    @field_validator('email', 'insurance_provider', 'insurance_id')
    @classmethod
    def blank_optional_fields_to_none(cls, value: str | None) -> str | None:
        return _strip_optional(value)


class AppointmentResponse(BaseModel):
    id: int
    patient_type: str
    first_name: str
    last_name: str
    phone: str
    email: str | None = None
    insurance_provider: str | None = None
    insurance_id: str | None = None
    reason: str
    appointment_dt: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class AdminLoginRequest(BaseModel):
    password: str | None = None


class AdminSessionResponse(BaseModel):
    authenticated: bool


class SuccessResponse(BaseModel):
    success: bool = True
