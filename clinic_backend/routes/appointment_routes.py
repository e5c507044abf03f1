import logging
import re
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_backend.auth.dependencies import get_db, require_admin
from clinic_backend.models.appointment import PATIENT_TYPES
from clinic_backend.schemas import (
    MAX_REASON_LENGTH,
    AppointmentResponse,
    CreateAppointmentRequest,
    SuccessResponse,
    TimeSlot,
)
from clinic_backend.services import appointments as appointment_store
from clinic_backend.services.timeslots import build_time_slots, is_bookable_slot

logger = logging.getLogger(__name__)

router = APIRouter(tags=['appointments'])

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
APPOINTMENT_DT_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$')
APPOINTMENT_DT_FORMAT = '%Y-%m-%dT%H:%M:%S'
MIN_PHONE_LENGTH = 7
REQUIRED_FIELDS = ('patient_type', 'first_name', 'last_name', 'phone', 'reason', 'appointment_dt')
MAX_STORED_ID = 2**63 - 1
SLOT_TAKEN_DETAIL = 'This time slot is no longer available. Please choose another.'
INTERNAL_ERROR_DETAIL = 'Internal server error'


def internal_error(exc: Exception) -> HTTPException:
    logger.exception('Unexpected database error', exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=INTERNAL_ERROR_DETAIL,
    )


def parse_slot_date(value: str | None) -> date:
    if not value or not DATE_PATTERN.match(value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Missing or invalid date parameter (expected YYYY-MM-DD).',
        )
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Invalid date: {value}.',
        ) from exc


def normalize_phone(value: str | None) -> str:
    phone = (value or '').strip()
    if len(phone) < MIN_PHONE_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Missing or invalid phone number.',
        )
    return phone


def validate_appointment_request(data: CreateAppointmentRequest) -> datetime:
    """Check a booking request and return its parsed slot start.

    Checks run in a fixed order: required fields, patient type, timestamp
    format, then whether the timestamp is a bookable slot.
    """
    missing = [field for field in REQUIRED_FIELDS if not getattr(data, field)]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Missing required fields: {", ".join(missing)}.',
        )

    if data.patient_type not in PATIENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid patient_type: must be 'new' or 'existing'.",
        )

    if not APPOINTMENT_DT_PATTERN.match(data.appointment_dt):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid appointment_dt format (expected YYYY-MM-DDTHH:MM:SS).',
        )

    try:
        appointment_dt = datetime.strptime(data.appointment_dt, APPOINTMENT_DT_FORMAT)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid appointment_dt: not a real calendar date and time.',
        ) from exc

    if not is_bookable_slot(appointment_dt):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid appointment_dt: appointments start on the half hour, 9:00 AM to 4:30 PM, Monday to Friday.',
        )

    if len(data.reason) > MAX_REASON_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'reason must be {MAX_REASON_LENGTH} characters or fewer.',
        )

    return appointment_dt


@router.get('/timeslots', response_model=list[TimeSlot])
def list_timeslots(
    slot_date: str | None = Query(default=None, alias='date'),
    db: Session = Depends(get_db),
):
    requested_date = parse_slot_date(slot_date)

    try:
        booked_starts = appointment_store.get_booked_slot_starts(db, requested_date)
    except SQLAlchemyError as exc:
        raise internal_error(exc) from exc

    return [slot for slot in build_time_slots(requested_date, booked_starts) if slot.available]


@router.get('/my-appointments', response_model=list[AppointmentResponse])
def list_my_appointments(
    phone: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    normalized_phone = normalize_phone(phone)

    try:
        return appointment_store.get_appointments_by_phone(db, normalized_phone)
    except SQLAlchemyError as exc:
        raise internal_error(exc) from exc


@router.get(
    '/appointments',
    response_model=list[AppointmentResponse],
    dependencies=[Depends(require_admin)],
)
def list_appointments(db: Session = Depends(get_db)):
    try:
        return appointment_store.get_all_appointments(db)
    except SQLAlchemyError as exc:
        raise internal_error(exc) from exc


@router.post('/appointments', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, db: Session = Depends(get_db)):
    appointment_dt = validate_appointment_request(data)

    try:
        appointment = appointment_store.create_appointment(
            db,
            patient_type=data.patient_type,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            email=data.email,
            insurance_provider=data.insurance_provider,
            insurance_id=data.insurance_id,
            reason=data.reason,
            appointment_dt=appointment_dt,
        )
    except IntegrityError as exc:
        db.rollback()
        logger.info('Booking conflict for slot %s', appointment_dt.isoformat())
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=SLOT_TAKEN_DETAIL,
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_error(exc) from exc

    logger.info('Created appointment %s for slot %s', appointment.id, appointment_dt.isoformat())
    return AppointmentResponse.model_validate(appointment)


@router.delete(
    '/appointments/{appointment_id}',
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
def delete_appointment(appointment_id: str, db: Session = Depends(get_db)):
    try:
        numeric_id = int(appointment_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid appointment ID.',
        ) from exc

    if not -MAX_STORED_ID - 1 <= numeric_id <= MAX_STORED_ID:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Appointment not found.',
        )

    try:
        deleted = appointment_store.delete_appointment(db, numeric_id)
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_error(exc) from exc

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Appointment not found.',
        )

    logger.info('Deleted appointment %s', numeric_id)
    return SuccessResponse()
