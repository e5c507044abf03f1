from datetime import date, datetime, time, timedelta

from sqlalchemy.orm import Session

from clinic_backend.models.appointment import Appointment


def get_all_appointments(db: Session) -> list[Appointment]:
    return db.query(Appointment).order_by(Appointment.appointment_dt.asc()).all()


def get_appointments_by_phone(db: Session, phone: str) -> list[Appointment]:
    return db.query(Appointment).filter(
        Appointment.phone == phone,
    ).order_by(Appointment.appointment_dt.asc()).all()


def get_booked_slot_starts(db: Session, slot_date: date) -> set[datetime]:
    day_start = datetime.combine(slot_date, time.min)
    day_end = day_start + timedelta(days=1)
    rows = db.query(Appointment.appointment_dt).filter(
        Appointment.appointment_dt >= day_start,
        Appointment.appointment_dt < day_end,
    ).all()
    return {appointment_dt for (appointment_dt,) in rows}


def create_appointment(
    db: Session,
    *,
    patient_type: str,
    first_name: str,
    last_name: str,
    phone: str,
    reason: str,
    appointment_dt: datetime,
    email: str | None = None,
    insurance_provider: str | None = None,
    insurance_id: str | None = None,
) -> Appointment:
    """Insert and commit a new appointment.

    Raises ``sqlalchemy.exc.IntegrityError`` when ``appointment_dt`` is already
    taken; the caller owns rollback.
    """
    appointment = Appointment(
        patient_type=patient_type,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        email=email,
        insurance_provider=insurance_provider,
        insurance_id=insurance_id,
        reason=reason,
        appointment_dt=appointment_dt,
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment


def delete_appointment(db: Session, appointment_id: int) -> bool:
    deleted = db.query(Appointment).filter(Appointment.id == appointment_id).delete(
        synchronize_session=False,
    )
    db.commit()
    return deleted > 0
