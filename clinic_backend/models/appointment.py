"""Appointment model definitions."""

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String, func

from clinic_backend.database import Base

PATIENT_TYPES = ('new', 'existing')


class Appointment(Base):
    """A booked half-hour visit. ``appointment_dt`` is unique across the table."""
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint("patient_type IN ('new', 'existing')", name='ck_appointments_patient_type'),
        Index('idx_appointment_dt', 'appointment_dt', unique=True),
        Index('idx_phone', 'phone'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_type = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    email = Column(String, nullable=True)
    insurance_provider = Column(String, nullable=True)
    insurance_id = Column(String, nullable=True)
    reason = Column(String, nullable=False)
    appointment_dt = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
