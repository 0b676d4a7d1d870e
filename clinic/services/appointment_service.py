from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from typing import Dict, List, NamedTuple, Optional
import logging

from ..core.config import settings
from ..core.security import NotFoundError
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..schemas.appointment import AppointmentCreate, BookingRequest
from .filters import filter_by_query

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"date", "time", "status", "reason", "notes"})

class AppointmentPartition(NamedTuple):
    upcoming: list
    future: list
    past: list

def partition_appointments(
    appointments,
    now: datetime,
    window_days: Optional[int] = None
) -> AppointmentPartition:
    """Split appointments around ``now``.

    ``upcoming`` holds those starting within the window (soonest first),
    ``future`` those beyond it (soonest first) and ``past`` those already
    started (most recent first).
    """
    if window_days is None:
        window_days = settings.UPCOMING_WINDOW_DAYS
    horizon = now + timedelta(days=window_days)

    upcoming, future, past = [], [], []
    for appointment in appointments:
        starts_at = appointment.starts_at
        if starts_at < now:
            past.append(appointment)
        elif starts_at <= horizon:
            upcoming.append(appointment)
        else:
            future.append(appointment)

    upcoming.sort(key=lambda a: a.starts_at)
    future.sort(key=lambda a: a.starts_at)
    past.sort(key=lambda a: a.starts_at, reverse=True)
    return AppointmentPartition(upcoming, future, past)

def is_starting_now(
    starts_at: datetime,
    now: datetime,
    window_minutes: Optional[int] = None,
    grace_minutes: Optional[int] = None
) -> bool:
    """True when an appointment starts within the next hour or has just started."""
    if window_minutes is None:
        window_minutes = settings.NOW_WINDOW_MINUTES
    if grace_minutes is None:
        grace_minutes = settings.NOW_GRACE_MINUTES
    minutes_until = (starts_at - now).total_seconds() / 60
    return -grace_minutes <= minutes_until <= window_minutes

class AppointmentService:
    def __init__(self, db: Session):
        self.db = db

    def list_appointments(
        self,
        q: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
        patient_id: Optional[int] = None,
        doctor_id: Optional[int] = None
    ) -> List[Appointment]:
        query = self.db.query(Appointment)
        if status is not None:
            query = query.filter(Appointment.status == status)
        if patient_id is not None:
            query = query.filter(Appointment.patient_id == patient_id)
        if doctor_id is not None:
            query = query.filter(Appointment.doctor_id == doctor_id)

        appointments = query.order_by(Appointment.date, Appointment.time, Appointment.id).all()
        return filter_by_query(
            appointments, q, lambda a: (a.patient_name, a.doctor_name)
        )

    def get_appointment(
        self,
        appointment_id: int,
        patient_id: Optional[int] = None,
        doctor_id: Optional[int] = None
    ) -> Appointment:
        """Fetch one appointment, optionally scoped to its patient or doctor.

        Appointments outside the scope are reported as missing.
        """
        query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
        if patient_id is not None:
            query = query.filter(Appointment.patient_id == patient_id)
        if doctor_id is not None:
            query = query.filter(Appointment.doctor_id == doctor_id)

        appointment = query.first()
        if not appointment:
            raise NotFoundError("Appointment", appointment_id)
        return appointment

    def create_appointment(self, data: AppointmentCreate) -> Appointment:
        appointment = Appointment(
            patient=self._get_patient(data.patient_id),
            doctor=self._get_doctor(data.doctor_id),
            date=data.date,
            time=data.time,
            status=data.status,
            reason=data.reason,
            notes=data.notes
        )
        return self._save_new(appointment)

    def book_appointment(self, patient: Patient, data: BookingRequest) -> Appointment:
        """Book a visit for ``patient``. Overlapping bookings are allowed."""
        appointment = Appointment(
            patient=patient,
            doctor=self._get_doctor(data.doctor_id),
            date=data.date,
            time=data.time,
            status=AppointmentStatus.SCHEDULED,
            reason=data.reason,
            notes=data.notes or None
        )
        return self._save_new(appointment)

    def update_appointment(self, appointment: Appointment, changes: Dict) -> Appointment:
        """Apply a partial edit. The id and every unsubmitted field are kept.

        Only ``EDITABLE_FIELDS`` and the patient and doctor ids may change.
        """
        unknown = set(changes) - EDITABLE_FIELDS - {"patient_id", "doctor_id"}
        if unknown:
            raise ValueError(f"Appointment fields cannot be edited: {sorted(unknown)}")

        for field, value in changes.items():
            if field == "patient_id":
                appointment.patient = self._get_patient(value)
            elif field == "doctor_id":
                appointment.doctor = self._get_doctor(value)
            else:
                setattr(appointment, field, value)

        self.db.commit()
        self.db.refresh(appointment)
        logger.info(f"Updated appointment {appointment.id}: {sorted(changes)}")
        return appointment

    def cancel_appointment(self, appointment: Appointment) -> Appointment:
        appointment.status = AppointmentStatus.CANCELLED
        self.db.commit()
        self.db.refresh(appointment)
        logger.info(f"Cancelled appointment {appointment.id}")
        return appointment

    def delete_appointment(self, appointment: Appointment) -> None:
        appointment_id = appointment.id
        self.db.delete(appointment)
        self.db.commit()
        logger.info(f"Deleted appointment {appointment_id}")

    def doctor_board(self, doctor: Optional[Doctor], now: datetime) -> AppointmentPartition:
        if doctor is None:
            return AppointmentPartition([], [], [])
        return partition_appointments(self.list_appointments(doctor_id=doctor.id), now)

    def _save_new(self, appointment: Appointment) -> Appointment:
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        logger.info(
            f"Created appointment {appointment.id} for patient {appointment.patient_id} "
            f"with doctor {appointment.doctor_id} on {appointment.date} {appointment.time}"
        )
        return appointment

    def _get_patient(self, patient_id: int) -> Patient:
        patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise NotFoundError("Patient", patient_id)
        return patient

    def _get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.db.query(Doctor).filter(Doctor.id == doctor_id).first()
        if not doctor:
            raise NotFoundError("Doctor", doctor_id)
        return doctor
