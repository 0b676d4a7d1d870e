from sqlalchemy import func
from sqlalchemy.orm import Session
from datetime import datetime

from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..models.user import User
from ..schemas.auth import ProfileResponse
from ..schemas.dashboard import AdminMetrics, DailyCount, DashboardView, PatientSummary

# role -> (dashboard, title, panels)
DASHBOARDS = {
    UserRole.ADMIN: (
        "admin", "Admin Dashboard",
        ["overview", "appointments", "doctors", "patients", "billing"],
    ),
    UserRole.DOCTOR: (
        "doctor", "Doctor Dashboard",
        ["appointments", "patient_history", "prescriptions"],
    ),
    UserRole.PATIENT: (
        "patient", "Patient Portal",
        ["doctors", "appointments", "records"],
    ),
}

METRIC_DAYS = 7

def dashboard_for(user: User) -> DashboardView:
    """The single dashboard a signed-in account lands on."""
    dashboard, title, panels = DASHBOARDS[user.role]
    return DashboardView(
        dashboard=dashboard,
        title=title,
        panels=list(panels),
        profile=ProfileResponse.from_user(user)
    )

class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def admin_metrics(self) -> AdminMetrics:
        by_status = {status.value: 0 for status in AppointmentStatus}
        rows = self.db.query(Appointment.status, func.count(Appointment.id)).group_by(Appointment.status).all()
        for status, count in rows:
            by_status[status.value] = count

        per_day = (
            self.db.query(Appointment.date, func.count(Appointment.id))
            .group_by(Appointment.date)
            .order_by(Appointment.date.desc())
            .limit(METRIC_DAYS)
            .all()
        )

        return AdminMetrics(
            total_patients=self.db.query(func.count(Patient.id)).scalar(),
            total_doctors=self.db.query(func.count(Doctor.id)).scalar(),
            total_appointments=sum(by_status.values()),
            appointments_by_status=by_status,
            appointments_per_day=[
                DailyCount(date=day, appointments=count) for day, count in reversed(per_day)
            ]
        )

    def patient_summary(self, patient: Patient, now: datetime) -> PatientSummary:
        upcoming = [
            appointment for appointment in patient.appointments
            if appointment.status == AppointmentStatus.SCHEDULED and appointment.starts_at >= now
        ]
        return PatientSummary(
            upcoming_appointments=len(upcoming),
            medical_records=len(patient.medical_records)
        )
