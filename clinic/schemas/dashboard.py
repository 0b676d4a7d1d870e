from pydantic import BaseModel
from typing import Dict, List
import datetime as dt

from .auth import ProfileResponse

class DashboardView(BaseModel):
    dashboard: str
    title: str
    panels: List[str]
    profile: ProfileResponse

class DailyCount(BaseModel):
    date: dt.date
    appointments: int

class AdminMetrics(BaseModel):
    total_patients: int
    total_doctors: int
    total_appointments: int
    appointments_by_status: Dict[str, int]
    appointments_per_day: List[DailyCount]

class PatientSummary(BaseModel):
    upcoming_appointments: int
    medical_records: int
