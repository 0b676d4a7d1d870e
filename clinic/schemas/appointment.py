from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
import datetime as dt

from ..models.appointment import AppointmentStatus

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

class AppointmentCreate(BaseModel):
    patient_id: int
    doctor_id: int
    date: dt.date
    time: str = Field(..., pattern=TIME_PATTERN)
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    reason: Optional[str] = None
    notes: Optional[str] = None

class AppointmentUpdate(BaseModel):
    """Partial edit; only the fields present in the request change."""
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    status: Optional[AppointmentStatus] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def reject_null_required(self):
        for field in ("patient_id", "doctor_id", "date", "time", "status"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be empty")
        return self

class BookingRequest(BaseModel):
    doctor_id: int
    date: dt.date
    time: str = Field(..., pattern=TIME_PATTERN)
    reason: str = ""
    notes: Optional[str] = None

class RescheduleRequest(BaseModel):
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    reason: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def reject_null_required(self):
        for field in ("date", "time"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be empty")
        return self

class DoctorAppointmentUpdate(BaseModel):
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def reject_null_status(self):
        if "status" in self.model_fields_set and self.status is None:
            raise ValueError("status cannot be empty")
        return self

class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    patient_name: Optional[str] = None
    doctor_name: Optional[str] = None
    doctor_specialty: Optional[str] = None
    date: dt.date
    time: str
    status: AppointmentStatus
    reason: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True

class BoardAppointment(AppointmentResponse):
    starts_at: dt.datetime
    is_now: bool = False

class AppointmentBoard(BaseModel):
    upcoming: List[BoardAppointment]
    future: List[BoardAppointment]
    past: List[BoardAppointment]
