from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Text, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from ..core.database import Base

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)

    # Appointment details
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)  # HH:MM
    status = Column(SQLEnum(AppointmentStatus), default=AppointmentStatus.SCHEDULED, nullable=False)
    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("Patient", back_populates="appointments")
    doctor = relationship("Doctor", back_populates="appointments")

    @property
    def starts_at(self) -> datetime:
        hour, minute = (int(part) for part in self.time.split(":"))
        return datetime(self.date.year, self.date.month, self.date.day, hour, minute)

    @property
    def doctor_name(self):
        return self.doctor.name if self.doctor else None

    @property
    def doctor_specialty(self):
        return self.doctor.specialty if self.doctor else None

    @property
    def patient_name(self):
        return self.patient.full_name if self.patient else None

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, date='{self.date} {self.time}')>"
