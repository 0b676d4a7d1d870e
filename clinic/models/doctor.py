from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Float, Date
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=True)

    # Personal information
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    specialty = Column(String(100), nullable=False)
    department = Column(String(100), nullable=True)

    # Professional information
    years_of_experience = Column(Integer, nullable=True)
    education = Column(String(255), nullable=True)
    rating = Column(Float, nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="doctor")
    appointments = relationship("Appointment", back_populates="doctor", cascade="all, delete")
    availability = relationship(
        "DoctorAvailability", back_populates="doctor",
        cascade="all, delete-orphan", order_by="DoctorAvailability.id"
    )
    time_slots = relationship(
        "TimeSlot", back_populates="doctor",
        cascade="all, delete-orphan", order_by="TimeSlot.date"
    )

    @property
    def name(self) -> str:
        return f"Dr. {self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.first_name} {self.last_name}', specialty='{self.specialty}')>"

class DoctorAvailability(Base):
    """Weekly working hours, e.g. Mon 09:00-13:00."""
    __tablename__ = "doctor_availability"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    day = Column(String(3), nullable=False)
    start = Column(String(5), nullable=False)
    end = Column(String(5), nullable=False)

    doctor = relationship("Doctor", back_populates="availability")

class TimeSlot(Base):
    """A concrete bookable slot shown to patients."""
    __tablename__ = "time_slots"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    available = Column(Boolean, default=True)

    doctor = relationship("Doctor", back_populates="time_slots")
