from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Date, Text, JSON, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

class PatientStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=True)

    # Personal information
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    age = Column(Integer, nullable=True)
    gender = Column(String(20), nullable=True)

    # Contact information
    email = Column(String(255), nullable=True)
    phone_number = Column(String(20), nullable=True)

    # Clinical overview
    status = Column(SQLEnum(PatientStatus), default=PatientStatus.ACTIVE)
    summary = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="patient")
    appointments = relationship("Appointment", back_populates="patient", cascade="all, delete")
    visits = relationship(
        "Visit", back_populates="patient",
        cascade="all, delete-orphan", order_by="Visit.date"
    )
    medical_records = relationship(
        "MedicalRecord", back_populates="patient",
        cascade="all, delete", order_by="MedicalRecord.date.desc()"
    )
    prescriptions = relationship(
        "Prescription", back_populates="patient",
        cascade="all, delete", order_by="Prescription.issued_at.desc()"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<Patient(id={self.id}, name='{self.first_name} {self.last_name}')>"

class Visit(Base):
    __tablename__ = "visits"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=False, default="")
    initial = Column(Boolean, default=False)
    last_doctor = Column(String(200), nullable=True)
    prescription = Column(String(255), nullable=True)

    patient = relationship("Patient", back_populates="visits")

class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    doctor = Column(String(200), nullable=False)
    diagnosis = Column(String(255), nullable=False)
    treatment = Column(String(255), nullable=True)
    prescriptions = Column(JSON, default=list)

    patient = relationship("Patient", back_populates="medical_records")

class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(String(40), primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    issued_at = Column(DateTime, nullable=False)
    meds = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    prescribed_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    patient = relationship("Patient", back_populates="prescriptions")

    def __repr__(self):
        return f"<Prescription(id='{self.id}', patient_id={self.patient_id})>"
