from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..core.security import NotFoundError
from ..models.doctor import Doctor, DoctorAvailability
from ..models.user import User
from ..schemas.doctor import DoctorCreate, DoctorListing, TimeSlotResponse
from .filters import filter_by_query

logger = logging.getLogger(__name__)

class DoctorService:
    def __init__(self, db: Session):
        self.db = db

    def list_doctors(self, q: Optional[str] = None) -> List[Doctor]:
        doctors = self.db.query(Doctor).order_by(Doctor.id).all()
        return filter_by_query(
            doctors, q, lambda d: (d.first_name, d.last_name, d.specialty)
        )

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.db.query(Doctor).filter(Doctor.id == doctor_id).first()
        if not doctor:
            raise NotFoundError("Doctor", doctor_id)
        return doctor

    def for_user(self, user: User) -> Optional[Doctor]:
        return self.db.query(Doctor).filter(Doctor.user_id == user.id).first()

    def create_doctor(self, data: DoctorCreate) -> Doctor:
        doctor = Doctor(**data.model_dump(exclude={"availability"}))
        doctor.availability = [
            DoctorAvailability(**row.model_dump()) for row in data.availability
        ]
        self.db.add(doctor)
        self.db.commit()
        self.db.refresh(doctor)
        logger.info(f"Added doctor {doctor.id} ({doctor.specialty})")
        return doctor

    def update_doctor(self, doctor: Doctor, data: DoctorCreate) -> Doctor:
        """Replace the doctor's details and weekly availability."""
        for field, value in data.model_dump(exclude={"availability"}).items():
            setattr(doctor, field, value)
        doctor.availability = [
            DoctorAvailability(**row.model_dump()) for row in data.availability
        ]
        self.db.commit()
        self.db.refresh(doctor)
        logger.info(f"Updated doctor {doctor.id}")
        return doctor

    def delete_doctor(self, doctor: Doctor) -> None:
        doctor_id = doctor.id
        self.db.delete(doctor)
        self.db.commit()
        logger.info(f"Deleted doctor {doctor_id}")

    def directory(self, q: Optional[str] = None) -> List[DoctorListing]:
        """Doctors as patients see them, with only their open slots."""
        doctors = self.db.query(Doctor).order_by(Doctor.id).all()
        doctors = filter_by_query(
            doctors, q, lambda d: (d.name, d.specialty, d.department)
        )
        return [
            DoctorListing(
                id=doctor.id,
                name=doctor.name,
                specialty=doctor.specialty,
                department=doctor.department,
                years_of_experience=doctor.years_of_experience,
                education=doctor.education,
                rating=doctor.rating,
                slots=[
                    TimeSlotResponse.model_validate(slot)
                    for slot in doctor.time_slots if slot.available
                ]
            )
            for doctor in doctors
        ]
