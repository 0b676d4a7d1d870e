from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional
import logging
import secrets

from ..core.security import NotFoundError
from ..models.patient import Patient, PatientStatus, Prescription, Visit
from ..models.user import User
from ..schemas.patient import PatientCreate, PrescriptionCreate
from .filters import filter_by_query

logger = logging.getLogger(__name__)

def new_prescription_id() -> str:
    return f"rx_{secrets.token_hex(6)}"

class PatientService:
    def __init__(self, db: Session):
        self.db = db

    def list_patients(self, q: Optional[str] = None) -> List[Patient]:
        patients = self.db.query(Patient).order_by(Patient.id).all()
        return filter_by_query(
            patients, q, lambda p: (p.first_name, p.last_name, p.email)
        )

    def search_patients(self, q: Optional[str] = None) -> List[Patient]:
        """Doctor-side lookup by full name or patient id."""
        patients = self.db.query(Patient).order_by(Patient.id).all()
        return filter_by_query(patients, q, lambda p: (p.full_name, str(p.id)))

    def get_patient(self, patient_id: int) -> Patient:
        patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise NotFoundError("Patient", patient_id)
        return patient

    def for_user(self, user: User) -> Patient:
        """The patient record of a patient account, created on first use."""
        patient = self.db.query(Patient).filter(Patient.user_id == user.id).first()
        if patient:
            return patient

        first_name, _, last_name = user.display_name.partition(" ")
        patient = Patient(
            user=user,
            first_name=first_name,
            last_name=last_name,
            email=user.email,
            status=PatientStatus.ACTIVE
        )
        self.db.add(patient)
        self.db.commit()
        self.db.refresh(patient)
        logger.info(f"Created patient record {patient.id} for {user.email}")
        return patient

    def create_patient(self, data: PatientCreate) -> Patient:
        patient = Patient(**data.model_dump(exclude={"visits"}))
        patient.visits = [Visit(**visit.model_dump()) for visit in data.visits]
        self.db.add(patient)
        self.db.commit()
        self.db.refresh(patient)
        logger.info(f"Added patient {patient.id}")
        return patient

    def update_patient(self, patient: Patient, data: PatientCreate) -> Patient:
        """Replace the patient's details and visit history."""
        for field, value in data.model_dump(exclude={"visits"}).items():
            setattr(patient, field, value)
        patient.visits = [Visit(**visit.model_dump()) for visit in data.visits]
        self.db.commit()
        self.db.refresh(patient)
        logger.info(f"Updated patient {patient.id}")
        return patient

    def delete_patient(self, patient: Patient) -> None:
        patient_id = patient.id
        self.db.delete(patient)
        self.db.commit()
        logger.info(f"Deleted patient {patient_id}")

    # Prescriptions
    def list_prescriptions(self, patient: Patient) -> List[Prescription]:
        return (
            self.db.query(Prescription)
            .filter(Prescription.patient_id == patient.id)
            .order_by(Prescription.issued_at.desc(), Prescription.id)
            .all()
        )

    def get_prescription(self, patient: Patient, prescription_id: str) -> Prescription:
        prescription = self.db.query(Prescription).filter(
            Prescription.id == prescription_id,
            Prescription.patient_id == patient.id
        ).first()
        if not prescription:
            raise NotFoundError("Prescription", prescription_id)
        return prescription

    def add_prescription(
        self,
        patient: Patient,
        data: PrescriptionCreate,
        prescriber: Optional[User] = None
    ) -> Prescription:
        prescription = Prescription(
            id=new_prescription_id(),
            patient=patient,
            issued_at=data.issued_at or datetime.utcnow(),
            meds=data.meds,
            notes=data.notes,
            prescribed_by=prescriber.id if prescriber else None
        )
        self.db.add(prescription)
        self.db.commit()
        self.db.refresh(prescription)
        logger.info(f"Added prescription {prescription.id} for patient {patient.id}")
        return prescription

    def update_prescription(self, prescription: Prescription, data: PrescriptionCreate) -> Prescription:
        prescription.meds = data.meds
        prescription.notes = data.notes
        if data.issued_at is not None:
            prescription.issued_at = data.issued_at
        self.db.commit()
        self.db.refresh(prescription)
        return prescription

    def delete_prescription(self, prescription: Prescription) -> None:
        prescription_id = prescription.id
        self.db.delete(prescription)
        self.db.commit()
        logger.info(f"Deleted prescription {prescription_id}")
