from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_patient, get_patient_user
from ...models.appointment import AppointmentStatus
from ...models.patient import Patient
from ...schemas.appointment import AppointmentResponse, BookingRequest, RescheduleRequest
from ...schemas.dashboard import PatientSummary
from ...schemas.doctor import DoctorListing
from ...schemas.patient import MedicalRecordResponse
from ...services.appointment_service import AppointmentService
from ...services.dashboard_service import DashboardService
from ...services.doctor_service import DoctorService

router = APIRouter(
    prefix="/patient",
    tags=["Patient"],
    dependencies=[Depends(get_patient_user)]
)

@router.get("/summary", response_model=PatientSummary)
async def summary(
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    return DashboardService(db).patient_summary(patient, datetime.now())

@router.get("/doctors", response_model=List[DoctorListing])
async def find_doctors(q: Optional[str] = None, db: Session = Depends(get_db)):
    """Doctors with their open slots, filtered by name, specialty or department."""
    return DoctorService(db).directory(q)

@router.get("/appointments", response_model=List[AppointmentResponse])
async def my_appointments(
    status: Optional[AppointmentStatus] = None,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    return AppointmentService(db).list_appointments(status=status, patient_id=patient.id)

@router.post("/appointments", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    booking: BookingRequest,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    return AppointmentService(db).book_appointment(patient, booking)

@router.patch("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: int,
    changes: RescheduleRequest,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    service = AppointmentService(db)
    appointment = service.get_appointment(appointment_id, patient_id=patient.id)
    return service.update_appointment(appointment, changes.model_dump(exclude_unset=True))

@router.post("/appointments/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    service = AppointmentService(db)
    return service.cancel_appointment(
        service.get_appointment(appointment_id, patient_id=patient.id)
    )

@router.delete("/appointments/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: int,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    service = AppointmentService(db)
    service.delete_appointment(
        service.get_appointment(appointment_id, patient_id=patient.id)
    )

@router.get("/records", response_model=List[MedicalRecordResponse])
async def my_records(patient: Patient = Depends(get_current_patient)):
    return patient.medical_records
