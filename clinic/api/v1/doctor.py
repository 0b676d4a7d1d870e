from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional

from ...core.database import get_db
from ...core.security import NotFoundError
from ...api.deps import get_current_doctor, get_doctor_user
from ...models.doctor import Doctor
from ...models.user import User
from ...schemas.appointment import (
    AppointmentBoard, AppointmentResponse, BoardAppointment, DoctorAppointmentUpdate
)
from ...schemas.patient import (
    PatientHistory, PatientResponse, PrescriptionCreate, PrescriptionResponse
)
from ...services.appointment_service import AppointmentService, is_starting_now
from ...services.patient_service import PatientService

router = APIRouter(
    prefix="/doctor",
    tags=["Doctor"],
    dependencies=[Depends(get_doctor_user)]
)

def _board_item(appointment, now: datetime) -> BoardAppointment:
    item = AppointmentResponse.model_validate(appointment)
    return BoardAppointment(
        **item.model_dump(),
        starts_at=appointment.starts_at,
        is_now=is_starting_now(appointment.starts_at, now)
    )

@router.get("/appointments", response_model=AppointmentBoard)
async def appointment_board(
    doctor: Optional[Doctor] = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    """Own appointments split into upcoming, future and past."""
    now = datetime.now()
    board = AppointmentService(db).doctor_board(doctor, now)
    return AppointmentBoard(
        upcoming=[_board_item(a, now) for a in board.upcoming],
        future=[_board_item(a, now) for a in board.future],
        past=[_board_item(a, now) for a in board.past],
    )

@router.patch("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    changes: DoctorAppointmentUpdate,
    doctor: Optional[Doctor] = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    """Mark an own appointment completed or cancelled, or add notes."""
    if doctor is None:
        raise NotFoundError("Appointment", appointment_id)
    service = AppointmentService(db)
    appointment = service.get_appointment(appointment_id, doctor_id=doctor.id)
    return service.update_appointment(appointment, changes.model_dump(exclude_unset=True))

# Patient history
@router.get("/patients", response_model=List[PatientResponse])
async def search_patients(q: Optional[str] = None, db: Session = Depends(get_db)):
    """Search patients by name or id."""
    return PatientService(db).search_patients(q)

@router.get("/patients/{patient_id}", response_model=PatientHistory)
async def patient_history(patient_id: int, db: Session = Depends(get_db)):
    return PatientService(db).get_patient(patient_id)

# Prescriptions
@router.get("/patients/{patient_id}/prescriptions", response_model=List[PrescriptionResponse])
async def list_prescriptions(patient_id: int, db: Session = Depends(get_db)):
    """Prescriptions of a patient, newest first."""
    service = PatientService(db)
    return service.list_prescriptions(service.get_patient(patient_id))

@router.post(
    "/patients/{patient_id}/prescriptions",
    response_model=PrescriptionResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_prescription(
    patient_id: int,
    prescription_data: PrescriptionCreate,
    current_user: User = Depends(get_doctor_user),
    db: Session = Depends(get_db)
):
    service = PatientService(db)
    return service.add_prescription(
        service.get_patient(patient_id), prescription_data, prescriber=current_user
    )

@router.put("/patients/{patient_id}/prescriptions/{prescription_id}", response_model=PrescriptionResponse)
async def update_prescription(
    patient_id: int,
    prescription_id: str,
    prescription_data: PrescriptionCreate,
    db: Session = Depends(get_db)
):
    service = PatientService(db)
    prescription = service.get_prescription(service.get_patient(patient_id), prescription_id)
    return service.update_prescription(prescription, prescription_data)

@router.delete(
    "/patients/{patient_id}/prescriptions/{prescription_id}",
    status_code=status.HTTP_204_NO_CONTENT
)
async def delete_prescription(
    patient_id: int,
    prescription_id: str,
    db: Session = Depends(get_db)
):
    service = PatientService(db)
    service.delete_prescription(
        service.get_prescription(service.get_patient(patient_id), prescription_id)
    )
