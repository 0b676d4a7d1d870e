from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...core.security import NotFoundError
from ...api.deps import get_admin_user
from ...models.appointment import AppointmentStatus
from ...models.user import User
from ...schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentUpdate
from ...schemas.auth import UserResponse
from ...schemas.dashboard import AdminMetrics
from ...schemas.doctor import DoctorCreate, DoctorResponse
from ...schemas.invoice import InvoiceCreate, InvoiceResponse
from ...schemas.patient import PatientCreate, PatientResponse
from ...services.appointment_service import AppointmentService
from ...services.auth_service import AuthService
from ...services.dashboard_service import DashboardService
from ...services.doctor_service import DoctorService
from ...services.invoice_service import InvoiceService
from ...services.patient_service import PatientService

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(get_admin_user)]
)

@router.get("/metrics", response_model=AdminMetrics)
async def metrics(db: Session = Depends(get_db)):
    return DashboardService(db).admin_metrics()

# Appointments
@router.get("/appointments", response_model=List[AppointmentResponse])
async def list_appointments(
    q: Optional[str] = None,
    status: Optional[AppointmentStatus] = None,
    db: Session = Depends(get_db)
):
    """List appointments, filtered by patient or doctor name."""
    return AppointmentService(db).list_appointments(q=q, status=status)

@router.post("/appointments", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db)
):
    return AppointmentService(db).create_appointment(appointment_data)

@router.get("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(appointment_id: int, db: Session = Depends(get_db)):
    return AppointmentService(db).get_appointment(appointment_id)

@router.patch("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    changes: AppointmentUpdate,
    db: Session = Depends(get_db)
):
    """Edit an appointment; fields left out of the body stay as they are."""
    service = AppointmentService(db)
    appointment = service.get_appointment(appointment_id)
    return service.update_appointment(appointment, changes.model_dump(exclude_unset=True))

@router.post("/appointments/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(appointment_id: int, db: Session = Depends(get_db)):
    service = AppointmentService(db)
    return service.cancel_appointment(service.get_appointment(appointment_id))

@router.delete("/appointments/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    service = AppointmentService(db)
    service.delete_appointment(service.get_appointment(appointment_id))

# Doctors
@router.get("/doctors", response_model=List[DoctorResponse])
async def list_doctors(q: Optional[str] = None, db: Session = Depends(get_db)):
    return DoctorService(db).list_doctors(q)

@router.post("/doctors", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(doctor_data: DoctorCreate, db: Session = Depends(get_db)):
    return DoctorService(db).create_doctor(doctor_data)

@router.get("/doctors/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    return DoctorService(db).get_doctor(doctor_id)

@router.put("/doctors/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: int,
    doctor_data: DoctorCreate,
    db: Session = Depends(get_db)
):
    service = DoctorService(db)
    return service.update_doctor(service.get_doctor(doctor_id), doctor_data)

@router.delete("/doctors/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_doctor(doctor_id: int, db: Session = Depends(get_db)):
    service = DoctorService(db)
    service.delete_doctor(service.get_doctor(doctor_id))

# Patients
@router.get("/patients", response_model=List[PatientResponse])
async def list_patients(q: Optional[str] = None, db: Session = Depends(get_db)):
    return PatientService(db).list_patients(q)

@router.post("/patients", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(patient_data: PatientCreate, db: Session = Depends(get_db)):
    return PatientService(db).create_patient(patient_data)

@router.get("/patients/{patient_id}", response_model=PatientResponse)
async def get_patient(patient_id: int, db: Session = Depends(get_db)):
    return PatientService(db).get_patient(patient_id)

@router.put("/patients/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: int,
    patient_data: PatientCreate,
    db: Session = Depends(get_db)
):
    service = PatientService(db)
    return service.update_patient(service.get_patient(patient_id), patient_data)

@router.delete("/patients/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(patient_id: int, db: Session = Depends(get_db)):
    service = PatientService(db)
    service.delete_patient(service.get_patient(patient_id))

# Billing
@router.get("/invoices", response_model=List[InvoiceResponse])
async def list_invoices(q: Optional[str] = None, db: Session = Depends(get_db)):
    """List invoices, filtered by patient name or invoice number."""
    return InvoiceService(db).list_invoices(q)

@router.post("/invoices", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(invoice_data: InvoiceCreate, db: Session = Depends(get_db)):
    return InvoiceService(db).create_invoice(invoice_data)

@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return InvoiceService(db).get_invoice(invoice_id)

@router.put("/invoices/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    invoice_data: InvoiceCreate,
    db: Session = Depends(get_db)
):
    service = InvoiceService(db)
    return service.update_invoice(service.get_invoice(invoice_id), invoice_data)

@router.post("/invoices/{invoice_id}/pay", response_model=InvoiceResponse)
async def pay_invoice(invoice_id: int, db: Session = Depends(get_db)):
    service = InvoiceService(db)
    return service.mark_paid(service.get_invoice(invoice_id))

@router.delete("/invoices/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: int, db: Session = Depends(get_db)):
    service = InvoiceService(db)
    service.delete_invoice(service.get_invoice(invoice_id))

# Accounts
@router.get("/users", response_model=List[UserResponse])
async def list_users(
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db)
):
    """List accounts."""
    users = db.query(User).order_by(User.id).offset(skip).limit(limit).all()
    return [UserResponse.model_validate(user) for user in users]

@router.patch("/users/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: int,
    is_active: bool,
    current_user: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Activate or deactivate an account. Deactivating ends its session."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id)

    return AuthService(db).set_active(user, is_active, acting_user=current_user)
