"""Demo accounts and sample clinic records.

The three demo accounts are always ensured; sample doctors, patients,
appointments and invoices are only added to an empty database.
"""
from sqlalchemy.orm import Session
from datetime import date, datetime, timedelta
import logging

from ..core.security import UserRole, get_password_hash
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor, DoctorAvailability, TimeSlot
from ..models.invoice import Invoice, InvoiceItem
from ..models.patient import MedicalRecord, Patient, PatientStatus, Prescription, Visit
from ..models.user import User
from ..schemas.auth import DemoAccount

logger = logging.getLogger(__name__)

DEMO_ACCOUNTS = [
    DemoAccount(email="admin@demo.test", password="admin123", role=UserRole.ADMIN, full_name="Admin Demo"),
    DemoAccount(email="doctor@demo.test", password="doctor123", role=UserRole.DOCTOR, full_name="Doctor Demo"),
    DemoAccount(email="patient@demo.test", password="patient123", role=UserRole.PATIENT, full_name="Patient Demo"),
]

def ensure_demo_accounts(db: Session) -> dict:
    users = {}
    for account in DEMO_ACCOUNTS:
        user = db.query(User).filter(User.email == account.email).first()
        if not user:
            user = User(
                email=account.email,
                password_hash=get_password_hash(account.password),
                role=account.role,
                full_name=account.full_name,
                is_active=True,
                is_demo=True
            )
            db.add(user)
            logger.info(f"Created demo account {account.email}")
        users[account.role] = user
    db.commit()
    return users

def seed_demo_data(db: Session, today: date = None) -> None:
    users = ensure_demo_accounts(db)
    if db.query(Doctor).first() is not None:
        return

    today = today or date.today()
    day = lambda offset: today + timedelta(days=offset)  # noqa: E731

    demo_doctor = Doctor(
        user=users[UserRole.DOCTOR], first_name="Demo", last_name="Doctor",
        specialty="General Practice", department="Outpatients",
        years_of_experience=8, education="MBBS", rating=4.6,
        availability=[
            DoctorAvailability(day="Mon", start="09:00", end="17:00"),
            DoctorAvailability(day="Thu", start="09:00", end="13:00"),
        ],
        time_slots=[
            TimeSlot(date=day(1), start_time="09:00", end_time="09:30"),
            TimeSlot(date=day(2), start_time="11:00", end_time="11:30"),
        ],
    )
    sarah = Doctor(
        first_name="Sarah", last_name="Johnson", specialty="Cardiology",
        department="Heart Center", years_of_experience=15,
        education="MD, Harvard Medical School", rating=4.9,
        availability=[
            DoctorAvailability(day="Mon", start="09:00", end="13:00"),
            DoctorAvailability(day="Wed", start="14:00", end="18:00"),
        ],
        time_slots=[
            TimeSlot(date=day(3), start_time="09:00", end_time="10:00"),
            TimeSlot(date=day(3), start_time="14:00", end_time="15:00"),
            TimeSlot(date=day(4), start_time="10:00", end_time="11:00"),
        ],
    )
    michael = Doctor(
        first_name="Michael", last_name="Chen", specialty="Neurology",
        department="Brain & Spine", years_of_experience=12,
        education="MD, Stanford University", rating=4.8,
        availability=[DoctorAvailability(day="Tue", start="10:00", end="16:00")],
        time_slots=[
            TimeSlot(date=day(3), start_time="11:00", end_time="12:00"),
            TimeSlot(date=day(4), start_time="09:00", end_time="10:00"),
        ],
    )
    emily = Doctor(
        first_name="Emily", last_name="Rodriguez", specialty="Pediatrics",
        department="Children's Health", years_of_experience=10,
        education="MD, Johns Hopkins University", rating=4.7,
        availability=[DoctorAvailability(day="Thu", start="09:00", end="12:00")],
        time_slots=[
            TimeSlot(date=day(5), start_time="13:00", end_time="14:00"),
            TimeSlot(date=day(6), start_time="10:00", end_time="11:00"),
        ],
    )

    demo_patient = Patient(
        user=users[UserRole.PATIENT], first_name="Patient", last_name="Demo",
        email="patient@demo.test", status=PatientStatus.ACTIVE,
        medical_records=[
            MedicalRecord(
                date=day(-9), doctor="Dr. Sarah Johnson", diagnosis="Hypertension",
                treatment="Medication and lifestyle changes",
                prescriptions=["Lisinopril 10mg", "Amlodipine 5mg"],
            ),
            MedicalRecord(
                date=day(-35), doctor="Dr. Michael Chen", diagnosis="Migraine",
                treatment="Preventive medication", prescriptions=["Sumatriptan 50mg"],
            ),
        ],
    )
    john = Patient(
        first_name="John", last_name="Doe", email="john@example.com",
        phone_number="+92-300-0000000", age=52, gender="M", status=PatientStatus.ACTIVE,
        summary="Complains of chest pain and shortness of breath. Referred for ECG.",
        visits=[
            Visit(date=day(-9), reason="Initial consult - chest pain", initial=True,
                  prescription="Aspirin 75mg once daily"),
        ],
        prescriptions=[
            Prescription(id="rx_seed_john", issued_at=datetime.combine(day(-9), datetime.min.time()),
                         meds="Aspirin 75mg once daily", notes="Review after ECG"),
        ],
    )
    ayesha = Patient(
        first_name="Ayesha", last_name="Raza", email="ayesha@example.com",
        phone_number="+92-300-1111111", age=34, gender="F", status=PatientStatus.ACTIVE,
        summary="Follow-up for eczema. Uses topical steroid occasionally.",
        visits=[
            Visit(date=day(-29), reason="Follow-up for eczema", initial=False,
                  last_doctor="Dr. Emily Rodriguez",
                  prescription="Hydrocortisone cream 1% - apply twice daily"),
        ],
    )

    appointments = [
        Appointment(patient=demo_patient, doctor=sarah, date=day(5), time="10:00",
                    status=AppointmentStatus.SCHEDULED, reason="Regular heart checkup",
                    notes="Bring previous test results"),
        Appointment(patient=demo_patient, doctor=michael, date=day(10), time="14:00",
                    status=AppointmentStatus.SCHEDULED, reason="Headache consultation"),
        Appointment(patient=john, doctor=demo_doctor, date=day(1), time="10:00",
                    status=AppointmentStatus.SCHEDULED, reason="Follow-up: chest pain"),
        Appointment(patient=ayesha, doctor=demo_doctor, date=day(12), time="11:30",
                    status=AppointmentStatus.SCHEDULED, reason="Eczema review"),
        Appointment(patient=demo_patient, doctor=demo_doctor, date=day(-2), time="09:00",
                    status=AppointmentStatus.COMPLETED, reason="Routine checkup"),
        Appointment(patient=john, doctor=sarah, date=day(-1), time="15:30",
                    status=AppointmentStatus.CANCELLED, reason="ECG"),
    ]

    invoices = [
        Invoice(patient_name="John Doe", invoice_no="INV-1001", date=day(-9), paid=False, items=[
            InvoiceItem(description="Consultation (30 mins)", qty=1, unit=1500),
            InvoiceItem(description="ECG", qty=1, unit=800),
            InvoiceItem(description="Blood test (CBC)", qty=1, unit=600),
        ]),
        Invoice(patient_name="Ayesha Raza", invoice_no="INV-1002", date=day(-29), paid=True, items=[
            InvoiceItem(description="Dermatology consult", qty=1, unit=1200),
            InvoiceItem(description="Topical medication", qty=1, unit=400),
        ]),
    ]

    db.add_all([demo_doctor, sarah, michael, emily, demo_patient, john, ayesha])
    db.add_all(appointments)
    db.add_all(invoices)
    db.commit()
    logger.info("Seeded demo clinic records")
