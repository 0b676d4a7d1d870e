from .user import User, SessionToken
from .doctor import Doctor, DoctorAvailability, TimeSlot
from .patient import Patient, PatientStatus, Visit, MedicalRecord, Prescription
from .appointment import Appointment, AppointmentStatus
from .invoice import Invoice, InvoiceItem

__all__ = [
    "User", "SessionToken",
    "Doctor", "DoctorAvailability", "TimeSlot",
    "Patient", "PatientStatus", "Visit", "MedicalRecord", "Prescription",
    "Appointment", "AppointmentStatus",
    "Invoice", "InvoiceItem",
]
