from pydantic import BaseModel, Field
from typing import List, Optional
import datetime as dt

from ..models.patient import PatientStatus

class VisitRow(BaseModel):
    date: dt.date
    reason: str = ""
    initial: bool = False
    last_doctor: Optional[str] = None
    prescription: Optional[str] = None

    class Config:
        from_attributes = True

class PatientCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    phone_number: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)
    gender: Optional[str] = None
    status: PatientStatus = PatientStatus.ACTIVE
    summary: Optional[str] = None
    visits: List[VisitRow] = []

    class Config:
        str_strip_whitespace = True

class PatientResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    full_name: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    status: PatientStatus
    summary: Optional[str] = None
    visits: List[VisitRow] = []

    class Config:
        from_attributes = True

class MedicalRecordResponse(BaseModel):
    id: int
    date: dt.date
    doctor: str
    diagnosis: str
    treatment: Optional[str] = None
    prescriptions: List[str] = []

    class Config:
        from_attributes = True

class PatientHistory(PatientResponse):
    medical_records: List[MedicalRecordResponse] = []

class PrescriptionCreate(BaseModel):
    meds: str = Field(..., min_length=1)
    notes: Optional[str] = None
    issued_at: Optional[dt.datetime] = None

    class Config:
        str_strip_whitespace = True

class PrescriptionResponse(BaseModel):
    id: str
    patient_id: int
    issued_at: dt.datetime
    meds: str
    notes: Optional[str] = None
    prescribed_by: Optional[int] = None

    class Config:
        from_attributes = True
