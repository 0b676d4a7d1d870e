from pydantic import BaseModel, Field
from typing import List, Literal, Optional
import datetime as dt

from .appointment import TIME_PATTERN

Weekday = Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

class AvailabilityRow(BaseModel):
    day: Weekday
    start: str = Field(..., pattern=TIME_PATTERN)
    end: str = Field(..., pattern=TIME_PATTERN)

    class Config:
        from_attributes = True

class TimeSlotResponse(BaseModel):
    id: int
    date: dt.date
    start_time: str
    end_time: str
    available: bool

    class Config:
        from_attributes = True

class DoctorCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    specialty: str = Field(..., min_length=1, max_length=100)
    department: Optional[str] = None
    years_of_experience: Optional[int] = Field(None, ge=0)
    education: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    availability: List[AvailabilityRow] = []

    class Config:
        str_strip_whitespace = True

class DoctorResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    name: str
    first_name: str
    last_name: str
    specialty: str
    department: Optional[str] = None
    years_of_experience: Optional[int] = None
    education: Optional[str] = None
    rating: Optional[float] = None
    availability: List[AvailabilityRow] = []

    class Config:
        from_attributes = True

class DoctorListing(BaseModel):
    """A doctor card in the patient dashboard, with open slots only."""
    id: int
    name: str
    specialty: str
    department: Optional[str] = None
    years_of_experience: Optional[int] = None
    education: Optional[str] = None
    rating: Optional[float] = None
    slots: List[TimeSlotResponse] = []
