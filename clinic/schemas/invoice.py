from pydantic import BaseModel, Field
from typing import List, Optional
import datetime as dt

class LineItem(BaseModel):
    description: str = ""
    qty: int = Field(1, ge=0)
    unit: float = Field(0, ge=0)

    class Config:
        from_attributes = True

class InvoiceCreate(BaseModel):
    patient_name: str = Field(..., min_length=1, max_length=200)
    invoice_no: str = Field(..., min_length=1, max_length=50)
    date: Optional[dt.date] = None
    items: List[LineItem] = []

    class Config:
        str_strip_whitespace = True

class InvoiceResponse(BaseModel):
    id: int
    patient_name: str
    invoice_no: str
    date: dt.date
    paid: bool
    items: List[LineItem] = []
    total: float

    class Config:
        from_attributes = True
