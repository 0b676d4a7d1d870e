from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Boolean, Float
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    patient_name = Column(String(200), nullable=False)
    invoice_no = Column(String(50), nullable=False, index=True)
    date = Column(Date, nullable=False)
    paid = Column(Boolean, default=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    items = relationship(
        "InvoiceItem", back_populates="invoice",
        cascade="all, delete-orphan", order_by="InvoiceItem.id"
    )

    @property
    def total(self) -> float:
        return sum(item.line_total for item in self.items)

    def __repr__(self):
        return f"<Invoice(id={self.id}, invoice_no='{self.invoice_no}', paid={self.paid})>"

class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    description = Column(String(255), nullable=False, default="")
    qty = Column(Integer, nullable=False, default=1)
    unit = Column(Float, nullable=False, default=0)

    invoice = relationship("Invoice", back_populates="items")

    @property
    def line_total(self) -> float:
        return self.qty * self.unit
