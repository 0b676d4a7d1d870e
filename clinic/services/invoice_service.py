from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
import logging

from ..core.security import NotFoundError
from ..models.invoice import Invoice, InvoiceItem
from ..schemas.invoice import InvoiceCreate
from .filters import filter_by_query

logger = logging.getLogger(__name__)

class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def list_invoices(self, q: Optional[str] = None) -> List[Invoice]:
        invoices = self.db.query(Invoice).order_by(Invoice.id).all()
        return filter_by_query(invoices, q, lambda i: (i.patient_name, i.invoice_no))

    def get_invoice(self, invoice_id: int) -> Invoice:
        invoice = self.db.query(Invoice).filter(Invoice.id == invoice_id).first()
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def create_invoice(self, data: InvoiceCreate) -> Invoice:
        invoice = Invoice(
            patient_name=data.patient_name,
            invoice_no=data.invoice_no,
            date=data.date or date.today(),
            paid=False,
            items=[InvoiceItem(**item.model_dump()) for item in data.items]
        )
        self.db.add(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"Created invoice {invoice.invoice_no} total={invoice.total}")
        return invoice

    def update_invoice(self, invoice: Invoice, data: InvoiceCreate) -> Invoice:
        """Replace header fields and line items; the paid flag is kept."""
        invoice.patient_name = data.patient_name
        invoice.invoice_no = data.invoice_no
        if data.date is not None:
            invoice.date = data.date
        invoice.items = [InvoiceItem(**item.model_dump()) for item in data.items]
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def mark_paid(self, invoice: Invoice) -> Invoice:
        invoice.paid = True
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"Invoice {invoice.invoice_no} marked paid")
        return invoice

    def delete_invoice(self, invoice: Invoice) -> None:
        invoice_no = invoice.invoice_no
        self.db.delete(invoice)
        self.db.commit()
        logger.info(f"Deleted invoice {invoice_no}")
