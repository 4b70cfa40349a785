"""Invoice repository - Database operations for invoices"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models_invoice import Invoice


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def get_invoices(db: Session, user_id: int, status: Optional[str] = None) -> list[Invoice]:
        query = db.query(Invoice).filter(Invoice.user_id == user_id)
        if status:
            query = query.filter(Invoice.status == status)
        return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()

    @staticmethod
    def get_invoice_by_id(db: Session, invoice_id: int, user_id: int) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.user_id == user_id).first()

    @staticmethod
    def invoice_number_exists(db: Session, invoice_number: str) -> bool:
        return (
            db.query(Invoice.id).filter(Invoice.invoice_number == invoice_number).first() is not None
        )

    @staticmethod
    def get_overdue_candidates(
        db: Session, now: datetime, user_id: Optional[int] = None
    ) -> list[Invoice]:
        """Sent or viewed invoices whose due date has passed"""
        query = db.query(Invoice).filter(
            Invoice.status.in_(("sent", "viewed")),
            Invoice.due_date.isnot(None),
            Invoice.due_date < now,
        )
        if user_id is not None:
            query = query.filter(Invoice.user_id == user_id)
        return query.all()

    @staticmethod
    def create_invoice(db: Session, user_id: int, commit: bool = True, **invoice_data) -> Invoice:
        invoice = Invoice(user_id=user_id, **invoice_data)
        db.add(invoice)
        if commit:
            db.commit()
            db.refresh(invoice)
        return invoice

    @staticmethod
    def update_invoice(db: Session, invoice: Invoice, **updates) -> Invoice:
        for key, value in updates.items():
            setattr(invoice, key, value)
        db.commit()
        db.refresh(invoice)
        return invoice

    @staticmethod
    def delete_invoice(db: Session, invoice: Invoice) -> None:
        db.delete(invoice)
        db.commit()
