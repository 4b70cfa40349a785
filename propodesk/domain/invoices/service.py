"""Invoice service - Business logic for invoice operations"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...document_templates import invoice_html
from ...email_service import send_invoice_email
from ...models import User
from ...models_invoice import Invoice
from ...services.pdf_service import PDFService, PDFServiceError
from ...shared.validators import require_client_email
from ...utils.sanitization import sanitize_string
from ..contracts.repository import ContractRepository
from ..proposals.repository import ProposalRepository
from ..quotes.engine import quote_line_items, quote_request_from_snapshot
from ..workflow import INVOICE_WORKFLOW, InvalidTransition
from .repository import InvoiceRepository
from .schemas import InvoiceCreate, InvoiceUpdate
from .totals import compute_invoice_totals, split_unit_price

logger = logging.getLogger(__name__)

_PLAIN_FIELDS = ("title", "client_name", "client_company", "client_address", "notes")
LOCKED_STATUSES = ("paid", "cancelled")
NET_30 = timedelta(days=30)


def generate_invoice_number(now: Optional[datetime] = None) -> str:
    """INV-YYMM-XXXXXX with six random uppercase hex digits"""
    now = now or datetime.utcnow()
    return f"INV-{now:%y%m}-{secrets.token_hex(3).upper()}"


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()
        self.proposals = ProposalRepository()
        self.contracts = ContractRepository()
        self.pdf_service = PDFService()

    def _new_invoice_number(self) -> str:
        number = generate_invoice_number()
        while self.repo.invoice_number_exists(self.db, number):
            number = generate_invoice_number()
        return number

    def get_invoices(self, user: User, status: Optional[str] = None) -> list[Invoice]:
        return self.repo.get_invoices(self.db, user.id, status)

    def get_invoice(self, invoice_id: int, user: User) -> Invoice:
        invoice = self.repo.get_invoice_by_id(self.db, invoice_id, user.id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def create_invoice(self, data: InvoiceCreate, user: User) -> Invoice:
        logger.info(f"🧾 Creating invoice for user_id: {user.id}")
        invoice_data = data.model_dump()
        for field in _PLAIN_FIELDS:
            invoice_data[field] = sanitize_string(invoice_data[field])

        totals = compute_invoice_totals(
            [item.model_dump(exclude={"amount"}) for item in data.line_items], data.tax_rate
        )
        invoice_data.update(
            line_items=totals.line_items,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total=totals.total,
            invoice_number=self._new_invoice_number(),
            status="draft",
        )
        return self.repo.create_invoice(self.db, user.id, **invoice_data)

    def update_invoice(self, invoice_id: int, data: InvoiceUpdate, user: User) -> Invoice:
        """Edit an invoice and recompute its totals"""
        invoice = self.get_invoice(invoice_id, user)
        if invoice.status in LOCKED_STATUSES:
            raise HTTPException(
                status_code=409, detail=f"Cannot edit an invoice with status '{invoice.status}'"
            )

        updates = data.model_dump(exclude_unset=True)
        for field in _PLAIN_FIELDS:
            if updates.get(field) is not None:
                updates[field] = sanitize_string(updates[field])

        line_items = (
            [item.model_dump(exclude={"amount"}) for item in data.line_items]
            if data.line_items is not None
            else list(invoice.line_items or [])
        )
        tax_rate = data.tax_rate if data.tax_rate is not None else invoice.tax_rate
        totals = compute_invoice_totals(line_items, tax_rate)
        updates.update(
            line_items=totals.line_items,
            tax_rate=tax_rate,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total=totals.total,
        )
        return self.repo.update_invoice(self.db, invoice, **updates)

    def delete_invoice(self, invoice_id: int, user: User) -> dict:
        invoice = self.get_invoice(invoice_id, user)
        if invoice.status == "paid":
            raise HTTPException(status_code=409, detail="Paid invoices cannot be deleted")
        self.repo.delete_invoice(self.db, invoice)
        return {"message": "Invoice deleted successfully"}

    # ------------------------------------------------------------------
    # WORKFLOW
    # ------------------------------------------------------------------

    def apply_action(self, invoice: Invoice, action: str) -> Invoice:
        """Run a workflow action, stamping sent_at / paid_at where it applies"""
        if action == "send":
            try:
                require_client_email(invoice.client_email)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e)) from e
        try:
            new_status = INVOICE_WORKFLOW.next_state(invoice.status, action)
        except InvalidTransition as e:
            raise HTTPException(status_code=409, detail=str(e)) from e

        updates = {"status": new_status}
        if action == "send":
            updates["sent_at"] = datetime.utcnow()
        elif action == "mark_paid":
            updates["paid_at"] = datetime.utcnow()
        logger.info(f"🧾 Invoice {invoice.id}: {invoice.status} -> {new_status}")
        return self.repo.update_invoice(self.db, invoice, **updates)

    def update_status(self, invoice_id: int, target_status: str, user: User) -> Invoice:
        """Move an invoice to ``target_status`` through the matching workflow action"""
        invoice = self.get_invoice(invoice_id, user)
        action = INVOICE_WORKFLOW.action_for(invoice.status, target_status)
        if action is None:
            raise HTTPException(
                status_code=409,
                detail=f"Cannot move an invoice from '{invoice.status}' to '{target_status}'",
            )
        return self.apply_action(invoice, action)

    async def send_invoice(self, invoice_id: int, user: User) -> Invoice:
        """Mark sent and email the invoice; a failed email does not undo the send"""
        invoice = self.apply_action(self.get_invoice(invoice_id, user), "send")
        try:
            await send_invoice_email(
                to=invoice.client_email,
                client_name=invoice.client_name,
                sender_name=user.company or user.full_name or "Your agency",
                invoice_number=invoice.invoice_number,
                amount=invoice.total,
                currency=invoice.currency or "USD",
                due_date=f"{invoice.due_date:%B %d, %Y}" if invoice.due_date else "",
                payment_url=invoice.payment_link or "",
            )
        except Exception as e:
            logger.warning(f"⚠️ Invoice {invoice.id} email failed: {e}")
        return invoice

    def refresh_overdue(self, user: Optional[User] = None, now: Optional[datetime] = None) -> list[Invoice]:
        """Mark sent or viewed invoices past their due date as overdue"""
        now = now or datetime.utcnow()
        updated = []
        for invoice in self.repo.get_overdue_candidates(self.db, now, user.id if user else None):
            if INVOICE_WORKFLOW.can(invoice.status, "mark_overdue"):
                invoice.status = INVOICE_WORKFLOW.next_state(invoice.status, "mark_overdue")
                updated.append(invoice)
        if updated:
            self.db.commit()
            logger.info(f"⏰ Marked {len(updated)} invoice(s) overdue")
        return updated

    # ------------------------------------------------------------------
    # GENERATION
    # ------------------------------------------------------------------

    def create_from_proposal(self, proposal_id: int, milestones: int, user: User) -> list[Invoice]:
        """Split a proposal's quote into ``milestones`` equal draft invoices"""
        proposal = self.proposals.get_proposal_by_id(self.db, proposal_id, user.id)
        if not proposal:
            raise HTTPException(status_code=404, detail="Proposal not found")

        request = quote_request_from_snapshot(proposal.calculator_data)
        if request is None:
            raise HTTPException(status_code=400, detail="Proposal has no calculator selection")

        quote_items = quote_line_items(request.services, request.add_ons, request.contract_term)
        if not quote_items:
            raise HTTPException(status_code=400, detail="Proposal quote has no billable items")

        invoices = []
        for number in range(1, milestones + 1):
            line_items = [
                {
                    "id": f"{index + 1}",
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": split_unit_price(item.unit_price, milestones),
                }
                for index, item in enumerate(quote_items)
            ]
            totals = compute_invoice_totals(line_items, 0)
            title = (
                f"{proposal.title} - Payment {number} of {milestones}"
                if milestones > 1
                else proposal.title
            )
            invoices.append(
                self.repo.create_invoice(
                    self.db,
                    user.id,
                    commit=False,
                    proposal_id=proposal.id,
                    invoice_number=self._new_invoice_number(),
                    title=title,
                    client_name=proposal.client_name,
                    client_company=proposal.client_company,
                    client_email=proposal.client_email,
                    client_address=proposal.client_address,
                    line_items=totals.line_items,
                    subtotal=totals.subtotal,
                    tax_rate=0,
                    tax_amount=totals.tax_amount,
                    total=totals.total,
                    payment_terms="net_30",
                    milestone_number=number,
                    milestone_total=milestones,
                    status="draft",
                )
            )

        self.db.commit()
        for invoice in invoices:
            self.db.refresh(invoice)
        logger.info(f"🧾 Generated {len(invoices)} invoice(s) from proposal {proposal.id}")
        return invoices

    def create_from_contract(self, contract_id: int, user: User) -> Invoice:
        """Draft invoice billing each contract deliverable once, due in 30 days"""
        contract = self.contracts.get_contract_by_id(self.db, contract_id, user.id)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        if contract.status == "cancelled":
            raise HTTPException(status_code=409, detail="Cannot invoice a cancelled contract")
        if not contract.deliverables:
            raise HTTPException(status_code=400, detail="Contract has no deliverables to invoice")

        line_items = [
            {
                "id": f"{index + 1}",
                "description": deliverable.get("name") or "Service",
                "quantity": 1,
                "unit_price": deliverable.get("price") or 0,
            }
            for index, deliverable in enumerate(contract.deliverables)
        ]
        totals = compute_invoice_totals(line_items, 0)
        invoice = self.repo.create_invoice(
            self.db,
            user.id,
            proposal_id=contract.proposal_id,
            contract_id=contract.id,
            invoice_number=self._new_invoice_number(),
            title=f"Invoice - {contract.client_name or 'Client'}",
            client_name=contract.client_name,
            client_company=contract.client_company,
            client_email=contract.client_email,
            client_address=contract.client_address,
            line_items=totals.line_items,
            subtotal=totals.subtotal,
            tax_rate=0,
            tax_amount=totals.tax_amount,
            total=totals.total,
            due_date=datetime.utcnow() + NET_30,
            payment_terms="net_30",
            notes=f"Invoice generated from contract: {contract.title}",
            status="draft",
        )
        logger.info(f"🧾 Invoice {invoice.id} generated from contract {contract.id}")
        return invoice

    async def generate_pdf(self, invoice_id: int, user: User) -> tuple[bytes, str]:
        invoice = self.get_invoice(invoice_id, user)
        filename = f"{invoice.invoice_number}.pdf"
        try:
            pdf_bytes = await self.pdf_service.render_pdf(invoice_html(invoice), filename)
        except PDFServiceError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        return pdf_bytes, filename
