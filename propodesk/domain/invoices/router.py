"""Invoice router - FastAPI endpoints for invoice operations"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    InvoiceCreate,
    InvoiceListResponse,
    InvoiceResponse,
    InvoicesFromProposalRequest,
    InvoiceStatus,
    InvoiceStatusUpdate,
    InvoiceUpdate,
)
from .service import InvoiceService

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


@router.get("", response_model=list[InvoiceResponse])
async def get_invoices(
    status: Optional[InvoiceStatus] = Query(None, description="Filter by status"),
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return [InvoiceResponse.model_validate(i) for i in service.get_invoices(current_user, status)]


@router.post("", response_model=InvoiceResponse, status_code=201)
async def create_invoice(
    data: InvoiceCreate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Create a draft invoice; line amounts and totals are computed server-side"""
    return InvoiceResponse.model_validate(service.create_invoice(data, current_user))


@router.post("/from-proposal/{proposal_id}", response_model=InvoiceListResponse, status_code=201)
async def create_invoices_from_proposal(
    proposal_id: int,
    data: Optional[InvoicesFromProposalRequest] = None,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """One draft invoice per payment milestone"""
    milestones = (data or InvoicesFromProposalRequest()).milestones
    invoices = service.create_from_proposal(proposal_id, milestones, current_user)
    return InvoiceListResponse(invoices=[InvoiceResponse.model_validate(i) for i in invoices])


@router.post("/from-contract/{contract_id}", response_model=InvoiceResponse, status_code=201)
async def create_invoice_from_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Draft invoice covering the contract's deliverables"""
    return InvoiceResponse.model_validate(service.create_from_contract(contract_id, current_user))


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return InvoiceResponse.model_validate(service.get_invoice(invoice_id, current_user))


@router.patch("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return InvoiceResponse.model_validate(service.update_invoice(invoice_id, data, current_user))


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.delete_invoice(invoice_id, current_user)


@router.post("/{invoice_id}/send", response_model=InvoiceResponse)
async def send_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Mark sent and email the invoice to the client"""
    return InvoiceResponse.model_validate(await service.send_invoice(invoice_id, current_user))


@router.patch("/{invoice_id}/status", response_model=InvoiceResponse)
async def update_invoice_status(
    invoice_id: int,
    data: InvoiceStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Move the invoice to a new status; only workflow transitions are accepted"""
    invoice = service.update_status(invoice_id, data.status, current_user)
    return InvoiceResponse.model_validate(invoice)


@router.post("/{invoice_id}/pdf")
async def generate_invoice_pdf(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    pdf_bytes, filename = await service.generate_pdf(invoice_id, current_user)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
