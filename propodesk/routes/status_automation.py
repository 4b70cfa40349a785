"""
API endpoint for invoice status automation
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..domain.invoices.schemas import OverdueRefreshResponse
from ..domain.invoices.service import InvoiceService
from ..models import User

router = APIRouter(prefix="/status", tags=["status"])


@router.post("/invoices/refresh-overdue", response_model=OverdueRefreshResponse)
async def refresh_overdue_invoices(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """
    Mark the current user's sent or viewed invoices past due as overdue
    (In production, this should be run via scheduled job/cron)
    """
    updated = InvoiceService(db).refresh_overdue(user=current_user)
    return OverdueRefreshResponse(updated=len(updated), invoice_ids=[invoice.id for invoice in updated])
