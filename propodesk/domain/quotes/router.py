"""Calculator router - FastAPI endpoints for the marketing quote engine"""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from ...auth import get_current_user
from ...models import User
from .catalog import ADD_ON_PRICES, SERVICE_CATALOG
from .engine import compute_totals, quote_line_items
from .schemas import CatalogResponse, QuoteRequest, QuoteResponse, ServiceOut, TierOut

router = APIRouter(prefix="/calculators", tags=["Calculators"])


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog(current_user: User = Depends(get_current_user)):
    """Return the service tiers and add-on prices"""
    services = {
        key: ServiceOut(
            name=service.name,
            tiers={number: TierOut(**asdict(tier)) for number, tier in service.tiers.items()},
        )
        for key, service in SERVICE_CATALOG.items()
    }
    return CatalogResponse(services=services, add_ons=asdict(ADD_ON_PRICES))


@router.post("/quote", response_model=QuoteResponse)
async def calculate_quote(data: QuoteRequest, current_user: User = Depends(get_current_user)):
    """Compute totals and margin for a calculator selection"""
    return QuoteResponse(
        totals=compute_totals(data.services, data.add_ons, data.contract_term),
        line_items=quote_line_items(data.services, data.add_ons, data.contract_term),
    )
