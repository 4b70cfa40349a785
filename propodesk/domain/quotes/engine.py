"""
Quote engine: selected tiers + add-ons + contract term -> totals and margin.

Pure functions over the static catalog. Nothing is rounded here; callers
round for presentation.
"""

from typing import Mapping, Optional

from .catalog import ADD_ON_PRICES, SERVICE_CATALOG, AddOnPrices, Service
from .schemas import (
    AddOnsState,
    ContractTerm,
    QuoteLineItem,
    QuoteRequest,
    SelectedServices,
    Totals,
)

TWELVE_MONTH_DISCOUNT = 0.95


def _term_multiplier(contract_term: ContractTerm) -> float:
    return TWELVE_MONTH_DISCOUNT if contract_term == "12" else 1.0


def compute_totals(
    selection: SelectedServices,
    add_ons: AddOnsState,
    contract_term: ContractTerm,
    catalog: Mapping[str, Service] = SERVICE_CATALOG,
    add_on_prices: AddOnPrices = ADD_ON_PRICES,
) -> Totals:
    """Compute monthly, setup and annual totals plus internal margin for a quote"""
    monthly_total = 0.0
    setup_total = 0.0
    internal_cost_total = 0.0

    for key, service in catalog.items():
        tier_number = getattr(selection, key, None)
        if tier_number is None:
            continue
        tier = service.tiers.get(tier_number)
        if tier is None:
            continue
        monthly_total += tier.monthly_price
        setup_total += tier.setup_price
        internal_cost_total += tier.internal_cost

    # Landing pages, funnels and video packs are quoted as monthly amounts.
    # Existing proposals depend on this, so it stays even though they are one-time work.
    monthly_total += add_ons.landing_pages * add_on_prices.landing_pages
    monthly_total += add_ons.funnels * add_on_prices.funnels
    monthly_total += add_ons.video_pack * add_on_prices.video_pack

    if add_ons.dashboard:
        setup_total += add_on_prices.dashboard.setup
        monthly_total += add_on_prices.dashboard.monthly

    if add_ons.workshop == "half_day":
        monthly_total += add_on_prices.workshop.half_day
    elif add_ons.workshop == "full_day":
        monthly_total += add_on_prices.workshop.full_day

    # Term discount applies after add-ons
    monthly_total *= _term_multiplier(contract_term)

    annual_total = monthly_total * 12 + setup_total
    margin = (
        (monthly_total - internal_cost_total) / monthly_total * 100 if monthly_total > 0 else 0.0
    )

    return Totals(
        monthly_total=monthly_total,
        setup_total=setup_total,
        annual_total=annual_total,
        margin=margin,
    )


def quote_line_items(
    selection: SelectedServices,
    add_ons: AddOnsState,
    contract_term: ContractTerm,
    catalog: Mapping[str, Service] = SERVICE_CATALOG,
    add_on_prices: AddOnPrices = ADD_ON_PRICES,
) -> list[QuoteLineItem]:
    """
    Itemise a quote for contracts and invoices.

    Monthly items carry the term discount in their unit price, so the monthly
    items sum to ``compute_totals(...).monthly_total`` and the setup items sum
    to ``setup_total``.
    """
    multiplier = _term_multiplier(contract_term)
    items: list[QuoteLineItem] = []

    def monthly(description: str, quantity: int, unit_price: float) -> None:
        items.append(
            QuoteLineItem(
                description=description,
                quantity=quantity,
                unit_price=unit_price * multiplier,
                kind="monthly",
            )
        )

    def setup(description: str, unit_price: float) -> None:
        if unit_price > 0:
            items.append(
                QuoteLineItem(description=description, quantity=1, unit_price=unit_price, kind="setup")
            )

    for key, service in catalog.items():
        tier_number = getattr(selection, key, None)
        tier = service.tiers.get(tier_number) if tier_number is not None else None
        if tier is None:
            continue
        label = f"{service.name} (Tier {tier_number})"
        monthly(f"{label} - Monthly Retainer", 1, tier.monthly_price)
        setup(f"{label} - Setup Fee", tier.setup_price)

    if add_ons.landing_pages:
        monthly("Landing Pages", add_ons.landing_pages, add_on_prices.landing_pages)
    if add_ons.funnels:
        monthly("Funnels", add_ons.funnels, add_on_prices.funnels)
    if add_ons.video_pack:
        monthly("Video Pack", add_ons.video_pack, add_on_prices.video_pack)
    if add_ons.dashboard:
        monthly("Reporting Dashboard", 1, add_on_prices.dashboard.monthly)
        setup("Reporting Dashboard - Setup Fee", add_on_prices.dashboard.setup)
    if add_ons.workshop == "half_day":
        monthly("Strategy Workshop (Half Day)", 1, add_on_prices.workshop.half_day)
    elif add_ons.workshop == "full_day":
        monthly("Strategy Workshop (Full Day)", 1, add_on_prices.workshop.full_day)

    return items


def quote_request_from_snapshot(calculator_data: Optional[dict]) -> Optional[QuoteRequest]:
    """
    Rebuild the calculator selection stored on a proposal.

    Accepts the snake_case keys this service writes and the camelCase keys
    older browser clients posted. Returns None when the snapshot holds no
    marketing selection.
    """
    if not calculator_data:
        return None
    services = calculator_data.get("services", calculator_data.get("selectedServices"))
    if services is None:
        return None
    return QuoteRequest(
        services=services,
        add_ons=calculator_data.get("add_ons", calculator_data.get("addOns")) or {},
        contract_term=calculator_data.get("contract_term", calculator_data.get("contractTerm", "6")),
    )
