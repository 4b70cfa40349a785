"""Static price tables for the marketing calculator"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

SERVICE_KEYS = ("traffic", "retention", "creative")
TIERS_PER_SERVICE = 3


@dataclass(frozen=True)
class Tier:
    monthly_price: float
    setup_price: float
    internal_cost: float
    description: str


@dataclass(frozen=True)
class Service:
    name: str
    tiers: Mapping[int, Tier]


@dataclass(frozen=True)
class DashboardPrice:
    setup: float
    monthly: float


@dataclass(frozen=True)
class WorkshopPrice:
    half_day: float
    full_day: float


@dataclass(frozen=True)
class AddOnPrices:
    landing_pages: float
    funnels: float
    dashboard: DashboardPrice
    workshop: WorkshopPrice
    video_pack: float


def _service(name: str, tiers: dict[int, Tier]) -> Service:
    return Service(name=name, tiers=MappingProxyType(tiers))


SERVICE_CATALOG: Mapping[str, Service] = MappingProxyType(
    {
        "traffic": _service(
            "Traffic Driver",
            {
                1: Tier(7500, 3750, 2800, "Google + Meta management up to $5K ad spend"),
                2: Tier(
                    12500,
                    6250,
                    5000,
                    "Google + Meta + LinkedIn up to $15K ad spend (Growth Accelerator)",
                ),
                3: Tier(
                    19000,
                    9500,
                    7500,
                    "All channels including TikTok up to $50K ad spend (Enterprise Performance Ecosystem)",
                ),
            },
        ),
        "retention": _service(
            "Retention & CRM",
            {
                1: Tier(3500, 1750, 1200, "3 basic email flows with templates"),
                2: Tier(6000, 3000, 2400, "Full lifecycle automation with A/B testing"),
                3: Tier(
                    9250, 4625, 3750, "Multi-channel CRM (email, SMS, WhatsApp) with AI segmentation"
                ),
            },
        ),
        "creative": _service(
            "Creative Support",
            {
                1: Tier(
                    2500, 1250, 1000, "8-10 ad creatives/month, 5-day turnaround (Creative Support)"
                ),
                2: Tier(
                    5000,
                    2500,
                    2000,
                    "15-20 creatives/month with video, 3-day turnaround (Creative Growth Pack)",
                ),
                3: Tier(
                    8250,
                    4125,
                    3250,
                    "Unlimited creative requests, 48-hour turnaround (Creative Engine)",
                ),
            },
        ),
    }
)

ADD_ON_PRICES = AddOnPrices(
    landing_pages=2500,
    funnels=6250,
    dashboard=DashboardPrice(setup=2000, monthly=500),
    workshop=WorkshopPrice(half_day=3500, full_day=6000),
    video_pack=4000,
)


def validate_catalog(catalog: Mapping[str, Service], add_on_prices: AddOnPrices) -> None:
    """Raise ValueError unless every service has tiers 1..3 and no amount is negative"""
    for key, service in catalog.items():
        if sorted(service.tiers) != list(range(1, TIERS_PER_SERVICE + 1)):
            raise ValueError(f"Service '{key}' must define exactly tiers 1-{TIERS_PER_SERVICE}")
        for number, tier in service.tiers.items():
            for field_name in ("monthly_price", "setup_price", "internal_cost"):
                if getattr(tier, field_name) < 0:
                    raise ValueError(f"{key} tier {number}: {field_name} must be >= 0")

    amounts = [
        add_on_prices.landing_pages,
        add_on_prices.funnels,
        add_on_prices.dashboard.setup,
        add_on_prices.dashboard.monthly,
        add_on_prices.workshop.half_day,
        add_on_prices.workshop.full_day,
        add_on_prices.video_pack,
    ]
    if any(amount < 0 for amount in amounts):
        raise ValueError("Add-on prices must be >= 0")


validate_catalog(SERVICE_CATALOG, ADD_ON_PRICES)
