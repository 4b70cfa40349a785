"""Quote domain schemas - Pydantic models for calculator input and output"""

from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

TierNumber = Literal[1, 2, 3]
WorkshopOption = Literal["half_day", "full_day"]
ContractTerm = Literal["6", "12"]

_WORKSHOP_ALIASES = {"halfDay": "half_day", "fullDay": "full_day"}


class SelectedServices(BaseModel):
    """Tier chosen per service line; None (or "none") means not selected"""

    traffic: Optional[TierNumber] = None
    retention: Optional[TierNumber] = None
    creative: Optional[TierNumber] = None

    @field_validator("traffic", "retention", "creative", mode="before")
    @classmethod
    def parse_tier(cls, value):
        if value is None or value == "none" or value == "":
            return None
        if isinstance(value, str) and value.isdigit():
            return int(value)
        return value


class AddOnsState(BaseModel):
    landing_pages: int = Field(0, ge=0, validation_alias=AliasChoices("landing_pages", "landingPages"))
    funnels: int = Field(0, ge=0)
    dashboard: bool = False
    workshop: Optional[WorkshopOption] = None
    video_pack: int = Field(0, ge=0, validation_alias=AliasChoices("video_pack", "videoPack"))

    @field_validator("workshop", mode="before")
    @classmethod
    def parse_workshop(cls, value):
        if value is None or value == "none" or value == "":
            return None
        return _WORKSHOP_ALIASES.get(value, value)


class QuoteRequest(BaseModel):
    services: SelectedServices = Field(default_factory=SelectedServices)
    add_ons: AddOnsState = Field(default_factory=AddOnsState)
    contract_term: ContractTerm = "6"

    @field_validator("contract_term", mode="before")
    @classmethod
    def parse_term(cls, value):
        if isinstance(value, int):
            return str(value)
        return value


class Totals(BaseModel):
    monthly_total: float
    setup_total: float
    annual_total: float
    margin: float


class QuoteLineItem(BaseModel):
    description: str
    quantity: int
    unit_price: float
    kind: Literal["monthly", "setup"]


class QuoteResponse(BaseModel):
    totals: Totals
    line_items: list[QuoteLineItem]


class TierOut(BaseModel):
    monthly_price: float
    setup_price: float
    internal_cost: float
    description: str


class ServiceOut(BaseModel):
    name: str
    tiers: dict[int, TierOut]


class CatalogResponse(BaseModel):
    services: dict[str, ServiceOut]
    add_ons: dict
