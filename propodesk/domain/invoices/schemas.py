"""Invoice domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ...shared.validators import to_naive_utc, validate_email

InvoiceStatus = Literal["draft", "sent", "viewed", "paid", "overdue", "cancelled"]
PaymentTerms = Literal["net_30", "net_15", "due_on_receipt"]


class LineItem(BaseModel):
    """One billed line; ``amount`` is always recomputed server-side"""

    id: Optional[str] = None
    description: str = Field(..., min_length=1, max_length=500)
    quantity: float = Field(..., gt=0, allow_inf_nan=False)
    unit_price: float = Field(
        ..., ge=0, allow_inf_nan=False, validation_alias=AliasChoices("unit_price", "unitPrice")
    )
    amount: Optional[float] = None


class InvoiceCreate(BaseModel):
    """Schema for creating a new invoice"""

    proposal_id: Optional[int] = Field(None, validation_alias=AliasChoices("proposal_id", "proposalId"))
    contract_id: Optional[int] = Field(None, validation_alias=AliasChoices("contract_id", "contractId"))
    title: str = Field(..., min_length=1, max_length=255)
    client_name: str = Field(
        ..., min_length=1, max_length=255, validation_alias=AliasChoices("client_name", "clientName")
    )
    client_company: Optional[str] = Field(
        None, max_length=255, validation_alias=AliasChoices("client_company", "clientCompany")
    )
    client_email: Optional[str] = Field(
        None, validation_alias=AliasChoices("client_email", "clientEmail")
    )
    client_address: Optional[str] = Field(
        None, max_length=500, validation_alias=AliasChoices("client_address", "clientAddress")
    )
    line_items: list[LineItem] = Field(
        default_factory=list, validation_alias=AliasChoices("line_items", "lineItems")
    )
    tax_rate: float = Field(
        0, ge=0, le=100, allow_inf_nan=False, validation_alias=AliasChoices("tax_rate", "taxRate")
    )
    currency: str = Field("USD", min_length=3, max_length=10)
    due_date: Optional[datetime] = Field(None, validation_alias=AliasChoices("due_date", "dueDate"))
    payment_terms: PaymentTerms = Field(
        "net_30", validation_alias=AliasChoices("payment_terms", "paymentTerms")
    )
    milestone_number: int = Field(
        1, ge=1, validation_alias=AliasChoices("milestone_number", "milestoneNumber")
    )
    milestone_total: int = Field(
        1, ge=1, validation_alias=AliasChoices("milestone_total", "milestoneTotal")
    )
    payment_platform: Optional[str] = Field(
        None, max_length=50, validation_alias=AliasChoices("payment_platform", "paymentPlatform")
    )
    payment_link: Optional[str] = Field(
        None, max_length=500, validation_alias=AliasChoices("payment_link", "paymentLink")
    )
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("client_email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value) if value else None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value):
        return to_naive_utc(value)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value):
        return value.upper()


class InvoiceUpdate(BaseModel):
    """Schema for editing an invoice; status changes use PATCH /status"""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    client_name: Optional[str] = Field(
        None, min_length=1, max_length=255, validation_alias=AliasChoices("client_name", "clientName")
    )
    client_company: Optional[str] = Field(
        None, max_length=255, validation_alias=AliasChoices("client_company", "clientCompany")
    )
    client_email: Optional[str] = Field(
        None, validation_alias=AliasChoices("client_email", "clientEmail")
    )
    client_address: Optional[str] = Field(
        None, max_length=500, validation_alias=AliasChoices("client_address", "clientAddress")
    )
    line_items: Optional[list[LineItem]] = Field(
        None, validation_alias=AliasChoices("line_items", "lineItems")
    )
    tax_rate: Optional[float] = Field(
        None, ge=0, le=100, allow_inf_nan=False, validation_alias=AliasChoices("tax_rate", "taxRate")
    )
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    due_date: Optional[datetime] = Field(None, validation_alias=AliasChoices("due_date", "dueDate"))
    payment_terms: Optional[PaymentTerms] = Field(
        None, validation_alias=AliasChoices("payment_terms", "paymentTerms")
    )
    payment_platform: Optional[str] = Field(
        None, max_length=50, validation_alias=AliasChoices("payment_platform", "paymentPlatform")
    )
    payment_link: Optional[str] = Field(
        None, max_length=500, validation_alias=AliasChoices("payment_link", "paymentLink")
    )
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("client_email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value) if value else None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value):
        return to_naive_utc(value)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value):
        return value.upper() if value else value


class InvoiceResponse(BaseModel):
    id: int
    user_id: int
    proposal_id: Optional[int] = None
    contract_id: Optional[int] = None
    invoice_number: str
    title: str
    notes: Optional[str] = None
    client_name: str
    client_company: Optional[str] = None
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    line_items: list[dict] = Field(default_factory=list)
    subtotal: float
    tax_rate: float
    tax_amount: float
    total: float
    currency: str = "USD"
    due_date: Optional[datetime] = None
    payment_terms: Optional[str] = None
    milestone_number: int = 1
    milestone_total: int = 1
    payment_platform: Optional[str] = None
    payment_link: Optional[str] = None
    status: InvoiceStatus
    sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("line_items", mode="before")
    @classmethod
    def default_line_items(cls, value):
        return value or []

    class Config:
        from_attributes = True


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoicesFromProposalRequest(BaseModel):
    milestones: int = Field(1, ge=1, le=24)


class InvoiceListResponse(BaseModel):
    invoices: list[InvoiceResponse]


class OverdueRefreshResponse(BaseModel):
    updated: int
    invoice_ids: list[int]
