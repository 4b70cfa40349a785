"""Proposal domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ...shared.validators import to_naive_utc, validate_email
from ..links.schemas import LinkOut

CalculatorType = Literal["marketing", "custom"]
ProposalStatus = Literal["draft", "sent", "viewed", "accepted", "rejected"]

# Document body: editor blocks or an HTML string
ProposalContent = Union[list[dict[str, Any]], str]


class ProposalCreate(BaseModel):
    """Schema for creating a new proposal"""

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
    client_phone: Optional[str] = Field(
        None, max_length=50, validation_alias=AliasChoices("client_phone", "clientPhone")
    )
    client_address: Optional[str] = Field(
        None, max_length=500, validation_alias=AliasChoices("client_address", "clientAddress")
    )
    calculator_type: CalculatorType = Field(
        "marketing", validation_alias=AliasChoices("calculator_type", "calculatorType")
    )
    calculator_data: Optional[dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("calculator_data", "calculatorData")
    )
    content: Optional[ProposalContent] = None
    theme: Optional[dict[str, Any]] = None
    cover_photo_url: Optional[str] = Field(
        None, max_length=500, validation_alias=AliasChoices("cover_photo_url", "coverPhotoUrl")
    )

    @field_validator("client_email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value) if value else None


class ProposalUpdate(BaseModel):
    """Schema for updating an existing proposal; status changes go through the workflow endpoints"""

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
    client_phone: Optional[str] = Field(
        None, max_length=50, validation_alias=AliasChoices("client_phone", "clientPhone")
    )
    client_address: Optional[str] = Field(
        None, max_length=500, validation_alias=AliasChoices("client_address", "clientAddress")
    )
    calculator_type: Optional[CalculatorType] = Field(
        None, validation_alias=AliasChoices("calculator_type", "calculatorType")
    )
    calculator_data: Optional[dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("calculator_data", "calculatorData")
    )
    content: Optional[ProposalContent] = None
    theme: Optional[dict[str, Any]] = None
    cover_photo_url: Optional[str] = Field(
        None, max_length=500, validation_alias=AliasChoices("cover_photo_url", "coverPhotoUrl")
    )

    @field_validator("client_email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value) if value else None


class ProposalResponse(BaseModel):
    id: int
    user_id: int
    title: str
    client_name: str
    client_company: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    calculator_type: Optional[str] = None
    calculator_data: Optional[dict[str, Any]] = None
    content: Optional[ProposalContent] = None
    theme: Optional[dict[str, Any]] = None
    cover_photo_url: Optional[str] = None
    status: ProposalStatus
    view_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    share_links: list[LinkOut] = Field(
        default_factory=list, validation_alias=AliasChoices("share_links", "links")
    )

    class Config:
        from_attributes = True


class PublicProposalResponse(BaseModel):
    """What a recipient sees through a share link"""

    id: int
    title: str
    client_name: str
    client_company: Optional[str] = None
    calculator_type: Optional[str] = None
    calculator_data: Optional[dict[str, Any]] = None
    content: Optional[ProposalContent] = None
    theme: Optional[dict[str, Any]] = None
    cover_photo_url: Optional[str] = None
    status: ProposalStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SharedProposalResponse(BaseModel):
    proposal: PublicProposalResponse
    link_id: int


class ProposalSendRequest(BaseModel):
    message: Optional[str] = Field(None, max_length=2000)
    expires_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("expires_at", "expiresAt")
    )

    @field_validator("expires_at")
    @classmethod
    def normalize_expiry(cls, value):
        return to_naive_utc(value)


class ProposalSendResponse(BaseModel):
    proposal: ProposalResponse
    token: str
    url: str
    email_sent: bool


class ProposalDecision(BaseModel):
    """Recipient decision; the share token proves access to the proposal"""

    token: str = Field(..., min_length=1)
    signer_name: Optional[str] = Field(
        None, max_length=255, validation_alias=AliasChoices("signer_name", "signerName")
    )


class ProposalVersionCreate(BaseModel):
    label: Optional[str] = Field(None, max_length=255)


class ProposalVersionOut(BaseModel):
    id: int
    proposal_id: int
    version_number: int
    title: str
    content: Optional[ProposalContent] = None
    label: Optional[str] = None
    author_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProposalVersionDetail(BaseModel):
    version: ProposalVersionOut
    proposal_title: str
    client_name: str
