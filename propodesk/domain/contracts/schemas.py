"""Contract domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ...shared.validators import to_naive_utc, validate_email

ContractStatus = Literal["draft", "sent", "viewed", "signed", "countersigned", "completed", "cancelled"]


class Deliverable(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    price: Optional[float] = Field(None, ge=0, le=10_000_000, allow_inf_nan=False)
    price_type: Optional[str] = Field(
        None, max_length=50, validation_alias=AliasChoices("price_type", "priceType")
    )


class ContractCreate(BaseModel):
    """Schema for creating a new contract"""

    proposal_id: Optional[int] = Field(None, validation_alias=AliasChoices("proposal_id", "proposalId"))
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1, max_length=100_000)
    client_name: str = Field(
        ..., min_length=1, max_length=200, validation_alias=AliasChoices("client_name", "clientName")
    )
    client_company: Optional[str] = Field(
        None, max_length=200, validation_alias=AliasChoices("client_company", "clientCompany")
    )
    client_email: Optional[str] = Field(
        None, max_length=254, validation_alias=AliasChoices("client_email", "clientEmail")
    )
    client_address: Optional[str] = Field(
        None, max_length=500, validation_alias=AliasChoices("client_address", "clientAddress")
    )
    deliverables: list[Deliverable] = Field(default_factory=list)
    total_value: Optional[float] = Field(
        None,
        ge=0,
        le=10_000_000,
        allow_inf_nan=False,
        validation_alias=AliasChoices("total_value", "totalValue"),
    )
    contract_term: Optional[str] = Field(
        None, max_length=100, validation_alias=AliasChoices("contract_term", "contractTerm")
    )
    expires_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("expires_at", "expiresAt")
    )

    @field_validator("client_email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value) if value else None

    @field_validator("expires_at")
    @classmethod
    def normalize_expiry(cls, value):
        return to_naive_utc(value)


class ContractUpdate(BaseModel):
    """Schema for editing a draft contract"""

    title: Optional[str] = Field(None, min_length=1, max_length=300)
    content: Optional[str] = Field(None, min_length=1, max_length=100_000)
    client_name: Optional[str] = Field(
        None, min_length=1, max_length=200, validation_alias=AliasChoices("client_name", "clientName")
    )
    client_company: Optional[str] = Field(
        None, max_length=200, validation_alias=AliasChoices("client_company", "clientCompany")
    )
    client_email: Optional[str] = Field(
        None, max_length=254, validation_alias=AliasChoices("client_email", "clientEmail")
    )
    client_address: Optional[str] = Field(
        None, max_length=500, validation_alias=AliasChoices("client_address", "clientAddress")
    )
    deliverables: Optional[list[Deliverable]] = None
    total_value: Optional[float] = Field(
        None,
        ge=0,
        le=10_000_000,
        allow_inf_nan=False,
        validation_alias=AliasChoices("total_value", "totalValue"),
    )
    contract_term: Optional[str] = Field(
        None, max_length=100, validation_alias=AliasChoices("contract_term", "contractTerm")
    )
    expires_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("expires_at", "expiresAt")
    )

    @field_validator("client_email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value) if value else None

    @field_validator("expires_at")
    @classmethod
    def normalize_expiry(cls, value):
        return to_naive_utc(value)


class SignatureOut(BaseModel):
    id: int
    signer_type: str
    signer_name: str
    signer_email: Optional[str] = None
    signed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContractResponse(BaseModel):
    id: int
    user_id: int
    proposal_id: Optional[int] = None
    title: str
    content: str
    client_name: str
    client_company: Optional[str] = None
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    deliverables: list[dict] = Field(default_factory=list)
    total_value: Optional[float] = None
    contract_term: Optional[str] = None
    access_token: str
    status: ContractStatus
    client_signed_at: Optional[datetime] = None
    user_signed_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    signatures: list[SignatureOut] = Field(default_factory=list)

    @field_validator("deliverables", mode="before")
    @classmethod
    def default_deliverables(cls, value):
        return value or []

    class Config:
        from_attributes = True


class PublicContractResponse(BaseModel):
    """What the signer sees through the public link"""

    id: int
    title: str
    content: str
    client_name: str
    client_company: Optional[str] = None
    deliverables: list[dict] = Field(default_factory=list)
    total_value: Optional[float] = None
    contract_term: Optional[str] = None
    status: ContractStatus
    client_signed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @field_validator("deliverables", mode="before")
    @classmethod
    def default_deliverables(cls, value):
        return value or []

    class Config:
        from_attributes = True


class SignContractRequest(BaseModel):
    signer_name: str = Field(
        ..., min_length=1, max_length=200, validation_alias=AliasChoices("signer_name", "signerName")
    )
    signer_email: Optional[str] = Field(
        None, max_length=254, validation_alias=AliasChoices("signer_email", "signerEmail")
    )
    signature_data: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("signature_data", "signatureData")
    )

    @field_validator("signer_email")
    @classmethod
    def check_email(cls, value):
        return validate_email(value) if value else None


class SignContractResponse(BaseModel):
    success: bool = True
    contract: PublicContractResponse


class CountersignRequest(BaseModel):
    signature_data: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("signature_data", "signatureData")
    )
    signer_name: Optional[str] = Field(
        None, max_length=200, validation_alias=AliasChoices("signer_name", "signerName")
    )


class ContractFromProposalRequest(BaseModel):
    """Optional overrides when generating a contract from a proposal"""

    template: Optional[str] = Field(None, max_length=100_000)
    governing_state: Optional[str] = Field(
        None, max_length=100, validation_alias=AliasChoices("governing_state", "governingState")
    )


class SignatureUploadResponse(BaseModel):
    signature_data: str
