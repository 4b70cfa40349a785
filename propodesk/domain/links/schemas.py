"""Share link schemas - Pydantic models for public proposal and contract links"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, computed_field, field_validator

from ...config import FRONTEND_URL
from ...shared.validators import to_naive_utc

LinkType = Literal["proposal", "contract"]


def proposal_share_url(token: str) -> str:
    return f"{FRONTEND_URL}/p/{token}"


def contract_share_url(token: str) -> str:
    return f"{FRONTEND_URL}/c/{token}"


class LinkCreate(BaseModel):
    """Body of POST /links"""

    type: LinkType = "proposal"
    document_id: int = Field(
        ..., validation_alias=AliasChoices("document_id", "documentId", "proposalId", "contractId")
    )
    expires_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("expires_at", "expiresAt")
    )
    password: Optional[str] = Field(None, min_length=1, max_length=128)
    max_views: Optional[int] = Field(
        None, gt=0, validation_alias=AliasChoices("max_views", "maxViews")
    )

    @field_validator("expires_at")
    @classmethod
    def normalize_expiry(cls, value):
        return to_naive_utc(value)


class LinkUpdate(BaseModel):
    is_active: Optional[bool] = Field(None, validation_alias=AliasChoices("is_active", "isActive"))
    expires_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("expires_at", "expiresAt")
    )
    max_views: Optional[int] = Field(
        None, gt=0, validation_alias=AliasChoices("max_views", "maxViews")
    )

    @field_validator("expires_at")
    @classmethod
    def normalize_expiry(cls, value):
        return to_naive_utc(value)


class LinkCreated(BaseModel):
    token: str
    url: str
    expires_at: Optional[datetime] = None


class LinkOut(BaseModel):
    """Stored proposal link; the password hash never leaves the server"""

    id: int
    proposal_id: int
    token: str
    expires_at: Optional[datetime] = None
    max_views: Optional[int] = None
    view_count: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    # Read from the stored hash, which is never echoed back
    has_password: bool = Field(False, validation_alias=AliasChoices("has_password", "password_hash"))

    @field_validator("has_password", mode="before")
    @classmethod
    def hash_present(cls, value):
        return bool(value)

    @computed_field
    @property
    def url(self) -> str:
        return proposal_share_url(self.token)

    class Config:
        from_attributes = True
