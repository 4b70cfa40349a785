import secrets

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_access_token():
    """Generate an opaque token for public contract signing links"""
    return secrets.token_hex(32)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Subject claim issued by the identity provider
    external_id = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), index=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    proposals = relationship("Proposal", back_populates="user")
    contracts = relationship("Contract", back_populates="user")


class Proposal(Base):
    __tablename__ = "proposals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    client_name = Column(String(255), nullable=False)
    client_company = Column(String(255), nullable=True)
    client_email = Column(String(255), nullable=True)
    client_phone = Column(String(50), nullable=True)
    client_address = Column(String(500), nullable=True)

    calculator_type = Column(String(50), default="marketing")  # marketing, custom
    calculator_data = Column(JSON, nullable=True)  # Selection + Totals snapshot
    content = Column(JSON, nullable=True)  # Document body (blocks or HTML string)
    theme = Column(JSON, nullable=True)
    cover_photo_url = Column(String(500), nullable=True)

    status = Column(String(20), default="draft", nullable=False)  # draft, sent, viewed, accepted, rejected
    view_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="proposals")
    links = relationship("ProposalLink", back_populates="proposal", cascade="all, delete-orphan")
    comments = relationship(
        "ProposalComment", back_populates="proposal", cascade="all, delete-orphan"
    )
    versions = relationship(
        "ProposalVersion",
        back_populates="proposal",
        cascade="all, delete-orphan",
        order_by="ProposalVersion.version_number",
    )


class ProposalLink(Base):
    """Token-based public share link for a proposal"""

    __tablename__ = "proposal_links"

    id = Column(Integer, primary_key=True, index=True)
    proposal_id = Column(Integer, ForeignKey("proposals.id"), nullable=False, index=True)
    token = Column(String(64), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=True)
    expires_at = Column(DateTime, nullable=True)
    max_views = Column(Integer, nullable=True)
    view_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    proposal = relationship("Proposal", back_populates="links")


class ProposalVersion(Base):
    """Saved snapshot of a proposal's title and body"""

    __tablename__ = "proposal_versions"

    id = Column(Integer, primary_key=True, index=True)
    proposal_id = Column(Integer, ForeignKey("proposals.id"), nullable=False, index=True)
    version_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(JSON, nullable=True)
    label = Column(String(255), nullable=True)
    author_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    proposal = relationship("Proposal", back_populates="versions")


class ProposalComment(Base):
    __tablename__ = "proposal_comments"

    id = Column(Integer, primary_key=True, index=True)
    proposal_id = Column(Integer, ForeignKey("proposals.id"), nullable=False, index=True)
    author_name = Column(String(255), nullable=False, default="Anonymous")
    content = Column(Text, nullable=False)
    highlighted_text = Column(Text, nullable=True)
    block_id = Column(String(100), nullable=True, index=True)
    parent_comment_id = Column(Integer, ForeignKey("proposal_comments.id"), nullable=True)
    is_resolved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    proposal = relationship("Proposal", back_populates="comments")


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    proposal_id = Column(Integer, ForeignKey("proposals.id"), nullable=True)

    title = Column(String(300), nullable=False)
    content = Column(Text, nullable=False, default="")
    client_name = Column(String(200), nullable=False)
    client_company = Column(String(200), nullable=True)
    client_email = Column(String(254), nullable=True)
    client_address = Column(String(500), nullable=True)

    deliverables = Column(JSON, default=list)  # [{name, description, price, price_type}]
    total_value = Column(Float, nullable=True)
    contract_term = Column(String(100), nullable=True)

    # Opaque token for the public signing URL /c/{token}
    access_token = Column(
        String(64), unique=True, index=True, nullable=False, default=generate_access_token
    )

    # Status: draft, sent, viewed, signed, countersigned, completed, cancelled
    status = Column(String(20), default="draft", nullable=False)

    client_signed_at = Column(DateTime, nullable=True)
    user_signed_at = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="contracts")
    signatures = relationship(
        "ContractSignature", back_populates="contract", cascade="all, delete-orphan"
    )
    comments = relationship(
        "ContractComment", back_populates="contract", cascade="all, delete-orphan"
    )


class ContractSignature(Base):
    __tablename__ = "contract_signatures"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    signer_type = Column(String(20), nullable=False)  # client, user
    signer_name = Column(String(200), nullable=False)
    signer_email = Column(String(254), nullable=True)
    signature_data = Column(Text, nullable=False)  # data:image/...;base64 URL
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    signed_at = Column(DateTime, server_default=func.now())

    contract = relationship("Contract", back_populates="signatures")


class ContractComment(Base):
    __tablename__ = "contract_comments"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    author_name = Column(String(255), nullable=False, default="Anonymous")
    content = Column(Text, nullable=False)
    highlighted_text = Column(Text, nullable=True)
    block_id = Column(String(100), nullable=True, index=True)
    parent_comment_id = Column(Integer, ForeignKey("contract_comments.id"), nullable=True)
    is_resolved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    contract = relationship("Contract", back_populates="comments")
