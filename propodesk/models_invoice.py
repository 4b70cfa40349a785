"""
Invoice model for client billing
"""

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


class Invoice(Base):
    """Invoice model for client billing"""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    proposal_id = Column(Integer, ForeignKey("proposals.id"), nullable=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=True)

    # Invoice details
    invoice_number = Column(String(50), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)

    # Client details
    client_name = Column(String(255), nullable=False)
    client_company = Column(String(255), nullable=True)
    client_email = Column(String(255), nullable=True)
    client_address = Column(String(500), nullable=True)

    # Pricing - always recomputed from line_items before save
    line_items = Column(JSON, default=list)  # [{description, quantity, unit_price, amount}]
    subtotal = Column(Float, nullable=False, default=0)
    tax_rate = Column(Float, nullable=False, default=0)  # Percentage
    tax_amount = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False, default=0)
    currency = Column(String(10), default="USD")

    # Payment terms
    due_date = Column(DateTime, nullable=True)
    payment_terms = Column(String(30), default="net_30")  # net_30, net_15, due_on_receipt
    milestone_number = Column(Integer, default=1, nullable=False)
    milestone_total = Column(Integer, default=1, nullable=False)

    # Payment integration
    payment_platform = Column(String(50), nullable=True)
    payment_link = Column(String(500), nullable=True)

    # Status: draft, sent, viewed, paid, overdue, cancelled
    status = Column(String(20), default="draft", nullable=False)

    sent_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
