"""
Email Service using Resend
Outbound notifications for proposals, contracts and invoices
"""

import logging
import re
from typing import Optional, Union

import resend

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    contract_signed_notification_template,
    contract_signing_template,
    invoice_ready_template,
    proposal_decision_template,
    proposal_shared_template,
)

logger = logging.getLogger(__name__)

if RESEND_API_KEY:
    resend.api_key = RESEND_API_KEY


class EmailNotConfigured(RuntimeError):
    """Raised when no email provider key is configured"""


class EmailDeliveryError(RuntimeError):
    """Raised when the provider rejects or fails a send"""


def html_to_text(html_content: str) -> str:
    """Rough plain-text fallback for clients that do not render HTML"""
    text = re.sub(r"<(br|/p|/h\d|/li)\s*/?>", "\n", html_content, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", "", text)
    return re.sub(r"\n\s*\n+", "\n\n", text).strip()


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    html: str,
    text: Optional[str] = None,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        html: HTML body
        text: Plain text body (derived from the HTML when omitted)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailNotConfigured("Email service not configured")

    recipients = [to] if isinstance(to, str) else to
    email_data = {
        "from": from_address or EMAIL_FROM_ADDRESS,
        "to": recipients,
        "subject": subject,
        "html": html,
        "text": text or html_to_text(html),
    }

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built Emails for Document Events
# ============================================


async def send_proposal_share_email(
    to: str,
    client_name: str,
    sender_name: str,
    proposal_title: str,
    share_url: str,
    message: Optional[str] = None,
) -> dict:
    """Send a proposal share link to the client"""
    return await send_email(
        to=to,
        subject=f"Proposal: {proposal_title}",
        html=proposal_shared_template(client_name, sender_name, proposal_title, share_url, message),
    )


async def send_proposal_decision_email(
    to: str, owner_name: str, client_name: str, proposal_title: str, decision: str
) -> dict:
    """Tell the proposal owner the client accepted or rejected"""
    return await send_email(
        to=to,
        subject=f"{client_name} {decision} {proposal_title}",
        html=proposal_decision_template(owner_name, client_name, proposal_title, decision),
    )


async def send_contract_signing_email(
    to: str, client_name: str, sender_name: str, contract_title: str, signing_url: str
) -> dict:
    """Send the public signing link to the client"""
    return await send_email(
        to=to,
        subject=f"Please sign: {contract_title}",
        html=contract_signing_template(client_name, sender_name, contract_title, signing_url),
    )


async def send_contract_signed_notification(
    to: str, owner_name: str, client_name: str, contract_title: str
) -> dict:
    """Notify the owner when a client signs their contract"""
    return await send_email(
        to=to,
        subject=f"Contract Signed by {client_name}",
        html=contract_signed_notification_template(owner_name, client_name, contract_title),
    )


async def send_invoice_email(
    to: str,
    client_name: str,
    sender_name: str,
    invoice_number: str,
    amount: float,
    currency: str = "USD",
    due_date: str = "",
    payment_url: str = "",
) -> dict:
    """Send an invoice to the client"""
    return await send_email(
        to=to,
        subject=f"Invoice {invoice_number} from {sender_name}",
        html=invoice_ready_template(
            client_name, sender_name, invoice_number, amount, currency, due_date, payment_url
        ),
    )
