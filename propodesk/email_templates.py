"""
HTML Email Templates
Inline-styled HTML for proposal, contract and invoice notifications
"""

from html import escape
from typing import Optional

# App theme colors - Indigo/Slate color scheme
THEME = {
    "primary": "#4f46e5",
    "primary_dark": "#4338ca",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def get_base_template(
    title: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base HTML wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <p style="text-align: center; padding: 20px 0;">
          <a href="{escape(cta_url, quote=True)}"
             style="background-color: {THEME['primary']}; color: #ffffff; font-weight: 600;
                    border-radius: 8px; padding: 16px 36px; text-decoration: none; display: inline-block;">
            {cta_label}
          </a>
        </p>
        """

    return f"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>{escape(title)}</title></head>
  <body style="background-color: {THEME['background']}; margin: 0; padding: 32px 0;
               font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Arial, sans-serif;">
    <div style="max-width: 600px; margin: 0 auto; background-color: {THEME['card_bg']};
                border: 1px solid {THEME['border']}; border-radius: 12px; padding: 40px;">
      <h1 style="font-size: 24px; color: {THEME['text_primary']}; margin: 0 0 16px 0;">{escape(title)}</h1>
      <div style="font-size: 16px; line-height: 1.6; color: {THEME['text_secondary']};">
        {content_sections}
      </div>
      {cta_section}
    </div>
    <p style="text-align: center; font-size: 13px; color: {THEME['text_muted']};">Sent with Propodesk</p>
  </body>
</html>
"""


def proposal_shared_template(
    client_name: str, sender_name: str, proposal_title: str, share_url: str, message: Optional[str] = None
) -> str:
    """Proposal ready for review"""
    note = f"<p>{escape(message)}</p>" if message else ""
    content = f"""
    <p>Hi {escape(client_name)},</p>
    <p><strong>{escape(sender_name)}</strong> has shared a proposal with you:
       <strong>{escape(proposal_title)}</strong>.</p>
    {note}
    <p>You can review it, leave comments and accept it online.</p>
    """
    return get_base_template(
        title="Your Proposal Is Ready",
        content_sections=content,
        cta_url=share_url,
        cta_label="View Proposal",
    )


def proposal_decision_template(owner_name: str, client_name: str, proposal_title: str, decision: str) -> str:
    """Notify the owner that a client accepted or rejected a proposal"""
    content = f"""
    <p>Hi {escape(owner_name)},</p>
    <p>{escape(client_name)} has <strong>{escape(decision)}</strong> the proposal
       <strong>{escape(proposal_title)}</strong>.</p>
    """
    return get_base_template(title=f"Proposal {decision.capitalize()}", content_sections=content)


def contract_signing_template(
    client_name: str, sender_name: str, contract_title: str, signing_url: str
) -> str:
    """Contract ready to sign"""
    content = f"""
    <p>Hi {escape(client_name)},</p>
    <p><strong>{escape(sender_name)}</strong> has sent you a contract to review and sign:
       <strong>{escape(contract_title)}</strong>.</p>
    """
    return get_base_template(
        title="Contract Ready for Signature",
        content_sections=content,
        cta_url=signing_url,
        cta_label="Review & Sign",
    )


def contract_signed_notification_template(owner_name: str, client_name: str, contract_title: str) -> str:
    """Notify the owner when a client signs their contract"""
    content = f"""
    <p>Hi {escape(owner_name)},</p>
    <p>{escape(client_name)} has signed <strong>{escape(contract_title)}</strong>.
       Countersign it to complete the agreement.</p>
    """
    return get_base_template(title="Contract Signed", content_sections=content)


def invoice_ready_template(
    client_name: str,
    sender_name: str,
    invoice_number: str,
    amount: float,
    currency: str = "USD",
    due_date: str = "",
    payment_url: str = "",
) -> str:
    """Invoice ready notification for client"""
    due_date_section = f"<br/>Due Date: {escape(due_date)}" if due_date else ""

    content = f"""
    <p>Hi {escape(client_name)},</p>
    <p>Your invoice from <strong>{escape(sender_name)}</strong> is ready for payment.</p>
    <p style="text-align: center; font-size: 32px; font-weight: 700; color: {THEME['text_primary']};">
      {amount:,.2f} {escape(currency)}
    </p>
    <p style="font-size: 14px; color: {THEME['text_muted']};">
      Invoice: {escape(invoice_number)}{due_date_section}
    </p>
    """

    return get_base_template(
        title="Invoice Ready",
        content_sections=content,
        cta_url=payment_url or None,
        cta_label="Pay Invoice" if payment_url else None,
    )
