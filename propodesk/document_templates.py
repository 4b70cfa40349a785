"""
HTML renderers for proposal, contract and invoice PDFs.

Documents are rendered to a single self-contained HTML page that the PDF
service prints. Proposal bodies are either editor blocks or an HTML string.
"""

from html import escape
from typing import Any, Optional

from .email_templates import THEME
from .utils.sanitization import sanitize_html

BASE_CSS = f"""
body {{ font-family: -apple-system, 'Segoe UI', Arial, sans-serif; color: {THEME['text_secondary']};
       font-size: 14px; line-height: 1.6; margin: 40px; }}
h1, h2, h3 {{ color: {THEME['text_primary']}; }}
table {{ width: 100%; border-collapse: collapse; margin: 16px 0; }}
th, td {{ border-bottom: 1px solid {THEME['border']}; padding: 8px; text-align: left; }}
.amount {{ text-align: right; }}
.muted {{ color: {THEME['text_muted']}; }}
.signature img {{ max-height: 80px; }}
"""


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{escape(title)}</title><style>{BASE_CSS}</style></head>
<body>
{body}
</body>
</html>
"""


def _money(amount: Optional[float], currency: str = "USD") -> str:
    return f"{amount or 0:,.2f} {escape(currency)}"


def _inline_text(content: Any) -> str:
    """Flatten a block's inline content (list of text runs or a string)"""
    if isinstance(content, str):
        return escape(content)
    if not isinstance(content, list):
        return ""
    parts = []
    for run in content:
        if not isinstance(run, dict):
            continue
        text = escape(str(run.get("text", "")))
        styles = run.get("styles") or {}
        if styles.get("bold"):
            text = f"<strong>{text}</strong>"
        if styles.get("italic"):
            text = f"<em>{text}</em>"
        parts.append(text)
    return "".join(parts)


def render_blocks(blocks: list) -> str:
    """Render editor blocks (heading, paragraph, list items, tables) to HTML"""
    html_parts: list[str] = []
    open_list: Optional[str] = None

    for block in blocks:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")
        list_tag = {"bulletListItem": "ul", "numberedListItem": "ol"}.get(block_type)

        if open_list and open_list != list_tag:
            html_parts.append(f"</{open_list}>")
            open_list = None
        if list_tag and not open_list:
            html_parts.append(f"<{list_tag}>")
            open_list = list_tag

        block_id = escape(str(block.get("id", "")), quote=True)
        if block_type == "heading":
            level = min(max(int((block.get("props") or {}).get("level", 1)), 1), 3)
            html_parts.append(f'<h{level} id="{block_id}">{_inline_text(block.get("content"))}</h{level}>')
        elif list_tag:
            html_parts.append(f"<li>{_inline_text(block.get('content'))}</li>")
        elif block_type == "table":
            rows = (block.get("content") or {}).get("rows", [])
            row_html = "".join(
                "<tr>" + "".join(f"<td>{_inline_text(cell)}</td>" for cell in row.get("cells", [])) + "</tr>"
                for row in rows
                if isinstance(row, dict)
            )
            html_parts.append(f"<table>{row_html}</table>")
        else:
            html_parts.append(f'<p id="{block_id}">{_inline_text(block.get("content"))}</p>')

    if open_list:
        html_parts.append(f"</{open_list}>")
    return "\n".join(html_parts)


def render_body(content: Any) -> str:
    if isinstance(content, list):
        return render_blocks(content)
    if isinstance(content, str):
        return sanitize_html(content)
    return ""


def proposal_html(proposal, totals: Optional[dict] = None) -> str:
    """Proposal document with an optional pricing summary"""
    cover = ""
    if proposal.cover_photo_url:
        cover = f'<img src="{escape(proposal.cover_photo_url, quote=True)}" style="width: 100%;" />'

    pricing = ""
    if totals:
        pricing = f"""
        <h2>Investment</h2>
        <table>
          <tr><td>Monthly</td><td class="amount">{_money(totals.get('monthly_total'))}</td></tr>
          <tr><td>Setup</td><td class="amount">{_money(totals.get('setup_total'))}</td></tr>
          <tr><th>Annual</th><th class="amount">{_money(totals.get('annual_total'))}</th></tr>
        </table>
        """

    company = f" ({escape(proposal.client_company)})" if proposal.client_company else ""
    body = f"""
    {cover}
    <h1>{escape(proposal.title)}</h1>
    <p class="muted">Prepared for {escape(proposal.client_name)}{company}</p>
    {render_body(proposal.content)}
    {pricing}
    """
    return _page(proposal.title, body)


def contract_html(contract) -> str:
    """Contract document with deliverables and captured signatures"""
    deliverable_rows = "".join(
        f"<tr><td>{escape(str(item.get('name', '')))}</td>"
        f"<td>{escape(str(item.get('description', '')))}</td>"
        f"<td class=\"amount\">{_money(item.get('price'))}</td></tr>"
        for item in (contract.deliverables or [])
        if isinstance(item, dict)
    )
    deliverables = (
        f"<h2>Deliverables</h2><table><tr><th>Item</th><th>Description</th>"
        f"<th class=\"amount\">Price</th></tr>{deliverable_rows}</table>"
        if deliverable_rows
        else ""
    )

    signature_blocks = "".join(
        f"""<div class="signature">
          <p><strong>{escape(signature.signer_name)}</strong>
             <span class="muted">({escape(signature.signer_type)})</span></p>
          <img src="{escape(signature.signature_data, quote=True)}" />
          <p class="muted">Signed {signature.signed_at:%Y-%m-%d %H:%M} UTC</p>
        </div>"""
        for signature in (contract.signatures or [])
        if signature.signed_at
    )

    body = f"""
    <h1>{escape(contract.title)}</h1>
    <p class="muted">Client: {escape(contract.client_name)}</p>
    {render_body(contract.content)}
    {deliverables}
    <p><strong>Total value:</strong> {_money(contract.total_value)}</p>
    {signature_blocks}
    """
    return _page(contract.title, body)


def invoice_html(invoice) -> str:
    """Invoice document with line items and totals"""
    rows = "".join(
        f"<tr><td>{escape(str(item.get('description', '')))}</td>"
        f"<td>{item.get('quantity', 0)}</td>"
        f"<td class=\"amount\">{_money(item.get('unit_price'), invoice.currency)}</td>"
        f"<td class=\"amount\">{_money(item.get('amount'), invoice.currency)}</td></tr>"
        for item in (invoice.line_items or [])
        if isinstance(item, dict)
    )
    due = f"<p>Due: {invoice.due_date:%Y-%m-%d}</p>" if invoice.due_date else ""
    notes = f"<p class=\"muted\">{escape(invoice.notes)}</p>" if invoice.notes else ""

    body = f"""
    <h1>Invoice {escape(invoice.invoice_number)}</h1>
    <p>{escape(invoice.title)}</p>
    <p class="muted">Bill to: {escape(invoice.client_name)}</p>
    {due}
    <table>
      <tr><th>Description</th><th>Qty</th><th class="amount">Unit price</th><th class="amount">Amount</th></tr>
      {rows}
    </table>
    <table>
      <tr><td>Subtotal</td><td class="amount">{_money(invoice.subtotal, invoice.currency)}</td></tr>
      <tr><td>Tax ({invoice.tax_rate:g}%)</td><td class="amount">{_money(invoice.tax_amount, invoice.currency)}</td></tr>
      <tr><th>Total</th><th class="amount">{_money(invoice.total, invoice.currency)}</th></tr>
    </table>
    {notes}
    """
    return _page(f"Invoice {invoice.invoice_number}", body)
