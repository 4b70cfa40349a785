"""Invoice endpoints: totals, status changes, milestones and overdue refresh"""

import re
from datetime import datetime, timedelta

import pytest

from propodesk.domain.invoices.service import generate_invoice_number

from .conftest import proposal_payload

INVOICE = {
    "title": "September retainer",
    "client_name": "Acme Corp",
    "client_email": "billing@acme.test",
    "lineItems": [
        {"description": "Design", "quantity": 2, "unitPrice": 150, "amount": 1},
        {"description": "Ads management", "quantity": 1, "unit_price": 1000},
    ],
    "taxRate": 10,
}


def create_invoice(client, headers, **overrides):
    response = client.post("/invoices", json={**INVOICE, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestInvoiceNumber:
    def test_format(self):
        number = generate_invoice_number(datetime(2026, 3, 9))
        assert re.fullmatch(r"INV-2603-[0-9A-F]{6}", number)


# ============================================================================
# CRUD AND TOTALS
# ============================================================================


class TestInvoiceTotals:
    def test_create_computes_totals(self, client, headers):
        invoice = create_invoice(client, headers)
        assert [item["amount"] for item in invoice["line_items"]] == [300.0, 1000.0]
        assert invoice["subtotal"] == 1300.0
        assert invoice["tax_amount"] == 130.0
        assert invoice["total"] == 1430.0
        assert invoice["status"] == "draft"
        assert invoice["invoice_number"].startswith("INV-")

    def test_update_recomputes_amounts(self, client, headers):
        invoice = create_invoice(client, headers)
        response = client.patch(
            f"/invoices/{invoice['id']}",
            json={"line_items": [{"description": "Design", "quantity": 3, "unit_price": 150, "amount": 300}]},
            headers=headers,
        )
        updated = response.json()
        assert updated["line_items"][0]["amount"] == 450.0
        assert updated["subtotal"] == 450.0
        assert updated["total"] == 495.0

    def test_tax_rate_change_keeps_items(self, client, headers):
        invoice = create_invoice(client, headers)
        updated = client.patch(f"/invoices/{invoice['id']}", json={"tax_rate": 0}, headers=headers).json()
        assert updated["total"] == 1300.0
        assert len(updated["line_items"]) == 2

    def test_rejects_non_positive_quantity(self, client, headers):
        body = {**INVOICE, "lineItems": [{"description": "x", "quantity": 0, "unit_price": 1}]}
        assert client.post("/invoices", json=body, headers=headers).status_code == 422

    @pytest.mark.parametrize(
        "line_item",
        [
            '{"description": "x", "quantity": Infinity, "unit_price": 1}',
            '{"description": "x", "quantity": 1, "unit_price": NaN}',
            '{"description": "x", "quantity": 1, "unitPrice": -Infinity}',
        ],
    )
    def test_rejects_non_finite_line_items(self, client, headers, line_item):
        body = '{"title": "T", "client_name": "Acme", "line_items": [' + line_item + "]}"
        response = client.post(
            "/invoices", content=body, headers={**headers, "Content-Type": "application/json"}
        )
        assert response.status_code == 422
        assert client.get("/invoices", headers=headers).json() == []

    def test_rejects_non_finite_tax_rate_on_update(self, client, headers):
        invoice = create_invoice(client, headers)
        response = client.patch(
            f"/invoices/{invoice['id']}",
            content='{"tax_rate": Infinity}',
            headers={**headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 422
        assert client.get(f"/invoices/{invoice['id']}", headers=headers).json()["total"] == 1430.0

    def test_other_users_cannot_read(self, client, headers, other_headers):
        invoice = create_invoice(client, headers)
        assert client.get(f"/invoices/{invoice['id']}", headers=other_headers).status_code == 404


# ============================================================================
# STATUS
# ============================================================================


class TestInvoiceStatus:
    def test_send_emails_client(self, client, headers, sent_emails):
        invoice = create_invoice(client, headers)
        sent = client.post(f"/invoices/{invoice['id']}/send", headers=headers).json()
        assert sent["status"] == "sent"
        assert sent["sent_at"] is not None
        assert sent_emails[0]["to"] == "billing@acme.test"
        assert invoice["invoice_number"] in sent_emails[0]["subject"]

    def test_send_requires_email(self, client, headers):
        invoice = create_invoice(client, headers, client_email=None)
        assert client.post(f"/invoices/{invoice['id']}/send", headers=headers).status_code == 400

    def test_draft_cannot_be_paid(self, client, headers):
        invoice = create_invoice(client, headers)
        response = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=headers)
        assert response.status_code == 409

    def test_paid_invoice_is_locked(self, client, headers, sent_emails):
        invoice = create_invoice(client, headers)
        client.post(f"/invoices/{invoice['id']}/send", headers=headers)
        paid = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=headers)
        assert paid.json()["status"] == "paid"
        assert paid.json()["paid_at"] is not None

        assert client.patch(f"/invoices/{invoice['id']}", json={"title": "x"}, headers=headers).status_code == 409
        assert client.delete(f"/invoices/{invoice['id']}", headers=headers).status_code == 409

    def test_cancel_draft(self, client, headers):
        invoice = create_invoice(client, headers)
        response = client.patch(
            f"/invoices/{invoice['id']}/status", json={"status": "cancelled"}, headers=headers
        )
        assert response.json()["status"] == "cancelled"

    def test_delete_draft(self, client, headers):
        invoice = create_invoice(client, headers)
        assert client.delete(f"/invoices/{invoice['id']}", headers=headers).status_code == 200

    def test_refresh_overdue(self, client, headers, other_headers, sent_emails):
        past = (datetime.utcnow() - timedelta(days=2)).isoformat()
        future = (datetime.utcnow() + timedelta(days=30)).isoformat()
        late = create_invoice(client, headers, due_date=past)
        on_time = create_invoice(client, headers, due_date=future)
        unsent = create_invoice(client, headers, due_date=past)
        for invoice in (late, on_time):
            client.post(f"/invoices/{invoice['id']}/send", headers=headers)

        assert client.post("/status/invoices/refresh-overdue", headers=other_headers).json()["updated"] == 0

        result = client.post("/status/invoices/refresh-overdue", headers=headers).json()
        assert result == {"updated": 1, "invoice_ids": [late["id"]]}
        assert client.get(f"/invoices/{late['id']}", headers=headers).json()["status"] == "overdue"
        assert client.get(f"/invoices/{unsent['id']}", headers=headers).json()["status"] == "draft"

        overdue = client.get("/invoices", params={"status": "overdue"}, headers=headers).json()
        assert [i["id"] for i in overdue] == [late["id"]]


# ============================================================================
# MILESTONES
# ============================================================================


class TestInvoicesFromProposal:
    def test_split_into_milestones(self, client, headers):
        proposal = client.post("/proposals", json=proposal_payload(), headers=headers).json()
        response = client.post(
            f"/invoices/from-proposal/{proposal['id']}", json={"milestones": 3}, headers=headers
        )
        assert response.status_code == 201
        invoices = response.json()["invoices"]
        assert [i["milestone_number"] for i in invoices] == [1, 2, 3]
        assert all(i["milestone_total"] == 3 for i in invoices)
        assert invoices[0]["title"] == "Q3 Growth Plan - Payment 1 of 3"
        assert invoices[0]["total"] == pytest.approx(7733.32)
        assert len({i["invoice_number"] for i in invoices}) == 3

    def test_single_invoice(self, client, headers):
        proposal = client.post("/proposals", json=proposal_payload(), headers=headers).json()
        invoices = client.post(
            f"/invoices/from-proposal/{proposal['id']}", json={}, headers=headers
        ).json()["invoices"]
        assert len(invoices) == 1
        assert invoices[0]["title"] == "Q3 Growth Plan"
        assert invoices[0]["subtotal"] == pytest.approx(11875 + 6250 + 3325 + 1750)

    def test_milestone_limit(self, client, headers):
        proposal = client.post("/proposals", json=proposal_payload(), headers=headers).json()
        response = client.post(
            f"/invoices/from-proposal/{proposal['id']}", json={"milestones": 25}, headers=headers
        )
        assert response.status_code == 422


# ============================================================================
# FROM A CONTRACT
# ============================================================================

CONTRACT = {
    "title": "Retainer Agreement",
    "content": "<p>Services as agreed</p>",
    "client_name": "Acme Corp",
    "client_email": "buyer@acme.test",
    "deliverables": [
        {"name": "Paid social", "price": 5000, "price_type": "monthly"},
        {"name": "Onboarding", "price": 1250.5, "price_type": "one-time"},
        {"name": "Reporting", "price_type": "monthly"},
    ],
}


def create_contract(client, headers, **overrides):
    response = client.post("/contracts", json={**CONTRACT, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestInvoiceFromContract:
    def test_bills_each_deliverable_once(self, client, headers):
        contract = create_contract(client, headers)
        before = datetime.utcnow()
        response = client.post(f"/invoices/from-contract/{contract['id']}", headers=headers)
        assert response.status_code == 201, response.text

        invoice = response.json()
        assert invoice["contract_id"] == contract["id"]
        assert invoice["status"] == "draft"
        assert invoice["title"] == "Invoice - Acme Corp"
        assert invoice["client_email"] == "buyer@acme.test"
        assert [(i["description"], i["quantity"], i["amount"]) for i in invoice["line_items"]] == [
            ("Paid social", 1, 5000.0),
            ("Onboarding", 1, 1250.5),
            ("Reporting", 1, 0.0),
        ]
        assert invoice["subtotal"] == 6250.5
        assert invoice["total"] == 6250.5
        assert invoice["payment_terms"] == "net_30"
        assert invoice["notes"] == "Invoice generated from contract: Retainer Agreement"

        due = datetime.fromisoformat(invoice["due_date"])
        assert before + timedelta(days=29) < due < before + timedelta(days=31)

    def test_cancelled_contract(self, client, headers):
        contract = create_contract(client, headers)
        client.post(f"/contracts/{contract['id']}/cancel", headers=headers)
        response = client.post(f"/invoices/from-contract/{contract['id']}", headers=headers)
        assert response.status_code == 409

    def test_contract_without_deliverables(self, client, headers):
        contract = create_contract(client, headers, deliverables=[])
        response = client.post(f"/invoices/from-contract/{contract['id']}", headers=headers)
        assert response.status_code == 400

    def test_other_users_contract(self, client, headers, other_headers):
        contract = create_contract(client, headers)
        response = client.post(f"/invoices/from-contract/{contract['id']}", headers=other_headers)
        assert response.status_code == 404
