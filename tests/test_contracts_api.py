"""Contract endpoints: generation, sending, public signing and countersigning"""

import base64
from datetime import datetime, timedelta

import pytest

from .conftest import PNG_SIGNATURE, proposal_payload

CONTRACT = {
    "title": "Retainer Agreement",
    "content": "<p>Services as agreed</p>",
    "client_name": "Acme Corp",
    "client_email": "buyer@acme.test",
    "deliverables": [{"name": "Paid social", "price": 5000, "price_type": "monthly"}],
    "total_value": 60000,
    "contract_term": "12 months",
}


def create_contract(client, headers, **overrides):
    response = client.post("/contracts", json={**CONTRACT, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def sent_contract(client, headers):
    contract = create_contract(client, headers)
    response = client.post(f"/contracts/{contract['id']}/send", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def sign(client, token, **overrides):
    body = {"signer_name": "Ann Buyer", "signer_email": "ann@acme.test", "signature_data": PNG_SIGNATURE}
    body.update(overrides)
    return client.post(f"/contracts/sign/{token}", json=body, headers={"x-forwarded-for": "203.0.113.9, 10.0.0.1"})


# ============================================================================
# CRUD AND GENERATION
# ============================================================================


class TestContractCrud:
    def test_create_draft(self, client, headers):
        contract = create_contract(client, headers)
        assert contract["status"] == "draft"
        assert len(contract["access_token"]) == 64
        assert contract["deliverables"][0]["name"] == "Paid social"

    def test_unknown_proposal_reference(self, client, headers):
        response = client.post("/contracts", json={**CONTRACT, "proposal_id": 999}, headers=headers)
        assert response.status_code == 404

    def test_from_proposal(self, client, headers):
        proposal = client.post("/proposals", json=proposal_payload(), headers=headers).json()
        response = client.post(f"/contracts/from-proposal/{proposal['id']}", json={}, headers=headers)
        assert response.status_code == 201
        contract = response.json()
        assert contract["proposal_id"] == proposal["id"]
        assert contract["total_value"] == pytest.approx(190400)
        assert contract["contract_term"] == "12 months"
        assert contract["client_email"] == "buyer@acme.test"
        assert "California" in contract["content"]
        assert "{{" not in contract["content"]
        names = [d["name"] for d in contract["deliverables"]]
        assert "Traffic Driver (Tier 2) - Monthly Retainer" in names
        setup = [d for d in contract["deliverables"] if d["name"].endswith("Setup Fee")]
        assert all(d["price_type"] == "one-time" for d in setup)

    def test_from_proposal_governing_state(self, client, headers):
        proposal = client.post("/proposals", json=proposal_payload(), headers=headers).json()
        contract = client.post(
            f"/contracts/from-proposal/{proposal['id']}", json={"governingState": "Texas"}, headers=headers
        ).json()
        assert "State of Texas" in contract["content"]

    def test_from_proposal_without_selection(self, client, headers):
        proposal = client.post(
            "/proposals", json=proposal_payload(calculator_data=None, calculator_type="custom"), headers=headers
        ).json()
        response = client.post(f"/contracts/from-proposal/{proposal['id']}", json={}, headers=headers)
        assert response.status_code == 400

    def test_only_drafts_are_editable(self, client, headers, sent_emails):
        contract = sent_contract(client, headers)
        response = client.patch(f"/contracts/{contract['id']}", json={"title": "New"}, headers=headers)
        assert response.status_code == 409

    def test_update_draft(self, client, headers):
        contract = create_contract(client, headers)
        response = client.patch(f"/contracts/{contract['id']}", json={"title": "Amended"}, headers=headers)
        assert response.json()["title"] == "Amended"


# ============================================================================
# SENDING AND SIGNING
# ============================================================================


class TestContractSigning:
    def test_send_requires_client_email(self, client, headers):
        contract = create_contract(client, headers, client_email=None)
        assert client.post(f"/contracts/{contract['id']}/send", headers=headers).status_code == 400

    def test_send_emails_signing_link(self, client, headers, sent_emails):
        contract = sent_contract(client, headers)
        assert contract["status"] == "sent"
        assert contract["sent_at"] is not None
        assert f"/c/{contract['access_token']}" in sent_emails[0]["html"]

    def test_view_marks_viewed(self, client, headers, sent_emails):
        contract = sent_contract(client, headers)
        viewed = client.get(f"/contracts/view/{contract['access_token']}")
        assert viewed.status_code == 200
        assert viewed.json()["status"] == "viewed"
        assert "access_token" not in viewed.json()

    def test_sign_and_countersign(self, client, headers, sent_emails):
        contract = sent_contract(client, headers)
        client.get(f"/contracts/view/{contract['access_token']}")

        signed = sign(client, contract["access_token"])
        assert signed.status_code == 200, signed.text
        assert signed.json()["contract"]["status"] == "signed"
        assert sent_emails[-1]["to"] == "owner@agency.test"

        response = client.post(
            f"/contracts/{contract['id']}/countersign",
            json={"signatureData": PNG_SIGNATURE, "signerName": "Olivia Owner"},
            headers=headers,
        )
        assert response.status_code == 200
        completed = response.json()
        assert completed["status"] == "completed"
        assert completed["user_signed_at"] is not None
        assert sorted(s["signer_type"] for s in completed["signatures"]) == ["client", "user"]

    def test_signature_records_forwarded_ip(self, client, headers, sent_emails, db):
        from propodesk.models import ContractSignature

        contract = sent_contract(client, headers)
        sign(client, contract["access_token"])
        signature = db.query(ContractSignature).one()
        assert signature.ip_address == "203.0.113.9"
        assert signature.signature_data == PNG_SIGNATURE

    def test_cannot_sign_twice(self, client, headers, sent_emails):
        contract = sent_contract(client, headers)
        sign(client, contract["access_token"])
        assert sign(client, contract["access_token"]).status_code == 400

    def test_cannot_sign_a_draft(self, client, headers):
        contract = create_contract(client, headers)
        assert sign(client, contract["access_token"]).status_code == 409

    def test_bad_signature_is_rejected(self, client, headers, sent_emails):
        contract = sent_contract(client, headers)
        response = sign(client, contract["access_token"], signature_data="data:text/plain;base64,aGk=")
        assert response.status_code == 400
        assert client.get(f"/contracts/{contract['id']}", headers=headers).json()["status"] == "sent"

    def test_countersign_draft_is_refused(self, client, headers):
        contract = create_contract(client, headers)
        response = client.post(
            f"/contracts/{contract['id']}/countersign", json={"signature_data": PNG_SIGNATURE}, headers=headers
        )
        assert response.status_code == 409

    def test_expired_contract(self, client, headers):
        past = (datetime.utcnow() - timedelta(days=1)).isoformat()
        contract = create_contract(client, headers, expires_at=past)
        assert client.get(f"/contracts/view/{contract['access_token']}").status_code == 410

    def test_unknown_token(self, client):
        assert client.get("/contracts/view/missing").status_code == 404

    def test_signed_contract_cannot_be_deleted(self, client, headers, sent_emails):
        contract = sent_contract(client, headers)
        sign(client, contract["access_token"])
        assert client.delete(f"/contracts/{contract['id']}", headers=headers).status_code == 409

    def test_cancel(self, client, headers):
        contract = create_contract(client, headers)
        response = client.post(f"/contracts/{contract['id']}/cancel", headers=headers)
        assert response.json()["status"] == "cancelled"
        assert client.post(f"/contracts/{contract['id']}/cancel", headers=headers).status_code == 409


# ============================================================================
# SIGNATURE UPLOAD AND COMMENTS
# ============================================================================


class TestContractExtras:
    def test_signature_upload(self, client, headers):
        png = base64.b64decode(PNG_SIGNATURE.split(",", 1)[1])
        response = client.post(
            "/contracts/signatures/upload",
            files={"file": ("sig.png", png, "image/png")},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["signature_data"] == PNG_SIGNATURE

    def test_signature_upload_rejects_other_types(self, client, headers):
        response = client.post(
            "/contracts/signatures/upload",
            files={"file": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
            headers=headers,
        )
        assert response.status_code == 400

    def test_comments_and_owner_resolve(self, client, headers, other_headers):
        contract = create_contract(client, headers)
        cid = contract["id"]
        comment = client.post(f"/contracts/{cid}/comments", json={"content": "Clause 3?"}).json()
        assert comment["contract_id"] == cid

        assert client.post(f"/contracts/{cid}/comments/{comment['id']}/resolve").status_code in (401, 403)
        forbidden = client.post(f"/contracts/{cid}/comments/{comment['id']}/resolve", headers=other_headers)
        assert forbidden.status_code == 404
        resolved = client.post(f"/contracts/{cid}/comments/{comment['id']}/resolve", headers=headers)
        assert resolved.json()["is_resolved"] is True

        listing = client.get(f"/contracts/{cid}/comments").json()
        assert listing["threads"][0]["is_resolved"] is True
