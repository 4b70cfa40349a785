"""Proposal endpoints: CRUD, sending, recipient decisions, comments and PDF"""

import pytest

from propodesk.models import ProposalComment, ProposalVersion
from propodesk.services.pdf_service import PDFService, PDFServiceError

from .conftest import proposal_payload


def create_proposal(client, headers, **overrides):
    response = client.post("/proposals", json=proposal_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def send_and_view(client, headers, proposal_id):
    sent = client.post(f"/proposals/{proposal_id}/send", json={}, headers=headers).json()
    viewed = client.get(f"/links/share/{sent['token']}")
    assert viewed.status_code == 200, viewed.text
    return sent["token"]


# ============================================================================
# CRUD
# ============================================================================


class TestProposalCrud:
    def test_create_prices_the_selection(self, client, headers):
        proposal = create_proposal(client, headers)
        totals = proposal["calculator_data"]["totals"]
        assert proposal["status"] == "draft"
        assert totals["monthly_total"] == pytest.approx(15200)
        assert totals["annual_total"] == pytest.approx(190400)
        assert proposal["calculator_data"]["contract_term"] == "12"

    def test_client_totals_are_discarded(self, client, headers):
        data = proposal_payload()
        data["calculator_data"] = {**data["calculator_data"], "totals": {"monthly_total": 1}}
        proposal = client.post("/proposals", json=data, headers=headers).json()
        assert proposal["calculator_data"]["totals"]["monthly_total"] == pytest.approx(15200)

    def test_camel_case_payload(self, client, headers):
        response = client.post(
            "/proposals",
            json={
                "title": "Camel",
                "clientName": "Beta LLC",
                "clientEmail": "Buyer@Beta.test",
                "calculatorData": {"selectedServices": {"creative": 1}, "contractTerm": "6"},
            },
            headers=headers,
        )
        assert response.status_code == 201
        proposal = response.json()
        assert proposal["client_email"] == "buyer@beta.test"
        assert proposal["calculator_data"]["services"]["creative"] == 1
        assert "selectedServices" not in proposal["calculator_data"]

    def test_rich_content_is_cleaned(self, client, headers):
        proposal = create_proposal(client, headers, content="<p>Hi</p><script>alert(1)</script>")
        assert "<script>" not in proposal["content"]
        assert "<p>Hi</p>" in proposal["content"]

    def test_invalid_tier_is_rejected(self, client, headers):
        data = proposal_payload(calculator_data={"services": {"traffic": 7}})
        assert client.post("/proposals", json=data, headers=headers).status_code == 400

    def test_invalid_email_is_rejected(self, client, headers):
        data = proposal_payload(client_email="not-an-email")
        assert client.post("/proposals", json=data, headers=headers).status_code == 422

    def test_requires_authentication(self, client):
        assert client.get("/proposals").status_code in (401, 403)

    def test_list_filters_by_status(self, client, headers, sent_emails):
        first = create_proposal(client, headers)
        create_proposal(client, headers, title="Second")
        client.post(f"/proposals/{first['id']}/send", json={}, headers=headers)

        drafts = client.get("/proposals", params={"status": "draft"}, headers=headers).json()
        sent = client.get("/proposals", params={"status": "sent"}, headers=headers).json()
        assert [p["title"] for p in drafts] == ["Second"]
        assert [p["id"] for p in sent] == [first["id"]]

    def test_other_users_cannot_read(self, client, headers, other_headers):
        proposal = create_proposal(client, headers)
        assert client.get(f"/proposals/{proposal['id']}", headers=other_headers).status_code == 404

    def test_update_reprices(self, client, headers):
        proposal = create_proposal(client, headers)
        response = client.patch(
            f"/proposals/{proposal['id']}",
            json={"title": "Renamed", "calculator_data": {"services": {"traffic": 1}, "contract_term": "6"}},
            headers=headers,
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["title"] == "Renamed"
        assert updated["calculator_data"]["totals"]["monthly_total"] == 7500

    def test_delete(self, client, headers):
        proposal = create_proposal(client, headers)
        assert client.delete(f"/proposals/{proposal['id']}", headers=headers).status_code == 200
        assert client.get(f"/proposals/{proposal['id']}", headers=headers).status_code == 404


# ============================================================================
# VERSIONS
# ============================================================================


class TestProposalVersions:
    def test_versions_are_numbered_in_order(self, client, headers):
        pid = create_proposal(client, headers)["id"]
        first = client.post(f"/proposals/{pid}/versions", json={"label": "Draft"}, headers=headers)
        second = client.post(f"/proposals/{pid}/versions", headers=headers)
        assert first.status_code == 201, first.text
        assert first.json()["version_number"] == 1
        assert first.json()["label"] == "Draft"
        assert first.json()["author_name"]
        assert second.json()["version_number"] == 2

        listing = client.get(f"/proposals/{pid}/versions", headers=headers).json()
        assert [v["version_number"] for v in listing] == [1, 2]

    def test_version_detail(self, client, headers):
        pid = create_proposal(client, headers)["id"]
        version = client.post(f"/proposals/{pid}/versions", json={}, headers=headers).json()
        response = client.get(f"/proposals/{pid}/versions/{version['id']}", headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["version"]["title"] == "Q3 Growth Plan"
        assert body["proposal_title"] == "Q3 Growth Plan"
        assert body["client_name"] == "Acme Corp"

    def test_restore_brings_back_title_and_body(self, client, headers):
        proposal = create_proposal(client, headers)
        pid = proposal["id"]
        version = client.post(f"/proposals/{pid}/versions", json={}, headers=headers).json()
        client.patch(
            f"/proposals/{pid}", json={"title": "Renamed", "content": "<p>Rewritten</p>"}, headers=headers
        )

        response = client.post(f"/proposals/{pid}/versions/{version['id']}/restore", headers=headers)
        assert response.status_code == 200, response.text
        restored = response.json()
        assert restored["title"] == "Q3 Growth Plan"
        assert restored["content"] == proposal["content"]

    def test_unknown_version(self, client, headers):
        pid = create_proposal(client, headers)["id"]
        assert client.get(f"/proposals/{pid}/versions/999", headers=headers).status_code == 404
        assert client.post(f"/proposals/{pid}/versions/999/restore", headers=headers).status_code == 404

    def test_version_of_another_proposal_is_not_found(self, client, headers):
        first = create_proposal(client, headers)["id"]
        second = create_proposal(client, headers, title="Other")["id"]
        version = client.post(f"/proposals/{first}/versions", json={}, headers=headers).json()
        response = client.get(f"/proposals/{second}/versions/{version['id']}", headers=headers)
        assert response.status_code == 404

    def test_other_users_cannot_see_versions(self, client, headers, other_headers):
        pid = create_proposal(client, headers)["id"]
        client.post(f"/proposals/{pid}/versions", json={}, headers=headers)
        assert client.get(f"/proposals/{pid}/versions", headers=other_headers).status_code == 404

    def test_restore_after_acceptance_is_refused(self, client, headers, sent_emails):
        pid = create_proposal(client, headers)["id"]
        version = client.post(f"/proposals/{pid}/versions", json={}, headers=headers).json()
        token = send_and_view(client, headers, pid)
        client.post(f"/proposals/{pid}/accept", json={"token": token})

        response = client.post(f"/proposals/{pid}/versions/{version['id']}/restore", headers=headers)
        assert response.status_code == 409

    def test_versions_go_with_the_proposal(self, client, headers, db):
        pid = create_proposal(client, headers)["id"]
        client.post(f"/proposals/{pid}/versions", json={}, headers=headers)
        client.delete(f"/proposals/{pid}", headers=headers)
        db.expire_all()
        assert db.query(ProposalVersion).filter(ProposalVersion.proposal_id == pid).count() == 0


# ============================================================================
# SENDING AND DECISIONS
# ============================================================================


class TestProposalWorkflow:
    def test_send_requires_client_email(self, client, headers):
        proposal = create_proposal(client, headers, client_email=None)
        response = client.post(f"/proposals/{proposal['id']}/send", json={}, headers=headers)
        assert response.status_code == 400

    def test_send_creates_link_and_emails_client(self, client, headers, sent_emails):
        proposal = create_proposal(client, headers)
        response = client.post(
            f"/proposals/{proposal['id']}/send", json={"message": "Take a look"}, headers=headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["proposal"]["status"] == "sent"
        assert body["email_sent"] is True
        assert body["url"] == f"https://app.propodesk.test/p/{body['token']}"
        assert sent_emails[0]["to"] == "buyer@acme.test"
        assert body["url"] in sent_emails[0]["html"]

    def test_resend_reuses_the_active_link(self, client, headers, sent_emails):
        proposal = create_proposal(client, headers)
        first = client.post(f"/proposals/{proposal['id']}/send", json={}, headers=headers).json()
        second = client.post(f"/proposals/{proposal['id']}/send", json={}, headers=headers).json()
        assert first["token"] == second["token"]
        assert len(second["proposal"]["share_links"]) == 1

    def test_failed_email_still_sends(self, client, headers):
        # No email provider is configured in tests
        proposal = create_proposal(client, headers)
        body = client.post(f"/proposals/{proposal['id']}/send", json={}, headers=headers).json()
        assert body["email_sent"] is False
        assert body["proposal"]["status"] == "sent"

    def test_accept_after_viewing(self, client, headers, sent_emails):
        proposal = create_proposal(client, headers)
        token = send_and_view(client, headers, proposal["id"])

        response = client.post(
            f"/proposals/{proposal['id']}/accept", json={"token": token, "signerName": "Ann Buyer"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "accepted"
        assert sent_emails[-1]["to"] == "owner@agency.test"

    def test_reject_after_viewing(self, client, headers, sent_emails):
        proposal = create_proposal(client, headers)
        token = send_and_view(client, headers, proposal["id"])
        response = client.post(f"/proposals/{proposal['id']}/reject", json={"token": token})
        assert response.json()["status"] == "rejected"

    def test_accept_before_viewing_is_refused(self, client, headers, sent_emails):
        proposal = create_proposal(client, headers)
        token = client.post(f"/proposals/{proposal['id']}/send", json={}, headers=headers).json()["token"]
        response = client.post(f"/proposals/{proposal['id']}/accept", json={"token": token})
        assert response.status_code == 409

    def test_decision_is_final(self, client, headers, sent_emails):
        proposal = create_proposal(client, headers)
        token = send_and_view(client, headers, proposal["id"])
        client.post(f"/proposals/{proposal['id']}/accept", json={"token": token})
        response = client.post(f"/proposals/{proposal['id']}/reject", json={"token": token})
        assert response.status_code == 409

    def test_token_of_another_proposal_is_refused(self, client, headers, sent_emails):
        first = create_proposal(client, headers)
        second = create_proposal(client, headers, title="Other")
        token = send_and_view(client, headers, first["id"])
        send_and_view(client, headers, second["id"])
        response = client.post(f"/proposals/{second['id']}/accept", json={"token": token})
        assert response.status_code == 403

    def test_sending_an_accepted_proposal_is_refused(self, client, headers, sent_emails):
        proposal = create_proposal(client, headers)
        token = send_and_view(client, headers, proposal["id"])
        client.post(f"/proposals/{proposal['id']}/accept", json={"token": token})
        response = client.post(f"/proposals/{proposal['id']}/send", json={}, headers=headers)
        assert response.status_code == 409


# ============================================================================
# COMMENTS
# ============================================================================


class TestProposalComments:
    def test_thread_and_resolve(self, client, headers):
        proposal = create_proposal(client, headers)
        pid = proposal["id"]
        root = client.post(
            f"/proposals/{pid}/comments",
            json={"content": "Can we start in May?", "block_id": "b1", "author_name": "Ann"},
        ).json()
        reply = client.post(
            f"/proposals/{pid}/comments",
            json={"content": "Yes", "parent_comment_id": root["id"], "block_id": "b1"},
        ).json()
        assert reply["author_name"] == "Anonymous"

        listing = client.get(f"/proposals/{pid}/comments").json()
        assert [c["id"] for c in listing["comments"]] == [root["id"], reply["id"]]
        assert len(listing["threads"]) == 1
        assert listing["threads"][0]["replies"][0]["id"] == reply["id"]

        resolved = client.post(f"/proposals/{pid}/comments/{root['id']}/resolve").json()
        assert resolved["is_resolved"] is True
        reopened = client.patch(f"/proposals/{pid}/comments/{root['id']}/resolve", json={}).json()
        assert reopened["is_resolved"] is False
        explicit = client.patch(
            f"/proposals/{pid}/comments/{root['id']}/resolve", json={"is_resolved": False}
        ).json()
        assert explicit["is_resolved"] is False

    def test_replies_cannot_be_resolved(self, client, headers):
        pid = create_proposal(client, headers)["id"]
        root = client.post(f"/proposals/{pid}/comments", json={"content": "Root"}).json()
        reply = client.post(
            f"/proposals/{pid}/comments", json={"content": "Reply", "parent_comment_id": root["id"]}
        ).json()
        response = client.post(f"/proposals/{pid}/comments/{reply['id']}/resolve")
        assert response.status_code == 400

    def test_parent_must_be_on_same_proposal(self, client, headers):
        first = create_proposal(client, headers)["id"]
        second = create_proposal(client, headers, title="Other")["id"]
        root = client.post(f"/proposals/{first}/comments", json={"content": "Root"}).json()
        response = client.post(
            f"/proposals/{second}/comments", json={"content": "Reply", "parent_comment_id": root["id"]}
        )
        assert response.status_code == 400

    def test_block_filter(self, client, headers):
        pid = create_proposal(client, headers)["id"]
        client.post(f"/proposals/{pid}/comments", json={"content": "A", "block_id": "a"})
        client.post(f"/proposals/{pid}/comments", json={"content": "B", "block_id": "b"})
        listing = client.get(f"/proposals/{pid}/comments", params={"block_id": "b"}).json()
        assert [c["content"] for c in listing["comments"]] == ["B"]

    def test_block_filter_is_applied_before_the_page_limit(self, client, headers, db):
        pid = create_proposal(client, headers)["id"]
        db.add_all([ProposalComment(proposal_id=pid, content=f"A{i}", block_id="a") for i in range(100)])
        db.add(ProposalComment(proposal_id=pid, content="Late", block_id="b"))
        db.commit()

        listing = client.get(f"/proposals/{pid}/comments", params={"block_id": "b"}).json()
        assert [c["content"] for c in listing["comments"]] == ["Late"]
        assert [t["content"] for t in listing["threads"]] == ["Late"]

    def test_comment_html_is_cleaned(self, client, headers):
        pid = create_proposal(client, headers)["id"]
        comment = client.post(
            f"/proposals/{pid}/comments", json={"content": "<b>ok</b><img src=x onerror=alert(1)>"}
        ).json()
        assert comment["content"] == "<b>ok</b>"

    def test_unknown_proposal(self, client):
        assert client.get("/proposals/999/comments").status_code == 404


# ============================================================================
# PDF
# ============================================================================


class TestProposalPdf:
    def test_pdf_download(self, client, headers, monkeypatch):
        captured = {}

        async def fake_render(self, html, filename="document.pdf"):
            captured["html"] = html
            return b"%PDF-1.4 fake"

        monkeypatch.setattr(PDFService, "render_pdf", fake_render)
        proposal = create_proposal(client, headers)
        response = client.post(f"/proposals/{proposal['id']}/pdf", headers=headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content == b"%PDF-1.4 fake"
        assert "Q3 Growth Plan" in captured["html"]

    def test_pdf_service_failure(self, client, headers, monkeypatch):
        async def failing_render(self, html, filename="document.pdf"):
            raise PDFServiceError("renderer down")

        monkeypatch.setattr(PDFService, "render_pdf", failing_render)
        proposal = create_proposal(client, headers)
        assert client.post(f"/proposals/{proposal['id']}/pdf", headers=headers).status_code == 502
