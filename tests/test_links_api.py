"""Share links: creation, passwords, view limits, expiry and revocation"""

from datetime import datetime, timedelta

from propodesk.domain.links.service import link_expired

from .conftest import proposal_payload


def new_proposal(client, headers, **overrides):
    return client.post("/proposals", json=proposal_payload(**overrides), headers=headers).json()


def new_link(client, headers, proposal_id, **options):
    response = client.post("/links", json={"type": "proposal", "document_id": proposal_id, **options}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestLinkExpired:
    def test_no_expiry_never_expires(self):
        assert link_expired(None) is False

    def test_past_and_future(self):
        now = datetime(2026, 1, 1, 12, 0)
        assert link_expired(now - timedelta(seconds=1), now=now) is True
        assert link_expired(now + timedelta(days=1), now=now) is False


# ============================================================================
# OWNER OPERATIONS
# ============================================================================


class TestLinkManagement:
    def test_create_marks_draft_sent(self, client, headers):
        proposal = new_proposal(client, headers)
        link = new_link(client, headers, proposal["id"])
        assert link["url"].endswith(f"/p/{link['token']}")
        assert len(link["token"]) == 16
        assert client.get(f"/proposals/{proposal['id']}", headers=headers).json()["status"] == "sent"

    def test_list_hides_password_hash(self, client, headers):
        proposal = new_proposal(client, headers)
        new_link(client, headers, proposal["id"], password="s3cret", max_views=3)
        links = client.get(f"/links/proposal/{proposal['id']}", headers=headers).json()
        assert len(links) == 1
        assert links[0]["has_password"] is True
        assert links[0]["max_views"] == 3
        assert "password_hash" not in links[0]
        assert "s3cret" not in str(links[0])

    def test_camel_case_body(self, client, headers):
        proposal = new_proposal(client, headers)
        response = client.post("/links", json={"proposalId": proposal["id"], "maxViews": 2}, headers=headers)
        assert response.status_code == 201

    def test_cannot_link_another_users_proposal(self, client, headers, other_headers):
        proposal = new_proposal(client, headers)
        response = client.post("/links", json={"document_id": proposal["id"]}, headers=other_headers)
        assert response.status_code == 404

    def test_update_requires_changes(self, client, headers):
        proposal = new_proposal(client, headers)
        new_link(client, headers, proposal["id"])
        link_id = client.get(f"/links/proposal/{proposal['id']}", headers=headers).json()[0]["id"]
        assert client.patch(f"/links/{link_id}", json={}, headers=headers).status_code == 400

    def test_contract_link_is_the_signing_link(self, client, headers):
        contract = client.post(
            "/contracts",
            json={"title": "MSA", "content": "<p>Terms</p>", "client_name": "Acme"},
            headers=headers,
        ).json()
        response = client.post(
            "/links", json={"type": "contract", "document_id": contract["id"]}, headers=headers
        )
        assert response.status_code == 201
        assert response.json()["token"] == contract["access_token"]
        assert response.json()["url"].endswith(f"/c/{contract['access_token']}")


# ============================================================================
# PUBLIC ACCESS
# ============================================================================


class TestSharedAccess:
    def test_open_counts_views_and_marks_viewed(self, client, headers):
        proposal = new_proposal(client, headers)
        token = new_link(client, headers, proposal["id"])["token"]

        shared = client.get(f"/links/share/{token}").json()
        assert shared["proposal"]["status"] == "viewed"
        assert "client_email" not in shared["proposal"]
        client.get(f"/links/share/{token}")

        owner_view = client.get(f"/proposals/{proposal['id']}", headers=headers).json()
        assert owner_view["view_count"] == 2
        assert owner_view["share_links"][0]["view_count"] == 2

    def test_password_protected(self, client, headers):
        proposal = new_proposal(client, headers)
        token = new_link(client, headers, proposal["id"], password="s3cret")["token"]
        assert client.get(f"/links/share/{token}").status_code == 401
        assert client.get(f"/links/share/{token}", params={"password": "wrong"}).status_code == 401
        assert client.get(f"/links/share/{token}", params={"password": "s3cret"}).status_code == 200

    def test_view_limit(self, client, headers):
        proposal = new_proposal(client, headers)
        token = new_link(client, headers, proposal["id"], max_views=1)["token"]
        assert client.get(f"/links/share/{token}").status_code == 200
        assert client.get(f"/links/share/{token}").status_code == 410

    def test_expired_link(self, client, headers):
        proposal = new_proposal(client, headers)
        new_link(client, headers, proposal["id"])
        link = client.get(f"/links/proposal/{proposal['id']}", headers=headers).json()[0]
        past = (datetime.utcnow() - timedelta(hours=1)).isoformat()
        client.patch(f"/links/{link['id']}", json={"expires_at": past}, headers=headers)
        assert client.get(f"/links/share/{link['token']}").status_code == 410

    def test_revoked_link(self, client, headers):
        proposal = new_proposal(client, headers)
        new_link(client, headers, proposal["id"])
        link = client.get(f"/links/proposal/{proposal['id']}", headers=headers).json()[0]
        assert client.delete(f"/links/{link['id']}", headers=headers).status_code == 200
        assert client.get(f"/links/share/{link['token']}").status_code == 404

    def test_unknown_token(self, client):
        assert client.get("/links/share/nope").status_code == 404
