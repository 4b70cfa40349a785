"""
Shared test configuration and fixtures for Propodesk.
"""

import os

# Must be set before the propodesk modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["RESEND_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["UNSPLASH_ACCESS_KEY"] = ""
os.environ["FRONTEND_URL"] = "https://app.propodesk.test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from propodesk.database import Base, SessionLocal, engine  # noqa: E402
from propodesk.main import app  # noqa: E402
from propodesk.security_utils import create_jwt_token  # noqa: E402

# 1x1 transparent PNG
PNG_SIGNATURE = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


@pytest.fixture(autouse=True)
def _reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth_headers(subject: str = "user-1", email: str = "owner@agency.test", **claims) -> dict:
    token = create_jwt_token({"sub": subject, "email": email, "name": "Olivia Owner", **claims})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers()


@pytest.fixture
def other_headers():
    return auth_headers(subject="user-2", email="someone@else.test")


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outbound email instead of calling the provider"""
    sent = []

    async def fake_send_email(to, subject, html, text=None, from_address=None):
        sent.append({"to": to, "subject": subject, "html": html})
        return {"id": f"email-{len(sent)}"}

    monkeypatch.setattr("propodesk.email_service.send_email", fake_send_email)
    return sent


MARKETING_SELECTION = {
    "services": {"traffic": 2, "retention": 1, "creative": None},
    "add_ons": {"landing_pages": 0, "funnels": 0, "dashboard": False, "workshop": None, "video_pack": 0},
    "contract_term": "12",
}


def proposal_payload(**overrides) -> dict:
    payload = {
        "title": "Q3 Growth Plan",
        "client_name": "Acme Corp",
        "client_company": "Acme",
        "client_email": "buyer@acme.test",
        "calculator_type": "marketing",
        "calculator_data": dict(MARKETING_SELECTION),
        "content": "<p>Hello <strong>Acme</strong></p>",
    }
    payload.update(overrides)
    return payload
