import os
import re
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef")
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("SMTP_HOST", None)

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.api import auth, budgets, chatbot, deps, notes, transactions  # noqa: E402
from app.database import Base  # noqa: E402
from app import models  # noqa: E402,F401
from app.services.google_identity import get_identity_client  # noqa: E402
from app.services.mailer import EmailDeliveryError, get_mailer  # noqa: E402

PASSWORD = "TestPass123!"


class FakeMailer:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    def send(self, to_email: str, subject: str, html_content: str) -> None:
        if self.fail:
            raise EmailDeliveryError("SMTP connection refused")
        self.sent.append({"to": to_email, "subject": subject, "html": html_content})

    def last_reset_token(self) -> str:
        match = re.search(r"/reset-password/([^\"]+)\"", self.sent[-1]["html"])
        assert match, "reset link not found in email"
        return match.group(1)


class FakeIdentityClient:
    """Returns a canned Google profile, or fails like a rejected token."""

    def __init__(self):
        self.profile = None
        self.calls = 0

    async def fetch_profile(self, access_token: str):
        from app.services.google_identity import IdentityProviderError

        self.calls += 1
        if self.profile is None:
            raise IdentityProviderError("invalid_token")
        return self.profile


class FakeChatClient:
    def __init__(self, reply: str = "You spent $150 on Food."):
        self.reply = reply
        self.error = None
        self.calls: list[tuple[str, list[dict]]] = []

    async def generate(self, prompt: str, history):
        self.calls.append((prompt, list(history)))
        if self.error:
            raise self.error
        return self.reply


class AppContext:
    def __init__(self, client, session_factory, app, mailer, identity_client):
        self.client = client
        self.session_factory = session_factory
        self.app = app
        self.mailer = mailer
        self.identity_client = identity_client


def _build_test_context() -> AppContext:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    app = FastAPI()
    for module in (auth, transactions, budgets, notes, chatbot):
        app.include_router(module.router, prefix="/api")

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    mailer = FakeMailer()
    identity_client = FakeIdentityClient()
    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_identity_client] = lambda: identity_client
    return AppContext(TestClient(app), TestingSessionLocal, app, mailer, identity_client)


@pytest.fixture
def ctx() -> AppContext:
    return _build_test_context()


@pytest.fixture
def client(ctx) -> TestClient:
    return ctx.client


def signup(client: TestClient, email: str = "alpha@example.com", name: str = "Alpha", password: str = PASSWORD):
    response = client.post(
        "/api/auth/signup",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
