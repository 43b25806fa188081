"""Root conftest: app factory fixtures and a recording mail transport.

Invariants:
    - Every test gets a fresh app, so rate-limit counters never leak between tests
    - get_mail_transport is overridden, no test ever talks to a real SMTP relay
"""

import os

# Ensure tests don't accidentally pick up a real relay or a local .env
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient

from contact_api.commonUtils.errorUtil import MailDispatchError
from contact_api.config.settings import Settings
from contact_api.dependencies.contactDependencies import get_mail_transport
from contact_api.main import create_app

ALLOWED_ORIGIN = "https://portfolio.example.com"

BASE_SETTINGS = {
    "CORS_ORIGIN": f"{ALLOWED_ORIGIN}, http://localhost:5173",
    "RATE_LIMIT_POINTS": 6,
    "RATE_LIMIT_WINDOW": 60,
    "SMTP_HOST": "smtp.example.com",
    "SMTP_PORT": 587,
    "SMTP_USER": "relay@example.com",
    "SMTP_PASS": "not-a-real-password",
    "SENDER_EMAIL": "relay@example.com",
    "RECEIVER_EMAIL": "owner@example.com",
    "BRAND_NAME": "Portfolio",
}


class RecordingTransport:
    """Stands in for MailTransport; keeps every dispatched message."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def dispatch(self, from_address, to_address, reply_to, subject, html_body):
        if self.fail:
            raise MailDispatchError("relay down: 535 authentication failed")
        self.sent.append({
            "from_address": from_address,
            "to_address": to_address,
            "reply_to": reply_to,
            "subject": subject,
            "html_body": html_body,
        })


def build_settings(**overrides) -> Settings:
    values = {**BASE_SETTINGS, **overrides}
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory():
    return build_settings


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def app(transport):
    application = create_app(build_settings())
    application.dependency_overrides[get_mail_transport] = lambda: transport
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    """FastAPI test client over the ASGI app, caller address 127.0.0.1."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver",
    ) as ac:
        yield ac


def valid_payload(**overrides):
    payload = {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "message": "Hello! I'd like to talk about a project.",
    }
    payload.update(overrides)
    return payload
