"""Mail transport tests: fallible construction and dispatch through fastapi-mail.

Dispatch runs with SUPPRESS_SEND so nothing leaves the process; messages are
captured with FastMail.record_messages().
"""

import pytest
from unittest.mock import AsyncMock

from contact_api.commonUtils.emailUtil import MailTransport, build_mail_transport
from contact_api.commonUtils.errorUtil import MailConfigurationError, MailDispatchError
from conftest import build_settings


def suppressed_transport(**overrides) -> MailTransport:
    config = build_settings(**overrides).mail_config
    return MailTransport(config.model_copy(update={"SUPPRESS_SEND": 1}))


def test_build_returns_transport_when_configured():
    transport = build_mail_transport(build_settings())
    assert isinstance(transport, MailTransport)
    assert transport.default_sender == "relay@example.com"


def test_build_returns_none_when_incomplete(caplog):
    assert build_mail_transport(build_settings(SMTP_PASS=None)) is None
    assert "SMTP not configured yet" in caplog.text


def test_from_settings_rejects_invalid_sender():
    with pytest.raises(MailConfigurationError):
        MailTransport.from_settings(build_settings(SENDER_EMAIL="not-an-address"))


def test_build_returns_none_for_invalid_sender():
    assert build_mail_transport(build_settings(SENDER_EMAIL="not-an-address")) is None


@pytest.mark.asyncio
async def test_dispatch_sends_one_html_message_with_reply_to():
    transport = suppressed_transport()

    with transport.mailer.record_messages() as outbox:
        await transport.dispatch(
            from_address="relay@example.com",
            to_address="owner@example.com",
            reply_to="ada@example.com",
            subject="Portfolio contact from Ada",
            html_body="<p>Hello</p>",
        )

    assert len(outbox) == 1
    message = outbox[0]
    assert "owner@example.com" in str(message["To"])
    assert "ada@example.com" in str(message["Reply-To"])
    assert str(message["Subject"]) == "Portfolio contact from Ada"


@pytest.mark.asyncio
async def test_dispatch_wraps_relay_errors():
    transport = build_mail_transport(build_settings())
    transport.mailer.send_message = AsyncMock(side_effect=OSError("connection refused"))

    with pytest.raises(MailDispatchError) as excinfo:
        await transport.dispatch(
            from_address=transport.default_sender,
            to_address="owner@example.com",
            reply_to="ada@example.com",
            subject="s",
            html_body="<p>b</p>",
        )

    assert "connection refused" not in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, OSError)


@pytest.mark.asyncio
async def test_dispatch_wraps_invalid_reply_to():
    transport = build_mail_transport(build_settings())
    transport.mailer.send_message = AsyncMock()

    with pytest.raises(MailDispatchError):
        await transport.dispatch(
            from_address=transport.default_sender,
            to_address="owner@example.com",
            reply_to="not an address",
            subject="s",
            html_body="<p>b</p>",
        )
    transport.mailer.send_message.assert_not_awaited()
