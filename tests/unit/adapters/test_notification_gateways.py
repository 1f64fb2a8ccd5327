"""
Unit tests for the console and SMTP notification gateways
"""
import logging

import pytest

from campus_identity.adapter.services.console_notification_gateway import (
    ConsoleNotificationGateway,
)
from campus_identity.adapter.services.smtp_notification_gateway import SmtpNotificationGateway

LOGGER = "campus_identity.adapter.services.console_notification_gateway"
LINK = "https://portal.example.edu/auth/verify-email?e=YWxpY2U&t=secret-token&h=abcd"


@pytest.mark.asyncio
async def test_console_gateway_masks_recipient_and_hides_links(caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER)

    sent = await ConsoleNotificationGateway().send(
        "alice.student@example.com",
        "email-verification",
        {"name": "Alice", "verification_link": LINK},
    )

    assert sent is True
    assert "alice.student@example.com" not in caplog.text
    assert "secret-token" not in caplog.text
    assert "verification_link" in caplog.text


@pytest.mark.asyncio
async def test_console_gateway_shows_links_at_debug_when_enabled(caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER)

    await ConsoleNotificationGateway(show_links=True).send(
        "alice.student@example.com", "email-verification", {"verification_link": LINK}
    )

    debug = [record for record in caplog.records if record.levelno == logging.DEBUG]
    assert len(debug) == 1
    assert "secret-token" in debug[0].getMessage()
    assert "alice.student@example.com" not in caplog.text


def test_smtp_render_escapes_html_only():
    gateway = SmtpNotificationGateway(
        host="localhost", port=25, from_email="noreply@example.edu", from_name="Portal"
    )

    message = gateway.render(
        "alice@example.com",
        "email-verification",
        {"name": "<script>alert(1)</script>", "verification_link": LINK},
    )

    text_part, html_part = message.get_payload()
    text = text_part.get_payload(decode=True).decode()
    body = html_part.get_payload(decode=True).decode()
    assert "<script>" in text
    assert "<script>" not in body
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in body
    assert 'href="https://portal.example.edu/auth/verify-email?e=YWxpY2U&amp;t=secret-token' in body
    assert message["From"] == "Portal <noreply@example.edu>"


def test_smtp_render_unknown_template():
    gateway = SmtpNotificationGateway(host="localhost", port=25, from_email="noreply@example.edu")

    with pytest.raises(KeyError):
        gateway.render("alice@example.com", "missing-template", {})
