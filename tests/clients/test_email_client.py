"""Tests for EmailClient - SMTP patched out."""

import smtplib
from unittest.mock import patch

import pytest

from clients.email_client import EmailClient, EmailError


@pytest.fixture
def client():
    return EmailClient(user="support@sabbpe.in", password="app-password")


@pytest.fixture
def smtp():
    with patch("smtplib.SMTP") as smtp_class:
        yield smtp_class.return_value.__enter__.return_value


class TestEmailClientInit:
    """Fail-fast on invalid config."""

    def test_rejects_empty_user(self):
        with pytest.raises(ValueError, match="user"):
            EmailClient(user="", password="x")

    def test_rejects_empty_password(self):
        with pytest.raises(ValueError, match="password"):
            EmailClient(user="a@b.in", password="")

    def test_port_coerced_to_int(self):
        assert EmailClient("a@b.in", "x", port="465").port == 465


class TestSendEmail:

    def test_starttls_login_send(self, client, smtp):
        client.send_email("merchant@example.in", "Hello", "<p>Hi</p>")

        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("support@sabbpe.in", "app-password")
        sender, recipients, raw = smtp.sendmail.call_args.args
        assert sender == "support@sabbpe.in"
        assert recipients == ["merchant@example.in"]
        assert "Subject: Hello" in raw
        assert "SabbPe Support <support@sabbpe.in>" in raw

    def test_plain_text_alternative(self, client, smtp):
        client.send_email("m@example.in", "Hello", "<p>Hi</p>", text="Hi")

        raw = smtp.sendmail.call_args.args[2]
        assert "text/plain" in raw
        assert "text/html" in raw

    def test_empty_recipient(self, client, smtp):
        with pytest.raises(ValueError):
            client.send_email("", "Hello", "<p>Hi</p>")
        smtp.sendmail.assert_not_called()

    def test_auth_failure(self, client, smtp):
        smtp.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

        with pytest.raises(EmailError, match="Authentication failed"):
            client.send_email("m@example.in", "Hello", "<p>Hi</p>")

    def test_smtp_error(self, client, smtp):
        smtp.sendmail.side_effect = smtplib.SMTPRecipientsRefused({})

        with pytest.raises(EmailError, match="SMTP error"):
            client.send_email("m@example.in", "Hello", "<p>Hi</p>")

    def test_network_error(self, client):
        with patch("smtplib.SMTP", side_effect=TimeoutError("timed out")):
            with pytest.raises(EmailError, match="Connection failed"):
                client.send_email("m@example.in", "Hello", "<p>Hi</p>")
