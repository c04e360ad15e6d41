"""Tests for the application factory, configuration and CLI commands."""

from unittest.mock import patch

import pytest

from contact_relay import create_app
from contact_relay import config
from contact_relay.config import Config
from contact_relay.errors import DeliveryError
from contact_relay.services.email_service import SmtpTransport
from contact_relay.services.relay_service import ContactRelay

REQUIRED_ENV = ["SMTP_HOST", "SMTP_USER", "SMTP_PASS", "MAIL_FROM", "MAIL_TO"]


class TestConfigValidation:

    def test_validate_lists_missing(self, monkeypatch):
        for var in REQUIRED_ENV:
            monkeypatch.delenv(var, raising=False)
        monkeypatch.setenv("SMTP_HOST", "smtp.sendgrid.net")

        with pytest.raises(RuntimeError) as exc:
            Config.validate()
        message = str(exc.value)
        assert "SMTP_HOST" not in message
        for var in ["SMTP_USER", "SMTP_PASS", "MAIL_FROM", "MAIL_TO"]:
            assert var in message

    def test_validate_passes_when_set(self, monkeypatch):
        for var in REQUIRED_ENV:
            monkeypatch.setenv(var, "x")
        Config.validate()

    def test_testing_skips_validation(self):
        config.TestConfig.validate()

    def test_production_fails_fast(self, monkeypatch):
        for var in REQUIRED_ENV:
            monkeypatch.delenv(var, raising=False)
        with pytest.raises(RuntimeError):
            create_app("production")


class TestFactory:

    def test_relay_installed(self, app):
        relay = app.extensions["contact_relay"]
        assert isinstance(relay, ContactRelay)
        assert isinstance(relay.transport, SmtpTransport)
        assert relay.settings.mail_to == "Inbox@Saige.test"
        assert relay.settings.mail_from == "contact@saige.test"

    def test_transport_uses_config(self, app):
        transport = app.extensions["contact_relay"].transport
        assert transport.host == "smtp.test.local"
        assert transport.port == 587
        assert not transport.implicit_tls

    def test_nl2br_filter_registered(self, app):
        assert "nl2br" in app.jinja_env.filters


class TestCli:

    @patch.object(SmtpTransport, "check")
    def test_check_smtp_ok(self, mock_check, app):
        result = app.test_cli_runner().invoke(args=["check-smtp"])
        assert result.exit_code == 0
        assert "SMTP login OK." in result.output
        assert "STARTTLS" in result.output
        mock_check.assert_called_once()

    @patch.object(SmtpTransport, "check", side_effect=DeliveryError("SMTP check failed: 535"))
    def test_check_smtp_failure(self, mock_check, app):
        result = app.test_cli_runner().invoke(args=["check-smtp"])
        assert result.exit_code == 1
        assert "535" in result.output

    def test_send_test_email_defaults_to_inbox(self, app, outbox):
        result = app.test_cli_runner().invoke(args=["send-test-email"])
        assert result.exit_code == 0
        assert len(outbox.sent) == 1
        assert outbox.sent[0].recipient == "Inbox@Saige.test"

    def test_send_test_email_to(self, app, outbox):
        result = app.test_cli_runner().invoke(args=["send-test-email", "--to", "ops@example.com"])
        assert result.exit_code == 0
        assert outbox.sent[0].recipient == "ops@example.com"
        assert "ops@example.com" in result.output

    def test_send_test_email_failure(self, app, outbox):
        outbox.fail_for("Inbox@Saige.test", DeliveryError("relay down"))
        result = app.test_cli_runner().invoke(args=["send-test-email"])
        assert result.exit_code == 1
        assert "relay down" in result.output
