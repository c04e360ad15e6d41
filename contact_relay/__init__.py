import os
import logging

import click
from flask import Flask, jsonify, request
from markupsafe import Markup, escape

from contact_relay.config import config_by_name


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        config_by_name[config_name].validate()

    # --- Relay handler: explicit settings + injected transport ---
    from contact_relay.services.email_service import SmtpTransport
    from contact_relay.services.relay_service import ContactRelay, RelaySettings

    app.extensions["contact_relay"] = ContactRelay(
        settings=RelaySettings.from_mapping(app.config),
        transport=SmtpTransport.from_config(app.config),
    )

    # --- Register blueprints ---
    from contact_relay.blueprints.relay import relay_bp

    app.register_blueprint(relay_bp)

    @app.route("/healthz")
    def healthz():
        """Simple health check endpoint for monitoring."""
        return jsonify(
            status="healthy",
            smtpConfigured=bool(app.config.get("SMTP_HOST") and app.config.get("SMTP_USER")),
        )

    # --- Error handlers (JSON only, this is an API) ---
    @app.errorhandler(404)
    def not_found(e):
        return jsonify(error="Not found"), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        from contact_relay.blueprints.relay import RELAY_PATH, method_not_allowed_response

        # Methods outside the relay route's list never reach its view.
        if request.path.rstrip("/") == RELAY_PATH:
            return method_not_allowed_response()
        response = jsonify(error="Method not allowed")
        allowed = [m for m in (e.valid_methods or []) if m not in ("HEAD", "OPTIONS")]
        if allowed:
            response.headers["Allow"] = ", ".join(allowed)
        return response, 405

    @app.errorhandler(500)
    def server_error(e):
        return jsonify(error="Internal server error"), 500

    # --- Security headers ---
    @app.after_request
    def add_security_headers(response):
        """Add security headers to every response."""
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if not app.debug and request.is_secure:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    # --- Custom Jinja filters ---
    @app.template_filter("nl2br")
    def nl2br_filter(value):
        """Escape text and turn its newlines into <br> tags."""
        lines = (value or "").replace("\r\n", "\n").split("\n")
        return Markup("<br>").join(escape(line) for line in lines)

    # --- CLI commands ---
    register_cli(app)

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    return app


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("check-smtp")
    def check_smtp():
        """Log in to the configured SMTP relay without sending anything.

        Usage:
            flask check-smtp
        """
        from contact_relay.errors import DeliveryError
        from contact_relay.services.email_service import SmtpTransport

        transport = SmtpTransport.from_config(app.config)
        click.echo(f"Connecting to {transport.host}:{transport.port} "
                   f"({'implicit TLS' if transport.implicit_tls else 'STARTTLS'})...")
        try:
            transport.check()
        except DeliveryError as e:
            raise click.ClickException(str(e))
        click.echo("SMTP login OK.")

    @app.cli.command("send-test-email")
    @click.option("--to", "to", default=None, help="Recipient (defaults to MAIL_TO).")
    def send_test_email(to):
        """Send a one-off test message through the relay transport.

        Usage:
            flask send-test-email
            flask send-test-email --to someone@example.com
        """
        from contact_relay.errors import DeliveryError
        from contact_relay.models import OutboundMessage

        relay = app.extensions["contact_relay"]
        settings = relay.settings
        recipient = to or settings.mail_to

        message = OutboundMessage(
            sender_name=settings.from_name,
            sender=settings.mail_from,
            recipient=recipient,
            reply_to=settings.mail_to,
            subject="Contact relay test message",
            text_body="If you can read this, the contact relay can send mail.",
            html_body="<p>If you can read this, the contact relay can send mail.</p>",
        )
        try:
            relay.transport.send(message)
        except DeliveryError as e:
            raise click.ClickException(str(e))
        click.echo(f"Test message sent to {recipient}.")
