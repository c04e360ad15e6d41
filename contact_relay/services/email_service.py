"""
SMTP mail transport for the contact relay.

Works with any authenticated SMTP relay (SendGrid, Google Workspace,
Mailgun, ...). The relay only ever sees the ``send(message)`` capability,
so tests swap in a recording double.

Usage:
    from contact_relay.services.email_service import SmtpTransport, send_in_background

    transport = SmtpTransport.from_config(app.config)
    transport.send(message)                      # blocks, raises DeliveryError
    send_in_background(transport, message, on_error=log_failure)
"""

import logging
import smtplib
import ssl
import threading

from contact_relay.errors import DeliveryError

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


class SmtpTransport:
    """Opens one SMTP session per send."""

    def __init__(self, host, port=587, username=None, password=None, timeout=30):
        self.host = host
        self.port = int(port)
        self.username = username
        self.password = password
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            host=config.get("SMTP_HOST"),
            port=config.get("SMTP_PORT", 587),
            username=config.get("SMTP_USER"),
            password=config.get("SMTP_PASS"),
            timeout=config.get("SMTP_TIMEOUT", 30),
        )

    @property
    def implicit_tls(self):
        return self.port == IMPLICIT_TLS_PORT

    def connect(self):
        """Return a logged-in SMTP session (implicit TLS on 465, STARTTLS otherwise)."""
        context = ssl.create_default_context()
        if self.implicit_tls:
            server = smtplib.SMTP_SSL(
                self.host, self.port, timeout=self.timeout, context=context
            )
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            server.ehlo()
            if not self.implicit_tls:
                server.starttls(context=context)
                server.ehlo()
            if self.username:
                server.login(self.username, self.password or "")
        except Exception:
            server.close()
            raise
        return server

    def check(self):
        """Open and close a session without sending. Raises DeliveryError."""
        try:
            with self.connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP check failed for {self.host}:{self.port}: {e}") from e

    def send(self, message):
        """Deliver an OutboundMessage. Raises DeliveryError on any transport failure."""
        try:
            with self.connect() as server:
                server.send_message(message.to_mime())
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"Failed to send email to {message.recipient}: {e}") from e
        logger.info(f"Email sent to {message.recipient} — {message.subject}")

    def __repr__(self):
        return f"<SmtpTransport {self.host}:{self.port} tls={'implicit' if self.implicit_tls else 'starttls'}>"


def _send_guarded(transport, message, on_error):
    try:
        transport.send(message)
    except Exception as e:
        on_error(message, e)


def send_in_background(transport, message, on_error):
    """Send on a daemon thread so the request doesn't block.

    Failures never propagate; they are handed to ``on_error(message, exc)``.
    """
    thread = threading.Thread(
        target=_send_guarded, args=(transport, message, on_error)
    )
    thread.daemon = True
    thread.start()
    return thread
