"""
Contact relay service.

Decides what happens to one contact form submission:

  - honeypot filled  -> discard silently, report success
  - invalid input    -> raise MissingFields / InvalidEmail, send nothing
  - otherwise        -> send the internal notification (must succeed), then
                        fire an acknowledgment to the visitor when it cannot
                        start a mail loop

The service is plain Python. Flask is only used to render the email
templates, so ``handle()`` must run inside an app context.
"""

import enum
import logging
from dataclasses import dataclass

from flask import render_template

from contact_relay.errors import ConfigurationError, InvalidEmail, MissingFields
from contact_relay.models import OutboundMessage, SubmissionRequest
from contact_relay.services.email_service import send_in_background

logger = logging.getLogger(__name__)

# Addresses containing any of these belong to automated mailbox handlers.
AUTO_REPLY_DENY = ("postmaster", "mailer-daemon", "bounce", "no-reply", "noreply")

AUTO_REPLY_SUBJECT = "我们已收到您的来信 | We received your message"


class Disposition(enum.Enum):
    DELIVERED = "delivered"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class RelaySettings:
    """Everything the relay needs, resolved once at construction time."""

    mail_from: str
    mail_to: str
    from_name: str = "Website Contact"
    auto_reply_from_name: str = "赛格鞋业 SAIGE Footwear"

    REQUIRED = ("MAIL_FROM", "MAIL_TO")

    @classmethod
    def from_mapping(cls, config):
        missing = [key for key in cls.REQUIRED if not (config.get(key) or "").strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required relay settings: {', '.join(missing)}"
            )
        return cls(
            mail_from=config["MAIL_FROM"].strip(),
            mail_to=config["MAIL_TO"].strip(),
            from_name=config.get("MAIL_FROM_NAME") or cls.from_name,
            auto_reply_from_name=(
                config.get("AUTO_REPLY_FROM_NAME") or cls.auto_reply_from_name
            ),
        )


def header_text(value):
    """Fold line breaks and whitespace runs so user text is safe in a mail header."""
    return " ".join(value.split())


def is_safe_to_auto_reply(email, settings):
    """Return True when an acknowledgment to ``email`` cannot start a mail loop."""
    lower = (email or "").strip().lower()
    if not lower:
        return False
    if lower in (settings.mail_to.lower(), settings.mail_from.lower()):
        return False
    return not any(word in lower for word in AUTO_REPLY_DENY)


def validate_submission(submission):
    """Raise MissingFields or InvalidEmail. Checks run in that order."""
    if submission.missing_fields:
        raise MissingFields(f"Missing: {', '.join(submission.missing_fields)}")
    if not submission.has_valid_email:
        raise InvalidEmail(f"Invalid email: {submission.email!r}")


def compose_notification(submission, settings):
    """The message sent to the business inbox. Reply-to is the visitor."""
    context = {
        "name": submission.name,
        "email": submission.email,
        "message": submission.message,
    }
    return OutboundMessage(
        sender_name=settings.from_name,
        sender=settings.mail_from,
        recipient=settings.mail_to,
        reply_to=submission.email,
        subject=f"New message from {header_text(submission.name)}",
        text_body=render_template("emails/contact_notification.txt", **context),
        html_body=render_template("emails/contact_notification.html", **context),
    )


def compose_auto_reply(submission, settings):
    """The acknowledgment sent to the visitor. Reply-to is the business inbox."""
    context = {"name": submission.name, "brand": settings.auto_reply_from_name}
    return OutboundMessage(
        sender_name=settings.auto_reply_from_name,
        sender=settings.mail_from,
        recipient=submission.email,
        reply_to=settings.mail_to,
        subject=AUTO_REPLY_SUBJECT,
        text_body=render_template("emails/auto_reply.txt", **context),
        html_body=render_template("emails/auto_reply.html", **context),
    )


def log_auto_reply_failure(message, exc):
    logger.error(f"auto-reply error: failed to send to {message.recipient}: {exc}")


class ContactRelay:
    """
    The contact form relay handler.

    Args:
        settings:  RelaySettings (addresses and display names).
        transport: Anything with ``send(OutboundMessage)`` that raises on failure.
        spawn:     ``spawn(transport, message, on_error)`` runs a send detached
                   from the request. Defaults to a daemon thread.
        on_error:  Receives ``(message, exc)`` when the auto-reply fails.
    """

    def __init__(self, settings, transport, spawn=send_in_background,
                 on_error=log_auto_reply_failure):
        if settings is None:
            raise ConfigurationError("Relay settings are required.")
        if transport is None:
            raise ConfigurationError("A mail transport is required.")
        self.settings = settings
        self.transport = transport
        self.spawn = spawn
        self.on_error = on_error

    def handle(self, data):
        """Process one decoded request body. Returns a Disposition.

        Raises MissingFields / InvalidEmail before any mail is attempted, and
        DeliveryError (from the transport) when the notification fails.
        """
        submission = SubmissionRequest.from_payload(data)

        if submission.is_trapped:
            logger.warning("Honeypot filled — submission discarded.")
            return Disposition.DISCARDED

        try:
            validate_submission(submission)
        except (MissingFields, InvalidEmail) as e:
            logger.info(f"Submission rejected: {e}")
            raise

        # Failure here is the only one the client ever sees.
        self.transport.send(compose_notification(submission, self.settings))
        logger.info(
            f"Contact relay: message from {header_text(submission.name)} <{submission.email}> "
            f"forwarded to {self.settings.mail_to}"
        )

        if is_safe_to_auto_reply(submission.email, self.settings):
            # The notification is already out; nothing past here may fail the request.
            try:
                self.spawn(
                    self.transport,
                    compose_auto_reply(submission, self.settings),
                    self.on_error,
                )
            except Exception as e:
                logger.error(f"auto-reply error: {e}", exc_info=True)
        else:
            logger.info(f"Auto-reply skipped for {submission.email}")

        return Disposition.DELIVERED
