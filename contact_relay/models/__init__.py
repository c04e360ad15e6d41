"""Transient value types. Nothing here is persisted."""

from contact_relay.models.submission import SubmissionRequest  # noqa: F401
from contact_relay.models.outbound import OutboundMessage  # noqa: F401
