"""
Relay error taxonomy.

Each error carries the HTTP status and the public message returned to the
client. Transport detail never goes into ``message``; it stays on the
exception chain for the log.
"""


class RelayError(Exception):
    """Base class for errors that map to a JSON error response."""

    status_code = 500
    # Public text for the response body; the constructor detail only goes to logs.
    message = "Email send failed"

    def __init__(self, detail=None):
        super().__init__(detail or self.message)

    def to_dict(self):
        return {"error": self.message}


class MethodNotAllowed(RelayError):
    status_code = 405
    message = "Method not allowed"


class ValidationError(RelayError):
    status_code = 400


class MissingFields(ValidationError):
    message = "Missing fields"


class InvalidEmail(ValidationError):
    message = "Invalid email"


class DeliveryError(RelayError):
    """The outbound mail collaborator failed to accept a message."""

    status_code = 500
    message = "Email send failed"


class ConfigurationError(RuntimeError):
    """Raised at construction time when required settings are absent."""
