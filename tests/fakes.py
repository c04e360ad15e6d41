"""Test doubles for the mail transport."""


class RecordingTransport:
    """Stand-in for SmtpTransport.

    Every send attempt is recorded, including ones that fail. Register a
    failure with ``fail_for(recipient, exc)``.
    """

    def __init__(self):
        self.sent = []
        self.errors = []  # (message, exc) pairs reported by the relay
        self._failures = {}

    def fail_for(self, recipient, exc):
        self._failures[recipient.lower()] = exc

    def send(self, message):
        self.sent.append(message)
        exc = self._failures.get(message.recipient.lower())
        if exc is not None:
            raise exc

    def report(self, message, exc):
        self.errors.append((message, exc))


def run_now(transport, message, on_error):
    """Synchronous stand-in for the background sender."""
    try:
        transport.send(message)
    except Exception as e:
        on_error(message, e)
