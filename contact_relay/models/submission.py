"""SubmissionRequest model.

One inbound contact form submission. Built from the decoded request body;
lives only for the duration of the request.
"""

import re
from dataclasses import dataclass

# Same shape check as the form relay: local@domain.tld, no whitespace, one "@"
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _text(value):
    """Coerce a decoded field to text; ``None`` means absent."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class SubmissionRequest:
    name: str = ""
    email: str = ""
    message: str = ""
    honeypot: str = ""

    @classmethod
    def from_payload(cls, data):
        """Build a submission from a decoded JSON object or form dict.

        Anything that is not a mapping is treated as an empty body.
        """
        if not isinstance(data, dict):
            data = {}
        return cls(
            name=_text(data.get("name")),
            email=_text(data.get("email")).strip(),
            message=_text(data.get("message")),
            honeypot=_text(data.get("honeypot")),
        )

    @property
    def is_trapped(self):
        """True when the hidden honeypot field was filled (a bot)."""
        return bool(self.honeypot)

    @property
    def missing_fields(self):
        return [
            field for field in ("name", "email", "message")
            if not getattr(self, field)
        ]

    @property
    def has_valid_email(self):
        return EMAIL_RE.fullmatch(self.email) is not None

    def __repr__(self):
        return f"<SubmissionRequest name={self.name!r} email={self.email!r}>"
