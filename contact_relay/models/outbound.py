"""OutboundMessage model.

A fully composed email, ready to hand to a mail transport. The relay
produces at most two per request: the internal notification and the
auto-reply.
"""

from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr


@dataclass(frozen=True)
class OutboundMessage:
    sender_name: str
    sender: str
    recipient: str
    reply_to: str
    subject: str
    text_body: str
    html_body: str

    @property
    def from_header(self):
        """``"Display Name" <address>``"""
        return formataddr((self.sender_name, self.sender))

    def to_mime(self):
        """Serialize to a multipart/alternative message (text, then HTML)."""
        msg = EmailMessage()
        msg["Subject"] = self.subject
        msg["From"] = self.from_header
        msg["To"] = self.recipient
        if self.reply_to:
            msg["Reply-To"] = self.reply_to

        msg.set_content(self.text_body)
        msg.add_alternative(self.html_body, subtype="html")
        return msg

    def __repr__(self):
        return f"<OutboundMessage to={self.recipient} subject={self.subject!r}>"
