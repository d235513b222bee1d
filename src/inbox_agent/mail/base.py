"""
Mail source types.

Email objects are built once by a mail source and treated as read-only
by every later stage of the pipeline.
"""

import json
from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class EmailHeaders:
    """Headers quoted in the email text, falling back to the MIME headers."""

    from_: str | None = None
    to: str | None = None
    date: str | None = None
    subject: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        """Convert to the plain dict stored in result bundles."""
        return {
            "from": self.from_,
            "to": self.to,
            "date": self.date,
            "subject": self.subject,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class Attachment:
    """A file attached to an email."""

    filename: str
    content_type: str
    length: int
    content: bytes = field(repr=False, default=b"")


@dataclass(frozen=True)
class Email:
    """
    One inbox message.

    Attributes:
        id: RFC 2822 Message-ID. Idempotency and storage key.
        uid: Transport identifier, only used to archive the message.
        body: Cleaned, serialized message text fed to the model.
        headers: From/To/Date/Subject.
        html: HTML body, empty if the message had none.
        attachments: Files attached to the message.
    """

    id: str
    uid: str
    body: str
    headers: EmailHeaders = field(default_factory=EmailHeaders)
    html: str = ""
    attachments: tuple[Attachment, ...] = ()

    def summary(self) -> dict:
        """Short description used in log messages."""
        return {"id": self.id, "uid": self.uid, "subject": self.headers.subject}


class MailSource(Protocol):
    """A mailbox the inbox loop can read from and archive into."""

    def fetch_all(self) -> list[Email]:
        """
        Fetch every message currently in the inbox.

        Raises:
            FetchError: If the mailbox cannot be reached or read.
        """
        ...

    def archive(self, uid: str) -> None:
        """Move a message out of the inbox."""
        ...

