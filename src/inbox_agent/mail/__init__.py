"""Mail sources and email cleaning."""

from inbox_agent.mail.base import Attachment, Email, EmailHeaders, MailSource
from inbox_agent.mail.cleaning import (
    clean_email_string,
    extract_email_headers,
    serialize_message,
)

__all__ = [
    "Attachment",
    "Email",
    "EmailHeaders",
    "MailSource",
    "clean_email_string",
    "extract_email_headers",
    "serialize_message",
]
