"""
Email text cleaning and header extraction.

Incoming messages carry signatures, tracking links and quoted replies
that only add noise to model prompts. Everything here is pure string
processing so it can be shared by every mail source.
"""

import json
import re

from inbox_agent.campaign_config import get_campaign_config
from inbox_agent.mail.base import EmailHeaders

# <...> or [...] fragments (links, image placeholders)
BRACKETED_FRAGMENT = re.compile(r"<[^>]*>|\[[^\]]*\]")

QUOTED_LINE = re.compile(r"^>.*[\r\n]", re.MULTILINE)
BLANK_LINE = re.compile(r"^\s*[\r\n]", re.MULTILINE)
ESCAPED_NEWLINES = re.compile(r"(\\n)+")

HEADER_PATTERNS = {
    "from_": re.compile(r"From: (.*?)\n"),
    "to": re.compile(r"To: (.*?)\n"),
    "date": re.compile(r"Date: (.*?)\n"),
    "subject": re.compile(r"Subject: (.*?)\n"),
}


def clean_email_string(
    text: str,
    unwanted_substrings: list[str] | None = None,
    boilerplate_strings: list[str] | None = None,
) -> str:
    """
    Strip noise from an email string.

    Args:
        text: Email text, plain or serialized as JSON.
        unwanted_substrings: Bracketed fragments containing any of these
            (case-insensitive) are dropped. Defaults to config.yaml.
        boilerplate_strings: Literal strings removed everywhere.
            Defaults to config.yaml.

    Returns:
        The cleaned text.
    """
    config = get_campaign_config()
    if unwanted_substrings is None:
        unwanted_substrings = config.unwanted_substrings
    if boilerplate_strings is None:
        boilerplate_strings = config.boilerplate_strings

    unwanted = [s.lower() for s in unwanted_substrings]

    def drop_unwanted(match: re.Match) -> str:
        fragment = match.group(0).lower()
        if any(s in fragment for s in unwanted):
            return ""
        return match.group(0)

    cleaned = BRACKETED_FRAGMENT.sub(drop_unwanted, text)

    for boilerplate in boilerplate_strings:
        cleaned = cleaned.replace(boilerplate, "")

    cleaned = QUOTED_LINE.sub("", cleaned)
    cleaned = BLANK_LINE.sub("", cleaned)
    cleaned = ESCAPED_NEWLINES.sub("\n", cleaned)

    return cleaned


def serialize_message(uid: str, subject: str, message_id: str, body: str) -> str:
    """
    Serialize the parts of a message the model should see, then clean them.

    The JSON form keeps subject and body together in one indexable document.
    """
    message = {"uid": uid}
    if subject:
        message["Subject"] = subject
    if message_id:
        message["MessageID"] = message_id
    if body:
        message["Body"] = body
    return clean_email_string(json.dumps(message, ensure_ascii=False))


def extract_email_headers(text: str, fallback: EmailHeaders | None = None) -> EmailHeaders:
    """
    Extract From/To/Date/Subject lines quoted in an email body.

    Forwarded nominations and answers usually quote the original sender's
    headers in the body, which is who the campaign cares about.

    Args:
        text: Plain text body.
        fallback: Values used for headers missing from the body.

    Returns:
        EmailHeaders with each field from the body, the fallback, or None.
    """
    fallback = fallback or EmailHeaders()
    values = {}
    for name, pattern in HEADER_PATTERNS.items():
        match = pattern.search(text or "")
        values[name] = match.group(1).strip() if match else getattr(fallback, name)
    return EmailHeaders(**values)
