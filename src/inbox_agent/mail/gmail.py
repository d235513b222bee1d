"""
Gmail API mail source.

Alternative to IMAP for mailboxes hosted on Gmail. The Gmail message id
serves as the uid, and archiving removes the INBOX label.
"""

import base64
import logging

from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from inbox_agent.errors import FetchError
from inbox_agent.mail.base import Attachment, Email, EmailHeaders
from inbox_agent.mail.cleaning import extract_email_headers, serialize_message
from inbox_agent.mail.gmail_auth import get_gmail_service

logger = logging.getLogger(__name__)


def _decode(data: str) -> bytes:
    return base64.urlsafe_b64decode(data)


class GmailMailSource:
    """Mail source backed by the Gmail API."""

    def __init__(self, gmail_service: Resource | None = None) -> None:
        """
        Initialize the Gmail source.

        Args:
            gmail_service: Gmail API service. If None, will be auto-created.
        """
        self._service = gmail_service

    @property
    def service(self) -> Resource:
        """Get Gmail service, creating if needed."""
        if self._service is None:
            self._service = get_gmail_service()
        return self._service

    def fetch_all(self) -> list[Email]:
        """
        Fetch every message carrying the INBOX label.

        Raises:
            FetchError: If the API cannot be reached.
        """
        emails: list[Email] = []

        try:
            request = self.service.users().messages().list(userId="me", labelIds=["INBOX"])

            while request is not None:
                response = request.execute()

                for ref in response.get("messages", []):
                    message = (
                        self.service.users()
                        .messages()
                        .get(userId="me", id=ref["id"], format="full")
                        .execute()
                    )
                    parsed = self._parse_message(message)
                    if parsed is not None:
                        emails.append(parsed)

                request = self.service.users().messages().list_next(
                    previous_request=request,
                    previous_response=response,
                )

        except (HttpError, GoogleAuthError, FileNotFoundError, OSError) as e:
            logger.error(f"Failed to fetch emails: {e}")
            raise FetchError(f"Failed to fetch emails from Gmail: {e}") from e

        logger.info(f"Fetched {len(emails)} messages from Gmail")
        return emails

    def archive(self, uid: str) -> None:
        """Archive a message by removing the INBOX label."""
        logger.info(f"Archiving email: {uid}")
        try:
            self.service.users().messages().modify(
                userId="me",
                id=uid,
                body={"removeLabelIds": ["INBOX"]},
            ).execute()
        except HttpError as e:
            logger.error(f"Failed to archive email {uid}: {e}")
            raise
        logger.info(f"Email archived: {uid}")

    def _parse_message(self, message: dict) -> Email | None:
        """Parse a Gmail API message into an Email."""
        payload = message.get("payload", {})
        headers = {h["name"].lower(): h["value"] for h in payload.get("headers", [])}

        message_id = headers.get("message-id", "")
        if not message_id:
            logger.warning(f"Message {message.get('id')} has no Message-ID, skipping")
            return None

        uid = message["id"]
        subject = headers.get("subject", "")
        text = self._extract_part(payload, "text/plain")
        html = self._extract_part(payload, "text/html")

        mime_headers = EmailHeaders(
            from_=headers.get("from"),
            to=headers.get("to"),
            date=headers.get("date"),
            subject=subject or None,
        )

        return Email(
            id=message_id,
            uid=uid,
            body=serialize_message(uid, subject, message_id, text),
            headers=extract_email_headers(text, fallback=mime_headers),
            html=html,
            attachments=tuple(self._collect_attachments(uid, payload)),
        )

    def _extract_part(self, payload: dict, mime_type: str) -> str:
        """
        Find the first body part of a MIME type.

        Gmail messages can have nested multipart structures, so parts
        are searched recursively.
        """
        if payload.get("mimeType") == mime_type and not payload.get("filename"):
            data = payload.get("body", {}).get("data")
            if data:
                return _decode(data).decode("utf-8", errors="replace")

        for part in payload.get("parts", []):
            body = self._extract_part(part, mime_type)
            if body:
                return body

        return ""

    def _collect_attachments(self, message_id: str, payload: dict) -> list[Attachment]:
        attachments = []

        for part in payload.get("parts", []):
            if part.get("parts"):
                attachments.extend(self._collect_attachments(message_id, part))

            filename = part.get("filename")
            if not filename:
                continue

            body = part.get("body", {})
            data = body.get("data")
            if data is None and body.get("attachmentId"):
                data = (
                    self.service.users()
                    .messages()
                    .attachments()
                    .get(userId="me", messageId=message_id, id=body["attachmentId"])
                    .execute()
                    .get("data", "")
                )

            content = _decode(data) if data else b""
            attachments.append(
                Attachment(
                    filename=filename,
                    content_type=part.get("mimeType", "application/octet-stream"),
                    length=len(content),
                    content=content,
                )
            )

        return attachments
