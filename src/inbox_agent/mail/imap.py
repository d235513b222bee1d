"""
IMAP mail source.

Fetches every message in the inbox folder over IMAP4 SSL and archives
processed messages by moving them into the archive folder.
"""

import imaplib
import logging
from email import message_from_bytes
from email.header import decode_header as email_decode_header
from email.message import Message

from inbox_agent.config import settings
from inbox_agent.errors import FetchError
from inbox_agent.mail.base import Attachment, Email, EmailHeaders
from inbox_agent.mail.cleaning import extract_email_headers, serialize_message

logger = logging.getLogger(__name__)


class ImapMailSource:
    """Mail source backed by an IMAP mailbox."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        user: str | None = None,
        password: str | None = None,
        folder: str | None = None,
        archive_folder: str | None = None,
    ) -> None:
        self.host = host or settings.imap_host
        self.port = port or settings.imap_port
        self.user = user or settings.imap_user
        self.password = password or settings.imap_password
        self.folder = folder or settings.imap_folder
        self.archive_folder = archive_folder or settings.imap_archive_folder
        self._conn: imaplib.IMAP4_SSL | None = None

    def connect(self) -> None:
        """Connect and authenticate to the IMAP server."""
        logger.info(f"Connecting to IMAP server {self.host} as {self.user}")
        conn = imaplib.IMAP4_SSL(self.host, self.port)
        try:
            conn.login(self.user, self.password)
        except imaplib.IMAP4.error:
            conn.logout()
            raise
        self._conn = conn

    def disconnect(self) -> None:
        """Close the IMAP connection."""
        if self._conn is None:
            return
        try:
            self._conn.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.debug(f"IMAP logout failed: {e}")
        self._conn = None
        logger.info("IMAP connection ended")

    def __enter__(self) -> "ImapMailSource":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    def fetch_all(self) -> list[Email]:
        """
        Fetch every message in the inbox folder.

        Messages that cannot be parsed are logged and skipped.

        Raises:
            FetchError: If the server cannot be reached or searched.
        """
        emails: list[Email] = []

        try:
            with self:
                self._conn.select(self.folder)
                typ, data = self._conn.uid("SEARCH", None, "ALL")
                if typ != "OK":
                    raise FetchError(f"IMAP search failed: {typ}")

                uids = data[0].split() if data and data[0] else []
                logger.info(f"Fetching {len(uids)} messages from {self.folder}")

                for raw_uid in uids:
                    uid = raw_uid.decode()
                    typ, msg_data = self._conn.uid("FETCH", uid, "(RFC822)")
                    if typ != "OK" or not msg_data or not isinstance(msg_data[0], tuple):
                        logger.warning(f"Failed to fetch message {uid}")
                        continue

                    parsed = self._parse_message(uid, msg_data[0][1])
                    if parsed is not None:
                        emails.append(parsed)

        except (imaplib.IMAP4.error, OSError) as e:
            logger.error(f"Failed to fetch emails: {e}")
            raise FetchError(f"Failed to fetch emails from {self.host}: {e}") from e

        logger.info("Done fetching all messages!")
        return emails

    def archive(self, uid: str) -> None:
        """
        Move a message into the archive folder.

        Servers without the MOVE extension get COPY + delete instead.
        """
        logger.info(f"Archiving email: {uid}")

        with self:
            self._conn.select(self.folder)
            try:
                typ, data = self._conn.uid("MOVE", uid, self.archive_folder)
            except imaplib.IMAP4.error as e:
                logger.debug(f"UID MOVE unavailable: {e}")
                typ, data = "NO", None

            if typ != "OK":
                typ, data = self._conn.uid("COPY", uid, self.archive_folder)
                if typ != "OK":
                    raise imaplib.IMAP4.error(f"Failed to archive email {uid}: {data}")
                self._conn.uid("STORE", uid, "+FLAGS", r"(\Deleted)")
                self._conn.expunge()

        logger.info(f"Email archived: {uid}")

    def _decode_header(self, header: str | None) -> str:
        """Decode a MIME-encoded header into plain text."""
        if not header:
            return ""
        decoded_parts = []
        for part, charset in email_decode_header(header):
            if isinstance(part, bytes):
                decoded_parts.append(part.decode(charset or "utf-8", errors="replace"))
            else:
                decoded_parts.append(part)
        return "".join(decoded_parts).replace("\r\n", "").replace("\n", "")

    def _parse_message(self, uid: str, raw: bytes) -> Email | None:
        """Parse a raw RFC 822 message into an Email."""
        msg = message_from_bytes(raw)

        message_id = msg.get("Message-ID", "").strip()
        if not message_id:
            logger.warning(f"Message {uid} has no Message-ID, skipping")
            return None

        text, html = self._get_body(msg)
        subject = self._decode_header(msg.get("Subject"))

        mime_headers = EmailHeaders(
            from_=self._decode_header(msg.get("From")) or None,
            to=self._decode_header(msg.get("To")) or None,
            date=msg.get("Date"),
            subject=subject or None,
        )

        return Email(
            id=message_id,
            uid=uid,
            body=serialize_message(uid, subject, message_id, text),
            headers=extract_email_headers(text, fallback=mime_headers),
            html=html,
            attachments=tuple(self._get_attachments(msg)),
        )

    def _get_body(self, msg: Message) -> tuple[str, str]:
        """Extract the plain text and HTML bodies."""
        text_plain = ""
        text_html = ""

        for part in msg.walk() if msg.is_multipart() else [msg]:
            if "attachment" in part.get("Content-Disposition", ""):
                continue

            payload = part.get_payload(decode=True)
            if not payload:
                continue

            charset = part.get_content_charset() or "utf-8"
            try:
                text = payload.decode(charset, errors="replace")
            except LookupError:
                text = payload.decode("utf-8", errors="replace")

            if part.get_content_type() == "text/plain":
                text_plain += text
            elif part.get_content_type() == "text/html":
                text_html += text

        return text_plain, text_html

    def _get_attachments(self, msg: Message) -> list[Attachment]:
        attachments = []
        if not msg.is_multipart():
            return attachments

        for part in msg.walk():
            if "attachment" not in part.get("Content-Disposition", ""):
                continue
            content = part.get_payload(decode=True) or b""
            attachments.append(
                Attachment(
                    filename=self._decode_header(part.get_filename()) or "unnamed",
                    content_type=part.get_content_type(),
                    length=len(content),
                    content=content,
                )
            )
        return attachments
