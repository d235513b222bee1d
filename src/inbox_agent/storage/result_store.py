"""
Result bundle persistence.

Each processed email gets a directory under the data folder, named after
its sanitized Message-ID. The directory doubles as the idempotency
marker: an email whose directory exists is never processed again, so
the directory only appears once the whole bundle has been written.
"""

import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path

from inbox_agent.config import settings
from inbox_agent.errors import PersistenceError
from inbox_agent.mail.base import Attachment

logger = logging.getLogger(__name__)

# Characters that are unsafe in directory names
UNSAFE_ID_CHARS = re.compile(r'[<>:"\\/|?*@+=]')

# Attachments live in their own folder so they never clobber bundle files
ATTACHMENTS_DIR = "attachments"

# Suffix of the hidden directory a bundle is written to before it is moved into place
STAGING_SUFFIX = ".partial"

# Bundle field -> file name
BUNDLE_FILES = {
    "api_usage": "api_cost.txt",
    "raw_email": "raw_email.txt",
    "html": "email_html.html",
    "article": "article.html",
    "generated_response": "generated_response.txt",
    "nominations": "nominations.txt",
    "thank_you_note": "thankyou_note.txt",
    "category": "email_category.txt",
    "record": "response_object.txt",
    "headers": "email_headers.txt",
}


@dataclass
class ResultBundle:
    """Everything a handler persists for one email. None fields are not written."""

    id: str
    api_usage: str | None = None
    raw_email: str | None = None
    html: str | None = None
    article: str | None = None
    generated_response: str | None = None
    nominations: str | None = None
    thank_you_note: str | None = None
    category: str | None = None
    record: str | None = None
    headers: str | None = None
    attachments: tuple[Attachment, ...] = ()


def sanitize_id(email_id: str) -> str:
    """Make a Message-ID safe to use as a directory name."""
    return UNSAFE_ID_CHARS.sub("_", email_id)


class ResultStore:
    """Writes result bundles to per-email directories."""

    def __init__(self, data_dir: Path | str | None = None) -> None:
        """
        Initialize the store.

        Args:
            data_dir: Root folder for bundles. Defaults to settings.data_dir.
        """
        self.data_dir = Path(data_dir) if data_dir is not None else settings.data_dir

    def path_for(self, email_id: str) -> Path:
        return self.data_dir / sanitize_id(email_id)

    def id_exists(self, email_id: str) -> bool:
        """Check if a bundle was already saved for this email."""
        exists = self.path_for(email_id).is_dir()
        if exists:
            logger.info(f"Email {email_id} already exists in the data folder")
        return exists

    def save(self, bundle: ResultBundle) -> Path:
        """
        Write a bundle, replacing any bundle from a previous attempt.

        Files are written to a staging directory that is renamed into
        place once every write succeeded, so a failed save never leaves
        the idempotency marker behind.

        Returns:
            The bundle directory.

        Raises:
            PersistenceError: If any file cannot be written.
        """
        directory = self.path_for(bundle.id)
        staging = directory.with_name(f".{directory.name}{STAGING_SUFFIX}")
        logger.info(f"Saving data to {directory}")

        try:
            if staging.exists():
                shutil.rmtree(staging)
            staging.mkdir(parents=True)

            for field_name, file_name in BUNDLE_FILES.items():
                content = getattr(bundle, field_name)
                if content is not None:
                    (staging / file_name).write_text(content, encoding="utf-8")

            if bundle.attachments:
                attachments_dir = staging / ATTACHMENTS_DIR
                attachments_dir.mkdir()
                for attachment in bundle.attachments:
                    # Keep only the base name so attachments cannot escape the directory
                    file_name = Path(attachment.filename).name
                    if file_name in ("", ".", ".."):
                        file_name = "unnamed"
                    (attachments_dir / file_name).write_bytes(attachment.content)

            if directory.exists():
                shutil.rmtree(directory)
            staging.rename(directory)

        except OSError as e:
            shutil.rmtree(staging, ignore_errors=True)
            logger.error(f"Failed to save data for {bundle.id}: {e}")
            raise PersistenceError(f"Failed to save data for {bundle.id}: {e}") from e

        logger.info(f"All files saved for: {bundle.id}")
        return directory
