"""
Inbox loop.

One batch run: fetch the inbox, then classify and handle each email in
turn. Emails that fail stay in the inbox and are picked up again on the
next run; emails with a saved result bundle are skipped. Each email runs
inside its own ledger session, so the usage of one email never leaks
into the report saved with the next.
"""

import asyncio
import logging
from dataclasses import dataclass

from inbox_agent.agent.classifier import EmailClassifier
from inbox_agent.agent.dispatcher import CategoryDispatcher
from inbox_agent.errors import (
    ClassificationError,
    FetchError,
    HandlerError,
    ModelError,
    UnknownCategoryError,
)
from inbox_agent.llm.usage import UsageLedger
from inbox_agent.mail.base import Email, MailSource
from inbox_agent.retrieval.retriever import ContextRetriever
from inbox_agent.storage.result_store import ResultStore

logger = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    """Counts for one inbox run."""

    fetched: int = 0
    skipped: int = 0
    processed: int = 0
    failed: int = 0


class InboxLoop:
    """Drives one pass over the inbox."""

    def __init__(
        self,
        mail: MailSource,
        store: ResultStore,
        retriever: ContextRetriever,
        classifier: EmailClassifier,
        dispatcher: CategoryDispatcher,
        ledger: UsageLedger,
    ) -> None:
        self.mail = mail
        self.store = store
        self.retriever = retriever
        self.classifier = classifier
        self.dispatcher = dispatcher
        self.ledger = ledger

    async def check_inbox(self) -> BatchSummary:
        """
        Process every new email in the inbox, one at a time.

        Returns:
            Counts of fetched, skipped, processed and failed emails.
        """
        summary = BatchSummary()

        try:
            emails = await asyncio.to_thread(self.mail.fetch_all)
        except FetchError as e:
            logger.error(f"Fetching emails failed. Reason: {e}")
            return summary

        summary.fetched = len(emails)
        logger.info(f"Fetched {summary.fetched} emails")

        for email in emails:
            if self.store.id_exists(email.id):
                summary.skipped += 1
                continue

            if await self.process_email(email):
                summary.processed += 1
            else:
                summary.failed += 1

        logger.info(
            f"Inbox check complete: {summary.processed} processed, "
            f"{summary.skipped} skipped, {summary.failed} failed"
        )
        return summary

    async def process_email(self, email: Email) -> bool:
        """
        Index, classify and dispatch one email.

        Embedding, classification and handler usage all land in the same
        ledger session, which is reset however the email ends.

        Returns:
            True if the handler completed.
        """
        logger.info(f"Processing email {email.summary()}")

        with self.ledger.session():
            try:
                await self.retriever.index_email(email)
            except ModelError as e:
                logger.error(f"Generating embeddings failed for {email.id}. Reason: {e}")

            try:
                decision = await self.classifier.classify(email)
            except ClassificationError as e:
                logger.error(f"Getting category failed. Reason: {e}")
                return False

            try:
                await self.dispatcher.dispatch(email, decision)
            except (UnknownCategoryError, HandlerError) as e:
                logger.error(f"Processing email failed. Reason: {e}")
                return False

        return True
