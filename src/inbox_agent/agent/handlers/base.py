"""
Shared machinery for category handlers.

A handler runs inside the ledger session the inbox loop opens for its
email, and opens a nested one of its own so it also resets the ledger
when run directly. The usage report saved with an email therefore only
ever covers that email.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from pydantic import ValidationError

from inbox_agent.agent.schemas import Category, CategoryDecision
from inbox_agent.campaign_config import CampaignConfig
from inbox_agent.errors import HandlerError, InboxAgentError
from inbox_agent.llm.client import ModelClient
from inbox_agent.llm.models import ModelVariant
from inbox_agent.llm.usage import UsageLedger
from inbox_agent.lookup.agent import DetailLookupAgent
from inbox_agent.mail.base import Email, MailSource
from inbox_agent.retrieval.retriever import ContextRetriever
from inbox_agent.storage.result_store import ResultBundle, ResultStore

logger = logging.getLogger(__name__)


@dataclass
class HandlerContext:
    """Collaborators every handler can use."""

    client: ModelClient
    retriever: ContextRetriever
    ledger: UsageLedger
    store: ResultStore
    mail: MailSource
    lookup: DetailLookupAgent
    config: CampaignConfig


class CategoryHandler(ABC):
    """Base class for the per-category email handlers."""

    category: Category

    def __init__(self, context: HandlerContext) -> None:
        self.context = context

    @abstractmethod
    async def process(self, email: Email, decision: CategoryDecision) -> None:
        """Generate, persist and archive the results for one email."""
        pass

    async def handle(self, email: Email, decision: CategoryDecision) -> None:
        """
        Process an email inside a ledger session.

        Raises:
            HandlerError: If any step fails. The email is then neither
                saved nor archived, so it is retried on the next run.
        """
        logger.info(f"Processing {email.id} as {self.category.value}")

        try:
            with self.context.ledger.session():
                await self.process(email, decision)
        except (InboxAgentError, ValidationError) as e:
            logger.error(f"An error occurred processing {self.category.value}: {e}")
            raise HandlerError(self.category.value, str(e)) from e

    async def ask(self, tier: tuple[ModelVariant, ...], system_prompt: str, top_k: int) -> str:
        """Invoke the model with the email content most relevant to the prompt."""
        user_prompt = await self.context.retriever.retrieve(system_prompt, top_k)
        return await self.context.client.invoke(tier, system_prompt, user_prompt)

    def new_bundle(self, email: Email, **fields) -> ResultBundle:
        """Start a result bundle with the fields every handler saves."""
        return ResultBundle(
            id=email.id,
            api_usage=self.context.ledger.report(),
            raw_email=email.body,
            html=email.html or None,
            attachments=email.attachments,
            **fields,
        )

    async def save_and_archive(self, bundle: ResultBundle, email: Email) -> None:
        """
        Persist a bundle, then move the email out of the inbox.

        Archive failures are only logged: the saved bundle already marks
        the email as processed.
        """
        await asyncio.to_thread(self.context.store.save, bundle)

        try:
            await asyncio.to_thread(self.context.mail.archive, email.uid)
        except Exception as e:
            logger.error(f"Failed to archive email {email.uid}: {e}")
