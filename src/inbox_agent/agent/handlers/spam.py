"""Handler for unsolicited promotions."""

import asyncio
import logging

from inbox_agent.agent.handlers.base import CategoryHandler
from inbox_agent.agent.schemas import Category, CategoryDecision
from inbox_agent.errors import HandlerError
from inbox_agent.mail.base import Email

logger = logging.getLogger(__name__)


class SpamHandler(CategoryHandler):
    """Archives spam without calling the model or saving anything."""

    category = Category.SPAM_OR_PROMOTION

    async def process(self, email: Email, decision: CategoryDecision) -> None:
        await asyncio.to_thread(self.context.mail.archive, email.uid)

    async def handle(self, email: Email, decision: CategoryDecision) -> None:
        logger.info(f"Archiving spam or promotion {email.id}")
        try:
            await self.process(email, decision)
        except Exception as e:
            logger.error(f"Failed to archive spam {email.uid}: {e}")
            raise HandlerError(self.category.value, str(e)) from e
