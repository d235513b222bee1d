"""
Category dispatch.

Maps a classifier label onto the closed Category set and runs the
matching handler. Labels outside the set are rejected, never guessed.
"""

import logging

from inbox_agent.agent.handlers import (
    AnswersHandler,
    CategoryHandler,
    HandlerContext,
    NominationsHandler,
    ReplyHandler,
    SpamHandler,
)
from inbox_agent.agent.schemas import Category, CategoryDecision
from inbox_agent.errors import UnknownCategoryError
from inbox_agent.mail.base import Email

logger = logging.getLogger(__name__)


def parse_category(label: str) -> Category:
    """
    Map a classifier label to a Category.

    Raises:
        UnknownCategoryError: If the label is not one of the categories.
    """
    try:
        return Category(label.strip())
    except ValueError:
        raise UnknownCategoryError(label) from None


class CategoryDispatcher:
    """Routes classified emails to their handlers."""

    def __init__(self, context: HandlerContext) -> None:
        self.context = context

    def handler_for(self, category: Category) -> CategoryHandler:
        """Build the handler for a category."""
        match category:
            case Category.ANSWERS:
                return AnswersHandler(self.context)
            case Category.NOMINATIONS:
                return NominationsHandler(self.context)
            case (
                Category.QUESTIONS
                | Category.UNSUBSCRIBE
                | Category.ACKNOWLEDGMENT
                | Category.CONFIRMATION
                | Category.DECLINE
            ):
                return ReplyHandler(self.context, category)
            case Category.SPAM_OR_PROMOTION:
                return SpamHandler(self.context)
            case _:
                raise UnknownCategoryError(str(category))

    async def dispatch(self, email: Email, decision: CategoryDecision) -> Category:
        """
        Run the handler for a classified email.

        Returns:
            The category the email was handled as.

        Raises:
            UnknownCategoryError: If the label is not a known category.
            HandlerError: If the handler failed.
        """
        category = parse_category(decision.category)
        logger.info(f"Dispatching {email.id} to {category.value} handler")
        await self.handler_for(category).handle(email, decision)
        return category
