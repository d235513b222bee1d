"""Handlers that answer the sender with a generated reply."""

import logging

from inbox_agent.agent.handlers.base import CategoryHandler, HandlerContext
from inbox_agent.agent.prompts import reply_prompt
from inbox_agent.agent.schemas import (
    Category,
    CategoryDecision,
    GeneratedReply,
    parse_model_output,
    to_json,
)
from inbox_agent.llm.models import GPT4
from inbox_agent.mail.base import Email

logger = logging.getLogger(__name__)

REPLY_TOP_K = 1

REPLY_CATEGORIES = (
    Category.QUESTIONS,
    Category.UNSUBSCRIBE,
    Category.ACKNOWLEDGMENT,
    Category.CONFIRMATION,
    Category.DECLINE,
)


class ReplyHandler(CategoryHandler):
    """
    Drafts a reply for Questions, Unsubscribe request, Acknowledgment,
    Confirmation and Decline to Participate emails.

    The categories differ only in their instructions.
    """

    def __init__(self, context: HandlerContext, category: Category) -> None:
        if category not in REPLY_CATEGORIES:
            raise ValueError(f"{category.value} is not a reply category")
        super().__init__(context)
        self.category = category

    async def process(self, email: Email, decision: CategoryDecision) -> None:
        system_prompt = reply_prompt(self.category, decision.explanation, self.context.config)

        response = await self.ask(GPT4, system_prompt, REPLY_TOP_K)
        reply = parse_model_output(response, GeneratedReply)
        generated_response = reply.as_text()
        logger.info(generated_response)

        bundle = self.new_bundle(
            email,
            generated_response=generated_response,
            category=to_json(decision),
        )
        await self.save_and_archive(bundle, email)
