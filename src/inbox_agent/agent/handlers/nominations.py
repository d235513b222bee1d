"""Handler for emails nominating other businesses."""

import logging

from pydantic import ValidationError

from inbox_agent.agent.enrichment import NominationEnricher
from inbox_agent.agent.handlers.base import CategoryHandler, HandlerContext
from inbox_agent.agent.prompts import (
    business_details_prompt,
    nominations_prompt,
    thank_you_note_prompt,
)
from inbox_agent.agent.schemas import (
    BusinessDetails,
    Category,
    CategoryDecision,
    GeneratedReply,
    Nominations,
    parse_model_output,
    to_json,
)
from inbox_agent.errors import ModelError
from inbox_agent.llm.models import GPT4
from inbox_agent.mail.base import Email
from inbox_agent.results import StepResult

logger = logging.getLogger(__name__)

NOMINATIONS_TOP_K = 1
BUSINESS_DETAILS_TOP_K = 3


class NominationsHandler(CategoryHandler):
    """Extracts nominees, prepares their invitations and thanks the nominator."""

    category = Category.NOMINATIONS

    def __init__(self, context: HandlerContext) -> None:
        super().__init__(context)
        self.enricher = NominationEnricher(context.lookup, context.config)

    async def process(self, email: Email, decision: CategoryDecision) -> None:
        logger.info("Getting openai response for nominations...")
        response = await self.ask(GPT4, nominations_prompt(decision.explanation), NOMINATIONS_TOP_K)
        nominations = parse_model_output(response, Nominations)

        response = await self.ask(
            GPT4, business_details_prompt(minified=True), BUSINESS_DETAILS_TOP_K
        )
        details = parse_model_output(response, BusinessDetails)

        enriched = await self.enricher.enrich(details, nominations)

        thank_you_note = await self.generate_thank_you_note(email)

        bundle = self.new_bundle(
            email,
            headers=email.headers.to_json(),
            nominations=to_json(enriched),
            thank_you_note=thank_you_note.value,
            category=to_json(decision),
        )
        await self.save_and_archive(bundle, email)

    async def generate_thank_you_note(self, email: Email) -> StepResult[str]:
        """Draft a thank-you note for the nominator."""
        logger.info("Getting openai response for thank you note...")

        try:
            response = await self.context.client.invoke(
                GPT4, thank_you_note_prompt(self.context.config), email.body
            )
            note = parse_model_output(response, GeneratedReply)
        except (ModelError, ValidationError) as e:
            logger.warning(f"Failed to generate a thank you note: {e}")
            return StepResult.degraded(str(e))

        return StepResult.ok(note.as_text())
