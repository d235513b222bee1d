"""
Handler for emails answering the campaign questions.

Builds the merged record behind the interview article: the answers to
the fixed questions, keywords, the business's details and its
nominations. Only the answers are required; every other part degrades
to an empty value when it fails.
"""

import asyncio
import logging

from pydantic import ValidationError

from inbox_agent.agent.enrichment import NominationEnricher
from inbox_agent.agent.handlers.base import CategoryHandler, HandlerContext
from inbox_agent.agent.prompts import (
    business_details_prompt,
    keywords_prompt,
    nominations_prompt,
    qa_prompt,
)
from inbox_agent.agent.schemas import (
    BusinessDetails,
    Category,
    CategoryDecision,
    Nominations,
    QAPair,
    parse_model_output,
    to_json,
)
from inbox_agent.config import settings
from inbox_agent.errors import EnrichmentError, ModelError
from inbox_agent.llm.models import GPT4, GPT35
from inbox_agent.mail.base import Email
from inbox_agent.results import StepResult, settle_all
from inbox_agent.services.article_generator import generate_article

logger = logging.getLogger(__name__)

QA_TOP_K = 1
BUSINESS_DETAILS_TOP_K = 3
NOMINATIONS_TOP_K = 1


class AnswersHandler(CategoryHandler):
    """Turns an Answers email into an article and its structured record."""

    category = Category.ANSWERS

    def __init__(self, context: HandlerContext, call_spacing_ms: int | None = None) -> None:
        super().__init__(context)
        self.call_spacing_ms = (
            call_spacing_ms if call_spacing_ms is not None else settings.qa_call_spacing_ms
        )
        self.enricher = NominationEnricher(context.lookup, context.config)

    async def process(self, email: Email, decision: CategoryDecision) -> None:
        qa_pairs = await self.extract_answers()
        keywords = await self.generate_keywords(qa_pairs)
        details = await self.extract_business_details()
        nominations = await self.extract_nominations(details.value)

        record = {
            "QA": [pair.model_dump() for pair in qa_pairs],
            "original_message": [
                {
                    "From": email.headers.from_,
                    "To": email.headers.to,
                    "Subject": email.headers.subject,
                    "Date": email.headers.date,
                }
            ],
            "QA_keywords": keywords.value,
            "bussines_details": details.value.model_dump(),
            "nominations": nominations.value.model_dump(),
        }

        article = generate_article(record, self.context.config)

        bundle = self.new_bundle(
            email,
            article=article,
            nominations=to_json(record["nominations"]),
            record=to_json(record),
            category=to_json(decision),
        )
        await self.save_and_archive(bundle, email)

    async def extract_answers(self) -> list[QAPair]:
        """
        Extract the answer to each campaign question.

        Prompts are prepared and their context retrieved concurrently.
        Model calls are then made one at a time with a pause in between.
        A question whose retrieval or model call fails is skipped.
        """
        logger.info("Getting QA with OpenAI...")
        system_prompts = [qa_prompt(question) for question in self.context.config.questions]
        contexts = await settle_all(
            *(self.context.retriever.retrieve(prompt, QA_TOP_K) for prompt in system_prompts)
        )

        pairs: list[QAPair] = []
        calls = 0
        for index, (system_prompt, context) in enumerate(zip(system_prompts, contexts)):
            if not context.success:
                logger.warning(f"Failed to retrieve context for answer {index + 1}: {context.error}")
                continue
            if calls:
                await asyncio.sleep(self.call_spacing_ms / 1000)
            calls += 1
            try:
                response = await self.context.client.invoke(GPT4, system_prompt, context.value)
                pairs.append(parse_model_output(response, QAPair))
            except (ModelError, ValidationError) as e:
                logger.warning(f"Failed to extract answer {index + 1}: {e}")

        return pairs

    async def generate_keywords(self, qa_pairs: list[QAPair]) -> StepResult[str]:
        """Generate hashtags describing the business from its answers."""
        logger.info("Getting keywords with OpenAI...")
        answers = " ".join(pair.a for pair in qa_pairs)

        try:
            keywords = await self.context.client.invoke(GPT35, keywords_prompt(), answers)
        except ModelError as e:
            logger.warning(f"Failed to generate keywords from business answers: {e}")
            return StepResult.degraded(str(e))

        return StepResult.ok(keywords)

    async def extract_business_details(self) -> StepResult[BusinessDetails]:
        """Extract the business's details, then look up missing links."""
        logger.info("Extracting business details from email...")

        try:
            response = await self.ask(GPT4, business_details_prompt(), BUSINESS_DETAILS_TOP_K)
            details = parse_model_output(response, BusinessDetails)
        except (ModelError, ValidationError) as e:
            logger.warning(f"Failed to extract business details from email body: {e}")
            return StepResult.degraded(str(e), fallback=BusinessDetails())

        try:
            details = await self.context.lookup.find_missing_business_details(details)
        except EnrichmentError as e:
            logger.warning(f"Failed to get missing details about the company: {e}")

        return StepResult.ok(details)

    async def extract_nominations(self, details: BusinessDetails) -> StepResult[Nominations]:
        """Extract and enrich the businesses nominated to be featured next."""
        logger.info("Extracting nominations from email...")

        try:
            response = await self.ask(GPT4, nominations_prompt(), NOMINATIONS_TOP_K)
            nominations = parse_model_output(response, Nominations)
        except (ModelError, ValidationError) as e:
            logger.warning(f"Failed to extract nominations from email body: {e}")
            return StepResult.degraded(str(e), fallback=Nominations({}))

        if nominations.is_blank:
            logger.info("No nominations in email")
            return StepResult.ok(Nominations({}))

        return StepResult.ok(await self.enricher.enrich(details, nominations))
