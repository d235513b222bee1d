"""
Email classification.

Assigns each email exactly one of the campaign categories. The decision
comes from the GPT4 tier, reading the two chunks of indexed email most
relevant to the category taxonomy.
"""

import logging

from pydantic import ValidationError

from inbox_agent.agent.prompts import classification_prompt
from inbox_agent.agent.schemas import CategoryDecision, parse_model_output
from inbox_agent.campaign_config import CampaignConfig, get_campaign_config
from inbox_agent.errors import ClassificationError, ModelError
from inbox_agent.llm.client import ModelClient
from inbox_agent.llm.models import GPT4
from inbox_agent.mail.base import Email
from inbox_agent.retrieval.retriever import ContextRetriever

logger = logging.getLogger(__name__)

CLASSIFICATION_TOP_K = 2


class EmailClassifier:
    """Classifies emails into campaign categories."""

    def __init__(
        self,
        client: ModelClient,
        retriever: ContextRetriever,
        config: CampaignConfig | None = None,
    ) -> None:
        self.client = client
        self.retriever = retriever
        self.config = config or get_campaign_config()

    async def classify(self, email: Email) -> CategoryDecision:
        """
        Classify an indexed email.

        The label is returned as the model wrote it. Mapping it to a
        Category happens at dispatch.

        Args:
            email: Email already indexed in the retriever.

        Returns:
            CategoryDecision with label and explanation.

        Raises:
            ClassificationError: On retrieval, model or parse failure.
        """
        logger.info(f"Classifying email {email.id}")
        system_prompt = classification_prompt(self.config)

        try:
            user_prompt = await self.retriever.retrieve(system_prompt, CLASSIFICATION_TOP_K)
            response = await self.client.invoke(GPT4, system_prompt, user_prompt)
            decision = parse_model_output(response, CategoryDecision)
        except (ModelError, ValidationError) as e:
            raise ClassificationError(f"Getting category failed for {email.id}: {e}") from e

        logger.info(f"Email {email.id} classified as {decision.category!r}")
        return decision
