"""
Model invocation client.

Wraps the OpenAI chat and embedding endpoints with:
- model selection by estimated prompt size
- retry with linearly growing backoff
- usage accounting into the shared ledger
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

import tiktoken
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI, OpenAIEmbeddings

from inbox_agent.config import settings
from inbox_agent.errors import ModelError
from inbox_agent.llm.models import EMBEDDINGS, ModelVariant, select_model
from inbox_agent.llm.usage import UsageLedger

logger = logging.getLogger(__name__)

TOKENIZER_ENCODING = "cl100k_base"


@dataclass(frozen=True)
class PromptPair:
    """Instructions and context for one chat call."""

    system: str
    user: str

    @property
    def text(self) -> str:
        return self.system + self.user

    def to_messages(self) -> list[BaseMessage]:
        return [SystemMessage(content=self.system), HumanMessage(content=self.user)]


async def _wait(seconds: float) -> None:
    """Sleep between retry attempts."""
    await asyncio.sleep(seconds)


def _tiktoken_counter() -> Callable[[str], int]:
    """Build a token counter on the cl100k encoding."""
    encoding = tiktoken.get_encoding(TOKENIZER_ENCODING)
    return lambda text: len(encoding.encode(text))


def _message_text(content: str | list) -> str:
    """Flatten chat message content into plain text."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class ModelClient:
    """
    Sends prompts to the language model and records what they cost.

    Chat and embedding models are created lazily per variant and cached,
    so one client serves every tier.
    """

    def __init__(
        self,
        ledger: UsageLedger,
        token_counter: Callable[[str], int] | None = None,
        max_retries: int | None = None,
        initial_wait_ms: int | None = None,
        wait_increment_ms: int | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            ledger: Usage ledger updated after every successful call.
            token_counter: Deterministic tokenizer. Uses tiktoken if None.
            max_retries: Attempts per call. Defaults to settings.
            initial_wait_ms: Starting backoff. Defaults to settings.
            wait_increment_ms: Backoff growth per failure. Defaults to settings.
        """
        self.ledger = ledger
        self._token_counter = token_counter
        self.max_retries = max_retries or settings.max_retries
        self.initial_wait_ms = (
            initial_wait_ms if initial_wait_ms is not None else settings.retry_initial_wait_ms
        )
        self.wait_increment_ms = (
            wait_increment_ms
            if wait_increment_ms is not None
            else settings.retry_wait_increment_ms
        )
        self._chat_models: dict[str, ChatOpenAI] = {}
        self._embedding_models: dict[str, OpenAIEmbeddings] = {}

    def count_tokens(self, text: str) -> int:
        """Estimate the number of tokens in text."""
        if self._token_counter is None:
            self._token_counter = _tiktoken_counter()
        return self._token_counter(text)

    def select_model(self, tier: tuple[ModelVariant, ...], text: str) -> tuple[ModelVariant, int]:
        """
        Pick the variant for a prompt.

        Returns:
            Tuple of (variant, estimated_tokens).
        """
        tokens = self.count_tokens(text)
        return select_model(tier, tokens), tokens

    def _chat_model(self, name: str) -> ChatOpenAI:
        if name not in self._chat_models:
            self._chat_models[name] = ChatOpenAI(
                model=name,
                api_key=settings.openai_api_key,
                temperature=0,
            )
        return self._chat_models[name]

    def _embedding_model(self, name: str) -> OpenAIEmbeddings:
        if name not in self._embedding_models:
            self._embedding_models[name] = OpenAIEmbeddings(
                model=name,
                api_key=settings.openai_api_key,
            )
        return self._embedding_models[name]

    async def invoke(
        self,
        tier: tuple[ModelVariant, ...],
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """
        Get a chat completion for a (system, user) prompt pair.

        Args:
            tier: Candidate model variants.
            system_prompt: Instructions and output contract.
            user_prompt: Retrieved context or other user content.

        Returns:
            The model's answer text.

        Raises:
            ModelError: If every attempt failed.
        """
        prompt = PromptPair(system=system_prompt, user=user_prompt)
        variant, input_estimate = self.select_model(tier, prompt.text)
        messages = prompt.to_messages()

        logger.info(f"Waiting for {variant.name} response (~{input_estimate} tokens)...")

        async def call() -> str:
            response = await self._chat_model(variant.name).ainvoke(messages)
            answer = _message_text(response.content).strip()
            if not answer:
                raise ValueError("Model returned an empty answer")

            usage = getattr(response, "usage_metadata", None) or {}
            self._record(
                variant,
                usage.get("input_tokens", input_estimate),
                usage.get("output_tokens", self.count_tokens(answer)),
            )
            return answer

        return await self._with_retries(variant, call)

    async def embed(self, text: str) -> list[float]:
        """
        Create an embedding vector for text.

        Raises:
            ModelError: If every attempt failed.
        """
        variant, input_tokens = self.select_model(EMBEDDINGS, text)

        async def call() -> list[float]:
            vector = await self._embedding_model(variant.name).aembed_query(text)
            self._record(variant, input_tokens, 0)
            return vector

        return await self._with_retries(variant, call)

    async def _with_retries(self, variant: ModelVariant, call):
        """Run call up to max_retries times with growing waits in between."""
        wait_ms = self.initial_wait_ms
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                if last_error is not None:
                    logger.info(f"Retry attempt #{attempt + 1} for {variant.name}")
                return await call()
            except Exception as e:
                logger.warning(f"Attempt {attempt + 1} with {variant.name} failed: {e}")
                last_error = e
                wait_ms += self.wait_increment_ms

                if attempt < self.max_retries - 1:
                    logger.info(f"Waiting {wait_ms / 1000} seconds...")
                    await _wait(wait_ms / 1000)

        logger.error(
            f"All {self.max_retries} attempts with {variant.name} failed. "
            f"Last error: {last_error}"
        )
        raise ModelError(f"{variant.name} failed after {self.max_retries} attempts: {last_error}") from last_error

    def _record(self, variant: ModelVariant, input_tokens: int, output_tokens: int) -> None:
        try:
            self.ledger.record(variant.name, input_tokens, output_tokens)
        except KeyError as e:
            logger.error(f"Failed to update token usage and cost: {e}")
