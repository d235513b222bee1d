"""Tests for the model invocation client."""

from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest

from inbox_agent.errors import ModelError
from inbox_agent.llm.client import ModelClient
from inbox_agent.llm.models import GPT4
from inbox_agent.llm.usage import UsageLedger


def chat_response(content: str, input_tokens: int = 10, output_tokens: int = 5):
    """Mock chat model response."""
    response = MagicMock()
    response.content = content
    response.usage_metadata = {"input_tokens": input_tokens, "output_tokens": output_tokens}
    return response


@pytest.fixture
def client(ledger: UsageLedger, word_counter) -> ModelClient:
    return ModelClient(
        ledger,
        token_counter=word_counter,
        max_retries=3,
        initial_wait_ms=1000,
        wait_increment_ms=3000,
    )


@pytest.fixture
def mock_wait():
    with patch("inbox_agent.llm.client._wait", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def mock_chat():
    with patch("inbox_agent.llm.client.ChatOpenAI") as mock_cls:
        model = MagicMock()
        model.ainvoke = AsyncMock()
        mock_cls.return_value = model
        yield model


class TestInvoke:
    """Tests for chat completions."""

    @pytest.mark.asyncio
    async def test_returns_answer_and_records_usage(
        self, client: ModelClient, ledger: UsageLedger, mock_chat, mock_wait
    ) -> None:
        """Test a successful call on the first attempt."""
        mock_chat.ainvoke.return_value = chat_response("  the answer  ", 12, 3)

        answer = await client.invoke(GPT4, "system prompt", "user prompt")

        assert answer == "the answer"
        entry = next(e for e in ledger.snapshot() if e.model == "gpt-4")
        assert entry.input_tokens == 12
        assert entry.output_tokens == 3
        mock_wait.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sends_system_and_user_messages(
        self, client: ModelClient, mock_chat, mock_wait
    ) -> None:
        """Test that prompts are sent as a system/user pair."""
        mock_chat.ainvoke.return_value = chat_response("ok")

        await client.invoke(GPT4, "Categorize email", '["context"]')

        messages = mock_chat.ainvoke.call_args.args[0]
        assert messages[0].type == "system"
        assert messages[0].content == "Categorize email"
        assert messages[1].type == "human"
        assert messages[1].content == '["context"]'

    @pytest.mark.asyncio
    async def test_retries_with_growing_waits(
        self, client: ModelClient, ledger: UsageLedger, mock_chat, mock_wait
    ) -> None:
        """Test that two failures are retried after 4s then 7s."""
        mock_chat.ainvoke.side_effect = [
            RuntimeError("rate limited"),
            RuntimeError("rate limited"),
            chat_response("finally", 10, 5),
        ]

        answer = await client.invoke(GPT4, "system", "user")

        assert answer == "finally"
        assert mock_wait.await_args_list == [call(4.0), call(7.0)]
        entry = next(e for e in ledger.snapshot() if e.model == "gpt-4")
        assert entry.input_tokens == 10
        assert entry.output_tokens == 5

    @pytest.mark.asyncio
    async def test_raises_model_error_after_all_attempts(
        self, client: ModelClient, ledger: UsageLedger, mock_chat, mock_wait
    ) -> None:
        """Test that exhausting retries raises and records nothing."""
        mock_chat.ainvoke.side_effect = RuntimeError("service unavailable")

        with pytest.raises(ModelError) as exc_info:
            await client.invoke(GPT4, "system", "user")

        assert mock_chat.ainvoke.await_count == 3
        assert mock_wait.await_count == 2
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert ledger.total_cost == 0

    @pytest.mark.asyncio
    async def test_empty_answer_counts_as_failure(
        self, client: ModelClient, mock_chat, mock_wait
    ) -> None:
        """Test that a blank completion is retried."""
        mock_chat.ainvoke.side_effect = [chat_response("   "), chat_response("ok")]

        assert await client.invoke(GPT4, "system", "user") == "ok"
        assert mock_wait.await_args_list == [call(4.0)]

    @pytest.mark.asyncio
    async def test_estimates_usage_when_provider_omits_it(
        self, client: ModelClient, ledger: UsageLedger, mock_chat, mock_wait
    ) -> None:
        """Test that tokenizer estimates are recorded without usage metadata."""
        response = MagicMock()
        response.content = "three word answer"
        response.usage_metadata = None
        mock_chat.ainvoke.return_value = response

        await client.invoke(GPT4, "one two ", "three four")

        entry = next(e for e in ledger.snapshot() if e.model == "gpt-4")
        assert entry.input_tokens == 4
        assert entry.output_tokens == 3

    @pytest.mark.asyncio
    async def test_large_prompt_selects_larger_variant(
        self, client: ModelClient, ledger: UsageLedger, mock_chat, mock_wait
    ) -> None:
        """Test that the variant is chosen from the prompt size."""
        mock_chat.ainvoke.return_value = chat_response("ok")

        await client.invoke(GPT4, "word " * 9000, "")

        active = [e.model for e in ledger.snapshot() if e.is_active]
        assert active == ["gpt-4-32k"]


class TestEmbed:
    """Tests for embeddings."""

    @pytest.mark.asyncio
    async def test_embed_records_total_tokens(
        self, client: ModelClient, ledger: UsageLedger, mock_wait
    ) -> None:
        """Test that embeddings are billed on input tokens only."""
        with patch("inbox_agent.llm.client.OpenAIEmbeddings") as mock_cls:
            mock_cls.return_value.aembed_query = AsyncMock(return_value=[0.1, 0.2])

            vector = await client.embed("four words of text")

        assert vector == [0.1, 0.2]
        entry = next(e for e in ledger.snapshot() if e.model == "text-embedding-ada-002")
        assert entry.total_tokens == 4

    @pytest.mark.asyncio
    async def test_embed_failure_raises_model_error(
        self, client: ModelClient, mock_wait
    ) -> None:
        """Test that embedding failures are retried then raised."""
        with patch("inbox_agent.llm.client.OpenAIEmbeddings") as mock_cls:
            mock_cls.return_value.aembed_query = AsyncMock(side_effect=RuntimeError("down"))

            with pytest.raises(ModelError):
                await client.embed("text")

        assert mock_wait.await_count == 2


class TestUsageRecording:
    """Tests for ledger updates."""

    @pytest.mark.asyncio
    async def test_untracked_model_does_not_fail_the_call(
        self, word_counter, mock_chat, mock_wait
    ) -> None:
        """Test that a ledger without the variant only logs the problem."""
        ledger = UsageLedger(variants=())
        client = ModelClient(ledger, token_counter=word_counter)
        mock_chat.ainvoke.return_value = chat_response("ok")

        assert await client.invoke(GPT4, "system", "user") == "ok"
