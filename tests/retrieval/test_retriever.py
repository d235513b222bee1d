"""Tests for context retrieval."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from inbox_agent.mail.base import Email
from inbox_agent.retrieval.retriever import ContextRetriever, LedgerEmbeddings


@pytest.fixture
def embedding_client():
    """Client whose embeddings depend on a keyword in the text."""
    client = MagicMock()

    async def embed(text: str) -> list[float]:
        return [1.0, 0.0] if "bakery" in text else [0.0, 1.0]

    client.embed = AsyncMock(side_effect=embed)
    return client


class TestLedgerEmbeddings:
    """Tests for the embeddings adapter."""

    @pytest.mark.asyncio
    async def test_async_calls_go_through_client(self, embedding_client) -> None:
        """Test that every text is embedded via the model client."""
        embeddings = LedgerEmbeddings(embedding_client)

        vectors = await embeddings.aembed_documents(["bakery", "other"])

        assert vectors == [[1.0, 0.0], [0.0, 1.0]]
        assert embedding_client.embed.await_count == 2

    def test_sync_calls_are_not_supported(self, embedding_client) -> None:
        """Test that blocking embedding is refused."""
        embeddings = LedgerEmbeddings(embedding_client)

        with pytest.raises(NotImplementedError):
            embeddings.embed_query("text")


class TestContextRetriever:
    """Tests for indexing and retrieving email content."""

    @pytest.mark.asyncio
    async def test_retrieve_returns_json_list(self, embedding_client) -> None:
        """Test that matches come back as a JSON list of texts."""
        retriever = ContextRetriever(embedding_client)
        await retriever.index_email(Email(id="<1@x>", uid="1", body="my bakery story"))

        result = await retriever.retrieve("Tell me about the bakery", 2)

        assert json.loads(result) == ["my bakery story"]

    @pytest.mark.asyncio
    async def test_index_replaces_previous_email(self, embedding_client) -> None:
        """Test that only the current email can be retrieved."""
        retriever = ContextRetriever(embedding_client)
        await retriever.index_email(Email(id="<1@x>", uid="1", body="first bakery email"))
        await retriever.index_email(Email(id="<2@x>", uid="2", body="second email"))

        result = await retriever.retrieve("bakery", 3)

        assert json.loads(result) == ["second email"]
