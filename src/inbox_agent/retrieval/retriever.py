"""
Context retrieval for model prompts.

Each email is embedded once when processing starts. Handlers then query
with their own prompt text to pull the most relevant content into the
user message. The store only ever holds the email being processed.
"""

import json
import logging

from langchain_core.embeddings import Embeddings
from langchain_core.vectorstores import InMemoryVectorStore

from inbox_agent.llm.client import ModelClient
from inbox_agent.mail.base import Email

logger = logging.getLogger(__name__)


class LedgerEmbeddings(Embeddings):
    """
    Embeddings routed through the model client.

    Going through ModelClient.embed means every embedding call is
    retried and counted in the usage ledger.
    """

    def __init__(self, client: ModelClient) -> None:
        self.client = client

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise NotImplementedError("LedgerEmbeddings only supports async embedding")

    def embed_query(self, text: str) -> list[float]:
        raise NotImplementedError("LedgerEmbeddings only supports async embedding")

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]:
        return [await self.client.embed(text) for text in texts]

    async def aembed_query(self, text: str) -> list[float]:
        return await self.client.embed(text)


class ContextRetriever:
    """Vector search over the email currently being processed."""

    def __init__(self, client: ModelClient) -> None:
        self.embeddings = LedgerEmbeddings(client)
        self.store = InMemoryVectorStore(embedding=self.embeddings)

    async def index_email(self, email: Email) -> None:
        """
        Replace the store contents with a single email.

        Args:
            email: Email to index. Its serialized body is the document.
        """
        logger.info(f"Generating embeddings for email {email.id}...")

        self.store = InMemoryVectorStore(embedding=self.embeddings)
        await self.store.aadd_texts([email.body], metadatas=[{"id": email.id}])

        logger.info("Successfully generated embeddings")

    async def retrieve(self, prompt_text: str, top_k: int) -> str:
        """
        Find the content most relevant to a prompt.

        Args:
            prompt_text: Query text, usually the handler's system prompt.
            top_k: Maximum number of matches.

        Returns:
            JSON list of matched texts, best match first.
        """
        documents = await self.store.asimilarity_search(prompt_text, k=top_k)
        return json.dumps([doc.page_content for doc in documents], ensure_ascii=False)
