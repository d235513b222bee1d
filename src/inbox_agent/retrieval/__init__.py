"""Vector retrieval of email context."""

from inbox_agent.retrieval.retriever import ContextRetriever, LedgerEmbeddings

__all__ = ["ContextRetriever", "LedgerEmbeddings"]
