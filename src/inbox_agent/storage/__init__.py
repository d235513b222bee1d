"""Storage module for processed email results."""

from inbox_agent.storage.result_store import ResultBundle, ResultStore, sanitize_id

__all__ = [
    "ResultBundle",
    "ResultStore",
    "sanitize_id",
]
