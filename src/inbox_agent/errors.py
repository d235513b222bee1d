"""
Exception taxonomy for the inbox pipeline.

The inbox loop decides what happens to an email from the type of error
that reaches it:
- FetchError: the batch degrades to empty
- ClassificationError / UnknownCategoryError: the email is skipped
- HandlerError: the email stays unarchived and is retried on the next run
- EnrichmentError: caught inside a handler, the sub-result degrades
- PersistenceError: raised by the result store, wrapped into HandlerError
"""


class InboxAgentError(Exception):
    """Base class for all pipeline errors."""


class FetchError(InboxAgentError):
    """Mail source could not be reached or read."""


class ModelError(InboxAgentError):
    """Language model call failed after exhausting retries."""


class ClassificationError(InboxAgentError):
    """Email could not be assigned a category."""


class UnknownCategoryError(InboxAgentError):
    """Classifier returned a label outside the fixed category set."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Invalid category: {label!r}")
        self.label = label


class HandlerError(InboxAgentError):
    """A category handler failed for one email."""

    def __init__(self, category: str, message: str) -> None:
        super().__init__(f"{category} handler failed: {message}")
        self.category = category


class EnrichmentError(InboxAgentError):
    """A best-effort sub-task (lookup, extraction) failed."""


class PersistenceError(InboxAgentError):
    """Result bundle could not be written."""
