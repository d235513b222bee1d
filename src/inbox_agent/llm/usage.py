"""
Token usage and cost tracking.

The ledger is the only shared mutable state in the pipeline. It holds one
entry per model variant, is updated after every successful model call,
captured into the usage report of an email's result bundle, and reset
before the next email starts.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterable, Iterator

from inbox_agent.llm.models import ALL_VARIANTS, ModelVariant

logger = logging.getLogger(__name__)


@dataclass
class UsageEntry:
    """Counters for a single model variant."""

    model: str
    single_rate: bool = False
    input_tokens: int = 0
    input_tokens_cost: float = 0.0
    output_tokens: int = 0
    output_tokens_cost: float = 0.0
    total_tokens: int = 0
    cost: float = 0.0

    @property
    def is_active(self) -> bool:
        """True if the entry recorded any usage."""
        return bool(self.input_tokens or self.output_tokens or self.total_tokens or self.cost)

    def format_line(self) -> str:
        """Format the entry as a single report line."""
        if self.single_rate:
            return (
                f"Model: {self.model}, Total Tokens: {self.total_tokens}, "
                f"Cost: ${self.cost:.6f}"
            )
        return (
            f"Model: {self.model}, Input Tokens: {self.input_tokens}, "
            f"Input Tokens Cost: ${self.input_tokens_cost:.6f}, "
            f"Output Tokens: {self.output_tokens}, "
            f"Output Tokens Cost: ${self.output_tokens_cost:.6f}, "
            f"Total Cost: ${self.cost:.6f}"
        )


class UsageLedger:
    """
    Per-model token and cost counters.

    Mutations are guarded by a lock so the ledger stays consistent if
    emails are ever processed in parallel.
    """

    def __init__(self, variants: Iterable[ModelVariant] = ALL_VARIANTS) -> None:
        self._variants: dict[str, ModelVariant] = {v.name: v for v in variants}
        self._entries: dict[str, UsageEntry] = {
            name: UsageEntry(model=name, single_rate=variant.is_single_rate)
            for name, variant in self._variants.items()
        }
        self._lock = threading.Lock()

    def record(self, model: str, input_tokens: int, output_tokens: int = 0) -> UsageEntry:
        """
        Add the usage of one model call.

        Args:
            model: Variant name the call was made with.
            input_tokens: Prompt tokens (or total tokens for embeddings).
            output_tokens: Completion tokens.

        Returns:
            A copy of the updated entry.

        Raises:
            KeyError: If the model is not tracked by this ledger.
        """
        if model not in self._entries:
            raise KeyError(f"Model not tracked by usage ledger: {model}")

        variant = self._variants[model]

        with self._lock:
            entry = self._entries[model]
            if variant.is_single_rate:
                entry.total_tokens += input_tokens
                entry.cost += input_tokens * variant.cost_per_1k / 1000
            else:
                entry.input_tokens += input_tokens
                entry.output_tokens += output_tokens
                entry.input_tokens_cost += input_tokens * variant.input_cost_per_1k / 1000
                entry.output_tokens_cost += output_tokens * variant.output_cost_per_1k / 1000
                entry.cost = entry.input_tokens_cost + entry.output_tokens_cost
            return replace(entry)

    def snapshot(self) -> list[UsageEntry]:
        """Return copies of all entries."""
        with self._lock:
            return [replace(entry) for entry in self._entries.values()]

    @property
    def total_cost(self) -> float:
        """Total cost across all models."""
        with self._lock:
            return sum(entry.cost for entry in self._entries.values())

    def report(self) -> str:
        """
        Build the usage report.

        Returns:
            One line per model with recorded activity, then a total line.
        """
        entries = self.snapshot()
        lines = [entry.format_line() for entry in entries if entry.is_active]
        total = sum(entry.cost for entry in entries)
        lines.append(f"Total Cost of all models: ${total:.6f}")
        return "\n".join(lines)

    def reset(self) -> None:
        """Zero every counter."""
        logger.debug("Resetting token usage")
        with self._lock:
            for name, entry in self._entries.items():
                self._entries[name] = UsageEntry(model=name, single_rate=entry.single_rate)

    @contextmanager
    def session(self) -> Iterator["UsageLedger"]:
        """
        Scope the ledger to one unit of work.

        The ledger is reset when the block exits, whether it succeeded or
        raised, so usage never bleeds into the next email.
        """
        try:
            yield self
        finally:
            self.reset()
