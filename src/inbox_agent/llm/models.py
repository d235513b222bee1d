"""
Model variants, tiers and cost rates.

A tier is a list of interchangeable variants that differ only in context
size and price. The client picks the smallest variant that fits the
prompt, so cheap variants are used whenever the prompt allows it.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelVariant:
    """A single model with its input capacity and cost per 1k tokens."""

    name: str
    max_tokens: int
    input_cost_per_1k: float = 0.0
    output_cost_per_1k: float = 0.0
    cost_per_1k: float | None = None  # single-rate models (embeddings)

    @property
    def is_single_rate(self) -> bool:
        """True for models billed on total tokens only."""
        return self.cost_per_1k is not None


GPT4: tuple[ModelVariant, ...] = (
    ModelVariant("gpt-4-32k", 32768, input_cost_per_1k=0.06, output_cost_per_1k=0.12),
    ModelVariant("gpt-4", 8192, input_cost_per_1k=0.03, output_cost_per_1k=0.06),
)

GPT35: tuple[ModelVariant, ...] = (
    ModelVariant("gpt-3.5-turbo-16k", 16384, input_cost_per_1k=0.003, output_cost_per_1k=0.004),
    ModelVariant("gpt-3.5-turbo", 4096, input_cost_per_1k=0.0015, output_cost_per_1k=0.002),
)

EMBEDDINGS: tuple[ModelVariant, ...] = (
    ModelVariant("text-embedding-ada-002", 8191, cost_per_1k=0.0001),
)

ALL_VARIANTS: tuple[ModelVariant, ...] = GPT35 + GPT4 + EMBEDDINGS


def select_model(tier: tuple[ModelVariant, ...] | list[ModelVariant], tokens: int) -> ModelVariant:
    """
    Select the smallest variant whose capacity fits the token estimate.

    Oversized prompts are never rejected: when no variant fits, the one
    with the largest capacity is returned.

    Args:
        tier: Candidate variants.
        tokens: Estimated prompt size.

    Returns:
        The selected variant.
    """
    if not tier:
        raise ValueError("Model tier has no variants")

    by_capacity = sorted(tier, key=lambda variant: variant.max_tokens)
    for variant in by_capacity:
        if tokens <= variant.max_tokens:
            return variant

    return by_capacity[-1]
