"""
Language model access.

This module contains:
- ModelVariant and the GPT4 / GPT35 / EMBEDDINGS tiers
- select_model: size-based variant selection
- UsageLedger: per-model token and cost counters
- PromptPair: the (system, user) prompt of one chat call
- ModelClient: chat and embedding calls with retry and usage accounting
"""

from inbox_agent.llm.client import ModelClient, PromptPair
from inbox_agent.llm.models import (
    ALL_VARIANTS,
    EMBEDDINGS,
    GPT4,
    GPT35,
    ModelVariant,
    select_model,
)
from inbox_agent.llm.usage import UsageEntry, UsageLedger

__all__ = [
    "ModelClient",
    "PromptPair",
    "ModelVariant",
    "GPT4",
    "GPT35",
    "EMBEDDINGS",
    "ALL_VARIANTS",
    "select_model",
    "UsageEntry",
    "UsageLedger",
]
