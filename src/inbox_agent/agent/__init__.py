"""
Agent module for email classification and category handling.

This module contains:
- Category / CategoryDecision: the category set and classifier output
- EmailClassifier: assigns each email a category

The dispatcher and handlers live in inbox_agent.agent.dispatcher and
inbox_agent.agent.handlers.
"""

from inbox_agent.agent.classifier import EmailClassifier
from inbox_agent.agent.schemas import Category, CategoryDecision

__all__ = [
    "Category",
    "CategoryDecision",
    "EmailClassifier",
]
