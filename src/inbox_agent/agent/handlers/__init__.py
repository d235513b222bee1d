"""
Category handlers.

- AnswersHandler: article and record for answered questions
- NominationsHandler: nominee invitations and a thank-you note
- ReplyHandler: generated replies for the five reply categories
- SpamHandler: archive only
"""

from inbox_agent.agent.handlers.answers import AnswersHandler
from inbox_agent.agent.handlers.base import CategoryHandler, HandlerContext
from inbox_agent.agent.handlers.nominations import NominationsHandler
from inbox_agent.agent.handlers.reply import REPLY_CATEGORIES, ReplyHandler
from inbox_agent.agent.handlers.spam import SpamHandler

__all__ = [
    "AnswersHandler",
    "CategoryHandler",
    "HandlerContext",
    "NominationsHandler",
    "REPLY_CATEGORIES",
    "ReplyHandler",
    "SpamHandler",
]
