"""
Web lookup of missing business details.

This module contains:
- DetailLookupAgent: ReAct agent that fills in business links
- GoogleSearchTool / LinkParserTool: tools offered to the agent
"""

from inbox_agent.lookup.agent import DetailLookupAgent, assign_urls, extract_urls
from inbox_agent.lookup.base import BaseTool
from inbox_agent.lookup.tools import GoogleSearchTool, LinkParserTool, extract_social_links

__all__ = [
    "BaseTool",
    "DetailLookupAgent",
    "GoogleSearchTool",
    "LinkParserTool",
    "assign_urls",
    "extract_social_links",
    "extract_urls",
]
