"""
External detail-lookup agent.

A ReAct agent with web search and link parsing tools, used to fill in
business links the email did not contain. Its model usage is not
counted in the usage ledger.
"""

import logging
import re

from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI
from langgraph.prebuilt import create_react_agent

from inbox_agent.agent.schemas import BusinessDetails
from inbox_agent.config import settings
from inbox_agent.errors import EnrichmentError
from inbox_agent.lookup.base import BaseTool
from inbox_agent.lookup.tools import GoogleSearchTool, LinkParserTool

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"https?://[^\s\"'<>\]]+")

# Social domain -> BusinessDetails field
SOCIAL_FIELDS = {
    "facebook.com": "facebook",
    "twitter.com": "twitter",
    "instagram.com": "instagram",
    "linkedin.com": "linkedin",
}


def extract_urls(text: str) -> list[str]:
    """
    Find URLs in agent output.

    Trailing punctuation is trimmed and doubled slashes after the scheme
    are collapsed so domains match reliably.
    """
    urls = []
    for url in URL_PATTERN.findall(text):
        url = url.rstrip(".,;:)")
        url = re.sub(r"([^:])//+", r"\1/", url)
        urls.append(url)
    return urls


def assign_urls(details: BusinessDetails, urls: list[str]) -> BusinessDetails:
    """
    Fill link fields of a business record from a list of URLs.

    Social links go to their platform field. The first URL also becomes
    the website when the record has none.
    """
    updates: dict[str, str] = {}
    website = details.website

    for url in urls:
        for domain, field_name in SOCIAL_FIELDS.items():
            if domain in url:
                updates[field_name] = url
        if not website:
            website = url
            updates["website"] = url

    return details.model_copy(update=updates)


class DetailLookupAgent:
    """Finds missing business links on the web."""

    def __init__(self, tools: list[BaseTool] | None = None, temperature: float | None = None) -> None:
        """
        Initialize the lookup agent.

        Args:
            tools: Tools offered to the agent. Defaults to search and link parser.
            temperature: Sampling temperature. Defaults to settings.
        """
        self.tools = tools if tools is not None else [GoogleSearchTool(), LinkParserTool()]
        self.temperature = temperature if temperature is not None else settings.agent_temperature
        self._graph = None

    @property
    def graph(self):
        """Compiled ReAct graph, built on first use."""
        if self._graph is None:
            model = ChatOpenAI(
                model=settings.agent_model,
                api_key=settings.openai_api_key,
                temperature=self.temperature,
            )
            self._graph = create_react_agent(
                model,
                [tool.as_langchain_tool() for tool in self.tools],
            )
        return self._graph

    async def run(self, task: str) -> str:
        """
        Run the agent on a task.

        Returns:
            The agent's final answer text.

        Raises:
            EnrichmentError: If the agent fails.
        """
        try:
            result = await self.graph.ainvoke({"messages": [HumanMessage(content=task)]})
        except Exception as e:
            logger.error(f"Agent failed with error: {e}")
            raise EnrichmentError(f"Lookup agent failed: {e}") from e

        output = result["messages"][-1].content
        if not isinstance(output, str):
            output = str(output)
        logger.info(f"Agent returned following data: {output}")
        return output

    async def find_missing_business_details(self, details: BusinessDetails) -> BusinessDetails:
        """
        Look up the website and social links of a business.

        Args:
            details: Business record extracted from the email.

        Returns:
            A copy of the record with any found links filled in.

        Raises:
            EnrichmentError: If the agent fails.
        """
        task = (
            f"Find missing details about this company '{details.businessName}, {details.town}'. "
            f'Website: "{details.website}", Facebook: "{details.facebook}", '
            f'Twitter: "{details.twitter}", Instagram: "{details.instagram}".'
        )
        output = await self.run(task)
        return assign_urls(details, extract_urls(output))

    async def find_missing_link(self, query: str) -> str:
        """
        Find a website or social link for a business.

        Args:
            query: Business name and location.

        Returns:
            The first URL the agent found, or "".

        Raises:
            EnrichmentError: If the agent fails.
        """
        task = (
            f"Find website or social media link for this business: '{query}'\n"
            "If you can't find link, return 'No data'."
        )
        urls = extract_urls(await self.run(task))
        return urls[0] if urls else ""
