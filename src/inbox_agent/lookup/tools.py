"""
Web lookup tools.

- google_search: top results from Google Custom Search
- link_parser: social media links found on a web page
"""

import logging
from typing import Any

import httpx
from bs4 import BeautifulSoup
from googleapiclient.discovery import build
from pydantic import BaseModel, Field

from inbox_agent.config import settings
from inbox_agent.lookup.base import BaseTool
from inbox_agent.results import StepResult

logger = logging.getLogger(__name__)

SEARCH_RESULT_COUNT = 5

SOCIAL_DOMAINS = ("facebook.com", "instagram.com", "twitter.com")


class SearchParams(BaseModel):
    query: str = Field(description="Search query")


class LinkParserParams(BaseModel):
    url: str = Field(description="Page URL in format: https://exampleurl.com/")


class GoogleSearchTool(BaseTool):
    """Search the web with Google Custom Search."""

    def __init__(self, api_key: str | None = None, cse_id: str | None = None) -> None:
        self.api_key = api_key or settings.google_api_key
        self.cse_id = cse_id or settings.google_cse_id
        self._service = None

    @property
    def name(self) -> str:
        return "google_search"

    @property
    def description(self) -> str:
        return "Call this to get top 5 search results for your query. Input should be search query."

    @property
    def args_schema(self) -> type[BaseModel]:
        return SearchParams

    @property
    def service(self):
        """Custom Search API service, created on first use."""
        if self._service is None:
            self._service = build(
                "customsearch", "v1", developerKey=self.api_key, cache_discovery=False
            )
        return self._service

    def execute(self, **kwargs: Any) -> StepResult:
        query = kwargs["query"]
        logger.info(f"Agent searched google for: {query}")

        if not self.api_key or not self.cse_id:
            return StepResult.degraded("Google search credentials not configured", fallback=[])

        response = (
            self.service.cse()
            .list(q=query, cx=self.cse_id, num=SEARCH_RESULT_COUNT)
            .execute()
        )

        items = [
            {
                "title": item.get("title", ""),
                "link": item.get("link", ""),
                "snippet": item.get("snippet", ""),
            }
            for item in response.get("items", [])
        ]
        return StepResult.ok(items, query=query)


class LinkParserTool(BaseTool):
    """Collect social media links from a web page."""

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "link_parser"

    @property
    def description(self) -> str:
        return (
            "Call this to get an array of social media links from any URL. "
            "Input should be url in format: https://exampleurl.com/"
        )

    @property
    def args_schema(self) -> type[BaseModel]:
        return LinkParserParams

    def execute(self, **kwargs: Any) -> StepResult:
        url = kwargs["url"]
        logger.info(f"Agent asked to parse links from: {url}")

        with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
            response = client.get(url)
            response.raise_for_status()

        return StepResult.ok(extract_social_links(response.text), url=url)


def extract_social_links(html: str) -> list[str]:
    """Absolute links on a page that point at a social media domain."""
    soup = BeautifulSoup(html, "html.parser")
    links = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"]
        if href.startswith("http") and any(domain in href for domain in SOCIAL_DOMAINS):
            links.append(href)
    return links
