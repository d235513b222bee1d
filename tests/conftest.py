"""Shared test fixtures and configuration."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from inbox_agent.agent.handlers import HandlerContext
from inbox_agent.agent.schemas import CategoryDecision
from inbox_agent.campaign_config import CampaignConfig
from inbox_agent.llm.usage import UsageLedger
from inbox_agent.mail.base import Attachment, Email, EmailHeaders
from inbox_agent.storage.result_store import ResultStore


def word_count(text: str) -> int:
    """Deterministic stand-in for the tokenizer."""
    return len(text.split())


@pytest.fixture
def word_counter():
    """Token counter that counts whitespace-separated words."""
    return word_count


@pytest.fixture
def campaign_config() -> CampaignConfig:
    """Campaign configuration with default values."""
    return CampaignConfig()


@pytest.fixture
def sample_email() -> Email:
    """Answers email from a small business."""
    body = json.dumps(
        {
            "uid": "42",
            "Subject": "Re: Why Small Businesses Matter",
            "MessageID": "<abc123@acmebakery.com>",
            "Body": "Hi Dan, here are my answers. I started Acme Bakery in 2015...",
        }
    )
    return Email(
        id="<abc123@acmebakery.com>",
        uid="42",
        body=body,
        headers=EmailHeaders(
            from_="Jane Doe <jane@acmebakery.com>",
            to="dan@hamletmail.com",
            date="Mon, 1 May 2023 10:00:00 -0400",
            subject="Re: Why Small Businesses Matter",
        ),
        html="<p>Hi Dan</p>",
        attachments=(Attachment("logo.png", "image/png", 3, b"png"),),
    )


@pytest.fixture
def ledger() -> UsageLedger:
    """Fresh usage ledger."""
    return UsageLedger()


@pytest.fixture
def mock_client():
    """Model client with async invoke and embed."""
    client = MagicMock()
    client.invoke = AsyncMock(return_value="")
    client.embed = AsyncMock(return_value=[1.0, 0.0])
    return client


@pytest.fixture
def mock_retriever():
    """Retriever returning a fixed context."""
    retriever = MagicMock()
    retriever.index_email = AsyncMock()
    retriever.retrieve = AsyncMock(return_value='["Hi Dan, here are my answers."]')
    return retriever


@pytest.fixture
def mock_lookup():
    """Lookup agent that finds nothing new."""
    lookup = MagicMock()
    lookup.find_missing_link = AsyncMock(return_value="")
    lookup.find_missing_business_details = AsyncMock(side_effect=lambda details: details)
    return lookup


@pytest.fixture
def mock_mail():
    """Mail source with no messages."""
    mail = MagicMock()
    mail.fetch_all.return_value = []
    return mail


@pytest.fixture
def store(tmp_path) -> ResultStore:
    """Result store in a temporary data folder."""
    return ResultStore(tmp_path / "data")


@pytest.fixture
def handler_context(
    mock_client, mock_retriever, ledger, store, mock_mail, mock_lookup, campaign_config
) -> HandlerContext:
    """Handler context wired with mocks and a real store."""
    return HandlerContext(
        client=mock_client,
        retriever=mock_retriever,
        ledger=ledger,
        store=store,
        mail=mock_mail,
        lookup=mock_lookup,
        config=campaign_config,
    )


@pytest.fixture
def decision_factory():
    """Build classifier decisions."""

    def make(category: str, explanation: str = "Sender replied to the campaign.") -> CategoryDecision:
        return CategoryDecision(category=category, explanation=explanation)

    return make
