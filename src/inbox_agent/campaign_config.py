"""
Campaign configuration from config.yaml.

This module loads the identity of the mailbox owner and the details of
the "Why Small Businesses Matter" campaign. These are separate from
environment-based settings in config.py.

config.yaml is for:
- Mailbox owner name and email domains
- Default town and sponsor shown in generated content
- The fixed interview questions
- Strings stripped from incoming emails

.env is for:
- API keys and mailbox credentials (secrets)
- Retry policy and other runtime knobs
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Default config path
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.yaml"

DEFAULT_QUESTIONS = [
    "Why did you start your business?",
    "What is your best-selling product/service?",
    "How many local businesses do you use to support your business "
    "(products and services) and can you name them?",
    "Have you 'reimagined' your small business?",
]

DEFAULT_UNWANTED_SUBSTRINGS = [
    "hamlethub",
    "maps.google.com",
    "zohoinsights",
    "fairfieldcapital",
    "image",
]


@dataclass
class OwnerInfo:
    """Person who signs every generated email."""

    name: str = "Dan Boldis"
    first_name: str = "Dan"
    domains: list[str] = field(default_factory=lambda: ["hamletmail.com", "hamlethub.com"])


@dataclass
class CampaignConfig:
    """Complete campaign configuration from config.yaml."""

    owner: OwnerInfo = field(default_factory=OwnerInfo)
    site_name: str = "Hamlethub.com"
    publisher_name: str = "HamletHub"
    default_town: str = "Ridgefield"
    sponsor_name: str = "Fairfield County Bank"
    sponsor_url: str = "https://www.fairfieldcountybank.com/"
    sponsor_hashtag: str = "#FairfieldCountyBank"
    questions: list[str] = field(default_factory=lambda: list(DEFAULT_QUESTIONS))
    unwanted_substrings: list[str] = field(
        default_factory=lambda: list(DEFAULT_UNWANTED_SUBSTRINGS)
    )
    boilerplate_strings: list[str] = field(default_factory=list)


def load_campaign_config(config_path: Path | str | None = None) -> CampaignConfig:
    """
    Load campaign configuration from config.yaml.

    Args:
        config_path: Path to config.yaml. Uses default if None.

    Returns:
        CampaignConfig with loaded or default values.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        logger.warning(f"Config file not found at {config_path}, using defaults")
        return CampaignConfig()

    try:
        raw_config = yaml.safe_load(config_path.read_text())

        if raw_config is None:
            return CampaignConfig()

        owner_section = raw_config.get("owner", {})
        campaign_section = raw_config.get("campaign", {})
        cleaning_section = raw_config.get("cleaning", {})
        defaults = CampaignConfig()

        owner = OwnerInfo(
            name=owner_section.get("name", defaults.owner.name),
            first_name=owner_section.get("first_name", defaults.owner.first_name),
            domains=owner_section.get("domains", defaults.owner.domains),
        )

        questions = campaign_section.get("questions") or defaults.questions
        if len(questions) != len(DEFAULT_QUESTIONS):
            logger.warning(
                f"Expected {len(DEFAULT_QUESTIONS)} campaign questions, "
                f"got {len(questions)}; using defaults"
            )
            questions = defaults.questions

        return CampaignConfig(
            owner=owner,
            site_name=campaign_section.get("site_name", defaults.site_name),
            publisher_name=campaign_section.get("publisher_name", defaults.publisher_name),
            default_town=campaign_section.get("default_town", defaults.default_town),
            sponsor_name=campaign_section.get("sponsor_name", defaults.sponsor_name),
            sponsor_url=campaign_section.get("sponsor_url", defaults.sponsor_url),
            sponsor_hashtag=campaign_section.get(
                "sponsor_hashtag", defaults.sponsor_hashtag
            ),
            questions=questions,
            unwanted_substrings=cleaning_section.get(
                "unwanted_substrings", defaults.unwanted_substrings
            ),
            boilerplate_strings=cleaning_section.get("boilerplate_strings", []),
        )

    except Exception as e:
        logger.error(f"Failed to load config.yaml: {e}")
        return CampaignConfig()


@lru_cache(maxsize=1)
def get_campaign_config() -> CampaignConfig:
    """
    Get cached campaign configuration.

    Returns:
        CampaignConfig loaded from config.yaml (cached).
    """
    return load_campaign_config()
