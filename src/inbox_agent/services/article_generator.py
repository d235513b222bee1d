"""
Article generation using Jinja2 templates.

Renders the "Why Small Businesses Matter" interview article from the
merged record of an Answers email. Every field of the record may be
missing, so every fragment degrades to an empty string instead of
failing.
"""

import json
import logging
import re

from jinja2 import BaseLoader, Environment

from inbox_agent.campaign_config import CampaignConfig, get_campaign_config

logger = logging.getLogger(__name__)

UNKNOWN_COUNT = "__UNKNOWN__"

COUNT_WORDS = {3: "Three", 4: "Four"}

SOCIAL_NETWORKS = [
    ("Facebook", "facebook"),
    ("Twitter", "twitter"),
    ("Instagram", "instagram"),
    ("LinkedIn", "linkedin"),
]

TWITTER_PREFIXES = ("https://www.twitter.com/", "https://twitter.com/")

TITLE_TEMPLATE = "Why Small Businesses Matter in {{ town }}: {{ business_name }}"

ARTICLE_TEMPLATE = """<div id="article-content">
<h2>Why Small Businesses Matter</h2>
<p><em>Shop small, do big things for your community</em></p>
<p>Why Small Businesses Matter puts a spotlight on the local merchants who donate their time, talent, goods, and services for the betterment of our community. The shop local movement spreads virally as local businesses who are “tagged” have the opportunity to share their story!</p>
<p><strong>You're IT&nbsp;{{ business_link }}!</strong></p>
<p>{{ count_word }} questions with&nbsp;{{ owner }} {{ sender_title }} of&nbsp;{{ business_link }}.</p>

{% for pair in answers %}<p><strong>{{ pair.q }}</strong></p>
<p>{{ pair.a }}</p>
{% endfor %}
{{ nominations }}
<p>{{ location }}{{ visit }} {{ socials }} {{ phone }}</p>
<p><strong>{{ publisher }} thanks <a href="{{ sponsor_url }}">{{ sponsor_name }}&nbsp;</a>for making our Why Small Businesses Matter series possible!</strong></p> </div>"""

META_TEMPLATE = (
    "#whysmallbusinessesmatter in {{ town_hashtag }} made possible by {{ sponsor_hashtag }} "
    "{{ count }} questions with {{ business_hashtag }} {{ keywords }} {{ female_founder }}"
    "#shoplocal #smallbusiness"
)

_env = Environment(loader=BaseLoader(), autoescape=False)
_title = _env.from_string(TITLE_TEMPLATE)
_article = _env.from_string(ARTICLE_TEMPLATE)
_meta = _env.from_string(META_TEMPLATE)


def _text(value) -> str:
    """Field value as text. Anything that is not a string or number is blank."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _mapping(value) -> dict:
    return value if isinstance(value, dict) else {}


def _answered(record: dict) -> list[dict[str, str]]:
    pairs = record.get("QA")
    if not isinstance(pairs, list):
        return []
    answered = []
    for pair in pairs:
        pair = _mapping(pair)
        answer = _text(pair.get("a")).strip()
        if answer:
            answered.append({"q": _text(pair.get("q")), "a": answer})
    return answered


def _count_word(count: int) -> str:
    return COUNT_WORDS.get(count, UNKNOWN_COUNT)


class ArticleGenerator:
    """Builds the interview article for one business."""

    def __init__(self, config: CampaignConfig | None = None) -> None:
        self.config = config or get_campaign_config()

    def generate(self, record: dict) -> str:
        """
        Render the article.

        Args:
            record: Merged record with QA, bussines_details, nominations
                and QA_keywords keys, any of which may be missing.

        Returns:
            Title, article HTML and meta description separated by blank lines.
        """
        logger.info("Generating article.")
        record = _mapping(record)
        details = {k: _text(v) for k, v in _mapping(record.get("bussines_details")).items()}
        answers = _answered(record)
        link = self._business_link(details)

        title = _title.render(
            town=details.get("town", "").replace(", CT", ""),
            business_name=details.get("businessName", ""),
        )

        article = _article.render(
            business_link=link,
            count_word=_count_word(len(answers)),
            owner=self._owner(details),
            sender_title=details.get("senderTitle") or "Founder",
            answers=answers,
            nominations=self._nominations(record.get("nominations"), details),
            location=self._location(details, link),
            visit=self._visit(details, link),
            socials=self._socials(details),
            phone=self._phone(details, link),
            publisher=self.config.publisher_name,
            sponsor_url=self.config.sponsor_url,
            sponsor_name=self.config.sponsor_name,
        )

        meta = _meta.render(
            town_hashtag=self._town_hashtag(details),
            sponsor_hashtag=self.config.sponsor_hashtag,
            count=len(answers),
            business_hashtag=self._business_hashtag(details),
            keywords=self._keywords(record.get("QA_keywords")),
            female_founder=" #femalefounder " if details.get("senderGender") == "Female" else "",
        )

        complete = "\n\n".join([title, article, meta])
        return complete.replace("undefined", "")

    def _business_link(self, details: dict) -> str:
        name = details.get("businessName", "")
        if not name:
            return ""
        for field_name in ("website", "facebook", "instagram", "twitter"):
            url = details.get(field_name)
            if url:
                return f'<a href="{url}">{name}</a>'
        return name

    def _owner(self, details: dict) -> str:
        name = details.get("senderName")
        return f"{name}," if name else ""

    def _nominator(self, details: dict) -> str:
        return details.get("senderName") or f"{details.get('businessName', '')} team"

    def _nominations(self, nominations, details: dict) -> str:
        entries = []
        for nomination in _mapping(nominations).values():
            nomination = _mapping(nomination)
            name = _text(nomination.get("nominated_business_name"))
            if not name:
                continue
            link = _text(nomination.get("nominated_business_link"))
            location = _text(nomination.get("nominated_business_location"))
            if "http" in link:
                entries.append(f'<a href="{link}" target="_blank">{name}</a> in {location}')
            else:
                entries.append(f"{name} in {location}")

        if not entries:
            return ""
        if len(entries) == 1:
            nominated = entries[0]
        else:
            nominated = f"{', '.join(entries[:-1])}, and {entries[-1]}"
        return f"<p>{self._nominator(details)} would like to nominate {nominated} to be featured next!</p>"

    def _location(self, details: dict, link: str) -> str:
        place = details.get("address") or details.get("town")
        return f"{link} is located at {place}. " if place else ""

    def _visit(self, details: dict, link: str) -> str:
        website = details.get("website")
        if not website:
            return ""
        return f'Visit&nbsp;{link}&nbsp;online&nbsp;<a href="{website}">here</a>.'

    def _socials(self, details: dict) -> str:
        links = [
            f'<a href="{details[key].strip()}" target="_blank">{label}</a>'
            for label, key in SOCIAL_NETWORKS
            if details.get(key, "").strip()
        ]
        if not links:
            return ""
        if len(links) == 1:
            return f"Make sure to check out their&nbsp;{links[0]}&nbsp;page as well!"
        return (
            f"Make sure to check out their&nbsp;{', '.join(links[:-1])}, "
            f"and {links[-1]}&nbsp;pages as well!"
        )

    def _phone(self, details: dict, link: str) -> str:
        phone = details.get("phoneNumber")
        return f"Give {link}&nbsp;a call at&nbsp;{phone}." if phone else ""

    def _town_hashtag(self, details: dict) -> str:
        town = re.sub(r"[\W_]+", "", details.get("town", ""))
        return f"#{town.lower()}" if town else ""

    def _business_hashtag(self, details: dict) -> str:
        twitter = details.get("twitter")
        if twitter:
            handle = twitter
            for prefix in TWITTER_PREFIXES:
                handle = handle.replace(prefix, "")
            handle = re.sub(r"[.,'\"/]", "", handle)
            return f"@{handle}"

        name = re.sub(r"[^\w\s]", "", details.get("businessName", ""))
        name = re.sub(r"\s+", "", name)
        return f"#{name.lower()}" if name else ""

    def _keywords(self, keywords) -> str:
        keywords = _text(keywords)
        return json.dumps(keywords, ensure_ascii=False) if keywords else ""


def generate_article(record: dict, config: CampaignConfig | None = None) -> str:
    """Render the interview article for a merged Answers record."""
    return ArticleGenerator(config).generate(record)
