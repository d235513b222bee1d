"""
Nomination enrichment.

Completes each nominee record before it is stored: a missing location
is inherited from the nominating business, a missing link is looked up
on the web, and every nominee gets a ready-to-send invitation letter.
"""

import logging

from inbox_agent.agent.schemas import BusinessDetails, InvitationLetter, Nomination, Nominations
from inbox_agent.campaign_config import CampaignConfig, get_campaign_config
from inbox_agent.errors import EnrichmentError
from inbox_agent.lookup.agent import DetailLookupAgent
from inbox_agent.results import settle_all

logger = logging.getLogger(__name__)


def _pronoun(gender: str) -> str:
    if gender == "Female":
        return "her"
    if gender == "Male":
        return "his"
    return "their"


def _intro(details: BusinessDetails) -> str:
    if details.senderName and details.businessName:
        return f"{details.senderName} from {details.businessName}"
    if details.senderName:
        return details.senderName
    return f"{details.businessName} team"


def _thankful_note(details: BusinessDetails) -> str:
    if details.senderName:
        return (
            f"{details.senderName} was very thankful for the opportunity to showcase "
            f"{_pronoun(details.senderGender)} business, and was very happy to nominate "
            "you to participate next!"
        )
    return (
        f"{details.businessName} team was very thankful for the opportunity to showcase "
        "their business, and were very happy to nominate you to participate next!"
    )


def build_invitation_letter(
    details: BusinessDetails,
    nomination: Nomination,
    config: CampaignConfig | None = None,
) -> InvitationLetter:
    """
    Fill the invitation-to-interview template for one nominee.

    Args:
        details: The nominating business.
        nomination: The nominee.
        config: Campaign configuration. Defaults to config.yaml.

    Returns:
        Subject and message of the letter.
    """
    config = config or get_campaign_config()
    owner = config.owner.first_name
    town = nomination.nominated_business_location or details.town or config.default_town
    greeting = f"Hello {nomination.nominated_business_person or '!'}"
    questions = "\n".join(f"- {question}" for question in config.questions)

    subject = (
        f"Invitation to interview - {config.site_name.lower()} and {details.businessName}"
    )
    message = (
        f"\n{greeting}\n"
        f"My name is {owner} from the {config.site_name} website - a local news provider in {town}.\n"
        f"{_intro(details)} asked us to reach out to you to check if you're willing to "
        f"participate in an online interview that we're running in {town}. "
        f"{_thankful_note(details)}\n"
        "The interview process is completely online, and you can reply with your answers "
        "to the following questions:\n\n"
        f"{questions}\n\n"
        "Please let me know if you have any questions or if you need any help! Locally yours,\n"
        f"{owner}\n"
    )
    return InvitationLetter(subject=subject, message=message)


class NominationEnricher:
    """Completes nominee records with locations, links and invitation letters."""

    def __init__(self, lookup: DetailLookupAgent, config: CampaignConfig | None = None) -> None:
        self.lookup = lookup
        self.config = config or get_campaign_config()

    async def enrich(self, details: BusinessDetails, nominations: Nominations) -> Nominations:
        """
        Enrich every named nominee concurrently.

        Nominees without a name, or without any known location, are left
        as they are. One nominee failing never affects the others.

        Args:
            details: The nominating business.
            nominations: Nominees extracted from the email.

        Returns:
            Nominations with the enriched records in their original slots.
        """
        logger.info("Updating nominations...")
        pending: dict[str, Nomination] = {}

        for key, nomination in nominations.items():
            if not nomination.nominated_business_name:
                continue
            if not nomination.nominated_business_location and not details.town:
                logger.info(
                    f"Skipping nomination {nomination.nominated_business_name!r}: no known town"
                )
                continue
            pending[key] = nomination

        results = await settle_all(
            *(self._enrich_one(details, nomination) for nomination in pending.values())
        )

        enriched = dict(nominations.root)
        for key, result in zip(pending, results):
            if result.success:
                enriched[key] = result.value
            else:
                logger.warning(f"Failed to enrich nomination {key}: {result.error}")

        return Nominations(enriched)

    async def _enrich_one(self, details: BusinessDetails, nomination: Nomination) -> Nomination:
        location = nomination.nominated_business_location or details.town
        link = nomination.nominated_business_link

        if not link:
            logger.info("Asking agent to provide missing nomination URL...")
            try:
                link = await self.lookup.find_missing_link(
                    f"{nomination.nominated_business_name} {location}"
                )
            except EnrichmentError as e:
                logger.warning(f"Failed to get missing nomination URL: {e}")
                link = ""

        updated = nomination.model_copy(
            update={
                "nominated_business_location": location,
                "nominated_business_link": link,
            }
        )
        letter = build_invitation_letter(details, updated, self.config)
        return updated.model_copy(update={"email_template": letter})
