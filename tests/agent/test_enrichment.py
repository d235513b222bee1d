"""Tests for nomination enrichment and invitation letters."""

from unittest.mock import AsyncMock

import pytest

from inbox_agent.agent.enrichment import NominationEnricher, build_invitation_letter
from inbox_agent.agent.schemas import BusinessDetails, InvitationLetter, Nomination, Nominations
from inbox_agent.campaign_config import CampaignConfig
from inbox_agent.errors import EnrichmentError


@pytest.fixture
def details() -> BusinessDetails:
    return BusinessDetails(
        senderName="Jane Doe",
        senderGender="Female",
        businessName="Acme Bakery",
        town="Ridgefield, CT",
    )


class TestBuildInvitationLetter:
    """Tests for the invitation-to-interview template."""

    def test_letter_for_named_person(self, details: BusinessDetails) -> None:
        """Test the greeting, town, nominator and questions."""
        nomination = Nomination(
            nominated_business_name="Bean Cafe",
            nominated_business_location="Danbury, CT",
            nominated_business_person="Sam",
        )

        letter = build_invitation_letter(details, nomination, CampaignConfig())

        assert letter.subject == "Invitation to interview - hamlethub.com and Acme Bakery"
        assert letter.message.startswith("\nHello Sam\nMy name is Dan from the Hamlethub.com website")
        assert "a local news provider in Danbury, CT." in letter.message
        assert "Jane Doe from Acme Bakery asked us to reach out" in letter.message
        assert "showcase her business" in letter.message
        assert "- Why did you start your business?" in letter.message
        assert "- Have you 'reimagined' your small business?" in letter.message
        assert letter.message.endswith("Locally yours,\nDan\n")

    def test_letter_without_person_or_sender(self) -> None:
        """Test the fallbacks for missing names."""
        details = BusinessDetails(businessName="Acme Bakery")
        nomination = Nomination(nominated_business_name="Bean Cafe")

        letter = build_invitation_letter(details, nomination, CampaignConfig())

        assert "Hello !" in letter.message
        assert "local news provider in Ridgefield." in letter.message
        assert "Acme Bakery team asked us" in letter.message
        assert "Acme Bakery team was very thankful" in letter.message

    def test_unknown_gender_uses_their(self) -> None:
        """Test the neutral pronoun."""
        details = BusinessDetails(senderName="Alex Kim", businessName="Acme Bakery")

        letter = build_invitation_letter(details, Nomination(), CampaignConfig())

        assert "showcase their business" in letter.message


class TestNominationEnricher:
    """Tests for enriching nominee records."""

    @pytest.mark.asyncio
    async def test_inherits_location_and_finds_link(
        self, details: BusinessDetails, mock_lookup
    ) -> None:
        """Test a nominee without location or link."""
        mock_lookup.find_missing_link.return_value = "https://beancafe.com"
        nominations = Nominations({"0": Nomination(nominated_business_name="Bean Cafe")})

        enriched = await NominationEnricher(mock_lookup, CampaignConfig()).enrich(
            details, nominations
        )

        nominee = enriched.root["0"]
        assert nominee.nominated_business_location == "Ridgefield, CT"
        assert nominee.nominated_business_link == "https://beancafe.com"
        assert isinstance(nominee.email_template, InvitationLetter)
        mock_lookup.find_missing_link.assert_awaited_once_with("Bean Cafe Ridgefield, CT")

    @pytest.mark.asyncio
    async def test_existing_link_is_not_looked_up(
        self, details: BusinessDetails, mock_lookup
    ) -> None:
        """Test that known links are kept."""
        nominations = Nominations(
            {
                "0": Nomination(
                    nominated_business_name="Bean Cafe",
                    nominated_business_link="https://beancafe.com",
                )
            }
        )

        enriched = await NominationEnricher(mock_lookup, CampaignConfig()).enrich(
            details, nominations
        )

        assert enriched.root["0"].nominated_business_link == "https://beancafe.com"
        mock_lookup.find_missing_link.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lookup_error_leaves_link_empty(
        self, details: BusinessDetails, mock_lookup
    ) -> None:
        """Test that a failed lookup still produces a letter."""
        mock_lookup.find_missing_link.side_effect = EnrichmentError("agent failed")
        nominations = Nominations({"0": Nomination(nominated_business_name="Bean Cafe")})

        enriched = await NominationEnricher(mock_lookup, CampaignConfig()).enrich(
            details, nominations
        )

        assert enriched.root["0"].nominated_business_link == ""
        assert isinstance(enriched.root["0"].email_template, InvitationLetter)

    @pytest.mark.asyncio
    async def test_one_failure_does_not_block_others(
        self, details: BusinessDetails, mock_lookup
    ) -> None:
        """Test that nominees are enriched independently."""

        async def lookup(query: str) -> str:
            if query.startswith("Bean Cafe"):
                raise RuntimeError("unexpected failure")
            return "https://booknook.com"

        mock_lookup.find_missing_link = AsyncMock(side_effect=lookup)
        nominations = Nominations(
            {
                "0": Nomination(nominated_business_name="Bean Cafe"),
                "1": Nomination(nominated_business_name="Book Nook"),
            }
        )

        enriched = await NominationEnricher(mock_lookup, CampaignConfig()).enrich(
            details, nominations
        )

        assert enriched.root["0"] == nominations.root["0"]
        assert enriched.root["1"].nominated_business_link == "https://booknook.com"
        assert isinstance(enriched.root["1"].email_template, InvitationLetter)

    @pytest.mark.asyncio
    async def test_unnamed_or_unlocated_nominees_are_untouched(self, mock_lookup) -> None:
        """Test the skip rules."""
        details = BusinessDetails(businessName="Acme Bakery")
        nominations = Nominations(
            {
                "0": Nomination(nominated_business_location="Danbury, CT"),
                "1": Nomination(nominated_business_name="Bean Cafe"),
            }
        )

        enriched = await NominationEnricher(mock_lookup, CampaignConfig()).enrich(
            details, nominations
        )

        assert enriched == nominations
        mock_lookup.find_missing_link.assert_not_awaited()


class TestNominationsSchema:
    """Tests for nomination parsing helpers."""

    def test_null_fields_become_blank(self) -> None:
        """Test that model nulls are read as empty strings."""
        nomination = Nomination.model_validate({"nominated_business_name": None})

        assert nomination.nominated_business_name == ""
        assert nomination.is_blank

    def test_blank_detection(self) -> None:
        """Test that any filled slot makes the record non-blank."""
        assert Nominations({}).is_blank
        assert Nominations({"0": Nomination()}).is_blank
        assert not Nominations({"0": Nomination(nominated_business_name="Bean Cafe")}).is_blank
