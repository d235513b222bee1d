"""Tests for the reply, spam and shared handler behavior."""

import json
from unittest.mock import AsyncMock

import pytest

from inbox_agent.agent.handlers import ReplyHandler, SpamHandler
from inbox_agent.agent.schemas import Category
from inbox_agent.errors import HandlerError, ModelError
from inbox_agent.llm.models import GPT4

REPLY_JSON = json.dumps({"subject": "Re: Interview", "message": "Hi Jane,\nHappy to help.\nDan"})


class TestReplyHandler:
    """Tests for the reply-generating categories."""

    @pytest.mark.asyncio
    async def test_saves_reply_and_archives(
        self, handler_context, sample_email, decision_factory
    ) -> None:
        """Test the full reply flow."""
        handler_context.client.invoke.return_value = REPLY_JSON
        decision = decision_factory("Questions", "Asks when the article runs.")

        await ReplyHandler(handler_context, Category.QUESTIONS).handle(sample_email, decision)

        directory = handler_context.store.path_for(sample_email.id)
        assert (directory / "generated_response.txt").read_text() == (
            "Generated subject for this email:\nRe: Interview\n"
            "Generated response for this email:\nHi Jane,\nHappy to help.\nDan"
        )
        assert json.loads((directory / "email_category.txt").read_text()) == {
            "category": "Questions",
            "explanation": "Asks when the article runs.",
        }
        assert (directory / "raw_email.txt").read_text() == sample_email.body
        assert (directory / "email_html.html").read_text() == sample_email.html
        assert (directory / "attachments" / "logo.png").read_bytes() == b"png"
        assert (directory / "api_cost.txt").exists()
        handler_context.mail.archive.assert_called_once_with(sample_email.uid)

    @pytest.mark.asyncio
    async def test_prompt_carries_category_and_explanation(
        self, handler_context, sample_email, decision_factory
    ) -> None:
        """Test that the system prompt is built for the category."""
        handler_context.client.invoke.return_value = REPLY_JSON
        decision = decision_factory("Decline to Participate", "Too busy this month.")

        await ReplyHandler(handler_context, Category.DECLINE).handle(sample_email, decision)

        tier, system_prompt, _ = handler_context.client.invoke.call_args.args
        assert tier == GPT4
        assert "declined to participate" in system_prompt
        assert "Your previous reasoning: Too busy this month." in system_prompt
        assert "Dan Boldis" in system_prompt
        assert handler_context.retriever.retrieve.call_args.args[1] == 1

    @pytest.mark.asyncio
    async def test_usage_report_covers_this_email_only(
        self, handler_context, sample_email, decision_factory
    ) -> None:
        """Test that the ledger is captured in the bundle then reset."""
        ledger = handler_context.ledger
        ledger.record("gpt-3.5-turbo", 999, 999)
        ledger.reset()

        async def invoke(tier, system_prompt, user_prompt):
            ledger.record("gpt-4", 100, 50)
            return REPLY_JSON

        handler_context.client.invoke = AsyncMock(side_effect=invoke)

        await ReplyHandler(handler_context, Category.CONFIRMATION).handle(
            sample_email, decision_factory("Confirmation")
        )

        report = (handler_context.store.path_for(sample_email.id) / "api_cost.txt").read_text()
        assert "Model: gpt-4, Input Tokens: 100" in report
        assert "gpt-3.5-turbo" not in report
        assert ledger.total_cost == 0

    @pytest.mark.asyncio
    async def test_model_failure_saves_nothing(
        self, handler_context, sample_email, decision_factory
    ) -> None:
        """Test that a failed reply leaves the email for the next run."""
        handler_context.client.invoke.side_effect = ModelError("gpt-4 failed")

        with pytest.raises(HandlerError) as exc_info:
            await ReplyHandler(handler_context, Category.QUESTIONS).handle(
                sample_email, decision_factory("Questions")
            )

        assert exc_info.value.category == "Questions"
        assert handler_context.store.id_exists(sample_email.id) is False
        handler_context.mail.archive.assert_not_called()
        assert handler_context.ledger.total_cost == 0

    @pytest.mark.asyncio
    async def test_invalid_reply_json_raises_handler_error(
        self, handler_context, sample_email, decision_factory
    ) -> None:
        """Test that a reply without subject and message is rejected."""
        handler_context.client.invoke.return_value = '{"text": "Hello"}'

        with pytest.raises(HandlerError):
            await ReplyHandler(handler_context, Category.ACKNOWLEDGMENT).handle(
                sample_email, decision_factory("Acknowledgment")
            )

        assert handler_context.store.id_exists(sample_email.id) is False

    @pytest.mark.asyncio
    async def test_archive_failure_keeps_saved_bundle(
        self, handler_context, sample_email, decision_factory
    ) -> None:
        """Test that the bundle still marks the email as processed."""
        handler_context.client.invoke.return_value = REPLY_JSON
        handler_context.mail.archive.side_effect = OSError("mailbox gone")

        await ReplyHandler(handler_context, Category.UNSUBSCRIBE).handle(
            sample_email, decision_factory("Unsubscribe request")
        )

        assert handler_context.store.id_exists(sample_email.id) is True

    def test_rejects_non_reply_category(self, handler_context) -> None:
        """Test that only reply categories get a reply handler."""
        with pytest.raises(ValueError):
            ReplyHandler(handler_context, Category.ANSWERS)


class TestSpamHandler:
    """Tests for spam and promotions."""

    @pytest.mark.asyncio
    async def test_only_archives(self, handler_context, sample_email, decision_factory) -> None:
        """Test that spam is archived without model calls or files."""
        await SpamHandler(handler_context).handle(
            sample_email, decision_factory("Spam or Promotion")
        )

        handler_context.mail.archive.assert_called_once_with(sample_email.uid)
        handler_context.client.invoke.assert_not_awaited()
        handler_context.retriever.retrieve.assert_not_awaited()
        assert handler_context.store.id_exists(sample_email.id) is False

    @pytest.mark.asyncio
    async def test_archive_failure_raises_handler_error(
        self, handler_context, sample_email, decision_factory
    ) -> None:
        """Test that spam left in the inbox is reported."""
        handler_context.mail.archive.side_effect = OSError("mailbox gone")

        with pytest.raises(HandlerError):
            await SpamHandler(handler_context).handle(
                sample_email, decision_factory("Spam or Promotion")
            )
