"""Command line entry point: run one pass over the inbox."""

import asyncio
import logging

from inbox_agent.agent.classifier import EmailClassifier
from inbox_agent.agent.dispatcher import CategoryDispatcher
from inbox_agent.agent.handlers import HandlerContext
from inbox_agent.campaign_config import get_campaign_config
from inbox_agent.config import settings
from inbox_agent.inbox import BatchSummary, InboxLoop
from inbox_agent.llm.client import ModelClient
from inbox_agent.llm.usage import UsageLedger
from inbox_agent.lookup.agent import DetailLookupAgent
from inbox_agent.mail.base import MailSource
from inbox_agent.retrieval.retriever import ContextRetriever
from inbox_agent.storage.result_store import ResultStore

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def create_mail_source() -> MailSource:
    """Build the mail source selected by MAIL_BACKEND."""
    if settings.mail_backend == "gmail":
        from inbox_agent.mail.gmail import GmailMailSource

        return GmailMailSource()

    from inbox_agent.mail.imap import ImapMailSource

    return ImapMailSource()


def create_inbox_loop(mail: MailSource | None = None) -> InboxLoop:
    """Wire the pipeline together."""
    config = get_campaign_config()
    ledger = UsageLedger()
    client = ModelClient(ledger)
    retriever = ContextRetriever(client)
    store = ResultStore()
    mail = mail or create_mail_source()

    context = HandlerContext(
        client=client,
        retriever=retriever,
        ledger=ledger,
        store=store,
        mail=mail,
        lookup=DetailLookupAgent(),
        config=config,
    )

    return InboxLoop(
        mail=mail,
        store=store,
        retriever=retriever,
        classifier=EmailClassifier(client, retriever, config),
        dispatcher=CategoryDispatcher(context),
        ledger=ledger,
    )


def run() -> BatchSummary:
    """Run a single inbox check."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    return asyncio.run(create_inbox_loop().check_inbox())


def main() -> None:
    """Console script entry point."""
    summary = run()
    logger.info(f"Batch summary: {summary}")


if __name__ == "__main__":
    main()
