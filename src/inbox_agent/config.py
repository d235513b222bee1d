"""Application configuration using Pydantic settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str = ""

    # Application
    app_name: str = "Inbox Agent"
    app_version: str = "0.1.0"
    debug: bool = False

    # Mail source: "imap" or "gmail"
    mail_backend: str = "imap"

    # IMAP
    imap_host: str = "box.hamletmail.com"
    imap_port: int = 993
    imap_user: str = ""
    imap_password: str = ""
    imap_folder: str = "INBOX"
    imap_archive_folder: str = "Archive"

    # Gmail (used when mail_backend == "gmail")
    gmail_token_path: str = "scripts/token.json"

    # Google Custom Search (detail lookup agent)
    google_api_key: str = ""
    google_cse_id: str = ""

    # Persistence
    data_dir: Path = Path("data")

    # Model client retry policy
    max_retries: int = 3
    retry_initial_wait_ms: int = 1000
    retry_wait_increment_ms: int = 3000

    # Spacing between the fixed-question model calls
    qa_call_spacing_ms: int = 500

    # Lookup agent
    agent_model: str = "gpt-4o-mini"
    agent_temperature: float = 0.2


settings = Settings()
