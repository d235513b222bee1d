"""
Gmail authentication.

Loads OAuth credentials from the local token file written by
scripts/gmail_auth.py and refreshes them when expired.
"""

import json
import os
from functools import lru_cache

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build, Resource

from inbox_agent.config import settings

# Read messages and move them out of INBOX
SCOPES = [
    "https://www.googleapis.com/auth/gmail.modify",
]


@lru_cache(maxsize=1)
def get_gmail_credentials() -> Credentials:
    """
    Get Gmail API credentials from the local token file.

    Returns:
        Google OAuth2 Credentials object
    """
    token_path = settings.gmail_token_path
    if not os.path.exists(token_path):
        raise FileNotFoundError(
            f"Token file not found at {token_path}. "
            "Run 'python scripts/gmail_auth.py' to authenticate."
        )

    with open(token_path) as f:
        token_data = json.load(f)

    creds = Credentials.from_authorized_user_info(token_data, SCOPES)

    # Refresh if expired
    if creds.expired and creds.refresh_token:
        creds.refresh(Request())

    return creds


@lru_cache(maxsize=1)
def get_gmail_service() -> Resource:
    """
    Get authenticated Gmail API service.

    Returns:
        Gmail API Resource object
    """
    creds = get_gmail_credentials()
    return build("gmail", "v1", credentials=creds)
