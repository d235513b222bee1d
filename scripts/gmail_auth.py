#!/usr/bin/env python3
"""
One-time OAuth2 authentication script for the Gmail mail source.

Only needed when MAIL_BACKEND=gmail. The IMAP backend uses the mailbox
password from .env instead.

Usage:
    1. Download OAuth credentials from GCP Console as 'credentials.json'
    2. Place 'credentials.json' in this directory
    3. Run: python scripts/gmail_auth.py
    4. Browser will open for Google login
    5. Token will be saved to 'token.json'
    6. Point GMAIL_TOKEN_PATH at it if you move it elsewhere
"""

import json
from pathlib import Path

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

# Read messages and move them out of INBOX
SCOPES = [
    "https://www.googleapis.com/auth/gmail.modify",
]

SCRIPT_DIR = Path(__file__).parent
CREDENTIALS_FILE = SCRIPT_DIR / "credentials.json"
TOKEN_FILE = SCRIPT_DIR / "token.json"


def main() -> None:
    """Run OAuth2 flow to get and save credentials."""
    creds = None

    if TOKEN_FILE.exists():
        creds = Credentials.from_authorized_user_file(str(TOKEN_FILE), SCOPES)
        print(f"Found existing token at {TOKEN_FILE}")

    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            print("Refreshing expired token...")
            creds.refresh(Request())
        else:
            if not CREDENTIALS_FILE.exists():
                print(f"ERROR: {CREDENTIALS_FILE} not found!")
                print("\nTo get credentials.json:")
                print("1. Go to https://console.cloud.google.com/apis/credentials")
                print("2. Click 'Create Credentials' > 'OAuth client ID'")
                print("3. Select 'Desktop app' as application type")
                print("4. Download the JSON file")
                print(f"5. Save it as: {CREDENTIALS_FILE}")
                return

            print("Starting OAuth2 flow...")
            print("A browser window will open for Google login.")
            flow = InstalledAppFlow.from_client_secrets_file(str(CREDENTIALS_FILE), SCOPES)
            creds = flow.run_local_server(port=0)

        TOKEN_FILE.write_text(creds.to_json())
        print(f"\nToken saved to: {TOKEN_FILE}")

    token_data = json.loads(TOKEN_FILE.read_text())
    print("\nOAuth2 authentication complete.")
    print(f"Scopes: {', '.join(token_data.get('scopes', []))}")
    print("\nRun the inbox agent with:")
    print(f"   MAIL_BACKEND=gmail GMAIL_TOKEN_PATH={TOKEN_FILE} inbox-agent")


if __name__ == "__main__":
    main()
