"""Google Sheets integration for taskly.

Read-only access through a service account. Share the spreadsheet with the
service account's email (Viewer is enough) before syncing.
"""

import os
import re
import logging
from typing import List, Optional
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from google.auth.exceptions import GoogleAuthError
from dotenv import load_dotenv

from taskly.models.constants import SHEET_COLUMN_RANGE

load_dotenv()

logger = logging.getLogger(__name__)

# Google Sheets API scopes
SCOPES = ['https://www.googleapis.com/auth/spreadsheets.readonly']

CREDENTIALS_HELP = [
    "1. Create a Google Cloud project and enable the Sheets API.",
    "2. Create a Service Account and download its JSON key.",
    "3. Set GOOGLE_SHEETS_CREDENTIALS_PATH=/path/to/key.json in .env",
    "4. Share the Google Sheet with the service account email (Viewer or Editor).",
]


class SheetsCredentialsError(RuntimeError):
    """Service-account credentials are missing or unusable."""


class SheetsFetchError(RuntimeError):
    """The Sheets API refused or failed a read."""


def extract_spreadsheet_id(spreadsheet_input: str) -> str:
    """Extract spreadsheet ID from a URL or return the ID if already extracted.

    Supports various Google Sheets URL formats:
    - Full URL: https://docs.google.com/spreadsheets/d/SPREADSHEET_ID/edit
    - Copy link URL: https://docs.google.com/spreadsheets/d/SPREADSHEET_ID/edit?usp=sharing
    - Just the ID: SPREADSHEET_ID

    Raises:
        ValueError: If the spreadsheet ID cannot be extracted
    """
    spreadsheet_input = spreadsheet_input.strip()

    if re.match(r'^[a-zA-Z0-9_-]+$', spreadsheet_input):
        return spreadsheet_input

    match = re.search(r'spreadsheets/d/([a-zA-Z0-9_-]+)', spreadsheet_input)
    if match:
        return match.group(1)

    raise ValueError(
        f"Could not extract spreadsheet ID from: {spreadsheet_input}. "
        "Provide either the full Google Sheets URL or just the spreadsheet ID."
    )


def sheet_range(sheet_name: str) -> str:
    """A1 range for a tab name; names that already carry a range are kept."""
    return sheet_name if '!' in sheet_name else f"{sheet_name}!{SHEET_COLUMN_RANGE}"


class GoogleSheetsClient:
    """Client for reading raw cell values from Google Sheets."""

    def __init__(self, credentials_path: Optional[str] = None, credentials=None):
        """Initialize Google Sheets client.

        Args:
            credentials_path: Path to a service-account JSON key.
                              If None, reads from GOOGLE_SHEETS_CREDENTIALS_PATH env var.
            credentials: Ready-made google-auth credentials (skips the key file).
        """
        self.credentials_path = credentials_path or os.getenv("GOOGLE_SHEETS_CREDENTIALS_PATH")
        self.creds = credentials or self._load_credentials()
        self.service = build('sheets', 'v4', credentials=self.creds, cache_discovery=False)

    def _load_credentials(self):
        if not self.credentials_path or not os.path.isfile(self.credentials_path):
            raise SheetsCredentialsError(
                "Google Sheets credentials file not found. Set GOOGLE_SHEETS_CREDENTIALS_PATH "
                "in .env to the path of your service account JSON."
            )
        try:
            return service_account.Credentials.from_service_account_file(self.credentials_path, scopes=SCOPES)
        except (ValueError, OSError, GoogleAuthError) as e:
            raise SheetsCredentialsError(f"Invalid service account file {self.credentials_path}: {e}") from e

    def fetch(self, spreadsheet_id: str, sheet_name: str) -> List[List[str]]:
        """Read all rows of a sheet tab (header row included).

        Args:
            spreadsheet_id: Spreadsheet ID or full URL
            sheet_name: Tab name (read as columns A:Z) or an explicit A1 range

        Returns:
            Rows as lists of cell strings; trailing empty cells are omitted by the API
        """
        extracted_id = extract_spreadsheet_id(spreadsheet_id)
        range_name = sheet_range(sheet_name)
        try:
            result = self.service.spreadsheets().values().get(
                spreadsheetId=extracted_id,
                range=range_name,
            ).execute()
        except HttpError as e:
            status_code = e.resp.status if hasattr(e, 'resp') else None
            if status_code == 404:
                raise SheetsFetchError(
                    f"Spreadsheet {extracted_id} not found. Check the spreadsheet ID and sheet name."
                ) from e
            if status_code == 403:
                raise SheetsFetchError(
                    "Permission denied. Share the spreadsheet with the service account email."
                ) from e
            raise SheetsFetchError(f"Failed to read Google Sheet (HTTP {status_code}): {e}") from e

        values = result.get('values', [])
        logger.info(f"Fetched {len(values)} row(s) from {extracted_id} ({range_name})")
        return values
