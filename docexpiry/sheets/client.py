from __future__ import annotations

import logging

import gspread
from google.oauth2.service_account import Credentials

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]


class SheetsClient:
    def __init__(self, spreadsheet_id: str, service_account_file: str, worksheet_name: str) -> None:
        credentials = Credentials.from_service_account_file(service_account_file, scopes=SCOPES)
        self._client = gspread.authorize(credentials)
        self._spreadsheet = self._client.open_by_key(spreadsheet_id)
        self.worksheet_name = worksheet_name

    def fetch_rows(self) -> list[list[str]]:
        worksheet = self._get_worksheet()
        rows = worksheet.get_all_values()
        logger.info("Read %d row(s) from %s", len(rows), self.worksheet_name)
        return rows

    def _get_worksheet(self):
        try:
            return self._spreadsheet.worksheet(self.worksheet_name)
        except gspread.WorksheetNotFound as exc:
            raise RuntimeError(
                f"Worksheet '{self.worksheet_name}' not found in the spreadsheet."
            ) from exc
