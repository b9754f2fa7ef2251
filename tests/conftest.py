from __future__ import annotations

from pathlib import Path

import pytest

from docexpiry.config import Settings
from docexpiry.documents.rules import DEFAULT_RULES

HEADER = [
    "Name",
    "Contact",
    "PCP Form",
    "Physical",
    "MDS",
    "ISP",
    "PA",
    "Dental",
    "TB Test",
    "Consent",
    "Med Review",
]


@pytest.fixture
def header() -> list[str]:
    return list(HEADER)


@pytest.fixture
def make_row():
    columns = {rule.field_id: rule.column for rule in DEFAULT_RULES}

    def _make_row(name: str, contact: str = "", **fields) -> list:
        row: list = [""] * len(HEADER)
        row[0] = name
        row[1] = contact
        for field_id, value in fields.items():
            row[columns[field_id]] = value
        return row

    return _make_row


@pytest.fixture
def settings() -> Settings:
    return Settings(
        spreadsheet_id="sheet-123",
        service_account_file=Path("service-account.json"),
        recipient="coordinator@example.org",
        smtp_user="alerts@example.org",
    )
