from __future__ import annotations

from datetime import date, datetime
from typing import Any

from dateutil import parser as dateutil_parser

# dateutil fills missing components from ``default``. Parsing against two
# defaults that differ in year, month and day exposes any component the cell
# did not supply.
_DEFAULTS = (datetime(1901, 1, 1), datetime(1902, 2, 2))


class InvalidDateError(ValueError):
    """Raised when a sheet cell cannot be read as a calendar date."""

    def __init__(self, value: Any, reason: str = "") -> None:
        self.value = value
        self.reason = reason
        message = f"Could not parse date {value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


def _plain(value: date) -> date:
    # pendulum subclasses return intervals on subtraction; keep stdlib dates.
    return date(value.year, value.month, value.day)


def parse_cell_date(value: Any) -> date:
    if isinstance(value, date):
        return _plain(value)
    if not isinstance(value, str):
        raise InvalidDateError(value, f"unsupported cell type {type(value).__name__}")

    candidate = value.strip()
    try:
        first, second = (
            dateutil_parser.parse(candidate, default=default) for default in _DEFAULTS
        )
    except (dateutil_parser.ParserError, TypeError, ValueError, OverflowError) as exc:
        raise InvalidDateError(value, str(exc)) from exc

    if first.date() != second.date():
        raise InvalidDateError(value, "year, month and day are all required")
    return _plain(first)


def scrub(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
