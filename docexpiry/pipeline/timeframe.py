from __future__ import annotations

from datetime import date

import pendulum


def today_in(timezone: str) -> date:
    now = pendulum.now(timezone)
    return date(now.year, now.month, now.day)


def format_us_date(value: date) -> str:
    return value.strftime("%m/%d/%Y")
