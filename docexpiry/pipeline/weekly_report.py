from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol, Sequence

from ..config import Settings
from ..documents.models import Report
from ..notifications.mailer import EmailNotifier
from ..notifications.reporting import FormattedOutput, format_report
from ..sheets.client import SheetsClient
from .classify import classify
from .timeframe import format_us_date

logger = logging.getLogger(__name__)


class RowSource(Protocol):
    def fetch_rows(self) -> Sequence[Sequence[Any]]: ...


class Notifier(Protocol):
    def send(self, recipient: str, subject: str, body: FormattedOutput) -> None: ...


@dataclass(slots=True)
class PipelineResult:
    report: Report
    output: FormattedOutput | None
    notified: bool


def build_subject(report: Report) -> str:
    return (
        f"Document Expiration Alert - {report.total_expired} expired, "
        f"{report.total_critical} expiring soon ({format_us_date(report.today)})"
    )


def default_row_source(settings: Settings) -> SheetsClient:
    return SheetsClient(
        spreadsheet_id=settings.spreadsheet_id,
        service_account_file=str(settings.service_account_file),
        worksheet_name=settings.worksheet_name,
    )


def default_notifier(settings: Settings) -> EmailNotifier:
    return EmailNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.sender,
        username=settings.smtp_user,
        password=settings.smtp_password,
        starttls=settings.smtp_starttls,
    )


def run_weekly_report(
    settings: Settings,
    today: date,
    row_source: RowSource | None = None,
    notifier: Notifier | None = None,
    dry_run: bool = False,
) -> PipelineResult:
    source = row_source or default_row_source(settings)
    rows = source.fetch_rows()

    report = classify(
        rows,
        settings.rules,
        today,
        name_column=settings.name_column,
        contact_column=settings.contact_column,
        warning_days=settings.warning_days,
    )

    if report.is_empty:
        logger.info("No expired or expiring documents as of %s; no notification sent.", today)
        return PipelineResult(report=report, output=None, notified=False)

    output = format_report(report, settings.rules, today, settings.warning_days)
    if dry_run:
        logger.info("Dry run: skipping delivery of %d finding(s).", report.total_reported)
        return PipelineResult(report=report, output=output, notified=False)

    # DeliveryError propagates; no retry.
    sender = notifier or default_notifier(settings)
    sender.send(settings.recipient, build_subject(report), output)
    return PipelineResult(report=report, output=output, notified=True)
