from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from .config import Settings
from .documents.models import Report
from .notifications.mailer import DeliveryError
from .notifications.reporting import render_text
from .pipeline.timeframe import today_in
from .pipeline.weekly_report import run_weekly_report


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Email a summary of expired and soon-to-expire patient documents."
    )
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        help="Evaluate expirations as of this date (YYYY-MM-DD). Defaults to today in SCHEDULE_TIMEZONE.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the report instead of emailing it.",
    )
    return parser.parse_args(argv)


def log_skipped_cells(report: Report) -> None:
    if not report.skipped:
        return
    logging.warning(
        "%d cell(s) could not be read as dates: %s",
        len(report.skipped),
        ", ".join(f"row {cell.row_number} {cell.field_id}" for cell in report.skipped),
    )


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = parse_args(argv)

    try:
        settings = Settings.from_env()
    except RuntimeError as exc:
        logging.error("%s", exc)
        return 1

    logging.getLogger().setLevel(getattr(logging, settings.log_level, logging.INFO))

    today = args.today or today_in(settings.schedule_timezone)
    logging.info("Checking document expirations as of %s", today)

    try:
        result = run_weekly_report(settings=settings, today=today, dry_run=args.dry_run)
    except (DeliveryError, RuntimeError) as exc:
        logging.error("%s", exc)
        return 1

    report = result.report
    logging.info(
        "Reported %d document(s): %d expired; %d expiring soon; notified=%s.",
        report.total_reported,
        report.total_expired,
        report.total_critical,
        result.notified,
    )
    log_skipped_cells(report)

    if args.dry_run and result.output is not None:
        print(render_text(result.output))

    return 0


if __name__ == "__main__":
    sys.exit(main())
