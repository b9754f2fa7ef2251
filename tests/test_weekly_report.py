from __future__ import annotations

from datetime import date

import pytest

from docexpiry.notifications.mailer import DeliveryError
from docexpiry.pipeline.weekly_report import build_subject, run_weekly_report

TODAY = date(2025, 6, 1)


class FakeRowSource:
    def __init__(self, rows):
        self.rows = rows

    def fetch_rows(self):
        return self.rows


class FakeNotifier:
    def __init__(self, error: Exception | None = None):
        self.sent = []
        self.error = error

    def send(self, recipient, subject, body):
        if self.error is not None:
            raise self.error
        self.sent.append((recipient, subject, body))


def test_nothing_to_report_sends_nothing(settings, header, make_row):
    notifier = FakeNotifier()
    rows = [header, make_row("Alice", pcpForm="2025-01-01", pa="discharged")]

    result = run_weekly_report(settings, TODAY, FakeRowSource(rows), notifier)

    assert result.report.is_empty
    assert result.output is None
    assert not result.notified
    assert notifier.sent == []


def test_findings_are_sent_to_configured_recipient(settings, header, make_row):
    notifier = FakeNotifier()
    rows = [header, make_row("Alice", pcpForm="2023-01-01", pa="2025-06-01")]

    result = run_weekly_report(settings, TODAY, FakeRowSource(rows), notifier)

    assert result.notified
    [(recipient, subject, body)] = notifier.sent
    assert recipient == "coordinator@example.org"
    assert subject == build_subject(result.report)
    assert "1 expired, 1 expiring soon" in subject
    assert body is result.output
    assert [section.field_id for section in body.sections] == ["pcpForm", "pa"]


def test_dry_run_formats_without_sending(settings, header, make_row):
    notifier = FakeNotifier()
    rows = [header, make_row("Alice", pcpForm="2023-01-01")]

    result = run_weekly_report(settings, TODAY, FakeRowSource(rows), notifier, dry_run=True)

    assert result.output is not None
    assert not result.notified
    assert notifier.sent == []


def test_delivery_failure_propagates(settings, header, make_row):
    notifier = FakeNotifier(error=DeliveryError("smtp down"))
    rows = [header, make_row("Alice", pcpForm="2023-01-01")]

    with pytest.raises(DeliveryError):
        run_weekly_report(settings, TODAY, FakeRowSource(rows), notifier)
