from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..documents.models import DocumentRecord, Report
from ..documents.rules import Rule
from ..pipeline.timeframe import format_us_date

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

_template_env: Environment | None = None


@dataclass(frozen=True, slots=True)
class SummaryLine:
    label: str
    value: int


@dataclass(frozen=True, slots=True)
class ReportLine:
    patient_name: str
    contact: str
    original_date: str
    expiry_date: str
    status: str
    expired: bool


@dataclass(frozen=True, slots=True)
class Section:
    field_id: str
    display_name: str
    lines: tuple[ReportLine, ...]


@dataclass(frozen=True, slots=True)
class FormattedOutput:
    title: str
    summary: tuple[SummaryLine, ...]
    sections: tuple[Section, ...]


def status_text(record: DocumentRecord) -> str:
    expiry = format_us_date(record.expiry_date)
    if record.days_remaining < 0:
        return f"Expired on {expiry}"
    return f"Expires on {expiry} ({record.days_remaining} days)"


def _line(record: DocumentRecord) -> ReportLine:
    return ReportLine(
        patient_name=record.patient_name,
        contact=record.contact,
        original_date=format_us_date(record.original_date),
        expiry_date=format_us_date(record.expiry_date),
        status=status_text(record),
        expired=record.is_expired,
    )


def format_report(
    report: Report, rules: Iterable[Rule], today: date, warning_days: int = 30
) -> FormattedOutput:
    sections: list[Section] = []
    for rule in rules:
        findings = report.findings.get(rule.field_id)
        if findings is None or not findings.total:
            continue
        lines = [_line(record) for record in findings.expired]
        lines.extend(_line(record) for record in findings.expiring_soon)
        sections.append(
            Section(
                field_id=rule.field_id,
                display_name=rule.display_name,
                lines=tuple(lines),
            )
        )

    summary = (
        SummaryLine("Total documents reported", report.total_reported),
        SummaryLine("Expired", report.total_expired),
        SummaryLine(f"Expiring within {warning_days} days", report.total_critical),
    )
    return FormattedOutput(
        title=f"Document Expiration Report - {format_us_date(today)}",
        summary=summary,
        sections=tuple(sections),
    )


def ensure_template_env() -> Environment:
    global _template_env
    if _template_env is None:
        _template_env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _template_env


def render_text(output: FormattedOutput) -> str:
    return ensure_template_env().get_template("report.txt").render(report=output)


def render_html(output: FormattedOutput) -> str:
    return ensure_template_env().get_template("report.html").render(report=output)
