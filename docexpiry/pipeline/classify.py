from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Sequence

from ..documents.models import (
    DocumentRecord,
    FieldFindings,
    PatientRow,
    Report,
    SkippedCell,
    Status,
    classify_days,
)
from ..documents.parsers import InvalidDateError, parse_cell_date
from ..documents.rules import Rule, Sentinel

logger = logging.getLogger(__name__)


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _is_sentinel(value: Any) -> bool:
    return isinstance(value, str) and Sentinel.matches(value.strip())


def build_record(row: PatientRow, rule: Rule, original: date, today: date) -> DocumentRecord:
    expiry = rule.expiry_for(original)
    return DocumentRecord(
        patient_name=row.patient_name,
        contact=row.contact,
        field_id=rule.field_id,
        original_date=original,
        expiry_date=expiry,
        days_remaining=(expiry - today).days,
    )


def classify(
    rows: Sequence[Sequence[Any]],
    rules: Iterable[Rule],
    today: date,
    *,
    name_column: int = 0,
    contact_column: int = 1,
    warning_days: int = 30,
) -> Report:
    """Bin every dated document cell into expired / expiring soon / ignored.

    ``rows`` is the raw sheet grid with the header at index 0. Absent and
    sentinel cells are skipped silently; unparseable cells are logged and
    listed in ``Report.skipped`` without stopping the run.
    """
    rules = tuple(rules)
    expired: dict[str, list[DocumentRecord]] = {rule.field_id: [] for rule in rules}
    expiring: dict[str, list[DocumentRecord]] = {rule.field_id: [] for rule in rules}
    skipped: list[SkippedCell] = []

    # Sheet row numbers are 1-based and the header occupies row 1.
    for row_number, raw_row in enumerate(rows[1:], start=2):
        row = PatientRow.from_sheet_row(row_number, raw_row, name_column, contact_column)
        for rule in rules:
            value = row.value_at(rule.column)
            if _is_absent(value) or _is_sentinel(value):
                continue

            try:
                original = parse_cell_date(value)
            except InvalidDateError as exc:
                logger.warning(
                    "Skipping %s for '%s' (row %d): %s",
                    rule.display_name,
                    row.patient_name,
                    row.row_number,
                    exc,
                )
                skipped.append(
                    SkippedCell(
                        row_number=row.row_number,
                        field_id=rule.field_id,
                        raw_value=value,
                        reason=str(exc),
                    )
                )
                continue

            record = build_record(row, rule, original, today)
            status = classify_days(record.days_remaining, warning_days)
            if status is Status.EXPIRED:
                expired[rule.field_id].append(record)
            elif status is Status.EXPIRING_SOON:
                expiring[rule.field_id].append(record)

    findings = {
        rule.field_id: FieldFindings(
            field_id=rule.field_id,
            expired=tuple(expired[rule.field_id]),
            expiring_soon=tuple(expiring[rule.field_id]),
        )
        for rule in rules
    }
    report = Report(today=today, findings=findings, skipped=tuple(skipped))
    logger.info(
        "Classified %d row(s): %d expired, %d expiring within %d days, %d unreadable cell(s).",
        max(len(rows) - 1, 0),
        report.total_expired,
        report.total_critical,
        warning_days,
        len(skipped),
    )
    return report
