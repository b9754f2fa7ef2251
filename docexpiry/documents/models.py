from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from .parsers import scrub


class Status(str, Enum):
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    IGNORED = "ignored"


def classify_days(days_remaining: int, warning_days: int = 30) -> Status:
    if days_remaining < 0:
        return Status.EXPIRED
    if days_remaining <= warning_days:
        return Status.EXPIRING_SOON
    return Status.IGNORED


@dataclass(frozen=True, slots=True)
class PatientRow:
    row_number: int
    patient_name: str
    contact: str
    cells: tuple[Any, ...]

    @classmethod
    def from_sheet_row(
        cls,
        row_number: int,
        row: Sequence[Any],
        name_column: int = 0,
        contact_column: int = 1,
    ) -> "PatientRow":
        return cls(
            row_number=row_number,
            patient_name=_text_at(row, name_column),
            contact=_text_at(row, contact_column),
            cells=tuple(row),
        )

    def value_at(self, column: int) -> Any:
        if column < 0 or column >= len(self.cells):
            return None
        return self.cells[column]


@dataclass(frozen=True, slots=True)
class DocumentRecord:
    patient_name: str
    contact: str
    field_id: str
    original_date: date
    expiry_date: date
    days_remaining: int

    @property
    def is_expired(self) -> bool:
        return self.days_remaining < 0


@dataclass(frozen=True, slots=True)
class SkippedCell:
    row_number: int
    field_id: str
    raw_value: Any
    reason: str


@dataclass(frozen=True, slots=True)
class FieldFindings:
    field_id: str
    expired: tuple[DocumentRecord, ...] = ()
    expiring_soon: tuple[DocumentRecord, ...] = ()

    @property
    def total(self) -> int:
        return len(self.expired) + len(self.expiring_soon)


@dataclass(frozen=True)
class Report:
    today: date
    findings: Mapping[str, FieldFindings]
    skipped: tuple[SkippedCell, ...] = field(default=())

    def __post_init__(self) -> None:
        if not isinstance(self.findings, MappingProxyType):
            object.__setattr__(self, "findings", MappingProxyType(dict(self.findings)))

    @property
    def total_expired(self) -> int:
        return sum(len(item.expired) for item in self.findings.values())

    @property
    def total_critical(self) -> int:
        return sum(len(item.expiring_soon) for item in self.findings.values())

    @property
    def total_reported(self) -> int:
        return self.total_expired + self.total_critical

    @property
    def is_empty(self) -> bool:
        return self.total_reported == 0


def _text_at(row: Sequence[Any], column: int) -> str:
    if column < 0 or column >= len(row):
        return ""
    return scrub(row[column])
