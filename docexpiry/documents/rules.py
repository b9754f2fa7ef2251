from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Union


class Sentinel(str, Enum):
    """Placeholder values meaning a document is intentionally absent."""

    MISSING = "missing"
    DISCHARGED = "discharged"

    @classmethod
    def matches(cls, value: str) -> bool:
        return value in {member.value for member in cls}


@dataclass(frozen=True, slots=True)
class ExactDate:
    def expiry_for(self, original: date) -> date:
        return original


@dataclass(frozen=True, slots=True)
class RelativeDays:
    days: int

    def __post_init__(self) -> None:
        if self.days < 0:
            raise ValueError(f"RelativeDays offset must be >= 0, got {self.days}")

    def expiry_for(self, original: date) -> date:
        return original + timedelta(days=self.days)


Policy = Union[ExactDate, RelativeDays]


@dataclass(frozen=True, slots=True)
class Rule:
    field_id: str
    column: int
    policy: Policy
    display_name: str

    def expiry_for(self, original: date) -> date:
        return self.policy.expiry_for(original)


# Declaration order is the order fields appear in the report.
DEFAULT_RULES: tuple[Rule, ...] = (
    Rule("pcpForm", 2, RelativeDays(365), "PCP Form"),
    Rule("physical", 3, RelativeDays(365), "Physical"),
    Rule("mds", 4, RelativeDays(365), "MDS"),
    Rule("isp", 5, RelativeDays(182), "ISP"),
    Rule("pa", 6, ExactDate(), "Prior Authorization"),
    Rule("dental", 7, RelativeDays(182), "Dental Exam"),
    Rule("tbTest", 8, RelativeDays(365), "TB Test"),
    Rule("consent", 9, RelativeDays(365), "Consent Form"),
    Rule("medReview", 10, RelativeDays(90), "Medication Review"),
)
