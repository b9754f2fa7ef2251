from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfoNotFoundError

import pendulum
from dotenv import load_dotenv
from pendulum.tz.exceptions import InvalidTimezone

from .documents.rules import DEFAULT_RULES, Rule

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def load_environment() -> None:
    """Load environment variables from a .env file if present."""
    env_file = os.getenv("ENV_FILE", ".env")
    env_path = Path(env_file)
    if env_path.is_file():
        load_dotenv(env_path)
    else:
        # Fallback: load .env in current working directory if ENV_FILE is missing
        default_path = Path(".env")
        if default_path.is_file():
            load_dotenv(default_path)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    spreadsheet_id: str
    service_account_file: Path
    recipient: str
    worksheet_name: str = "Patients"
    name_column: int = 0
    contact_column: int = 1
    warning_days: int = 30
    rules: tuple[Rule, ...] = DEFAULT_RULES
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    email_from: str = ""
    smtp_starttls: bool = True
    schedule_weekday: str = "monday"
    schedule_hour: int = 8
    schedule_timezone: str = "America/New_York"
    log_level: str = "INFO"

    @property
    def sender(self) -> str:
        return self.email_from or self.smtp_user

    @classmethod
    def from_env(cls) -> "Settings":
        load_environment()

        spreadsheet_id = os.getenv("SPREADSHEET_ID")
        service_account_file = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE")
        recipient = os.getenv("RECIPIENT_EMAIL")

        missing = [
            name
            for name, value in {
                "SPREADSHEET_ID": spreadsheet_id,
                "GOOGLE_SERVICE_ACCOUNT_FILE": service_account_file,
                "RECIPIENT_EMAIL": recipient,
            }.items()
            if not value
        ]
        if missing:
            raise RuntimeError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )

        weekday = os.getenv("SCHEDULE_WEEKDAY", "monday").strip().lower()
        if weekday not in WEEKDAYS:
            raise RuntimeError(f"SCHEDULE_WEEKDAY must be one of {', '.join(WEEKDAYS)}, got {weekday!r}")

        hour = _int_env("SCHEDULE_HOUR", 8)
        if not 0 <= hour <= 23:
            raise RuntimeError(f"SCHEDULE_HOUR must be between 0 and 23, got {hour}")

        timezone = os.getenv("SCHEDULE_TIMEZONE", "America/New_York").strip()
        try:
            pendulum.timezone(timezone)
        except (InvalidTimezone, ZoneInfoNotFoundError, ValueError) as exc:
            raise RuntimeError(f"Unknown SCHEDULE_TIMEZONE {timezone!r}") from exc

        smtp_user = os.getenv("SMTP_USER", "")
        return cls(
            spreadsheet_id=spreadsheet_id,
            service_account_file=Path(service_account_file).expanduser().resolve(),
            recipient=recipient.strip(),
            worksheet_name=os.getenv("WORKSHEET_NAME", "Patients"),
            name_column=_int_env("NAME_COLUMN", 0),
            contact_column=_int_env("CONTACT_COLUMN", 1),
            warning_days=_int_env("WARNING_DAYS", 30),
            smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=_int_env("SMTP_PORT", 587),
            smtp_user=smtp_user,
            smtp_password=os.getenv("SMTP_PASSWORD", ""),
            email_from=os.getenv("EMAIL_FROM", smtp_user),
            smtp_starttls=_bool_env("SMTP_STARTTLS", True),
            schedule_weekday=weekday,
            schedule_hour=hour,
            schedule_timezone=timezone,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
