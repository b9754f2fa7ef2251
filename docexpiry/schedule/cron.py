from __future__ import annotations

import argparse
import logging
import shlex
import subprocess
import sys
from pathlib import Path

from ..config import WEEKDAYS, Settings

logger = logging.getLogger(__name__)

TARGET = "docexpiry.main"
BEGIN_MARKER = f"# BEGIN {TARGET} weekly report"
END_MARKER = f"# END {TARGET} weekly report"

# cron numbers weekdays from Sunday = 0.
CRON_WEEKDAYS = {name: (index + 1) % 7 for index, name in enumerate(WEEKDAYS)}


class ScheduleError(RuntimeError):
    pass


class CrontabRunner:
    """Reads and writes the current user's crontab through the ``crontab`` binary."""

    def __init__(self, binary: str = "crontab") -> None:
        self.binary = binary

    def read(self) -> list[str]:
        try:
            proc = subprocess.run(
                [self.binary, "-l"], capture_output=True, text=True, check=False
            )
        except OSError as exc:
            raise ScheduleError(f"Could not run {self.binary}: {exc}") from exc
        if proc.returncode != 0:
            if "no crontab" in proc.stderr.lower():
                return []
            raise ScheduleError(f"{self.binary} -l failed: {proc.stderr.strip()}")
        return proc.stdout.splitlines()

    def write(self, lines: list[str]) -> None:
        content = "\n".join(lines) + "\n" if lines else ""
        try:
            proc = subprocess.run(
                [self.binary, "-"], input=content, capture_output=True, text=True, check=False
            )
        except OSError as exc:
            raise ScheduleError(f"Could not run {self.binary}: {exc}") from exc
        if proc.returncode != 0:
            raise ScheduleError(f"{self.binary} - failed: {proc.stderr.strip()}")


def build_entry(
    settings: Settings,
    python: str | None = None,
    workdir: Path | None = None,
    log_file: Path | None = None,
) -> list[str]:
    python = python or sys.executable
    workdir = workdir or Path.cwd()
    command = f"cd {shlex.quote(str(workdir))} && {shlex.quote(python)} -m {TARGET}"
    if log_file is not None:
        command = f"{command} >> {shlex.quote(str(log_file))} 2>&1"

    weekday = CRON_WEEKDAYS[settings.schedule_weekday]
    return [
        BEGIN_MARKER,
        f"CRON_TZ={settings.schedule_timezone}",
        f"0 {settings.schedule_hour} * * {weekday} {command}",
        END_MARKER,
    ]


def _split_entry(lines: list[str]) -> tuple[list[str], list[str]]:
    """Separate the managed block from the rest of the crontab."""
    kept: list[str] = []
    managed: list[str] = []
    pending: list[str] | None = None
    for line in lines:
        marker = line.strip()
        if pending is None:
            if marker == BEGIN_MARKER:
                pending = [line]
            else:
                kept.append(line)
            continue
        pending.append(line)
        if marker == END_MARKER:
            managed.extend(pending)
            pending = None
    if pending is not None:
        raise ScheduleError(
            f"Crontab has '{BEGIN_MARKER}' without a matching '{END_MARKER}'; "
            "fix it by hand with `crontab -e`."
        )
    return kept, managed


def remove_schedule(runner: CrontabRunner | None = None) -> int:
    runner = runner or CrontabRunner()
    lines = runner.read()
    kept, managed = _split_entry(lines)
    removed = len(managed)
    if removed:
        runner.write(kept)
        logger.info("Removed %d crontab line(s) for %s", removed, TARGET)
    else:
        logger.info("No crontab entry found for %s", TARGET)
    return removed


def install_schedule(
    settings: Settings,
    runner: CrontabRunner | None = None,
    python: str | None = None,
    workdir: Path | None = None,
    log_file: Path | None = None,
) -> list[str]:
    runner = runner or CrontabRunner()
    entry = build_entry(settings, python=python, workdir=workdir, log_file=log_file)
    runner.write(_split_entry(runner.read())[0] + entry)
    logger.info(
        "Scheduled %s every %s at %02d:00 (%s)",
        TARGET,
        settings.schedule_weekday.title(),
        settings.schedule_hour,
        settings.schedule_timezone,
    )
    return entry


def current_schedule(runner: CrontabRunner | None = None) -> list[str]:
    runner = runner or CrontabRunner()
    return _split_entry(runner.read())[1]


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Install or remove the weekly document expiration report in crontab."
    )
    parser.add_argument("action", choices=("install", "remove", "show"))
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Append scheduled run output to this file.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        if args.action == "remove":
            remove_schedule()
            return 0
        if args.action == "show":
            for line in current_schedule():
                print(line)
            return 0

        settings = Settings.from_env()
        log_file = args.log_file.expanduser().resolve() if args.log_file else None
        install_schedule(settings, log_file=log_file)
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
