from __future__ import annotations

import subprocess
from dataclasses import replace
from pathlib import Path

import pytest

from docexpiry.schedule import cron
from docexpiry.schedule.cron import (
    BEGIN_MARKER,
    CRON_WEEKDAYS,
    END_MARKER,
    CrontabRunner,
    ScheduleError,
    build_entry,
    current_schedule,
    install_schedule,
    remove_schedule,
)

OTHER_JOB = "30 2 * * * /usr/local/bin/backup.sh"


class FakeRunner:
    def __init__(self, lines=None):
        self.lines = list(lines or [])
        self.writes = 0

    def read(self):
        return list(self.lines)

    def write(self, lines):
        self.writes += 1
        self.lines = list(lines)


def test_cron_weekday_numbers():
    assert CRON_WEEKDAYS["sunday"] == 0
    assert CRON_WEEKDAYS["monday"] == 1
    assert CRON_WEEKDAYS["saturday"] == 6


def test_build_entry_runs_module_weekly(settings):
    entry = build_entry(
        replace(settings, schedule_weekday="friday", schedule_hour=7, schedule_timezone="America/Chicago"),
        python="/opt/venv/bin/python",
        workdir=Path("/srv/docexpiry"),
    )

    assert entry[0] == BEGIN_MARKER
    assert entry[1] == "CRON_TZ=America/Chicago"
    assert entry[2] == "0 7 * * 5 cd /srv/docexpiry && /opt/venv/bin/python -m docexpiry.main"
    assert entry[-1] == END_MARKER


def test_install_is_idempotent(settings):
    runner = FakeRunner([OTHER_JOB])

    install_schedule(settings, runner=runner, python="python3", workdir=Path("/srv"))
    install_schedule(settings, runner=runner, python="python3", workdir=Path("/srv"))

    assert runner.lines.count(BEGIN_MARKER) == 1
    assert runner.lines[0] == OTHER_JOB
    assert current_schedule(runner) == runner.lines[1:]


def test_install_replaces_previous_settings(settings):
    runner = FakeRunner()

    install_schedule(settings, runner=runner, python="python3", workdir=Path("/srv"))
    install_schedule(replace(settings, schedule_hour=18), runner=runner, python="python3", workdir=Path("/srv"))

    jobs = [line for line in runner.lines if "docexpiry.main" in line and not line.startswith("#")]
    assert len(jobs) == 1
    assert jobs[0].startswith("0 18 * * 1 ")


def test_remove_keeps_unrelated_entries(settings):
    runner = FakeRunner([OTHER_JOB])
    install_schedule(settings, runner=runner, python="python3", workdir=Path("/srv"))

    removed = remove_schedule(runner)

    assert removed == 4
    assert runner.lines == [OTHER_JOB]


def test_remove_without_entry_does_not_rewrite():
    runner = FakeRunner([OTHER_JOB])

    assert remove_schedule(runner) == 0
    assert runner.writes == 0


def test_runner_treats_missing_crontab_as_empty(monkeypatch):
    def fake_run(args, **kwargs):
        return subprocess.CompletedProcess(args, 1, stdout="", stderr="no crontab for care\n")

    monkeypatch.setattr(cron.subprocess, "run", fake_run)

    assert CrontabRunner().read() == []


def test_runner_surfaces_crontab_failures(monkeypatch):
    def fake_run(args, **kwargs):
        return subprocess.CompletedProcess(args, 1, stdout="", stderr="permission denied\n")

    monkeypatch.setattr(cron.subprocess, "run", fake_run)

    with pytest.raises(ScheduleError):
        CrontabRunner().write(["# empty"])


def test_unterminated_block_is_left_alone(settings):
    lines = [BEGIN_MARKER, "CRON_TZ=America/New_York", OTHER_JOB]
    runner = FakeRunner(lines)

    with pytest.raises(ScheduleError):
        remove_schedule(runner)
    with pytest.raises(ScheduleError):
        install_schedule(settings, runner=runner, python="python3", workdir=Path("/srv"))

    assert runner.writes == 0
    assert runner.lines == lines
