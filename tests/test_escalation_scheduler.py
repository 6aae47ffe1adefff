# ruff: noqa: INP001
"""Recurring schedule registration, the RQ job entrypoint, and the CLI."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from campus_complaints import cli
from campus_complaints.core import logging as app_logging
from campus_complaints.services import escalation_scheduler
from campus_complaints.services.escalation_engine import EscalationResult


@dataclass
class _FakeJob:
    id: str


@dataclass
class _FakeScheduler:
    jobs: list[_FakeJob]
    cancelled: list[str] = field(default_factory=list)
    scheduled: list[dict[str, Any]] = field(default_factory=list)
    init_kwargs: dict[str, Any] = field(default_factory=dict)

    def get_jobs(self) -> list[_FakeJob]:
        return list(self.jobs)

    def cancel(self, job: _FakeJob) -> None:
        self.cancelled.append(job.id)

    def schedule(self, scheduled_time: object, **kwargs: Any) -> None:
        self.scheduled.append({"scheduled_time": scheduled_time, **kwargs})


def _install_fakes(
    monkeypatch: pytest.MonkeyPatch,
    scheduler: _FakeScheduler,
) -> list[str]:
    redis_urls: list[str] = []

    class _FakeRedis:
        @staticmethod
        def from_url(url: str) -> str:
            redis_urls.append(url)
            return "redis-connection"

    def _make_scheduler(**kwargs: Any) -> _FakeScheduler:
        scheduler.init_kwargs = kwargs
        return scheduler

    monkeypatch.setattr(escalation_scheduler, "Redis", _FakeRedis)
    monkeypatch.setattr(escalation_scheduler, "Scheduler", _make_scheduler)
    return redis_urls


def test_bootstrap_replaces_existing_job_with_same_id(monkeypatch: pytest.MonkeyPatch) -> None:
    schedule_id = escalation_scheduler.settings.escalation_schedule_id
    scheduler = _FakeScheduler(jobs=[_FakeJob(schedule_id), _FakeJob("nightly-digest")])
    redis_urls = _install_fakes(monkeypatch, scheduler)

    escalation_scheduler.bootstrap_escalation_schedule(interval_seconds=900)

    assert redis_urls == [escalation_scheduler.settings.escalation_redis_url]
    assert scheduler.init_kwargs == {
        "queue_name": escalation_scheduler.settings.escalation_rq_queue_name,
        "connection": "redis-connection",
    }
    assert scheduler.cancelled == [schedule_id]
    assert len(scheduler.scheduled) == 1
    job = scheduler.scheduled[0]
    assert job["func"] is escalation_scheduler.run_scheduled_escalation_pass
    assert job["interval"] == 900
    assert job["repeat"] is None
    assert job["id"] == schedule_id


def test_bootstrap_uses_configured_interval_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    scheduler = _FakeScheduler(jobs=[])
    _install_fakes(monkeypatch, scheduler)
    monkeypatch.setattr(
        escalation_scheduler.settings,
        "escalation_schedule_interval_seconds",
        1800,
    )

    escalation_scheduler.bootstrap_escalation_schedule()

    assert scheduler.cancelled == []
    assert scheduler.scheduled[0]["interval"] == 1800


def test_scheduled_job_configures_logging_and_returns_pass_counts(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    events: list[str] = []

    async def _fake_pass() -> EscalationResult:
        events.append("pass")
        return EscalationResult(message="ok", matched=3, escalated=2, skipped=4, failed=1)

    monkeypatch.setattr(escalation_scheduler, "configure_logging", lambda: events.append("logging"))
    monkeypatch.setattr(escalation_scheduler, "run_escalation_pass_once", _fake_pass)

    counts = escalation_scheduler.run_scheduled_escalation_pass()

    assert counts == {"matched": 3, "escalated": 2, "skipped": 4, "failed": 1}
    assert events == ["logging", "pass"]


@pytest.fixture
def _no_log_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_logging, "configure_logging", lambda: None)


@pytest.mark.usefixtures("_no_log_setup")
def test_cli_runs_pass_and_prints_result(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    async def _fake_pass() -> EscalationResult:
        return EscalationResult(message="Successfully processed 0 rule(s)", escalated=0)

    monkeypatch.setattr(escalation_scheduler, "run_escalation_pass_once", _fake_pass)

    exit_code = cli.main([])

    assert exit_code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["message"] == "Successfully processed 0 rule(s)"
    assert printed["failed"] == 0


@pytest.mark.usefixtures("_no_log_setup")
def test_cli_exit_code_reflects_failed_escalations(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _fake_pass() -> EscalationResult:
        return EscalationResult(message="partial", matched=2, escalated=1, failed=1)

    monkeypatch.setattr(escalation_scheduler, "run_escalation_pass_once", _fake_pass)

    assert cli.main([]) == 1


@pytest.mark.usefixtures("_no_log_setup")
def test_cli_schedule_flag_registers_job(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[int | None] = []
    monkeypatch.setattr(
        escalation_scheduler,
        "bootstrap_escalation_schedule",
        lambda interval_seconds=None: calls.append(interval_seconds),
    )

    assert cli.main(["--schedule", "--interval-seconds", "600"]) == 0
    assert calls == [600]
