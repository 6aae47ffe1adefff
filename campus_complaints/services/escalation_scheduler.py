"""Recurring auto-escalation schedule bootstrap for rq-scheduler."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from redis import Redis
from rq_scheduler import Scheduler  # type: ignore[import-untyped]

from campus_complaints.core.config import settings
from campus_complaints.core.logging import configure_logging, get_logger
from campus_complaints.services.escalation_engine import EscalationResult, run_escalation_pass

logger = get_logger(__name__)


async def run_escalation_pass_once() -> EscalationResult:
    """Run one pass on a fresh session; shared by the scheduler job and the CLI."""
    from campus_complaints.db.session import async_session_maker

    async with async_session_maker() as session:
        return await run_escalation_pass(session)


def run_scheduled_escalation_pass() -> dict[str, int]:
    """RQ job entrypoint: run one pass and return its counts."""
    configure_logging()
    result = asyncio.run(run_escalation_pass_once())
    return {
        "matched": result.matched,
        "escalated": result.escalated,
        "skipped": result.skipped,
        "failed": result.failed,
    }


def bootstrap_escalation_schedule(interval_seconds: int | None = None) -> None:
    """Register the recurring escalation job and keep it idempotent."""
    connection = Redis.from_url(settings.escalation_redis_url)
    scheduler = Scheduler(queue_name=settings.escalation_rq_queue_name, connection=connection)

    for job in scheduler.get_jobs():
        if job.id == settings.escalation_schedule_id:
            scheduler.cancel(job)

    effective_interval_seconds = (
        settings.escalation_schedule_interval_seconds
        if interval_seconds is None
        else interval_seconds
    )

    scheduler.schedule(
        datetime.now(tz=timezone.utc) + timedelta(seconds=5),
        func=run_scheduled_escalation_pass,
        interval=effective_interval_seconds,
        repeat=None,
        id=settings.escalation_schedule_id,
        queue_name=settings.escalation_rq_queue_name,
    )
    logger.info(
        "escalation.schedule.registered",
        extra={
            "schedule_id": settings.escalation_schedule_id,
            "interval_seconds": effective_interval_seconds,
        },
    )
