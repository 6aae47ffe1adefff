"""CLI to run an escalation pass on demand or register the recurring schedule."""

from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import asdict


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Escalate aged complaints according to the active escalation rules.",
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Register the recurring rq-scheduler job instead of running a pass now",
    )
    parser.add_argument(
        "--interval-seconds",
        type=int,
        default=None,
        help="Override the schedule interval (only with --schedule)",
    )
    return parser.parse_args(argv)


async def _run() -> int:
    from campus_complaints.services.escalation_scheduler import run_escalation_pass_once

    result = await run_escalation_pass_once()
    print(json.dumps(asdict(result), default=str, indent=2, sort_keys=True))
    return 1 if result.failed else 0


def main(argv: list[str] | None = None) -> int:
    from campus_complaints.core.logging import configure_logging

    args = _parse_args(argv)
    configure_logging()
    if args.schedule:
        from campus_complaints.services.escalation_scheduler import bootstrap_escalation_schedule

        bootstrap_escalation_schedule(interval_seconds=args.interval_seconds)
        return 0
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
