"""Command line entry points for the batch job, the scheduler and the webhook server."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from .config import Settings
from .errors import LeetQuizError
from .pipeline import BatchReport
from .scheduler import run_daily
from .streak import StreakCalculator
from .wiring import build_pipeline, build_store


logger = logging.getLogger("leetquiz")


def _run_batch(settings: Settings, count: Optional[int]) -> BatchReport:
    store = build_store(settings)
    try:
        pipeline = build_pipeline(settings, store)
        return asyncio.run(pipeline.run_batch(count))
    finally:
        store.close()


def _schedule(settings: Settings) -> None:
    store = build_store(settings)
    try:
        pipeline = build_pipeline(settings, store)
        asyncio.run(
            run_daily(pipeline.run_batch, at=settings.schedule_at, timezone=settings.timezone)
        )
    finally:
        store.close()


def _serve(host: str, port: int) -> None:
    uvicorn.run("leetquiz.main:app", host=host, port=port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="leetquiz",
        description="Practice quizzes about solved coding problems, delivered over Telegram.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    batch = commands.add_parser("run-batch", help="Generate and deliver questions once")
    batch.add_argument("--count", type=int, default=None, help="Number of questions to send")

    commands.add_parser("schedule", help="Run the batch every day at LEETQUIZ_SCHEDULE_AT")

    serve = commands.add_parser("serve", help="Start the Telegram webhook server")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=3000)

    commands.add_parser("streak", help="Print the current streak")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        _serve(args.host, args.port)
        return 0

    try:
        settings = Settings.from_env()
        if args.command == "run-batch":
            report = _run_batch(settings, args.count)
            print(
                f"Generated {report.generated} MCQ(s), delivered {report.delivered} "
                f"of {report.selected} selected."
            )
            return 0 if not report.failures else 1
        if args.command == "schedule":
            _schedule(settings)
            return 0
        store = build_store(settings)
        try:
            streak = StreakCalculator(store, timezone=settings.timezone).current_streak()
        finally:
            store.close()
        print(f"Current streak: {streak}")
        return 0
    except LeetQuizError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
