"""Terminal CLI entrypoint for interval-split."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from loguru import logger

from interval_split.cli.formatting import (
    format_plan,
    format_record,
    format_stats,
    format_status,
)
from interval_split.core.engine import IntervalEngine
from interval_split.core.events import BlockCompleted, EngineEvent, RoundCompleted, RunCompleted
from interval_split.core.logger import setup_logger
from interval_split.core.scheduler import TickScheduler
from interval_split.workout.library import default_plan
from interval_split.workout.model import BLOCK_TAGS, Plan
from interval_split.workout.parser import PlanParseError, load_plan
from interval_split.workout.plan_store import PlanStore
from interval_split.workout.session_store import WorkoutHistory
from interval_split.workout.stats import compute_stats


def _default_data_dir() -> Path:
    return Path.home() / ".interval-split"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interval split training timer")
    parser.add_argument("--show", action="store_true", help="Print the current plan")
    parser.add_argument("--run", action="store_true", help="Run the current plan")
    parser.add_argument(
        "--plan",
        type=Path,
        default=None,
        help="Use this JSON plan file instead of the stored plan",
    )
    parser.add_argument(
        "--init-default",
        action="store_true",
        help="Store the built-in warm-up / 2 rounds / cool-down plan",
    )
    parser.add_argument(
        "--history",
        type=int,
        nargs="?",
        const=10,
        default=None,
        help="List the most recent workouts (default 10)",
    )
    parser.add_argument("--stats", action="store_true", help="Print workout statistics")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding plan.json and workouts.jsonl",
    )
    parser.add_argument(
        "--tick-seconds",
        type=float,
        default=1.0,
        help="Wall-clock seconds between ticks (each tick counts as one second)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file (rotated daily)",
    )
    return parser


def resolve_plan(plan_file: Path | None, store: PlanStore) -> Plan | None:
    if plan_file is not None:
        return load_plan(plan_file)
    return store.load()


def _print_feedback(event: EngineEvent) -> None:
    if isinstance(event, BlockCompleted):
        print(f"\a> {BLOCK_TAGS[event.block.tag]} done ({event.block.actual_duration_sec}s)")
    elif isinstance(event, RoundCompleted):
        print(f"\a>> Round complete ({event.completed_repeats} repeats)")
    elif isinstance(event, RunCompleted):
        print(f"\a>>> Workout {event.record.status}: {format_record(event.record)}")


async def run_workout(
    plan: Plan,
    history: WorkoutHistory,
    tick_seconds: float = 1.0,
) -> IntervalEngine:
    engine = IntervalEngine(plan, sink=history.submit)
    engine.subscribe(_print_feedback)
    scheduler = TickScheduler(
        engine,
        interval_sec=tick_seconds,
        on_tick=lambda state: print(format_status(plan, state)),
    )

    await scheduler.start()
    print(format_status(plan, engine.snapshot()))
    try:
        await scheduler.wait()
    except asyncio.CancelledError:
        await scheduler.abandon()
        raise
    return engine


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    setup_logger(level="DEBUG" if args.debug else "WARNING", log_file=args.log_file)

    data_dir = args.data_dir or _default_data_dir()
    store = PlanStore(data_dir / "plan.json")
    history = WorkoutHistory(data_dir / "workouts.jsonl")

    if args.init_default:
        path = store.save(default_plan())
        print(f"Default plan stored in {path}")

    if args.history is not None or args.stats:
        history.load()
        if args.history is not None:
            for record in history.recent(args.history):
                print(format_record(record))
        if args.stats:
            for line in format_stats(compute_stats(history.records)):
                print(line)

    if not (args.show or args.run):
        if not (args.init_default or args.history is not None or args.stats):
            parser.print_help()
            return 1
        return 0

    try:
        plan = resolve_plan(args.plan, store)
    except PlanParseError as exc:
        print(f"Invalid plan: {exc}")
        return 1
    if plan is None:
        print("No plan stored. Use --init-default or --plan FILE")
        return 1

    if args.show:
        for line in format_plan(plan):
            print(line)

    if args.run:
        history.load()
        try:
            asyncio.run(run_workout(plan, history, tick_seconds=args.tick_seconds))
        except KeyboardInterrupt:
            logger.info("Run interrupted")
            print("Run abandoned")
            return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
