"""Aggregate statistics over stored workout records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timezone
from typing import Iterable

from interval_split.workout.model import WorkoutRecord


@dataclass(frozen=True)
class WorkoutStats:
    total_workouts: int
    total_duration_sec: int
    total_distance_km: float
    completed_rounds: int
    average_duration_sec: float
    longest_workout_sec: int
    shortest_workout_sec: int


@dataclass(frozen=True)
class DailyWorkoutRecord:
    day: date
    records: tuple[WorkoutRecord, ...]
    total_duration_sec: int
    total_rounds: int


def compute_stats(records: Iterable[WorkoutRecord]) -> WorkoutStats:
    """Summarise completed workouts; cancelled or paused runs are ignored."""
    completed = [record for record in records if record.status == "completed"]
    if not completed:
        return WorkoutStats(0, 0, 0.0, 0, 0.0, 0, 0)

    durations = [record.total_duration_sec for record in completed]
    total_duration = sum(durations)
    return WorkoutStats(
        total_workouts=len(completed),
        total_duration_sec=total_duration,
        total_distance_km=sum(record.estimated_distance_km for record in completed),
        completed_rounds=sum(len(record.completed_rounds) for record in completed),
        average_duration_sec=total_duration / len(completed),
        longest_workout_sec=max(durations),
        shortest_workout_sec=min(durations),
    )


def record_day(record: WorkoutRecord) -> date:
    started = record.started_at
    if started.tzinfo is not None:
        started = started.astimezone(timezone.utc)
    return started.date()


def daily_records(records: Iterable[WorkoutRecord], day: date) -> DailyWorkoutRecord:
    return _summarise_day(day, [record for record in records if record_day(record) == day])


def all_daily_records(records: Iterable[WorkoutRecord]) -> list[DailyWorkoutRecord]:
    by_day: dict[date, list[WorkoutRecord]] = {}
    for record in records:
        by_day.setdefault(record_day(record), []).append(record)
    return [
        _summarise_day(day, by_day[day])
        for day in sorted(by_day, reverse=True)
    ]


def _summarise_day(day: date, records: list[WorkoutRecord]) -> DailyWorkoutRecord:
    return DailyWorkoutRecord(
        day=day,
        records=tuple(records),
        total_duration_sec=sum(
            record.total_duration_sec for record in records if record.status == "completed"
        ),
        total_rounds=sum(len(record.completed_rounds) for record in records),
    )
