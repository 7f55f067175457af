"""Text rendering helpers for the terminal."""

from __future__ import annotations

from interval_split.core.state import EngineState
from interval_split.core.traversal import current_block, current_round
from interval_split.workout.model import BLOCK_TAGS, Plan, WorkoutRecord
from interval_split.workout.stats import WorkoutStats


def format_clock(seconds: int) -> str:
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


def format_pace(kmh: float) -> str:
    """Minutes per kilometre, e.g. 12 km/h -> 5'00."""
    if kmh <= 0:
        return "-"
    minutes_per_km = 60.0 / kmh
    mins = int(minutes_per_km)
    secs = int((minutes_per_km - mins) * 60)
    return f"{mins}'{secs:02d}"


def format_status(plan: Plan, state: EngineState) -> str:
    pos = state.position
    round_ = current_round(plan, pos)
    block = current_block(plan, pos)
    if round_ is None or block is None:
        return f"[{state.status.value}] {state.progress * 100:5.1f}%"
    return (
        f"[{state.status.value}] {round_.name} "
        f"rep {pos.repeat_index}/{round_.repeat_count} "
        f"block {pos.block_index + 1}/{len(round_.blocks)} "
        f"{BLOCK_TAGS[block.tag]:<9} {format_clock(pos.remaining_sec)} "
        f"@ {block.speed_kmh:g} km/h ({format_pace(block.speed_kmh)}/km) "
        f"{state.progress * 100:5.1f}%"
    )


def format_plan(plan: Plan) -> list[str]:
    if not plan.rounds:
        return ["(empty plan)"]
    lines: list[str] = []
    for round_ in plan.rounds:
        fixed = " [fixed]" if round_.is_fixed else ""
        lines.append(
            f"{round_.name}{fixed} x{round_.repeat_count} "
            f"({format_clock(round_.total_duration_sec)})"
        )
        for block in round_.blocks:
            lines.append(
                f"  - {BLOCK_TAGS[block.tag]:<9} {format_clock(block.duration_sec)} "
                f"@ {block.speed_kmh:g} km/h ({format_pace(block.speed_kmh)}/km)"
            )
    lines.append(f"Total: {format_clock(plan.total_duration_sec)}")
    return lines


def format_record(record: WorkoutRecord) -> str:
    return (
        f"{record.started_at.strftime('%Y-%m-%d %H:%M')} {record.status:<9} "
        f"{format_clock(record.total_duration_sec)} "
        f"{len(record.completed_rounds)} rounds "
        f"{record.estimated_distance_km:.2f} km"
    )


def format_stats(stats: WorkoutStats) -> list[str]:
    return [
        f"Workouts:      {stats.total_workouts}",
        f"Total time:    {format_clock(stats.total_duration_sec)}",
        f"Distance:      {stats.total_distance_km:.2f} km (estimated)",
        f"Rounds:        {stats.completed_rounds}",
        f"Average:       {format_clock(round(stats.average_duration_sec))}",
        f"Longest:       {format_clock(stats.longest_workout_sec)}",
        f"Shortest:      {format_clock(stats.shortest_workout_sec)}",
    ]
