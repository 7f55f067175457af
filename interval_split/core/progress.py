"""Planned and elapsed time for a position within a plan."""

from __future__ import annotations

from interval_split.core.state import TraversalPosition
from interval_split.workout.model import Plan


def total_duration(plan: Plan) -> int:
    return plan.total_duration_sec


def elapsed(plan: Plan, position: TraversalPosition) -> int:
    rounds = plan.rounds
    seconds = sum(round_.total_duration_sec for round_ in rounds[: position.round_index])
    if position.round_index >= len(rounds):
        return seconds

    round_ = rounds[position.round_index]
    if not round_.is_runnable:
        return seconds

    seconds += round_.repeat_duration_sec * (position.repeat_index - 1)
    seconds += sum(block.duration_sec for block in round_.blocks[: position.block_index])
    if position.block_index < len(round_.blocks):
        seconds += round_.blocks[position.block_index].duration_sec - position.remaining_sec
    return seconds


def progress_fraction(plan: Plan, position: TraversalPosition) -> float:
    total = total_duration(plan)
    if total <= 0:
        return 0.0
    return elapsed(plan, position) / total
