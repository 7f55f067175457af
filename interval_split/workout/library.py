"""Built-in interval plan and plan editing helpers."""

from __future__ import annotations

import math
from dataclasses import replace
from uuid import uuid4

from interval_split.workout.model import BLOCK_TAGS, Block, BlockTag, Plan, Round


MAX_ROUNDS = 5
MAX_REPEATS = 100
NEW_BLOCK_DURATION_SEC = 60
NEW_BLOCK_SPEED_KMH = 10.0
COOLDOWN_ROUND_ID = "cooldown"


class PlanEditError(ValueError):
    """Raised when an edit would break the plan's round policy."""


def default_plan() -> Plan:
    return Plan(
        rounds=(
            Round(
                id="warmup",
                name="Warm-up",
                repeat_count=1,
                is_fixed=True,
                blocks=(Block("warmup-block", "warmup", 300, 8.0),),
            ),
            Round(
                id="round-1",
                name="Round 1",
                repeat_count=3,
                blocks=(
                    Block("round-1-fast", "fast", 60, 12.0),
                    Block("round-1-slow", "slow", 120, 8.0),
                ),
            ),
            Round(
                id="round-2",
                name="Round 2",
                repeat_count=3,
                blocks=(
                    Block("round-2-fast", "fast", 90, 13.0),
                    Block("round-2-slow", "slow", 180, 9.0),
                ),
            ),
            Round(
                id=COOLDOWN_ROUND_ID,
                name="Cool-down",
                repeat_count=1,
                is_fixed=True,
                blocks=(Block("cooldown-block", "cooldown", 300, 7.0),),
            ),
        )
    )


def new_round(number: int, key: str) -> Round:
    round_id = f"round-{key}"
    return Round(
        id=round_id,
        name=f"Round {number}",
        repeat_count=3,
        blocks=(
            Block(f"{round_id}-fast", "fast", 60, 12.0),
            Block(f"{round_id}-slow", "slow", 120, 8.0),
        ),
    )


def editable_rounds(plan: Plan) -> list[Round]:
    return [round_ for round_ in plan.rounds if not round_.is_fixed]


def add_round(plan: Plan, round_: Round | None = None, *, key: str | None = None) -> Plan:
    """Insert a round ahead of the fixed cool-down round.

    Fixed rounds do not count towards ``MAX_ROUNDS``.
    """
    editable = editable_rounds(plan)
    if len(editable) >= MAX_ROUNDS:
        raise PlanEditError(f"A plan can hold at most {MAX_ROUNDS} rounds")

    if round_ is None:
        number = len(editable) + 1
        round_ = new_round(number, key or _free_round_key(plan))
    if plan.find_round(round_.id) is not None:
        raise PlanEditError(f"Round id '{round_.id}' already exists")

    rounds = list(plan.rounds)
    for i, existing in enumerate(rounds):
        if existing.is_fixed and existing.id == COOLDOWN_ROUND_ID:
            rounds.insert(i, round_)
            break
    else:
        rounds.append(round_)
    return Plan(rounds=tuple(rounds))


def update_round(plan: Plan, round_id: str, updated: Round) -> Plan:
    if plan.find_round(round_id) is None:
        raise PlanEditError(f"Unknown round '{round_id}'")
    return Plan(
        rounds=tuple(updated if r.id == round_id else r for r in plan.rounds)
    )


def delete_round(plan: Plan, round_id: str) -> Plan:
    target = plan.find_round(round_id)
    if target is None:
        raise PlanEditError(f"Unknown round '{round_id}'")
    if target.is_fixed:
        raise PlanEditError(f"Round '{target.name}' is fixed and cannot be deleted")
    return Plan(rounds=tuple(r for r in plan.rounds if r.id != round_id))


def set_repeat_count(plan: Plan, round_id: str, repeat_count: int) -> Plan:
    target = plan.find_round(round_id)
    if target is None:
        raise PlanEditError(f"Unknown round '{round_id}'")
    if target.is_fixed:
        raise PlanEditError(f"Round '{target.name}' is fixed; its repeat count is locked")
    if not 1 <= repeat_count <= MAX_REPEATS:
        raise PlanEditError(f"repeat_count must be between 1 and {MAX_REPEATS}")
    return update_round(plan, round_id, replace(target, repeat_count=repeat_count))


def rename_round(round_: Round, name: str) -> Round:
    return replace(round_, name=name)


def add_block(round_: Round, tag: BlockTag, key: str | None = None) -> Round:
    """Append a one-minute block at 10 km/h; the caller edits it afterwards."""
    if tag not in BLOCK_TAGS:
        raise PlanEditError(f"Unknown block tag '{tag}'")
    block_id = f"{round_.id}-{key or uuid4().hex[:8]}"
    if any(block.id == block_id for block in round_.blocks):
        raise PlanEditError(f"Block id '{block_id}' already exists")
    block = Block(block_id, tag, NEW_BLOCK_DURATION_SEC, NEW_BLOCK_SPEED_KMH)
    return replace(round_, blocks=(*round_.blocks, block))


def update_block(round_: Round, block_id: str, updated: Block) -> Round:
    _require_block(round_, block_id)
    return replace(
        round_,
        blocks=tuple(updated if b.id == block_id else b for b in round_.blocks),
    )


def delete_block(round_: Round, block_id: str) -> Round:
    _require_block(round_, block_id)
    return replace(round_, blocks=tuple(b for b in round_.blocks if b.id != block_id))


def parse_duration(minutes: str, seconds: str) -> int:
    return max(0, _lenient_int(minutes)) * 60 + max(0, _lenient_int(seconds))


def parse_speed(text: str) -> float:
    try:
        value = float(text.strip())
    except ValueError:
        return 0.0
    if not math.isfinite(value) or value <= 0:
        return 0.0
    return value


def _lenient_int(text: str) -> int:
    # Leading digits only, like a text field that accepts partial input.
    digits = ""
    for ch in text.strip():
        if not (ch.isascii() and ch.isdigit()):
            break
        digits += ch
    return int(digits) if digits else 0


def _free_round_key(plan: Plan) -> str:
    number = len(plan.rounds) + 1
    while plan.find_round(f"round-{number}") is not None:
        number += 1
    return str(number)


def _require_block(round_: Round, block_id: str) -> None:
    if not any(block.id == block_id for block in round_.blocks):
        raise PlanEditError(f"Unknown block '{block_id}' in round '{round_.name}'")
