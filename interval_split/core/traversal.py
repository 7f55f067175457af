"""Walks a plan round by round, repeat by repeat, block by block.

Every call to :func:`advance` consumes exactly one second. When the current
block runs out, the first matching rule wins:

1. next block of the same repeat,
2. next repeat of the same round,
3. next runnable round,
4. plan complete.

Rounds without blocks (or with a repeat count below 1) are never entered.
Blocks lasting zero seconds are completed as soon as they are entered, so a
plan lasting ``T`` seconds completes after exactly ``T`` ticks.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from interval_split.core.state import TraversalPosition
from interval_split.workout.model import Block, Plan, Round


TransitionKind = Literal["next_block", "next_repeat", "next_round", "plan_complete"]


@dataclass(frozen=True)
class Transition:
    kind: TransitionKind
    exited: TraversalPosition
    entered: TraversalPosition
    block: Block | None


@dataclass(frozen=True)
class Advance:
    position: TraversalPosition
    transitions: tuple[Transition, ...] = ()

    @property
    def completed(self) -> bool:
        return any(t.kind == "plan_complete" for t in self.transitions)


def current_round(plan: Plan, position: TraversalPosition) -> Round | None:
    if 0 <= position.round_index < len(plan.rounds):
        return plan.rounds[position.round_index]
    return None


def current_block(plan: Plan, position: TraversalPosition) -> Block | None:
    round_ = current_round(plan, position)
    if round_ is None or not round_.is_runnable:
        return None
    if 0 <= position.block_index < len(round_.blocks):
        return round_.blocks[position.block_index]
    return None


def start_position(plan: Plan) -> TraversalPosition:
    index = _next_runnable_round(plan, 0)
    if index is None:
        return TraversalPosition()
    return TraversalPosition(
        round_index=index,
        remaining_sec=plan.rounds[index].blocks[0].duration_sec,
    )


def advance(plan: Plan, position: TraversalPosition) -> Advance:
    if position.remaining_sec > 1:
        return Advance(replace(position, remaining_sec=position.remaining_sec - 1))

    if current_block(plan, position) is None:
        return settle(plan, position)

    transition = complete_block(plan, position)
    if transition.kind == "plan_complete":
        return Advance(transition.entered, (transition,))
    rest = settle(plan, transition.entered)
    return Advance(rest.position, (transition,) + rest.transitions)


def settle(plan: Plan, position: TraversalPosition) -> Advance:
    """Complete zero-length blocks until one with time left is reached."""
    transitions: list[Transition] = []
    while True:
        if current_block(plan, position) is None:
            done = replace(position, remaining_sec=0, is_running=False)
            transitions.append(Transition("plan_complete", position, done, None))
            return Advance(done, tuple(transitions))
        if position.remaining_sec > 0:
            return Advance(position, tuple(transitions))

        transition = complete_block(plan, position)
        transitions.append(transition)
        position = transition.entered
        if transition.kind == "plan_complete":
            return Advance(position, tuple(transitions))


def complete_block(plan: Plan, position: TraversalPosition) -> Transition:
    """Apply the block-complete rules to a position that sits on a block."""
    round_ = plan.rounds[position.round_index]
    block = round_.blocks[position.block_index]

    if position.block_index < len(round_.blocks) - 1:
        next_index = position.block_index + 1
        entered = replace(
            position,
            block_index=next_index,
            remaining_sec=round_.blocks[next_index].duration_sec,
        )
        return Transition("next_block", position, entered, block)

    if position.repeat_index < round_.repeat_count:
        entered = replace(
            position,
            repeat_index=position.repeat_index + 1,
            block_index=0,
            remaining_sec=round_.blocks[0].duration_sec,
        )
        return Transition("next_repeat", position, entered, block)

    next_round = _next_runnable_round(plan, position.round_index + 1)
    if next_round is not None:
        entered = replace(
            position,
            round_index=next_round,
            repeat_index=1,
            block_index=0,
            remaining_sec=plan.rounds[next_round].blocks[0].duration_sec,
        )
        return Transition("next_round", position, entered, block)

    done = replace(position, remaining_sec=0, is_running=False)
    return Transition("plan_complete", position, done, block)


def _next_runnable_round(plan: Plan, start: int) -> int | None:
    for index in range(start, len(plan.rounds)):
        if plan.rounds[index].is_runnable:
            return index
    return None
