from __future__ import annotations

from interval_split.core.state import TraversalPosition
from interval_split.core.traversal import advance, complete_block, settle, start_position
from interval_split.workout.model import Block, Plan, Round


def _single_block_plan(duration: int = 5) -> Plan:
    return Plan(rounds=(Round("r1", "Only", 1, (Block("b1", "fast", duration, 10.0),)),))


def test_countdown_then_completion() -> None:
    plan = _single_block_plan(5)
    position = start_position(plan)
    assert position == TraversalPosition(0, 1, 0, 5)

    remaining: list[int] = []
    completed_at: list[int] = []
    for tick in range(1, 6):
        step = advance(plan, position)
        position = step.position
        remaining.append(position.remaining_sec)
        if step.completed:
            completed_at.append(tick)

    assert remaining == [4, 3, 2, 1, 0]
    assert completed_at == [5]
    assert position.is_running is False


def test_repeats_visit_blocks_in_order_before_next_round() -> None:
    plan = Plan(
        rounds=(
            Round(
                "main",
                "Main",
                3,
                (Block("fast", "fast", 60, 12.0), Block("slow", "slow", 120, 8.0)),
            ),
            Round("cool", "Cool", 1, (Block("cd", "cooldown", 300, 7.0),)),
        )
    )
    position = start_position(plan)
    visited: list[tuple[int, int]] = []
    kinds: list[str] = []
    while position.round_index == 0:
        transition = complete_block(plan, position)
        visited.append((transition.exited.repeat_index, transition.exited.block_index))
        kinds.append(transition.kind)
        position = transition.entered

    assert visited == [(1, 0), (1, 1), (2, 0), (2, 1), (3, 0), (3, 1)]
    assert kinds == [
        "next_block",
        "next_repeat",
        "next_block",
        "next_repeat",
        "next_block",
        "next_round",
    ]
    assert position == TraversalPosition(1, 1, 0, 300)


def test_round_without_blocks_is_skipped() -> None:
    plan = Plan(
        rounds=(
            Round("empty-a", "Empty", 2, ()),
            Round("main", "Main", 2, (Block("b", "fast", 2, 10.0),)),
            Round("empty-b", "Empty", 1, ()),
        )
    )
    position = start_position(plan)
    assert position.round_index == 1

    ticks = 0
    step = advance(plan, position)
    ticks += 1
    while not step.completed:
        step = advance(plan, step.position)
        ticks += 1
    assert ticks == plan.total_duration_sec == 4


def test_zero_length_blocks_complete_on_entry() -> None:
    plan = Plan(
        rounds=(
            Round(
                "r",
                "R",
                1,
                (
                    Block("z", "warmup", 0, 6.0),
                    Block("a", "fast", 3, 12.0),
                    Block("z2", "slow", 0, 8.0),
                    Block("b", "slow", 1, 8.0),
                ),
            ),
        )
    )
    step = settle(plan, start_position(plan))
    assert [t.kind for t in step.transitions] == ["next_block"]
    assert step.position.block_index == 1
    assert step.position.remaining_sec == 3

    position = step.position
    for _ in range(2):
        position = advance(plan, position).position
    step = advance(plan, position)
    assert [t.block.id for t in step.transitions if t.block] == ["a", "z2"]
    assert step.position.block_index == 3


def test_empty_plan_completes_on_settle() -> None:
    plan = Plan()
    step = settle(plan, start_position(plan))
    assert step.completed
    assert step.transitions[0].block is None
    assert advance(plan, step.position).completed
