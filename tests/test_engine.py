from __future__ import annotations

import pytest

from interval_split.core.engine import IntervalEngine
from interval_split.core.events import (
    BlockCompleted,
    EngineEvent,
    PlanCompleted,
    RoundCompleted,
    RunCompleted,
    RunStarted,
)
from interval_split.core.state import RunStatus
from interval_split.core.traversal import start_position
from interval_split.workout.library import default_plan
from interval_split.workout.model import Block, Plan, Round, WorkoutRecord


def _engine(plan: Plan, clock) -> tuple[IntervalEngine, list[WorkoutRecord], list[EngineEvent]]:
    records: list[WorkoutRecord] = []
    events: list[EngineEvent] = []
    engine = IntervalEngine(plan, sink=records.append, clock=clock)
    engine.subscribe(events.append)
    return engine, records, events


def _tick(engine: IntervalEngine, clock, times: int = 1) -> None:
    for _ in range(times):
        clock.advance(1)
        engine.tick()


def test_single_block_run_produces_one_record(clock) -> None:
    plan = Plan(rounds=(Round("r1", "Only", 1, (Block("b1", "fast", 5, 10.0),)),))
    engine, records, _ = _engine(plan, clock)

    engine.start()
    remaining: list[int] = []
    for _ in range(5):
        _tick(engine, clock)
        remaining.append(engine.position.remaining_sec)

    assert remaining == [4, 3, 2, 1, 0]
    assert engine.status is RunStatus.COMPLETED
    assert len(records) == 1
    record = records[0]
    assert record.status == "completed"
    assert record.total_duration_sec == 5
    assert record.ended_at is not None
    assert len(record.completed_rounds) == 1
    completed_round = record.completed_rounds[0]
    assert completed_round.completed_repeats == 1
    assert len(completed_round.blocks) == 1
    assert completed_round.blocks[0].actual_duration_sec == 5
    assert completed_round.blocks[0].planned_speed_kmh == 10.0


def test_full_plan_completes_once_after_total_ticks(clock) -> None:
    plan = default_plan()
    engine, records, events = _engine(plan, clock)
    total = engine.total_duration_sec

    engine.start()
    for i in range(total):
        assert engine.progress < 1.0
        _tick(engine, clock)
        if i < total - 1:
            assert engine.status is RunStatus.RUNNING

    assert engine.status is RunStatus.COMPLETED
    assert engine.progress == 1.0
    _tick(engine, clock, 3)
    assert len(records) == 1
    assert sum(isinstance(e, PlanCompleted) for e in events) == 1
    assert sum(isinstance(e, RunCompleted) for e in events) == 1
    assert [r.round_id for r in records[0].completed_rounds] == [
        "warmup",
        "round-1",
        "round-2",
        "cooldown",
    ]
    assert [r.completed_repeats for r in records[0].completed_rounds] == [1, 3, 3, 1]
    assert records[0].total_duration_sec == total


def test_repeat_order_is_reported_through_events(clock) -> None:
    plan = Plan(
        rounds=(
            Round("main", "Main", 3, (Block("f", "fast", 60, 12.0), Block("s", "slow", 120, 8.0))),
            Round("cool", "Cool", 1, (Block("c", "cooldown", 10, 7.0),)),
        )
    )
    engine, _, events = _engine(plan, clock)
    engine.start()
    _tick(engine, clock, 3 * 180)

    blocks = [(e.repeat_index, e.block_index) for e in events if isinstance(e, BlockCompleted)]
    assert blocks == [(1, 0), (1, 1), (2, 0), (2, 1), (3, 0), (3, 1)]
    rounds = [e for e in events if isinstance(e, RoundCompleted)]
    assert [(r.round_id, r.completed_repeats) for r in rounds] == [("main", 3)]
    assert engine.position.round_index == 1


def test_completed_repeats_follow_progress(clock) -> None:
    plan = Plan(rounds=(Round("r", "R", 3, (Block("b", "fast", 2, 10.0),)),))
    engine, _, _ = _engine(plan, clock)
    engine.start()
    _tick(engine, clock, 4)

    state = engine.snapshot().recorder
    assert state is not None
    assert state.rounds[0].completed_repeats == 2
    assert len(state.rounds[0].blocks) == 2


def test_empty_plan_completes_immediately(clock) -> None:
    engine, records, _ = _engine(Plan(), clock)
    engine.start()

    assert engine.status is RunStatus.COMPLETED
    assert engine.total_duration_sec == 0
    assert engine.progress == 0.0
    assert len(records) == 1
    assert records[0].total_duration_sec == 0
    assert records[0].completed_rounds == ()


def test_round_without_blocks_does_not_crash(clock) -> None:
    plan = Plan(
        rounds=(
            Round("w", "Warm", 1, (Block("w1", "warmup", 2, 8.0),)),
            Round("empty", "Empty", 3, ()),
            Round("c", "Cool", 1, (Block("c1", "cooldown", 1, 7.0),)),
        )
    )
    engine, records, _ = _engine(plan, clock)
    engine.start()
    _tick(engine, clock, 3)

    assert engine.status is RunStatus.COMPLETED
    assert [r.round_id for r in records[0].completed_rounds] == ["w", "c"]


def test_reset_mid_run_discards_everything(clock) -> None:
    plan = default_plan()
    engine, records, _ = _engine(plan, clock)
    engine.start()
    _tick(engine, clock, 400)

    engine.reset()

    assert engine.status is RunStatus.IDLE
    assert engine.position == start_position(plan)
    assert engine.snapshot().recorder is None
    assert engine.elapsed_sec == 0
    assert records == []

    _tick(engine, clock, 5)
    assert engine.position == start_position(plan)


def test_pause_freezes_position_and_excludes_paused_time(clock) -> None:
    plan = Plan(rounds=(Round("r", "R", 1, (Block("b", "fast", 3, 10.0),)),))
    engine, records, _ = _engine(plan, clock)
    engine.start()
    _tick(engine, clock, 2)

    engine.pause()
    frozen = engine.position
    assert engine.status is RunStatus.PAUSED
    clock.advance(30)
    engine.tick()
    engine.tick()
    assert engine.position.remaining_sec == frozen.remaining_sec
    assert engine.position.round_index == frozen.round_index
    assert engine.position.repeat_index == frozen.repeat_index
    assert engine.position.block_index == frozen.block_index

    engine.start()
    assert engine.status is RunStatus.RUNNING
    assert engine.position.remaining_sec == frozen.remaining_sec
    _tick(engine, clock)

    assert engine.status is RunStatus.COMPLETED
    record = records[0]
    assert record.completed_rounds[0].blocks[0].actual_duration_sec == 3
    assert record.total_duration_sec == 33


def test_double_start_is_a_no_op(clock) -> None:
    engine, _, events = _engine(default_plan(), clock)
    engine.start()
    started_at = engine.snapshot().recorder.started_at
    clock.advance(10)
    engine.start()

    assert sum(isinstance(e, RunStarted) for e in events) == 1
    assert engine.snapshot().recorder.started_at == started_at


def test_start_after_completion_requires_reset(clock) -> None:
    plan = Plan(rounds=(Round("r", "R", 1, (Block("b", "fast", 1, 10.0),)),))
    engine, records, _ = _engine(plan, clock)
    engine.start()
    _tick(engine, clock)
    engine.start()
    assert engine.status is RunStatus.COMPLETED

    engine.reset()
    engine.start()
    _tick(engine, clock)
    assert len(records) == 2


def test_abandon_stores_cancelled_record(clock) -> None:
    plan = default_plan()
    engine, records, _ = _engine(plan, clock)
    engine.start()
    _tick(engine, clock, 360)
    engine.pause()

    record = engine.abandon()

    assert record is not None
    assert records == [record]
    assert record.status == "cancelled"
    assert record.ended_at is None
    assert record.total_duration_sec == 360
    assert [r.round_id for r in record.completed_rounds] == ["warmup", "round-1"]
    assert engine.status is RunStatus.IDLE
    assert engine.abandon() is None


def test_sink_failure_does_not_roll_back(clock) -> None:
    def failing_sink(record: WorkoutRecord) -> None:
        raise OSError("disk full")

    plan = Plan(rounds=(Round("r", "R", 1, (Block("b", "fast", 1, 10.0),)),))
    engine = IntervalEngine(plan, sink=failing_sink, clock=clock)
    events: list[EngineEvent] = []
    engine.subscribe(events.append)
    engine.start()
    _tick(engine, clock)

    assert engine.status is RunStatus.COMPLETED
    assert any(isinstance(e, RunCompleted) for e in events)


def test_listener_failure_is_isolated(clock) -> None:
    plan = Plan(rounds=(Round("r", "R", 1, (Block("b", "fast", 2, 10.0),)),))
    engine, records, _ = _engine(plan, clock)

    def broken(_event: EngineEvent) -> None:
        raise RuntimeError("haptics unavailable")

    engine.subscribe(broken)
    engine.start()
    _tick(engine, clock, 2)
    assert len(records) == 1


def test_plan_cannot_change_mid_run(clock) -> None:
    engine, _, _ = _engine(default_plan(), clock)
    engine.start()
    with pytest.raises(RuntimeError):
        engine.plan = Plan()

    engine.reset()
    engine.plan = Plan()
    assert engine.total_duration_sec == 0
