"""Accumulates what actually happened during a run."""

from __future__ import annotations

import copy
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from interval_split.workout.model import (
    Block,
    CompletedBlock,
    CompletedRound,
    Plan,
    Round,
    WorkoutRecord,
    WorkoutStatus,
)


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class RecorderState:
    started_at: datetime
    block_started_at: datetime
    paused_at: datetime | None = None
    rounds: tuple[CompletedRound, ...] = ()


class RunRecorder:
    """Run-scoped accumulator; paused time never counts towards a block."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self.state: RecorderState | None = None

    @property
    def active(self) -> bool:
        return self.state is not None

    def begin(self, first_round: Round | None) -> None:
        now = self._clock()
        rounds: tuple[CompletedRound, ...] = ()
        if first_round is not None:
            rounds = (CompletedRound(round_id=first_round.id, round_name=first_round.name),)
        self.state = RecorderState(started_at=now, block_started_at=now, rounds=rounds)

    def pause(self) -> None:
        state = self._require()
        if state.paused_at is None:
            self.state = replace(state, paused_at=self._clock())

    def resume(self) -> None:
        state = self._require()
        if state.paused_at is None:
            return
        paused_for = self._clock() - state.paused_at
        self.state = replace(
            state,
            block_started_at=state.block_started_at + paused_for,
            paused_at=None,
        )

    def complete_block(self, block: Block) -> CompletedBlock:
        state = self._require()
        now = self._clock()
        actual = max(0, int((now - state.block_started_at).total_seconds()))
        completed = CompletedBlock(
            block_id=block.id,
            tag=block.tag,
            planned_duration_sec=block.duration_sec,
            actual_duration_sec=actual,
            planned_speed_kmh=block.speed_kmh,
        )
        current = state.rounds[-1]
        self.state = replace(
            state,
            block_started_at=now,
            rounds=state.rounds[:-1] + (replace(current, blocks=current.blocks + (completed,)),),
        )
        return completed

    def finish_repeat(self, repeats_done: int) -> CompletedRound:
        state = self._require()
        current = replace(state.rounds[-1], completed_repeats=repeats_done)
        self.state = replace(state, rounds=state.rounds[:-1] + (current,))
        return current

    def enter_round(self, round_: Round) -> None:
        state = self._require()
        entry = CompletedRound(round_id=round_.id, round_name=round_.name)
        self.state = replace(state, rounds=state.rounds + (entry,))

    def finalize(self, plan: Plan, status: WorkoutStatus) -> WorkoutRecord:
        state = self._require()
        now = self._clock()
        record = WorkoutRecord(
            id=str(uuid4()),
            started_at=state.started_at,
            ended_at=now if status == "completed" else None,
            config=copy.deepcopy(plan),
            completed_rounds=state.rounds,
            total_duration_sec=max(0, int((now - state.started_at).total_seconds())),
            status=status,
        )
        self.state = None
        return record

    def discard(self) -> None:
        self.state = None

    def _require(self) -> RecorderState:
        if self.state is None:
            raise RuntimeError("No run is being recorded")
        return self.state
