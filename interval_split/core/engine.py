"""Interval execution engine driven by one-second ticks."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable

from loguru import logger

from interval_split.core import progress as progress_calc
from interval_split.core.events import (
    BlockCompleted,
    EventChannel,
    EventListener,
    PlanCompleted,
    RoundCompleted,
    RunCompleted,
    RunPaused,
    RunReset,
    RunResumed,
    RunStarted,
)
from interval_split.core.recorder import Clock, RunRecorder, utc_now
from interval_split.core.state import EngineState, RunStatus
from interval_split.core.traversal import (
    Advance,
    Transition,
    advance,
    current_round,
    settle,
    start_position,
)
from interval_split.workout.model import Plan, WorkoutRecord


RecordSink = Callable[[WorkoutRecord], None]


class IntervalEngine:
    """Single-threaded state machine: Idle, Running, Paused, Completed.

    Commands issued in a state where they make no sense are ignored. The
    only outside effect is one ``WorkoutRecord`` handed to ``sink`` when the
    plan completes (or when the run is explicitly abandoned).
    """

    def __init__(
        self,
        plan: Plan,
        sink: RecordSink | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._plan = plan
        self._sink = sink
        self._recorder = RunRecorder(clock)
        self.events = EventChannel()
        self.status = RunStatus.IDLE
        self.position = start_position(plan)

    @property
    def plan(self) -> Plan:
        return self._plan

    @plan.setter
    def plan(self, plan: Plan) -> None:
        if self.status in (RunStatus.RUNNING, RunStatus.PAUSED):
            raise RuntimeError("Cannot change the plan while a run is in progress")
        self._plan = plan
        self.status = RunStatus.IDLE
        self.position = start_position(plan)

    @property
    def is_running(self) -> bool:
        return self.status is RunStatus.RUNNING

    @property
    def total_duration_sec(self) -> int:
        return progress_calc.total_duration(self._plan)

    @property
    def elapsed_sec(self) -> int:
        return progress_calc.elapsed(self._plan, self.position)

    @property
    def progress(self) -> float:
        return progress_calc.progress_fraction(self._plan, self.position)

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        return self.events.subscribe(listener)

    def snapshot(self) -> EngineState:
        return EngineState(
            status=self.status,
            position=self.position,
            recorder=self._recorder.state,
            elapsed_sec=self.elapsed_sec,
            total_duration_sec=self.total_duration_sec,
            progress=self.progress,
        )

    def start(self) -> None:
        if self.status is RunStatus.RUNNING:
            logger.debug("start ignored: already running")
            return
        if self.status is RunStatus.COMPLETED:
            logger.debug("start ignored: run completed, reset first")
            return

        if self.status is RunStatus.PAUSED:
            self._recorder.resume()
            self.status = RunStatus.RUNNING
            self.position = replace(self.position, is_running=True)
            self.events.emit(RunResumed(self.position))
            return

        self.position = replace(start_position(self._plan), is_running=True)
        first_round = None if self._plan.is_empty else current_round(self._plan, self.position)
        self._recorder.begin(first_round)
        self.status = RunStatus.RUNNING
        logger.info(
            f"Run started: {len(self._plan.rounds)} rounds, {self.total_duration_sec}s planned"
        )
        self.events.emit(RunStarted(self.position))
        self._apply(settle(self._plan, self.position))

    def pause(self) -> None:
        if self.status is not RunStatus.RUNNING:
            logger.debug(f"pause ignored while {self.status.value}")
            return
        self._recorder.pause()
        self.status = RunStatus.PAUSED
        self.position = replace(self.position, is_running=False)
        self.events.emit(RunPaused(self.position))

    def tick(self) -> None:
        if self.status is not RunStatus.RUNNING:
            logger.debug(f"tick ignored while {self.status.value}")
            return
        self._apply(advance(self._plan, self.position))

    def reset(self) -> None:
        """Return to Idle, dropping the run without producing a record."""
        if self._recorder.active:
            logger.info("Run reset; in-progress recording discarded")
        self._recorder.discard()
        self.status = RunStatus.IDLE
        self.position = start_position(self._plan)
        self.events.emit(RunReset())

    def abandon(self) -> WorkoutRecord | None:
        """Stop a running or paused run and keep it as a cancelled record."""
        if self.status not in (RunStatus.RUNNING, RunStatus.PAUSED):
            logger.debug(f"abandon ignored while {self.status.value}")
            return None
        record = self._recorder.finalize(self._plan, "cancelled")
        self._submit(record)
        self.status = RunStatus.IDLE
        self.position = start_position(self._plan)
        return record

    def _apply(self, step: Advance) -> None:
        self.position = step.position
        for transition in step.transitions:
            self._record(transition)
        if step.completed:
            self._complete()

    def _record(self, transition: Transition) -> None:
        exited = transition.exited
        logger.debug(
            f"{transition.kind}: round {exited.round_index} repeat {exited.repeat_index} "
            f"block {exited.block_index}"
        )
        if transition.block is None:
            return

        completed = self._recorder.complete_block(transition.block)
        self.events.emit(
            BlockCompleted(
                round_index=exited.round_index,
                repeat_index=exited.repeat_index,
                block_index=exited.block_index,
                block=completed,
            )
        )

        if transition.kind == "next_repeat":
            self._recorder.finish_repeat(exited.repeat_index)
        elif transition.kind in ("next_round", "plan_complete"):
            round_ = self._plan.rounds[exited.round_index]
            self._recorder.finish_repeat(round_.repeat_count)
            self.events.emit(
                RoundCompleted(
                    round_index=exited.round_index,
                    round_id=round_.id,
                    completed_repeats=round_.repeat_count,
                )
            )
            if transition.kind == "next_round":
                self._recorder.enter_round(self._plan.rounds[transition.entered.round_index])

    def _complete(self) -> None:
        self.status = RunStatus.COMPLETED
        self.events.emit(PlanCompleted(self.elapsed_sec))
        record = self._recorder.finalize(self._plan, "completed")
        logger.info(f"Plan completed in {record.total_duration_sec}s")
        self._submit(record)

    def _submit(self, record: WorkoutRecord) -> None:
        if self._sink is not None:
            try:
                self._sink(record)
            except Exception:
                logger.exception(f"Persistence sink rejected workout {record.id}")
        self.events.emit(RunCompleted(record))

