"""Notifications emitted by the interval engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from loguru import logger

from interval_split.core.state import TraversalPosition
from interval_split.workout.model import CompletedBlock, WorkoutRecord


@dataclass(frozen=True)
class RunStarted:
    position: TraversalPosition


@dataclass(frozen=True)
class RunPaused:
    position: TraversalPosition


@dataclass(frozen=True)
class RunResumed:
    position: TraversalPosition


@dataclass(frozen=True)
class RunReset:
    pass


@dataclass(frozen=True)
class BlockCompleted:
    round_index: int
    repeat_index: int
    block_index: int
    block: CompletedBlock


@dataclass(frozen=True)
class RoundCompleted:
    round_index: int
    round_id: str
    completed_repeats: int


@dataclass(frozen=True)
class PlanCompleted:
    elapsed_sec: int


@dataclass(frozen=True)
class RunCompleted:
    record: WorkoutRecord


EngineEvent = Union[
    RunStarted,
    RunPaused,
    RunResumed,
    RunReset,
    BlockCompleted,
    RoundCompleted,
    PlanCompleted,
    RunCompleted,
]
EventListener = Callable[[EngineEvent], None]


class EventChannel:
    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event: EngineEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # Feedback is fire-and-forget.
                logger.exception(f"Event listener failed on {type(event).__name__}")
