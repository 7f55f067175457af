"""Run-scoped state of the interval engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from interval_split.core.recorder import RecorderState


class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TraversalPosition:
    round_index: int = 0
    repeat_index: int = 1
    block_index: int = 0
    remaining_sec: int = 0
    is_running: bool = False


@dataclass(frozen=True)
class EngineState:
    status: RunStatus
    position: TraversalPosition
    recorder: RecorderState | None
    elapsed_sec: int
    total_duration_sec: int
    progress: float
