"""Interval plan and workout record models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


BlockTag = Literal["warmup", "fast", "slow", "cooldown"]
WorkoutStatus = Literal["completed", "paused", "cancelled"]

BLOCK_TAGS: dict[str, str] = {
    "warmup": "Warm-up",
    "fast": "Fast",
    "slow": "Slow",
    "cooldown": "Cool-down",
}


@dataclass(frozen=True)
class Block:
    id: str
    tag: BlockTag
    duration_sec: int
    speed_kmh: float


@dataclass(frozen=True)
class Round:
    id: str
    name: str
    repeat_count: int
    blocks: tuple[Block, ...]
    is_fixed: bool = False

    @property
    def repeat_duration_sec(self) -> int:
        return sum(block.duration_sec for block in self.blocks)

    @property
    def total_duration_sec(self) -> int:
        if not self.is_runnable:
            return 0
        return self.repeat_duration_sec * self.repeat_count

    @property
    def is_runnable(self) -> bool:
        return bool(self.blocks) and self.repeat_count >= 1


@dataclass(frozen=True)
class Plan:
    rounds: tuple[Round, ...] = ()

    @property
    def total_duration_sec(self) -> int:
        return sum(round_.total_duration_sec for round_ in self.rounds)

    @property
    def is_empty(self) -> bool:
        return not any(round_.is_runnable for round_ in self.rounds)

    def find_round(self, round_id: str) -> Round | None:
        for round_ in self.rounds:
            if round_.id == round_id:
                return round_
        return None


@dataclass(frozen=True)
class CompletedBlock:
    block_id: str
    tag: BlockTag
    planned_duration_sec: int
    actual_duration_sec: int
    planned_speed_kmh: float

    @property
    def estimated_distance_km(self) -> float:
        return self.planned_speed_kmh * self.actual_duration_sec / 3600.0


@dataclass(frozen=True)
class CompletedRound:
    round_id: str
    round_name: str
    completed_repeats: int = 0
    blocks: tuple[CompletedBlock, ...] = ()


@dataclass(frozen=True)
class WorkoutRecord:
    id: str
    started_at: datetime
    ended_at: datetime | None
    config: Plan
    completed_rounds: tuple[CompletedRound, ...]
    total_duration_sec: int
    status: WorkoutStatus

    @property
    def estimated_distance_km(self) -> float:
        return sum(
            block.estimated_distance_km
            for round_ in self.completed_rounds
            for block in round_.blocks
        )
