"""Local persistence for finished and abandoned interval workouts."""

from __future__ import annotations

import json
from dataclasses import asdict, replace
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from interval_split.workout.model import CompletedBlock, CompletedRound, WorkoutRecord
from interval_split.workout.parser import plan_from_dict, plan_to_dict


def _default_history_path() -> Path:
    return Path.home() / ".interval-split" / "workouts.jsonl"


def record_to_dict(record: WorkoutRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "started_at": record.started_at.isoformat(),
        "ended_at": record.ended_at.isoformat() if record.ended_at else None,
        "config": plan_to_dict(record.config),
        "completed_rounds": [
            {
                "round_id": round_.round_id,
                "round_name": round_.round_name,
                "completed_repeats": round_.completed_repeats,
                "blocks": [asdict(block) for block in round_.blocks],
            }
            for round_ in record.completed_rounds
        ],
        "total_duration_sec": record.total_duration_sec,
        "status": record.status,
    }


def record_from_dict(item: dict[str, Any]) -> WorkoutRecord:
    ended_at = item.get("ended_at")
    return WorkoutRecord(
        id=str(item["id"]),
        started_at=datetime.fromisoformat(item["started_at"]),
        ended_at=datetime.fromisoformat(ended_at) if ended_at else None,
        config=plan_from_dict(item["config"]),
        completed_rounds=tuple(
            CompletedRound(
                round_id=raw["round_id"],
                round_name=raw["round_name"],
                completed_repeats=int(raw["completed_repeats"]),
                blocks=tuple(CompletedBlock(**block) for block in raw["blocks"]),
            )
            for raw in item["completed_rounds"]
        ),
        total_duration_sec=int(item["total_duration_sec"]),
        status=item["status"],
    )


class WorkoutHistory:
    """Workout records kept newest first, backed by a JSONL file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or _default_history_path()
        self.records: list[WorkoutRecord] = []

    def load(self) -> list[WorkoutRecord]:
        self.records = []
        if not self.path.exists():
            return self.records

        lines = self.path.read_text(encoding="utf-8").splitlines()
        for lineno, raw in reversed(list(enumerate(lines, start=1))):
            if not raw.strip():
                continue
            try:
                self.records.append(record_from_dict(json.loads(raw)))
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning(f"Skipping unreadable workout record {self.path}:{lineno} ({exc})")
        return self.records

    def recent(self, limit: int = 20) -> list[WorkoutRecord]:
        return self.records[:limit]

    def submit(self, record: WorkoutRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record_to_dict(record), ensure_ascii=True) + "\n")
        self.records.insert(0, record)
        logger.info(f"Stored workout {record.id} ({record.status}, {record.total_duration_sec}s)")

    def update(self, record_id: str, **changes: Any) -> WorkoutRecord | None:
        for i, record in enumerate(self.records):
            if record.id == record_id:
                updated = replace(record, **changes)
                self.records[i] = updated
                self._rewrite()
                return updated
        return None

    def delete(self, record_id: str) -> bool:
        remaining = [record for record in self.records if record.id != record_id]
        if len(remaining) == len(self.records):
            return False
        self.records = remaining
        self._rewrite()
        return True

    def clear(self) -> None:
        self.records = []
        self._rewrite()

    def _rewrite(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # File order is oldest first so that appends stay cheap.
        lines = [
            json.dumps(record_to_dict(record), ensure_ascii=True)
            for record in reversed(self.records)
        ]
        self.path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
