"""Local persistence for the user's current interval plan."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

from interval_split.workout.model import Plan
from interval_split.workout.parser import PlanParseError, load_plan, plan_to_dict


def _default_plan_path() -> Path:
    return Path.home() / ".interval-split" / "plan.json"


class PlanStore:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or _default_plan_path()

    def load(self) -> Plan | None:
        if not self.path.exists():
            return None
        try:
            return load_plan(self.path)
        except PlanParseError as exc:
            logger.warning(f"Ignoring unreadable plan at {self.path}: {exc}")
            return None

    def save(self, plan: Plan) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(plan_to_dict(plan), ensure_ascii=True, indent=2),
            encoding="utf-8",
        )
        logger.debug(f"Saved plan with {len(plan.rounds)} rounds to {self.path}")
        return self.path

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
