"""Interval plan file parser (JSON)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, cast

from interval_split.workout.model import BLOCK_TAGS, Block, BlockTag, Plan, Round


class PlanParseError(ValueError):
    """Raised when a plan file or payload is invalid."""


def load_plan(path: str | Path) -> Plan:
    file_path = Path(path)
    if file_path.suffix.lower() != ".json":
        raise PlanParseError(
            f"Unsupported plan format '{file_path.suffix}'. Use .json"
        )
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PlanParseError(f"Invalid JSON: {exc}") from exc
    return plan_from_dict(data)


def plan_from_dict(data: object) -> Plan:
    if not isinstance(data, dict):
        raise PlanParseError("Plan JSON must be an object")

    rounds_obj = data.get("rounds", [])
    if not isinstance(rounds_obj, list):
        raise PlanParseError("Plan field 'rounds' must be an array")

    rounds: list[Round] = []
    for i, raw in enumerate(rounds_obj):
        if not isinstance(raw, dict):
            raise PlanParseError(f"Round {i + 1}: must be an object")
        rounds.append(_build_round(raw, index=i))
    return Plan(rounds=tuple(rounds))


def plan_to_dict(plan: Plan) -> dict[str, Any]:
    return {
        "rounds": [
            {
                "id": round_.id,
                "name": round_.name,
                "repeat_count": round_.repeat_count,
                "is_fixed": round_.is_fixed,
                "blocks": [
                    {
                        "id": block.id,
                        "tag": block.tag,
                        "duration_sec": block.duration_sec,
                        "speed_kmh": block.speed_kmh,
                    }
                    for block in round_.blocks
                ],
            }
            for round_ in plan.rounds
        ]
    }


def _build_round(raw: dict[str, Any], *, index: int) -> Round:
    where = f"Round {index + 1}"
    round_id = _parse_id(raw.get("id"), where=where)

    name_obj = raw.get("name")
    if name_obj is None:
        name = f"Round {index + 1}"
    elif isinstance(name_obj, str):
        name = name_obj.strip() or f"Round {index + 1}"
    else:
        raise PlanParseError(f"{where}: 'name' must be a string")

    repeat_count = _parse_int_field(raw.get("repeat_count", 1), "repeat_count", where)
    if repeat_count < 1:
        raise PlanParseError(f"{where}: repeat_count must be >= 1")

    blocks_obj = raw.get("blocks", [])
    if not isinstance(blocks_obj, list):
        raise PlanParseError(f"{where}: 'blocks' must be an array")

    blocks: list[Block] = []
    seen: set[str] = set()
    for j, block_raw in enumerate(blocks_obj):
        block_where = f"{where}, block {j + 1}"
        if not isinstance(block_raw, dict):
            raise PlanParseError(f"{block_where}: must be an object")
        block = _build_block(block_raw, where=block_where)
        if block.id in seen:
            raise PlanParseError(f"{block_where}: duplicate block id '{block.id}'")
        seen.add(block.id)
        blocks.append(block)

    return Round(
        id=round_id,
        name=name,
        repeat_count=repeat_count,
        blocks=tuple(blocks),
        is_fixed=bool(raw.get("is_fixed", False)),
    )


def _build_block(raw: dict[str, Any], *, where: str) -> Block:
    block_id = _parse_id(raw.get("id"), where=where)

    tag = raw.get("tag")
    if tag not in BLOCK_TAGS:
        raise PlanParseError(
            f"{where}: invalid tag {tag!r} (expected one of {', '.join(BLOCK_TAGS)})"
        )

    duration_sec = _parse_int_field(raw.get("duration_sec"), "duration_sec", where)
    if duration_sec < 0:
        raise PlanParseError(f"{where}: duration_sec must be >= 0")

    speed_obj = raw.get("speed_kmh", 0)
    if isinstance(speed_obj, bool):
        raise PlanParseError(f"{where}: invalid speed_kmh")
    try:
        speed_kmh = float(speed_obj)
    except (TypeError, ValueError) as exc:
        raise PlanParseError(f"{where}: invalid speed_kmh") from exc
    if speed_kmh < 0:
        raise PlanParseError(f"{where}: speed_kmh must be >= 0")

    return Block(
        id=block_id,
        tag=cast(BlockTag, tag),
        duration_sec=duration_sec,
        speed_kmh=speed_kmh,
    )


def _parse_id(raw: object, *, where: str) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise PlanParseError(f"{where}: 'id' must be a non-empty string")
    return raw.strip()


def _parse_int_field(raw: object, field_name: str, where: str) -> int:
    if raw is None or isinstance(raw, bool):
        raise PlanParseError(f"{where}: invalid {field_name}")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise PlanParseError(f"{where}: {field_name} must be a whole number")
        return int(raw)
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise PlanParseError(f"{where}: invalid {field_name}") from exc
