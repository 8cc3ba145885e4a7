"""Saved node positions, stored by the client under a per-folder key."""

import json

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from mdreader.domain.graph import Position

STORAGE_KEY_PREFIX = "whiteboard_positions_"

_positions_adapter = TypeAdapter(dict[str, Position])


def storage_key(folder: str) -> str:
    return f"{STORAGE_KEY_PREFIX}{folder}"


def parse_saved_positions(raw: str | None) -> dict[str, Position]:
    """Parse a `{fileId: {x, y}}` JSON object; anything unreadable counts as no saved positions."""
    if not raw:
        return {}
    try:
        return _positions_adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Ignoring unreadable saved positions: {e.error_count()} errors")
        return {}


def dump_saved_positions(positions: dict[str, Position]) -> str:
    return json.dumps({node_id: pos.model_dump() for node_id, pos in positions.items()})


def merge_saved_positions(
    computed: dict[str, Position], saved: dict[str, Position]
) -> dict[str, Position]:
    """Overlay finite saved positions on computed ones, for nodes present in both."""
    merged = dict(computed)
    for node_id, position in saved.items():
        if node_id in merged and position.is_finite:
            merged[node_id] = position
    return merged
