"""Append-only JSONL record of tool calls."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

PATH_FIELDS = ("source_path", "source_dir")
POSITION_FIELDS = ("line", "column")


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """One tools/call outcome with its sanitized arguments."""

    timestamp: str
    request_id: str
    tool: str
    ok: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Keep query_definition paths and positions; record anything else by key only.

    A known field with the wrong shape is recorded as `<field>_type` so the
    audit trail explains validation failures without echoing the value.
    """
    sanitized: dict[str, object] = {}
    for key in PATH_FIELDS:
        if key not in arguments:
            continue
        value = arguments[key]
        if isinstance(value, str):
            sanitized[key] = value
        else:
            sanitized[f"{key}_type"] = type(value).__name__
    for key in POSITION_FIELDS:
        if key not in arguments:
            continue
        value = arguments[key]
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            sanitized[key] = value
        else:
            sanitized[f"{key}_type"] = type(value).__name__

    other_keys = sorted(
        str(key) for key in arguments if key not in PATH_FIELDS and key not in POSITION_FIELDS
    )
    if other_keys:
        sanitized["other_keys"] = other_keys
    return sanitized


class JsonlAuditLogger:
    """Writes one JSON object per tool call to `<data_dir>/audit.jsonl`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append an event, recreating the data directory if it was removed."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(asdict(event), sort_keys=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")
