"""query_definition orchestration: index check, on-demand build, query."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from codenav_mcp.engine import EngineOutcome
from codenav_mcp.errors import CodenavError, MissingPrerequisiteError, ValidationError
from codenav_mcp.tools.response import ToolResponse

logger = logging.getLogger(__name__)


class DefinitionEngine(Protocol):
    """Engine operations the orchestrator depends on."""

    def build_index(self, source_dir: str) -> EngineOutcome: ...

    def query_definition(self, source_path: str, line: int, column: int) -> EngineOutcome: ...


@dataclass(slots=True, frozen=True)
class DefinitionQuery:
    """Validated query_definition request."""

    source_path: str
    line: int
    column: int
    source_dir: str | None = None


def parse_definition_query(arguments: dict[str, object]) -> DefinitionQuery:
    """Validate raw tool arguments into a DefinitionQuery."""
    source_path = arguments.get("source_path")
    if not isinstance(source_path, str) or not source_path:
        raise ValidationError("query_definition source_path must be a non-empty string.")

    line = _position_value(arguments, "line")
    column = _position_value(arguments, "column")

    source_dir = arguments.get("source_dir")
    if source_dir is not None and not isinstance(source_dir, str):
        raise ValidationError("query_definition source_dir must be a string when provided.")

    return DefinitionQuery(
        source_path=source_path,
        line=line,
        column=column,
        source_dir=source_dir or None,
    )


def _position_value(arguments: dict[str, object], name: str) -> int:
    value = arguments.get(name)
    # bool is an int subclass; JSON true/false are not positions
    if isinstance(value, bool):
        raise ValidationError(f"query_definition {name} must be a number.")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if value is None:
        raise ValidationError(f"query_definition {name} is required.")
    raise ValidationError(f"query_definition {name} must be an integer number.")


class DefinitionService:
    """Run one definition lookup per request against the external engine.

    Index presence is checked on every call. When the index is missing and a
    source directory is supplied, it is built first; the query then runs
    exactly once. Concurrent callers that both see a missing index will both
    build it; there is no lock around the build step.
    """

    def __init__(self, engine: DefinitionEngine, index_path: Path) -> None:
        self._engine = engine
        self._index_path = index_path

    def index_exists(self) -> bool:
        """Return True when the index artifact is present (file or directory)."""
        return self._index_path.exists()

    def handle(self, arguments: dict[str, object]) -> ToolResponse:
        """Tool handler; every failure becomes an error-flagged response."""
        try:
            query = parse_definition_query(arguments)
            return ToolResponse.text(self.resolve(query))
        except CodenavError as error:
            logger.error("query_definition failed (%s): %s", error.code, error.message)
            return ToolResponse.failure(f"Error: {error.message}", error_code=error.code)

    def resolve(self, query: DefinitionQuery) -> str:
        """Return the engine's definition output for a validated query."""
        if not self.index_exists():
            if query.source_dir is None:
                raise MissingPrerequisiteError(
                    f"Index not found at {self._index_path}; "
                    "source_dir is required to build it."
                )
            logger.info("index not found, building from %s", query.source_dir)
            self._engine.build_index(query.source_dir).unwrap()

        return self._engine.query_definition(query.source_path, query.line, query.column).unwrap()
