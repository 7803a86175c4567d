"""Deterministic tool registration primitives."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from codenav_mcp.errors import UnknownCapabilityError
from codenav_mcp.tools.response import ToolResponse

ToolHandler = Callable[[dict[str, object]], ToolResponse]


@dataclass(slots=True, frozen=True)
class ToolSpec:
    """Named, schema-described tool and its handler."""

    name: str
    description: str
    input_schema: dict[str, object]
    handler: ToolHandler

    def describe(self) -> dict[str, object]:
        """Return the tools/list entry for this tool."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass(slots=True)
class ToolRegistry:
    """In-memory tool registry preserving deterministic insertion order."""

    _tools: dict[str, ToolSpec] = field(default_factory=dict)

    def register(self, tool: ToolSpec) -> None:
        """Register a tool under its name."""
        self._tools[tool.name] = tool

    def get(self, name: str) -> ToolSpec | None:
        """Return a registered tool by name."""
        return self._tools.get(name)

    def describe(self) -> list[dict[str, object]]:
        """Return tools/list entries in registration order."""
        return [tool.describe() for tool in self._tools.values()]

    def dispatch(self, name: str, arguments: dict[str, object]) -> ToolResponse:
        """Dispatch to a registered tool by name."""
        tool = self.get(name)
        if tool is None:
            raise UnknownCapabilityError(name)
        return tool.handler(arguments)
