"""Built-in tool registrations."""

from __future__ import annotations

from codenav_mcp.tools.definition import DefinitionService
from codenav_mcp.tools.registry import ToolRegistry, ToolSpec

QUERY_DEFINITION_TOOL = "query_definition"

QUERY_DEFINITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "source_path": {"type": "string", "description": "Path to the source file"},
        "line": {"type": "number", "description": "Line number of the reference"},
        "column": {"type": "number", "description": "Column number of the reference"},
        "source_dir": {
            "type": "string",
            "description": (
                "Path to the source directory (used to create an index if the index "
                "does not exist)"
            ),
        },
    },
    "required": ["source_path", "line", "column"],
}


def register_builtin_tools(registry: ToolRegistry, definitions: DefinitionService) -> None:
    """Register the query_definition tool."""
    registry.register(
        ToolSpec(
            name=QUERY_DEFINITION_TOOL,
            description="Searches for the definition of a reference at a specific position",
            input_schema=QUERY_DEFINITION_SCHEMA,
            handler=definitions.handle,
        )
    )
