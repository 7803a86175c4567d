"""MCP tool interfaces and registrations."""

from .definition import DefinitionQuery, DefinitionService, parse_definition_query
from .registry import ToolHandler, ToolRegistry, ToolSpec
from .response import ToolResponse

__all__ = [
    "DefinitionQuery",
    "DefinitionService",
    "ToolHandler",
    "ToolRegistry",
    "ToolResponse",
    "ToolSpec",
    "parse_definition_query",
]
