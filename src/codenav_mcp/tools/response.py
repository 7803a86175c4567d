"""Tool response envelope returned to MCP callers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ToolResponse:
    """Text content plus an error flag.

    `error_code` is kept for the audit log and never sent to callers.
    """

    texts: tuple[str, ...]
    is_error: bool = False
    error_code: str | None = None

    @classmethod
    def text(cls, text: str) -> ToolResponse:
        return cls(texts=(text,), is_error=False)

    @classmethod
    def failure(cls, message: str, error_code: str | None = None) -> ToolResponse:
        return cls(texts=(message,), is_error=True, error_code=error_code)

    def to_dict(self) -> dict[str, object]:
        """Return the wire shape of a tools/call result."""
        return {
            "content": [{"type": "text", "text": text} for text in self.texts],
            "isError": self.is_error,
        }
