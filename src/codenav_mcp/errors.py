"""Error taxonomy surfaced as error-flagged tool responses."""

from __future__ import annotations


class CodenavError(Exception):
    """Base class for failures converted into error-flagged tool responses."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CodenavError):
    """Raised when a required tool argument is missing or malformed."""

    code = "INVALID_PARAMS"


class MissingPrerequisiteError(CodenavError):
    """Raised when the index is absent and no source directory was supplied."""

    code = "INDEX_MISSING"


class EngineExecutionError(CodenavError):
    """Raised when the external engine exits non-zero or cannot be started."""

    code = "ENGINE_FAILED"

    def __init__(self, message: str, exit_code: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class UnknownCapabilityError(CodenavError):
    """Raised when a caller requests a tool this server does not implement."""

    code = "UNKNOWN_TOOL"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name
