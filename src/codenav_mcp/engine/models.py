"""Engine invocation and outcome models."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from codenav_mcp.errors import EngineExecutionError


class EngineOperation(str, Enum):
    """Subcommands understood by the external engine."""

    BUILD_INDEX = "index"
    QUERY_DEFINITION = "query"
    STATUS = "status"
    CLEAN = "clean"
    INIT = "init"
    TEST = "test"
    VISUALIZE = "visualize"
    DEBUG_PATH = "debug-path"


@dataclass(slots=True, frozen=True)
class EngineInvocation:
    """One engine call: the operation plus its ordered arguments."""

    operation: EngineOperation
    arguments: tuple[str, ...]

    def argv(self, command: Sequence[str]) -> list[str]:
        """Return the full argument vector for the given engine command."""
        return [*command, self.operation.value, *self.arguments]


@dataclass(slots=True, frozen=True)
class EngineResult:
    """Raw process result."""

    exit_code: int
    stdout: str
    stderr: str


@dataclass(slots=True, frozen=True)
class EngineOutcome:
    """Success payload or tagged failure for one engine invocation."""

    invocation: EngineInvocation
    result: EngineResult | None = None
    error: EngineExecutionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def output(self) -> str:
        """Return stdout, or an empty string for failed invocations."""
        if self.result is None or self.error is not None:
            return ""
        return self.result.stdout

    def unwrap(self) -> str:
        """Return stdout or raise the recorded failure."""
        if self.error is not None:
            raise self.error
        return self.output
