"""Subprocess gateway to the tree-sitter-stack-graphs command line."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from codenav_mcp.engine.models import (
    EngineInvocation,
    EngineOperation,
    EngineOutcome,
    EngineResult,
)
from codenav_mcp.errors import EngineExecutionError

DEFAULT_ENGINE_COMMAND = ("tree-sitter-stack-graphs",)

EngineRunner = Callable[[list[str], Path], EngineResult]

logger = logging.getLogger(__name__)


def run_subprocess(argv: list[str], cwd: Path) -> EngineResult:
    """Run one engine process to completion and capture its output."""
    completed = subprocess.run(
        argv,
        cwd=cwd,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=False,
    )
    return EngineResult(
        exit_code=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )


def position_token(source_path: str, line: int, column: int) -> str:
    """Format a source position the way the engine expects it."""
    return f"{source_path}:{line}:{column}"


class EngineGateway:
    """Translate engine operations into process invocations and outcomes."""

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_ENGINE_COMMAND,
        cwd: Path | None = None,
        runner: EngineRunner = run_subprocess,
    ) -> None:
        if not command:
            raise ValueError("Engine command must not be empty.")
        self._command = tuple(command)
        self._cwd = cwd if cwd is not None else Path.cwd()
        self._runner = runner

    def build_index(
        self,
        source_dir: str,
        force: bool = False,
        language: str | None = None,
        db: str | None = None,
    ) -> EngineOutcome:
        """Parse a source tree into the engine's index database."""
        arguments = [source_dir]
        if force:
            arguments.append("-f")
        if language:
            arguments.extend(["--language", language])
        if db:
            arguments.extend(["--db", db])
        return self.execute(EngineInvocation(EngineOperation.BUILD_INDEX, tuple(arguments)))

    def query_definition(self, source_path: str, line: int, column: int) -> EngineOutcome:
        """Find definitions for the reference at a source position."""
        token = position_token(source_path, line, column)
        return self.execute(
            EngineInvocation(EngineOperation.QUERY_DEFINITION, ("definition", token))
        )

    def status(self, source_dir: str) -> EngineOutcome:
        return self.execute(EngineInvocation(EngineOperation.STATUS, (source_dir,)))

    def clean(self, delete: bool = False) -> EngineOutcome:
        arguments = ("--delete",) if delete else ()
        return self.execute(EngineInvocation(EngineOperation.CLEAN, arguments))

    def init(self, project_dir: str) -> EngineOutcome:
        return self.execute(EngineInvocation(EngineOperation.INIT, (project_dir,)))

    def test(self, tests_dir: str) -> EngineOutcome:
        return self.execute(EngineInvocation(EngineOperation.TEST, (tests_dir,)))

    def visualize(
        self,
        source_file: str,
        format: str | None = None,
        output: str | None = None,
    ) -> EngineOutcome:
        arguments = [source_file]
        if format:
            arguments.extend(["--format", format])
        if output:
            arguments.extend(["--output", output])
        return self.execute(EngineInvocation(EngineOperation.VISUALIZE, tuple(arguments)))

    def debug_path(self, source_path: str, line: int, column: int) -> EngineOutcome:
        token = position_token(source_path, line, column)
        return self.execute(EngineInvocation(EngineOperation.DEBUG_PATH, (token,)))

    def execute(self, invocation: EngineInvocation) -> EngineOutcome:
        """Run one invocation; failures are returned, never raised."""
        argv = invocation.argv(self._command)
        logger.info("executing %s", shlex.join(argv))
        try:
            result = self._runner(argv, self._cwd)
        except (OSError, ValueError) as error:
            # ValueError: argv rejected before spawn (NUL byte, unencodable path)
            logger.error("engine could not be started: %s", error)
            return EngineOutcome(
                invocation=invocation,
                error=EngineExecutionError(f"Engine could not be started: {error}"),
            )

        if result.exit_code != 0:
            stderr = result.stderr.strip()
            logger.error(
                "engine %s exited with code %d: %s",
                invocation.operation.value,
                result.exit_code,
                stderr,
            )
            return EngineOutcome(
                invocation=invocation,
                result=result,
                error=EngineExecutionError(
                    f"Engine exited with code {result.exit_code}: {stderr}",
                    exit_code=result.exit_code,
                    stderr=result.stderr,
                ),
            )
        logger.debug("engine %s succeeded", invocation.operation.value)
        return EngineOutcome(invocation=invocation, result=result)
