"""STDIO MCP server entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from codenav_mcp.config import LOG_LEVELS, CliOverrides, ServerConfig, load_effective_config
from codenav_mcp.engine import EngineGateway, EngineRunner
from codenav_mcp.engine.gateway import run_subprocess
from codenav_mcp.errors import UnknownCapabilityError
from codenav_mcp.logging import (
    AuditEvent,
    JsonlAuditLogger,
    configure_diagnostics,
    sanitize_arguments,
    utc_timestamp,
)
from codenav_mcp.tools.builtin import register_builtin_tools
from codenav_mcp.tools.definition import DefinitionEngine, DefinitionService
from codenav_mcp.tools.registry import ToolRegistry
from codenav_mcp.tools.response import ToolResponse

SERVER_NAME = "codenav-mcp"
SERVER_VERSION = "0.1.0"
DEFAULT_PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

RequestId = str | int | None
MethodHandler = Callable[[dict[str, object], RequestId], dict[str, object]]

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Request:
    """Normalized incoming JSON-RPC message."""

    request_id: RequestId
    method: str
    params: dict[str, object]
    is_notification: bool


class ProtocolError(Exception):
    """Raised for malformed JSON-RPC envelopes and params."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for server startup configuration."""
    parser = argparse.ArgumentParser(prog="codenav-mcp")
    parser.add_argument("--work-dir", required=False, default=".")
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--engine", required=False, default=None)
    parser.add_argument("--index-path", required=False, default=None)
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        required=False,
        default=None,
    )
    parser.add_argument("--no-audit", action="store_true")
    return parser


class StdioServer:
    """Line-delimited JSON-RPC server exposing the query_definition tool."""

    def __init__(
        self,
        config: ServerConfig,
        engine: DefinitionEngine | None = None,
        runner: EngineRunner | None = None,
    ) -> None:
        self._config = config
        if engine is None:
            engine = EngineGateway(
                command=config.engine.command,
                cwd=config.work_dir,
                runner=runner or run_subprocess,
            )
        self._definitions = DefinitionService(engine=engine, index_path=config.engine.index_path)
        self._audit_logger: JsonlAuditLogger | None = None
        if config.logging.audit_enabled:
            self._audit_logger = JsonlAuditLogger(path=config.data_dir / "audit.jsonl")
        self._registry = ToolRegistry()
        register_builtin_tools(self._registry, self._definitions)
        self._methods: dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
        }
        self._fallback_request_counter = 0

    @property
    def config(self) -> ServerConfig:
        return self._config

    def serve(self, in_stream: TextIO, out_stream: TextIO) -> None:
        """Process JSON-line requests from stdin and write JSON-line responses."""
        for raw_line in in_stream:
            line = raw_line.strip()
            if not line:
                continue
            response = self.handle_json_line(line)
            if response is None:
                continue
            out_stream.write(f"{json.dumps(response, sort_keys=True)}\n")
            out_stream.flush()

    def handle_json_line(self, raw_line: str) -> dict[str, object] | None:
        """Handle a single JSON-line message."""
        try:
            payload = json.loads(raw_line)
        except json.JSONDecodeError:
            logger.error("discarding malformed JSON line of length %d", len(raw_line))
            return self.error_response(None, PARSE_ERROR, "Request must be valid JSON.")
        return self.handle_payload(payload)

    def handle_payload(self, payload: object) -> dict[str, object] | None:
        """Validate and dispatch a parsed payload; notifications return None."""
        try:
            request = self.parse_request(payload)
        except ProtocolError as error:
            request_id = payload.get("id") if isinstance(payload, dict) else None
            return self.error_response(_safe_id(request_id), error.code, error.message)

        handler = self._methods.get(request.method)
        if request.is_notification:
            logger.debug("notification %s", request.method)
            return None
        if handler is None:
            return self.error_response(
                request.request_id, METHOD_NOT_FOUND, f"Method not found: {request.method}"
            )
        try:
            result = handler(request.params, request.request_id)
        except ProtocolError as error:
            return self.error_response(request.request_id, error.code, error.message)
        return self.success_response(request.request_id, result)

    def parse_request(self, payload: object) -> Request:
        """Validate a JSON-RPC envelope and return a normalized Request."""
        if not isinstance(payload, dict):
            raise ProtocolError(INVALID_REQUEST, "Request must be an object.")

        method = payload.get("method")
        params = payload.get("params", {})
        if not isinstance(method, str) or not method:
            raise ProtocolError(INVALID_REQUEST, "Request method must be a non-empty string.")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ProtocolError(INVALID_PARAMS, "Request params must be an object.")

        return Request(
            request_id=_safe_id(payload.get("id")),
            method=method,
            params=params,
            is_notification="id" not in payload,
        )

    def next_request_id(self) -> str:
        """Generate deterministic fallback request IDs for audit entries."""
        self._fallback_request_counter += 1
        return f"req-{self._fallback_request_counter:06d}"

    @staticmethod
    def success_response(request_id: RequestId, result: dict[str, object]) -> dict[str, object]:
        """Build JSON-RPC success envelope."""
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    @staticmethod
    def error_response(request_id: RequestId, code: int, message: str) -> dict[str, object]:
        """Build JSON-RPC error envelope."""
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {"code": code, "message": message},
        }

    def log_tool_call(
        self,
        request_id: RequestId,
        tool_name: str,
        arguments: dict[str, object],
        response: ToolResponse,
    ) -> None:
        """Log one sanitized tool call event."""
        if self._audit_logger is None:
            return
        event = AuditEvent(
            timestamp=utc_timestamp(),
            request_id=str(request_id) if request_id is not None else self.next_request_id(),
            tool=tool_name,
            ok=not response.is_error,
            error_code=response.error_code,
            metadata=sanitize_arguments(arguments),
        )
        try:
            self._audit_logger.append(event)
        except OSError:
            logger.exception("could not write audit event for request %s", event.request_id)

    def _initialize(self, params: dict[str, object], _: RequestId) -> dict[str, object]:
        requested = params.get("protocolVersion")
        protocol_version = (
            requested if isinstance(requested, str) and requested else DEFAULT_PROTOCOL_VERSION
        )
        return {
            "protocolVersion": protocol_version,
            "capabilities": {"tools": {}, "resources": {}},
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        }

    def _ping(self, _: dict[str, object], __: RequestId) -> dict[str, object]:
        return {}

    def _list_tools(self, _: dict[str, object], __: RequestId) -> dict[str, object]:
        return {"tools": self._registry.describe()}

    def _list_resources(self, _: dict[str, object], __: RequestId) -> dict[str, object]:
        return {"resources": []}

    def _call_tool(self, params: dict[str, object], request_id: RequestId) -> dict[str, object]:
        name = params.get("name")
        arguments = params.get("arguments")
        if not isinstance(name, str) or not name:
            raise ProtocolError(
                INVALID_PARAMS, "tools/call params.name must be a non-empty string."
            )
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ProtocolError(INVALID_PARAMS, "tools/call params.arguments must be an object.")

        logger.info("[request] %s with args: %s", name, json.dumps(arguments, sort_keys=True))
        try:
            response = self._registry.dispatch(name, arguments)
        except UnknownCapabilityError as error:
            logger.error("%s", error.message)
            response = ToolResponse.failure(error.message, error_code=error.code)
        except Exception:
            logger.exception("unhandled error while executing tool %s", name)
            response = ToolResponse.failure(
                "Error: internal server error", error_code="INTERNAL_ERROR"
            )
        self.log_tool_call(request_id, name, arguments, response)
        return response.to_dict()


def _safe_id(value: object) -> RequestId:
    # JSON-RPC ids are strings, numbers or null; bool is excluded
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return value
    return None


def create_server(
    work_dir: str,
    data_dir: str | None = None,
    cli_overrides: CliOverrides | None = None,
    engine: DefinitionEngine | None = None,
    runner: EngineRunner | None = None,
) -> StdioServer:
    """Create a configured STDIO server instance."""
    overrides = cli_overrides or CliOverrides()
    if data_dir is not None and overrides.data_dir is None:
        overrides = CliOverrides(
            data_dir=Path(data_dir).resolve(),
            engine=overrides.engine,
            index_path=overrides.index_path,
            log_level=overrides.log_level,
            audit_enabled=overrides.audit_enabled,
        )
    config = load_effective_config(work_dir=Path(work_dir).resolve(), overrides=overrides)
    return StdioServer(config=config, engine=engine, runner=runner)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the codenav server process."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    overrides = CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        engine=args.engine,
        index_path=args.index_path,
        log_level=args.log_level,
        audit_enabled=False if args.no_audit else None,
    )
    server = create_server(work_dir=args.work_dir, cli_overrides=overrides)
    # undecodable client bytes become parse errors instead of ending the loop
    sys.stdin.reconfigure(errors="replace")  # type: ignore[union-attr]
    configure_diagnostics(server.config.logging.level)
    logger.info("%s running on stdio (work_dir=%s)", SERVER_NAME, server.config.work_dir)
    server.serve(in_stream=sys.stdin, out_stream=sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
