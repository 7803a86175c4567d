"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from codenav_mcp.engine import DEFAULT_ENGINE_COMMAND

CONFIG_FILE_NAME = "codenav_mcp.toml"
DEFAULT_INDEX_PATH = ".stack-graphs"
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(slots=True, frozen=True)
class EngineConfig:
    """External engine command and index location."""

    command: tuple[str, ...]
    index_path: Path


@dataclass(slots=True, frozen=True)
class LoggingConfig:
    """Diagnostic and audit logging settings."""

    level: str
    audit_enabled: bool


@dataclass(slots=True, frozen=True)
class ServerConfig:
    """Fully merged server configuration."""

    work_dir: Path
    data_dir: Path
    engine: EngineConfig
    logging: LoggingConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "work_dir": str(self.work_dir),
            "data_dir": str(self.data_dir),
            "engine": {
                "command": list(self.engine.command),
                "index_path": str(self.engine.index_path),
            },
            "logging": {
                "level": self.logging.level,
                "audit_enabled": self.logging.audit_enabled,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    engine: str | None = None
    index_path: str | None = None
    log_level: str | None = None
    audit_enabled: bool | None = None


def default_config(work_dir: Path) -> ServerConfig:
    """Build default config for a given working directory."""
    resolved_dir = work_dir.resolve()
    return ServerConfig(
        work_dir=resolved_dir,
        data_dir=resolved_dir / ".codenav_mcp",
        engine=EngineConfig(
            command=DEFAULT_ENGINE_COMMAND,
            index_path=resolved_dir / DEFAULT_INDEX_PATH,
        ),
        logging=LoggingConfig(level=DEFAULT_LOG_LEVEL, audit_enabled=True),
    )


def load_config_file(work_dir: Path) -> dict[str, object]:
    """Load optional codenav_mcp.toml from the working directory."""
    config_path = work_dir / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not value:
        raise ValueError(f"Config field '{section}.{field}' must be a non-empty list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item:
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _non_empty_string(value: object, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value


def _log_level(value: object, name: str) -> str:
    level = _non_empty_string(value, name).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Config field '{name}' must be one of {', '.join(LOG_LEVELS)}.")
    return level


def merge_config(
    base: ServerConfig, payload: dict[str, object], overrides: CliOverrides
) -> ServerConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    engine_payload = _get_table(payload, "engine")
    logging_payload = _get_table(payload, "logging")

    command = base.engine.command
    if "command" in engine_payload:
        command = _tuple_of_strings(engine_payload["command"], "engine", "command")
    index_path = base.engine.index_path
    if "index_path" in engine_payload:
        raw_index_path = _non_empty_string(engine_payload["index_path"], "engine.index_path")
        index_path = base.work_dir / raw_index_path

    level = base.logging.level
    if "level" in logging_payload:
        level = _log_level(logging_payload["level"], "logging.level")
    audit_enabled = base.logging.audit_enabled
    if "audit_enabled" in logging_payload:
        raw_audit_enabled = logging_payload["audit_enabled"]
        if not isinstance(raw_audit_enabled, bool):
            raise ValueError("Config field 'logging.audit_enabled' must be a boolean.")
        audit_enabled = raw_audit_enabled

    merged = ServerConfig(
        work_dir=base.work_dir,
        data_dir=base.data_dir,
        engine=EngineConfig(command=command, index_path=index_path),
        logging=LoggingConfig(level=level, audit_enabled=audit_enabled),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: ServerConfig, overrides: CliOverrides) -> ServerConfig:
    """Apply startup overrides at highest precedence."""
    command = config.engine.command
    if overrides.engine is not None:
        command = (_non_empty_string(overrides.engine, "overrides.engine"),)
    index_path = config.engine.index_path
    if overrides.index_path is not None:
        index_path = config.work_dir / _non_empty_string(
            overrides.index_path, "overrides.index_path"
        )
    level = config.logging.level
    if overrides.log_level is not None:
        level = _log_level(overrides.log_level, "overrides.log_level")
    audit_enabled = (
        overrides.audit_enabled
        if overrides.audit_enabled is not None
        else config.logging.audit_enabled
    )
    data_dir = overrides.data_dir or config.data_dir
    return ServerConfig(
        work_dir=config.work_dir,
        data_dir=data_dir.resolve(),
        engine=EngineConfig(command=command, index_path=index_path),
        logging=LoggingConfig(level=level, audit_enabled=audit_enabled),
    )


def load_effective_config(work_dir: Path, overrides: CliOverrides | None = None) -> ServerConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved_dir = work_dir.resolve()
    base = default_config(resolved_dir)
    payload = load_config_file(resolved_dir)
    return merge_config(base, payload, overrides or CliOverrides())
