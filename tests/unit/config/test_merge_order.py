from __future__ import annotations

from pathlib import Path

from codenav_mcp.config import CliOverrides, load_effective_config
from codenav_mcp.server import create_server


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    assert config.work_dir == tmp_path.resolve()
    assert config.data_dir == tmp_path.resolve() / ".codenav_mcp"
    assert config.engine.command == ("tree-sitter-stack-graphs",)
    assert config.engine.index_path == tmp_path.resolve() / ".stack-graphs"
    assert config.logging.level == "INFO"
    assert config.logging.audit_enabled is True


def test_merge_order_defaults_then_file_then_cli(tmp_path: Path) -> None:
    (tmp_path / "codenav_mcp.toml").write_text(
        "\n".join(
            [
                "[engine]",
                'command = ["npx", "tree-sitter-stack-graphs-typescript"]',
                'index_path = "build/graphs"',
                "",
                "[logging]",
                'level = "debug"',
                "audit_enabled = false",
            ]
        ),
        encoding="utf-8",
    )
    overrides = CliOverrides(index_path="cache/.stack-graphs", audit_enabled=True)

    config = load_effective_config(tmp_path, overrides)

    assert config.engine.command == ("npx", "tree-sitter-stack-graphs-typescript")
    assert config.engine.index_path == tmp_path.resolve() / "cache" / ".stack-graphs"
    assert config.logging.level == "DEBUG"
    assert config.logging.audit_enabled is True


def test_engine_override_replaces_configured_command(tmp_path: Path) -> None:
    (tmp_path / "codenav_mcp.toml").write_text(
        '[engine]\ncommand = ["npx", "tsg"]\n', encoding="utf-8"
    )

    config = load_effective_config(tmp_path, CliOverrides(engine="/opt/bin/tsg"))

    assert config.engine.command == ("/opt/bin/tsg",)


def test_data_dir_override_has_highest_precedence(tmp_path: Path) -> None:
    custom_data_dir = tmp_path / ".custom_data"
    server = create_server(
        work_dir=str(tmp_path),
        cli_overrides=CliOverrides(data_dir=custom_data_dir),
    )

    snapshot = server.config.to_public_dict()
    assert snapshot["data_dir"] == str(custom_data_dir.resolve())
    assert snapshot["engine"] == {
        "command": ["tree-sitter-stack-graphs"],
        "index_path": str(tmp_path.resolve() / ".stack-graphs"),
    }
