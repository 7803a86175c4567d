from __future__ import annotations

from pathlib import Path

from codenav_mcp.engine import EngineGateway, EngineOperation, EngineResult, position_token


class RecordingRunner:
    def __init__(self) -> None:
        self.calls: list[tuple[list[str], Path]] = []

    def __call__(self, argv: list[str], cwd: Path) -> EngineResult:
        self.calls.append((argv, cwd))
        return EngineResult(exit_code=0, stdout="ok\n", stderr="")


def _gateway(tmp_path: Path) -> tuple[EngineGateway, RecordingRunner]:
    runner = RecordingRunner()
    gateway = EngineGateway(command=("tsg",), cwd=tmp_path, runner=runner)
    return gateway, runner


def test_build_index_without_options(tmp_path: Path) -> None:
    gateway, runner = _gateway(tmp_path)

    outcome = gateway.build_index("/p")

    assert outcome.ok is True
    assert outcome.invocation.operation is EngineOperation.BUILD_INDEX
    assert runner.calls == [(["tsg", "index", "/p"], tmp_path)]


def test_build_index_flags_are_separate_arguments(tmp_path: Path) -> None:
    gateway, runner = _gateway(tmp_path)

    gateway.build_index("/p", force=True, language="typescript", db="/tmp/db.sqlite")

    argv, _ = runner.calls[0]
    assert argv == [
        "tsg",
        "index",
        "/p",
        "-f",
        "--language",
        "typescript",
        "--db",
        "/tmp/db.sqlite",
    ]


def test_query_definition_uses_single_position_token(tmp_path: Path) -> None:
    gateway, runner = _gateway(tmp_path)

    outcome = gateway.query_definition("/p/file.ts", 10, 5)

    assert runner.calls[0][0] == ["tsg", "query", "definition", "/p/file.ts:10:5"]
    assert outcome.unwrap() == "ok\n"


def test_position_token_format() -> None:
    assert position_token("src/a b.ts", 1, 2) == "src/a b.ts:1:2"


def test_auxiliary_operations_argument_shapes(tmp_path: Path) -> None:
    gateway, runner = _gateway(tmp_path)

    gateway.status("/p")
    gateway.clean()
    gateway.clean(delete=True)
    gateway.init("/new-lang")
    gateway.test("/new-lang/test")
    gateway.visualize("/p/a.py")
    gateway.visualize("/p/a.py", format="html", output="/tmp/out.html")
    gateway.debug_path("/p/a.py", 3, 7)

    assert [argv[1:] for argv, _ in runner.calls] == [
        ["status", "/p"],
        ["clean"],
        ["clean", "--delete"],
        ["init", "/new-lang"],
        ["test", "/new-lang/test"],
        ["visualize", "/p/a.py"],
        ["visualize", "/p/a.py", "--format", "html", "--output", "/tmp/out.html"],
        ["debug-path", "/p/a.py:3:7"],
    ]


def test_multi_part_engine_command_is_prefixed(tmp_path: Path) -> None:
    runner = RecordingRunner()
    gateway = EngineGateway(command=("python", "fake_engine.py"), cwd=tmp_path, runner=runner)

    gateway.status(".")

    assert runner.calls[0][0] == ["python", "fake_engine.py", "status", "."]
