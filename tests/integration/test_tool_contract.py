from __future__ import annotations

from pathlib import Path

from codenav_mcp.server import DEFAULT_PROTOCOL_VERSION, create_server


def _request(method: str, params: dict[str, object] | None = None) -> dict[str, object]:
    payload: dict[str, object] = {"jsonrpc": "2.0", "id": 1, "method": method}
    if params is not None:
        payload["params"] = params
    return payload


def test_initialize_reports_server_info_and_capabilities(tmp_path: Path) -> None:
    server = create_server(work_dir=str(tmp_path))

    response = server.handle_payload(
        _request("initialize", {"protocolVersion": "2025-03-26", "capabilities": {}})
    )

    assert response is not None
    result = response["result"]
    assert result["protocolVersion"] == "2025-03-26"
    assert result["capabilities"] == {"tools": {}, "resources": {}}
    assert result["serverInfo"]["name"] == "codenav-mcp"


def test_initialize_without_version_uses_default(tmp_path: Path) -> None:
    server = create_server(work_dir=str(tmp_path))

    response = server.handle_payload(_request("initialize"))

    assert response is not None
    assert response["result"]["protocolVersion"] == DEFAULT_PROTOCOL_VERSION


def test_tools_list_declares_query_definition(tmp_path: Path) -> None:
    server = create_server(work_dir=str(tmp_path))

    response = server.handle_payload(_request("tools/list"))

    assert response is not None
    tools = response["result"]["tools"]
    assert [tool["name"] for tool in tools] == ["query_definition"]
    schema = tools[0]["inputSchema"]
    assert schema["type"] == "object"
    assert schema["required"] == ["source_path", "line", "column"]
    assert {name: prop["type"] for name, prop in schema["properties"].items()} == {
        "source_path": "string",
        "line": "number",
        "column": "number",
        "source_dir": "string",
    }
    assert tools[0]["description"]


def test_resources_list_is_empty(tmp_path: Path) -> None:
    server = create_server(work_dir=str(tmp_path))

    response = server.handle_payload(_request("resources/list"))

    assert response == {"jsonrpc": "2.0", "id": 1, "result": {"resources": []}}


def test_ping_returns_empty_result(tmp_path: Path) -> None:
    server = create_server(work_dir=str(tmp_path))

    response = server.handle_payload(_request("ping"))

    assert response is not None
    assert response["result"] == {}
