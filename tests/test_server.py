"""Tests for the MCP server wiring: discovery, tool calls and error results."""

from __future__ import annotations

from contextlib import asynccontextmanager
import json
import sys
from unittest.mock import MagicMock

import mcp.types as types
import pytest

from openhue_mcp import server as server_module
from openhue_mcp.config import McpConfig
from openhue_mcp.dispatch import Dispatcher
from openhue_mcp.errors import ExternalCommandError, InvalidArgumentsError, UnknownToolError
from openhue_mcp.server import OpenHueMcpServer, main
from openhue_mcp.tools.exec import ExecResult


@pytest.fixture
def make_server(make_dispatcher):
    def _make(config: McpConfig | None = None, **outcome):
        dispatcher, executor = make_dispatcher(**outcome)
        return OpenHueMcpServer(config or McpConfig(), dispatcher=dispatcher), executor

    return _make


async def sdk_call(server: OpenHueMcpServer, name: str, arguments: dict) -> types.CallToolResult:
    handler = server.server.request_handlers[types.CallToolRequest]
    request = types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )
    result = await handler(request)
    return result.root


def test_default_dispatcher_from_config(home):
    config = McpConfig()
    config.container.image = "openhue/cli:test"
    config.exec.timeout = 9
    server = OpenHueMcpServer(config)
    assert isinstance(server.dispatcher, Dispatcher)
    assert server.dispatcher.timeout == 9
    assert server.dispatcher.builder.prefix.endswith("--rm openhue/cli:test")
    assert [t.name for t in server.tools] == [
        "get-lights",
        "control-light",
        "get-rooms",
        "control-room",
        "get-scenes",
        "activate-scene",
    ]


@pytest.mark.asyncio
async def test_list_tools_over_sdk(make_server):
    server, _ = make_server()
    handler = server.server.request_handlers[types.ListToolsRequest]
    result = await handler(types.ListToolsRequest(method="tools/list"))
    assert [t.name for t in result.root.tools] == [t.name for t in server.tools]


@pytest.mark.asyncio
async def test_successful_call_over_sdk(make_server):
    server, executor = make_server()
    result = await sdk_call(server, "control-light", {"target": "Desk Lamp", "action": "on"})
    assert not result.isError
    assert result.content[0].text == 'Successfully set light "Desk Lamp" to on'
    assert len(executor.calls) == 1


@pytest.mark.asyncio
async def test_read_call_over_sdk(make_server):
    server, _ = make_server(result=ExecResult(stdout='{"rooms": []}', stderr="", exit_code=0))
    result = await sdk_call(server, "get-rooms", {})
    assert not result.isError
    assert result.content[0].text == '{"rooms": []}'


@pytest.mark.asyncio
async def test_unknown_tool_is_error_result(make_server):
    server, executor = make_server()
    result = await sdk_call(server, "strobe", {})
    assert result.isError
    assert "Unknown tool: strobe" in result.content[0].text
    assert executor.calls == []


@pytest.mark.asyncio
async def test_invalid_arguments_error_lists_every_field(make_server):
    server, executor = make_server()
    result = await sdk_call(
        server, "control-room", {"target": "", "action": "on", "temperature": 600}
    )
    assert result.isError
    text = result.content[0].text
    assert "Invalid arguments" in text
    assert "target" in text
    assert "temperature" in text
    assert executor.calls == []


@pytest.mark.asyncio
async def test_external_failure_is_error_result(make_server):
    server, _ = make_server(error=ExternalCommandError("bridge unreachable", exit_code=1))
    result = await sdk_call(server, "get-lights", {})
    assert result.isError
    assert "bridge unreachable" in result.content[0].text


@pytest.mark.asyncio
async def test_metrics_recorded_when_enabled(make_server):
    config = McpConfig()
    config.observability.enabled = True
    server, _ = make_server(config)

    await server.handle_call_tool("get-lights", {})
    with pytest.raises(UnknownToolError):
        await server.handle_call_tool("nope", {})
    with pytest.raises(InvalidArgumentsError):
        await server.handle_call_tool("activate-scene", {})

    stats = server.obs.get_stats()
    assert stats["total_requests"] == 3
    assert stats["total_errors"] == 2
    assert stats["errors_by_code"] == {"UNKNOWN_TOOL": 1, "INVALID_ARGUMENTS": 1}
    assert stats["tools"]["get-lights"]["calls"] == 1


@asynccontextmanager
async def fake_stdio_server():
    yield None, None


@pytest.mark.asyncio
@pytest.mark.parametrize("enabled", [True, False])
async def test_run_logs_session_metrics_on_exit(make_server, monkeypatch, enabled):
    config = McpConfig()
    config.observability.enabled = enabled
    server, _ = make_server(config)
    await server.handle_call_tool("get-lights", {})

    async def closed_session(*args):
        raise EOFError("client went away")

    fake_logger = MagicMock()
    monkeypatch.setattr(server_module, "stdio_server", fake_stdio_server)
    monkeypatch.setattr(server_module, "logger", fake_logger)
    monkeypatch.setattr(server.server, "run", closed_session)

    with pytest.raises(EOFError):
        await server.run()

    messages = [c.args[0] for c in fake_logger.info.call_args_list]
    summaries = [m for m in messages if m.startswith("Session metrics: ")]
    if not enabled:
        assert summaries == []
        return
    assert len(summaries) == 1
    stats = json.loads(summaries[0].removeprefix("Session metrics: "))
    assert stats["total_requests"] == 1
    assert stats["tools"]["get-lights"]["calls"] == 1


def test_main_exits_nonzero_on_bad_config(tmp_path, monkeypatch):
    bad = tmp_path / "bad.toml"
    bad.write_text('[mcp.server]\ntransport = "carrier-pigeon"\n')
    monkeypatch.setattr(sys, "argv", ["openhue-mcp", "--config", str(bad)])
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 1


def test_main_exits_zero_when_disabled(monkeypatch):
    monkeypatch.setenv("OPENHUE_MCP_ENABLED", "0")
    monkeypatch.setattr(sys, "argv", ["openhue-mcp"])
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 0


def test_main_exits_nonzero_on_transport_failure(monkeypatch):
    async def broken_run(self):
        raise OSError("stdin closed")

    monkeypatch.setattr(OpenHueMcpServer, "run", broken_run)
    monkeypatch.setattr(sys, "argv", ["openhue-mcp", "--log-level", "debug"])
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 1
