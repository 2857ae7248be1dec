"""
Request dispatch: validate → build → execute → respond.

The Dispatcher knows nothing about the MCP transport; it takes a tool name
and raw arguments and either returns content or raises a HueToolError.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import logging
from typing import Any

from mcp.types import TextContent, Tool

from openhue_mcp.errors import HueToolError, UnknownToolError
from openhue_mcp.registry import ToolEntry, get_tool_registry
from openhue_mcp.tools.commands import CommandBuilder
from openhue_mcp.tools.exec import ExecResult, run_command
from openhue_mcp.tools.schemas import parse_params

logger = logging.getLogger("openhue-mcp.dispatch")

Executor = Callable[..., Awaitable[ExecResult]]


class Dispatcher:
    """Routes tool calls through the tool table.

    Args:
        builder: Wraps subcommands in the container invocation
        executor: Coroutine running a command string (``run_command`` signature)
        timeout: Passed to the executor; None means no timeout
        stderr_is_failure: Passed to the executor
        registry: Tool table, defaults to the static one
    """

    def __init__(
        self,
        builder: CommandBuilder,
        executor: Executor = run_command,
        timeout: float | None = None,
        stderr_is_failure: bool = True,
        registry: dict[str, ToolEntry] | None = None,
    ):
        self.builder = builder
        self.executor = executor
        self.timeout = timeout
        self.stderr_is_failure = stderr_is_failure
        self.registry = registry if registry is not None else get_tool_registry()

    def list_tools(self) -> list[Tool]:
        return [entry.tool for entry in self.registry.values()]

    def _prepare(self, name: str, arguments: dict[str, Any] | None) -> tuple[ToolEntry, Any, str]:
        entry = self.registry.get(name)
        if entry is None:
            raise UnknownToolError(name)
        params = parse_params(entry.model, arguments)
        return entry, params, self.builder.build(entry.build(params))

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
        """Run one tool call end to end.

        Raises:
            HueToolError: any failure; unexpected exceptions are wrapped
        """
        entry, params, command = self._prepare(name, arguments)
        logger.debug(f"{name}: {command}")

        try:
            result = await self.executor(
                command,
                timeout=self.timeout,
                stderr_is_failure=self.stderr_is_failure,
            )
            text = entry.respond(params, result)
        except HueToolError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected failure in {name}")
            raise HueToolError(f"Tool {name} failed: {e}") from e

        return [TextContent(type="text", text=text)]
