#!/usr/bin/env python3
"""
OpenHue MCP Server - Model Context Protocol interface for Philips Hue lighting.

Every tool runs the OpenHue CLI container directly (no shell involved):
    docker run -v "~/.openhue:/.openhue" --rm openhue/cli <subcommand>

Supports stdio transport for Claude Desktop integration.
Run with: python -m openhue_mcp

Tools:
- get-lights / get-rooms / get-scenes: CLI JSON output, passed through as text
- control-light / control-room: on/off, brightness, color, temperature
- activate-scene: scene by name, optional room and mode
"""  # noqa: I001

from __future__ import annotations

import asyncio
import json
import logging
import sys
import time
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from openhue_mcp import __version__
from openhue_mcp.config import McpConfig, load_config
from openhue_mcp.dispatch import Dispatcher
from openhue_mcp.errors import HueToolError
from openhue_mcp.observability import TEXT_LOG_FORMAT, ObservabilityContext, setup_logging
from openhue_mcp.tools.commands import CommandBuilder

# Configure logging to stderr (stdout is the protocol stream)
logging.basicConfig(
    level=logging.INFO,
    format=TEXT_LOG_FORMAT,
    stream=sys.stderr,
)
logger = logging.getLogger("openhue-mcp")


class OpenHueMcpServer:
    """OpenHue MCP Server implementation."""

    def __init__(self, config: McpConfig, dispatcher: Dispatcher | None = None):
        self.config = config
        self.server = Server("openhue-mcp", version=__version__)
        self.obs = ObservabilityContext(config.observability)

        if dispatcher is None:
            dispatcher = Dispatcher(
                CommandBuilder(config.container),
                timeout=config.exec.effective_timeout,
                stderr_is_failure=config.exec.stderr_is_failure,
            )
        self.dispatcher = dispatcher
        self.tools: list[Tool] = dispatcher.list_tools()

        self._register_handlers()
        logger.info(
            f"OpenHue MCP Server initialized ({__version__}, {len(self.tools)} tools, "
            f"image={config.container.image})"
        )

    def _register_handlers(self):
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """Return available tools."""
            logger.debug("list_tools called")
            return self.tools

        # Arguments are checked by the pydantic models, which report every
        # violation at once; the SDK's first-error JSON Schema check is skipped.
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            return await self.handle_call_tool(name, arguments)

    async def handle_call_tool(
        self, name: str, arguments: dict[str, Any] | None
    ) -> list[TextContent]:
        """Handle tool invocation with observability.

        HueToolError is re-raised after logging; the SDK turns it into a
        CallToolResult with isError set and the message as text.
        """
        cid = self.obs.correlation_id()
        start_time = time.time()
        error: HueToolError | None = None

        logger.info(f"call_tool: {name}", extra={"correlation_id": cid, "tool": name})

        try:
            return await self.dispatcher.call_tool(name, arguments)
        except HueToolError as e:
            error = e
            logger.warning(
                f"call_tool failed: {name}: {e}",
                extra={"correlation_id": cid, "tool": name, "error_code": e.code},
            )
            raise
        finally:
            latency_ms = (time.time() - start_time) * 1000
            self.obs.record(
                correlation_id=cid,
                tool=name,
                latency_ms=latency_ms,
                success=error is None,
                error_code=error.code if error else None,
            )
            logger.info(
                f"call_tool done: {name}",
                extra={
                    "correlation_id": cid,
                    "tool": name,
                    "latency_ms": latency_ms,
                    "status": "ok" if error is None else "error",
                    "error": str(error) if error else None,
                },
            )

    async def run(self):
        """Run the server with stdio transport."""
        logger.info("Starting OpenHue MCP server (stdio transport)")
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            if self.obs.enabled:
                logger.info(f"Session metrics: {json.dumps(self.obs.get_stats())}")


def main():
    """Entry point for OpenHue MCP server."""
    import argparse

    global logger  # noqa: PLW0603

    parser = argparse.ArgumentParser(description="OpenHue MCP Server")
    parser.add_argument(
        "--config",
        "-c",
        help="Path to openhue-mcp.toml config file",
        default=None,
    )
    parser.add_argument(
        "--log-level",
        "-l",
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Override log level",
    )
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        logger.error(f"Fatal error loading config: {e}")
        sys.exit(1)

    if args.log_level:
        config.server.log_level = args.log_level
        config.observability.log_level = args.log_level

    if config.observability.enabled:
        logger = setup_logging(config.observability, "openhue-mcp")
    else:
        log_level = getattr(logging, config.server.log_level.upper(), logging.INFO)
        logging.getLogger().setLevel(log_level)
        logger.setLevel(log_level)

    logger.info(f"Config loaded: enabled={config.enabled}")
    logger.info(
        f"Container: runtime={config.container.runtime}, image={config.container.image}, "
        f"config_dir={config.container.config_path}"
    )
    logger.info(
        f"Exec: timeout={config.exec.effective_timeout}, "
        f"stderr_is_failure={config.exec.stderr_is_failure}"
    )

    if not config.enabled:
        logger.warning("MCP server disabled in config, exiting")
        sys.exit(0)

    try:
        server = OpenHueMcpServer(config)
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        logger.exception(f"Fatal error in main(): {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
