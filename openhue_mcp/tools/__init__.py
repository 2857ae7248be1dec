"""OpenHue MCP tools - argument models, command builder, and process executor."""

from openhue_mcp.tools.commands import CommandBuilder, quote  # noqa: F401
from openhue_mcp.tools.exec import ExecResult, run_command  # noqa: F401
from openhue_mcp.tools.schemas import (  # noqa: F401
    PARAMETER_MODELS,
    LightAction,
    LightQuery,
    RoomAction,
    RoomQuery,
    SceneAction,
    SceneQuery,
    validate_arguments,
)
