"""
Tool catalog for the OpenHue MCP server.

TOOLS is what ``list_tools`` returns. TOOL_REGISTRY maps each tool name to the
pieces the dispatcher needs: the argument model, the subcommand builder and
the response formatter. Adding a tool means adding one entry to each.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from mcp.types import Tool
from pydantic import BaseModel

from openhue_mcp.tools import commands
from openhue_mcp.tools.exec import ExecResult
from openhue_mcp.tools.schemas import (
    ACTIONS,
    BRIGHTNESS_RANGE,
    PARAMETER_MODELS,
    SCENE_MODES,
    TEMPERATURE_RANGE,
    LightAction,
    SceneAction,
)


def _json_type(name: str, optional: bool) -> str | list[str]:
    # Optional fields accept null, which the models treat as omitted
    return [name, "null"] if optional else name


def _string(description: str, optional: bool = False) -> dict[str, Any]:
    return {"type": _json_type("string", optional), "minLength": 1, "description": description}


def _action_properties(target_description: str, action_description: str) -> dict[str, Any]:
    return {
        "target": _string(target_description),
        "action": {
            "type": "string",
            "enum": list(ACTIONS),
            "description": action_description,
        },
        "brightness": {
            "type": _json_type("number", True),
            "minimum": BRIGHTNESS_RANGE[0],
            "maximum": BRIGHTNESS_RANGE[1],
            "description": "Optional brightness level (0-100)",
        },
        "color": _string("Optional color name (e.g., 'red', 'blue')", optional=True),
        "temperature": {
            "type": _json_type("number", True),
            "minimum": TEMPERATURE_RANGE[0],
            "maximum": TEMPERATURE_RANGE[1],
            "description": "Optional color temperature in Mirek (153-500)",
        },
    }


TOOLS: list[Tool] = [
    Tool(
        name="get-lights",
        description="List all Hue lights or get details for a specific light",
        inputSchema={
            "type": "object",
            "properties": {
                "lightId": _string(
                    "Optional light ID or name to get specific light details", optional=True
                ),
                "room": _string("Optional room name to filter lights", optional=True),
            },
        },
    ),
    Tool(
        name="control-light",
        description="Control a specific Hue light",
        inputSchema={
            "type": "object",
            "properties": _action_properties("Light ID or name", "Turn light on or off"),
            "required": ["target", "action"],
        },
    ),
    Tool(
        name="get-rooms",
        description="List all rooms or get details for a specific room",
        inputSchema={
            "type": "object",
            "properties": {
                "roomId": _string(
                    "Optional room ID or name to get specific room details", optional=True
                ),
            },
        },
    ),
    Tool(
        name="control-room",
        description="Control all lights in a room",
        inputSchema={
            "type": "object",
            "properties": _action_properties("Room ID or name", "Turn room lights on or off"),
            "required": ["target", "action"],
        },
    ),
    Tool(
        name="get-scenes",
        description="List all scenes, optionally filtered by room",
        inputSchema={
            "type": "object",
            "properties": {
                "room": _string("Optional room name to filter scenes", optional=True),
            },
        },
    ),
    Tool(
        name="activate-scene",
        description="Activate a specific scene",
        inputSchema={
            "type": "object",
            "properties": {
                "name": _string("Scene name or ID"),
                "room": _string("Optional room name for the scene", optional=True),
                "mode": {
                    "type": _json_type("string", True),
                    "enum": [*SCENE_MODES, None],
                    "description": "Optional scene mode",
                },
            },
            "required": ["name"],
        },
    ),
]


def passthrough(params: BaseModel, result: ExecResult) -> str:
    """Read tools return the CLI's JSON output untouched."""
    return result.stdout


def light_confirmation(params: LightAction, result: ExecResult) -> str:
    return f'Successfully set light "{params.target}" to {params.action}'


def room_confirmation(params: LightAction, result: ExecResult) -> str:
    return f'Successfully set room "{params.target}" to {params.action}'


def scene_confirmation(params: SceneAction, result: ExecResult) -> str:
    message = f'Successfully activated scene "{params.name}"'
    if params.room is not None:
        message += f' in room "{params.room}"'
    if params.mode is not None:
        message += f" ({params.mode})"
    return message


@dataclass(frozen=True)
class ToolEntry:
    """Everything the dispatcher needs to run one tool."""

    tool: Tool
    model: type[BaseModel]
    build: Callable[[Any], str]
    respond: Callable[[Any, ExecResult], str]

    @property
    def read_only(self) -> bool:
        return self.respond is passthrough


_BUILDERS: dict[str, tuple[Callable[[Any], str], Callable[[Any, ExecResult], str]]] = {
    "get-lights": (commands.get_lights, passthrough),
    "control-light": (commands.control_light, light_confirmation),
    "get-rooms": (commands.get_rooms, passthrough),
    "control-room": (commands.control_room, room_confirmation),
    "get-scenes": (commands.get_scenes, passthrough),
    "activate-scene": (commands.activate_scene, scene_confirmation),
}


def _build_registry() -> dict[str, ToolEntry]:
    registry: dict[str, ToolEntry] = {}
    for tool in TOOLS:
        if tool.name in registry:
            raise ValueError(f"Tool already registered: {tool.name}")
        build, respond = _BUILDERS[tool.name]
        registry[tool.name] = ToolEntry(
            tool=tool,
            model=PARAMETER_MODELS[tool.name],
            build=build,
            respond=respond,
        )
    return registry


TOOL_REGISTRY: dict[str, ToolEntry] = _build_registry()


def get_tool_registry() -> dict[str, ToolEntry]:
    """Return the name → ToolEntry table."""
    return TOOL_REGISTRY
