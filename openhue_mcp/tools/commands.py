"""
Command construction for the OpenHue CLI.

Every function here is pure: the same validated parameters always produce the
same command string. Free-form values (names, rooms, colors) are wrapped in
double quotes with backslash and quote escaped, which is exactly what
``shlex.split`` undoes. The executor tokenizes with ``shlex.split`` and never
runs a shell, so nothing inside a value is interpreted.
"""

from __future__ import annotations

import shlex

from openhue_mcp.config import ContainerConfig
from openhue_mcp.tools.schemas import (
    LightAction,
    LightQuery,
    RoomAction,
    RoomQuery,
    SceneAction,
    SceneQuery,
)


def quote(value: str) -> str:
    """Quote a free-form value as a single double-quoted argument."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_number(value: float) -> str:
    """Render 50.0 as ``50`` and 50.5 as ``50.5``."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _set_target(kind: str, params: LightAction) -> str:
    parts = ["set", kind, quote(params.target), f"--{params.action}"]
    if params.brightness is not None:
        parts += ["--brightness", format_number(params.brightness)]
    if params.color is not None:
        parts += ["--color", quote(params.color)]
    if params.temperature is not None:
        parts += ["--temperature", format_number(params.temperature)]
    return " ".join(parts)


def get_lights(params: LightQuery) -> str:
    parts = ["get", "light"]
    if params.light_id is not None:
        parts.append(quote(params.light_id))
    if params.room is not None:
        parts += ["--room", quote(params.room)]
    parts.append("--json")
    return " ".join(parts)


def control_light(params: LightAction) -> str:
    return _set_target("light", params)


def get_rooms(params: RoomQuery) -> str:
    parts = ["get", "room"]
    if params.room_id is not None:
        parts.append(quote(params.room_id))
    parts.append("--json")
    return " ".join(parts)


def control_room(params: RoomAction) -> str:
    return _set_target("room", params)


def get_scenes(params: SceneQuery) -> str:
    parts = ["get", "scene"]
    if params.room is not None:
        parts += ["--room", quote(params.room)]
    parts.append("--json")
    return " ".join(parts)


def activate_scene(params: SceneAction) -> str:
    parts = ["set", "scene", quote(params.name)]
    if params.room is not None:
        parts += ["--room", quote(params.room)]
    if params.mode is not None:
        parts += ["--action", params.mode]
    return " ".join(parts)


class CommandBuilder:
    """Wraps OpenHue subcommands in the container invocation.

    The mount spec is resolved once, at construction, so ``build`` does not
    depend on the environment afterwards.

    Usage:
        builder = CommandBuilder(config.container)
        builder.build("get light --json")
        # docker run -v "/home/me/.openhue:/.openhue" --rm openhue/cli get light --json
    """

    def __init__(self, config: ContainerConfig):
        self.config = config
        self._mount = f"{config.config_path}:{config.mount_target}"
        self._prefix = self._render_prefix()

    def _render_prefix(self) -> str:
        parts = [shlex.quote(self.config.runtime), "run", "-v", quote(self._mount)]
        if self.config.remove:
            parts.append("--rm")
        parts.append(shlex.quote(self.config.image))
        return " ".join(parts)

    @property
    def prefix(self) -> str:
        return self._prefix

    def build(self, subcommand: str) -> str:
        """Return the full external command for an OpenHue subcommand."""
        return f"{self._prefix} {subcommand}"
