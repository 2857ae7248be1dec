"""
Argument models for the OpenHue tools.

One frozen pydantic model per tool. Models are strict (no string-to-number
coercion) and collect every violation before failing, so a client sees the
full list of problems in one error.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError

from openhue_mcp.errors import FieldViolation, InvalidArgumentsError, UnknownToolError

BRIGHTNESS_RANGE = (0, 100)
TEMPERATURE_RANGE = (153, 500)  # Mirek
ACTIONS = ("on", "off")
SCENE_MODES = ("active", "dynamic", "static")

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]
Brightness = Annotated[float, Field(ge=BRIGHTNESS_RANGE[0], le=BRIGHTNESS_RANGE[1])]
Mirek = Annotated[float, Field(ge=TEMPERATURE_RANGE[0], le=TEMPERATURE_RANGE[1])]


class _Params(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")


class LightQuery(_Params):
    light_id: NonEmptyStr | None = Field(default=None, alias="lightId")
    room: NonEmptyStr | None = None


class RoomQuery(_Params):
    room_id: NonEmptyStr | None = Field(default=None, alias="roomId")


class SceneQuery(_Params):
    room: NonEmptyStr | None = None


class LightAction(_Params):
    target: NonEmptyStr
    action: Literal["on", "off"]
    brightness: Brightness | None = None
    color: NonEmptyStr | None = None
    temperature: Mirek | None = None


class RoomAction(LightAction):
    """Same shape as LightAction; target names a room instead of a light."""


class SceneAction(_Params):
    name: NonEmptyStr
    room: NonEmptyStr | None = None
    mode: Literal["active", "dynamic", "static"] | None = None


PARAMETER_MODELS: dict[str, type[_Params]] = {
    "get-lights": LightQuery,
    "control-light": LightAction,
    "get-rooms": RoomQuery,
    "control-room": RoomAction,
    "get-scenes": SceneQuery,
    "activate-scene": SceneAction,
}


def violations_from(error: ValidationError) -> list[FieldViolation]:
    """Flatten a pydantic ValidationError into (path, reason) pairs."""
    violations = []
    for err in error.errors():
        path = ".".join(str(part) for part in err["loc"]) or "arguments"
        violations.append(FieldViolation(path=path, reason=err["msg"]))
    return violations


def parse_params(model: type[_Params], arguments: Any) -> _Params:
    """Validate raw arguments against ``model``.

    Raises:
        InvalidArgumentsError: with one violation per offending field
    """
    if arguments is None:
        arguments = {}
    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        raise InvalidArgumentsError(violations_from(e)) from e


def validate_arguments(tool_name: str, arguments: Any) -> _Params:
    """Validate ``arguments`` for the named tool."""
    model = PARAMETER_MODELS.get(tool_name)
    if model is None:
        raise UnknownToolError(tool_name)
    return parse_params(model, arguments)
