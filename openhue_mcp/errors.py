"""
OpenHue MCP error types.

Custom exceptions with MCP-friendly error codes. Every failure raised while
handling a tool call is a HueToolError; the server turns it into an error
result instead of letting it reach the transport.
"""

from __future__ import annotations

from dataclasses import dataclass


class HueToolError(Exception):
    """Base error for tool invocations."""

    code: str = "TOOL_ERROR"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class UnknownToolError(HueToolError):
    """Tool name is not in the registry."""

    code = "UNKNOWN_TOOL"

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


@dataclass(frozen=True)
class FieldViolation:
    """One schema violation: dotted field path plus a readable reason."""

    path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


class InvalidArgumentsError(HueToolError):
    """Arguments failed schema validation. Carries every violation."""

    code = "INVALID_ARGUMENTS"

    def __init__(self, violations: list[FieldViolation]):
        self.violations = list(violations)
        detail = ", ".join(str(v) for v in self.violations)
        super().__init__(f"Invalid arguments: {detail}")

    @property
    def fields(self) -> list[str]:
        return [v.path for v in self.violations]


class ExternalCommandError(HueToolError):
    """The OpenHue CLI ran but reported a failure."""

    code = "EXTERNAL_FAILURE"

    def __init__(self, message: str, *, stderr: str = "", exit_code: int | None = None):
        super().__init__(message)
        self.stderr = stderr
        self.exit_code = exit_code


class SpawnError(HueToolError):
    """The external command could not be started at all."""

    code = "SPAWN_FAILURE"


class CommandTimeoutError(HueToolError):
    """The external command exceeded the configured timeout and was killed."""

    code = "TIMED_OUT"

    def __init__(self, timeout: float):
        super().__init__(f"Command timed out after {timeout:g}s")
        self.timeout = timeout
