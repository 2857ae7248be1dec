"""
Process execution for OpenHue CLI commands.

Outcomes:
- success: exit status 0 and nothing but whitespace on stderr
- ExternalCommandError: the CLI ran and reported a failure (stderr is the
  diagnostic, passed through verbatim)
- SpawnError: the process never started (missing container runtime, bad path)
- CommandTimeoutError: only when a timeout is given; the process is killed
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import shlex

from openhue_mcp.errors import CommandTimeoutError, ExternalCommandError, SpawnError

logger = logging.getLogger("openhue-mcp.exec")


@dataclass
class ExecResult:
    """Result from command execution."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def failed(self) -> bool:
        return self.exit_code != 0 or bool(self.stderr.strip())


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


async def run_command(
    command: str,
    timeout: float | None = None,
    stderr_is_failure: bool = True,
) -> ExecResult:
    """
    Execute an external command and capture its output.

    The command is tokenized with shlex and started directly, without a shell.

    Args:
        command: Full command line (as produced by CommandBuilder)
        timeout: Max execution time in seconds; None waits forever
        stderr_is_failure: Treat any stderr output as a failure even on exit 0

    Returns:
        ExecResult for a successful run

    Raises:
        ExternalCommandError: non-zero exit (or stderr output)
        SpawnError: process could not be started
        CommandTimeoutError: timeout elapsed; the process was killed
    """
    try:
        argv = shlex.split(command)
    except ValueError as e:
        raise SpawnError(f"Invalid command syntax: {e}") from e
    if not argv:
        raise SpawnError("Empty command")

    logger.debug(f"Running: {command}")
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise SpawnError(f"Failed to start '{argv[0]}': {e}") from e

    try:
        if timeout is None:
            out, err = await proc.communicate()
        else:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise CommandTimeoutError(timeout) from None

    result = ExecResult(stdout=_decode(out), stderr=_decode(err), exit_code=proc.returncode)

    # Whitespace-only stderr (a trailing newline, say) carries no diagnostic
    if result.exit_code != 0 or (stderr_is_failure and result.stderr.strip()):
        if result.stderr.strip():
            message = result.stderr
        else:
            message = f"Command exited with status {result.exit_code}"
        logger.debug(f"Command failed (exit {result.exit_code}): {message.strip()}")
        raise ExternalCommandError(message, stderr=result.stderr, exit_code=result.exit_code)

    if result.stderr.strip():
        logger.info(f"Command stderr (ignored): {result.stderr.strip()}")
    return result
