"""Pytest fixtures for OpenHue MCP."""

from __future__ import annotations

from pathlib import Path

import pytest

from openhue_mcp.config import ContainerConfig
from openhue_mcp.dispatch import Dispatcher
from openhue_mcp.tools.commands import CommandBuilder
from openhue_mcp.tools.exec import ExecResult

_ENV_VARS = [
    "OPENHUE_MCP_CONFIG",
    "OPENHUE_MCP_ENABLED",
    "OPENHUE_MCP_LOG_LEVEL",
    "OPENHUE_MCP_RUNTIME",
    "OPENHUE_MCP_IMAGE",
    "OPENHUE_CONFIG_DIR",
    "OPENHUE_MCP_TIMEOUT",
    "OPENHUE_MCP_OBS_ENABLED",
    "OPENHUE_MCP_OBS_LOG_FORMAT",
    "OPENHUE_MCP_OBS_CSV_ENABLED",
    "OPENHUE_MCP_OBS_CSV_PATH",
]


@pytest.fixture(autouse=True)
def hermetic_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Autouse: each test runs in its own tmp cwd with a private HOME and no
    OPENHUE_* overrides leaking in from the developer's shell.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(home))
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def home(hermetic_env: Path) -> Path:
    return hermetic_env / "home"


class FakeExecutor:
    """Stands in for run_command: records every command, replays a canned outcome."""

    def __init__(self, result: ExecResult | None = None, error: Exception | None = None):
        self.result = result or ExecResult(stdout="", stderr="", exit_code=0)
        self.error = error
        self.calls: list[dict] = []

    @property
    def commands(self) -> list[str]:
        return [call["command"] for call in self.calls]

    async def __call__(self, command: str, **kwargs) -> ExecResult:
        self.calls.append({"command": command, **kwargs})
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def container_config() -> ContainerConfig:
    return ContainerConfig()


@pytest.fixture
def builder(container_config: ContainerConfig) -> CommandBuilder:
    return CommandBuilder(container_config)


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def dispatcher(builder: CommandBuilder, fake_executor: FakeExecutor) -> Dispatcher:
    return Dispatcher(builder, executor=fake_executor)


@pytest.fixture
def prefix(home: Path) -> str:
    return f'docker run -v "{home}/.openhue:/.openhue" --rm openhue/cli'


@pytest.fixture
def make_dispatcher(builder: CommandBuilder):
    """Factory: a Dispatcher wired to a fresh FakeExecutor with the given outcome."""

    def _make(**kwargs) -> tuple[Dispatcher, FakeExecutor]:
        executor = FakeExecutor(**kwargs)
        return Dispatcher(builder, executor=executor), executor

    return _make
