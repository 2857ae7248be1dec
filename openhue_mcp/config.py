"""MCP configuration loader - reads from openhue-mcp.toml with ENV overrides."""  # noqa: I001

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
import tomllib
from typing import Any, cast

_TRUE_VALUES = ("1", "true", "yes")
_LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass
class McpServerConfig:
    """Server transport settings."""

    transport: str = "stdio"
    log_level: str = "info"

    def validate(self) -> None:
        if self.transport != "stdio":
            raise ValueError(f"Invalid transport: {self.transport}")
        if self.log_level.lower() not in _LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")


@dataclass
class ContainerConfig:
    """How the OpenHue CLI container is launched.

    ``config_dir`` is the host directory populated by ``openhue setup``; it is
    mounted at ``mount_target`` where the CLI looks for its configuration.
    """

    runtime: str = "docker"
    image: str = "openhue/cli"
    config_dir: str = "~/.openhue"
    mount_target: str = "/.openhue"
    remove: bool = True

    @property
    def config_path(self) -> Path:
        return Path(self.config_dir).expanduser()

    def validate(self) -> None:
        if not self.runtime.strip():
            raise ValueError("container runtime must not be empty")
        if not self.image.strip():
            raise ValueError("container image must not be empty")
        if not self.mount_target.startswith("/"):
            raise ValueError(f"mount_target must be absolute: {self.mount_target}")


@dataclass
class McpExecConfig:
    """External command execution settings."""

    timeout: float = 0  # seconds, 0 = wait forever
    stderr_is_failure: bool = True

    @property
    def effective_timeout(self) -> float | None:
        return self.timeout if self.timeout > 0 else None

    def validate(self) -> None:
        if self.timeout < 0:
            raise ValueError("timeout must not be negative")


@dataclass
class McpObservabilityConfig:
    """Observability settings."""

    enabled: bool = False
    log_format: str = "json"  # "json" | "text"
    log_level: str = "info"
    include_correlation_id: bool = True
    # Tool call audit CSV
    csv_audit_enabled: bool = False
    csv_path: str = "./artifacts/tool_audit.csv"

    def validate(self) -> None:
        if self.log_format not in ("json", "text"):
            raise ValueError(f"Invalid log_format: {self.log_format}")
        if self.enabled and self.csv_audit_enabled:
            path = Path(self.csv_path)
            if path.exists() and not path.is_file():
                raise ValueError(f"Audit CSV path '{self.csv_path}' exists but is not a file")


@dataclass
class McpConfig:
    """Root MCP configuration."""

    enabled: bool = True
    server: McpServerConfig = field(default_factory=McpServerConfig)
    container: ContainerConfig = field(default_factory=ContainerConfig)
    exec: McpExecConfig = field(default_factory=McpExecConfig)
    observability: McpObservabilityConfig = field(default_factory=McpObservabilityConfig)

    def validate(self) -> None:
        self.server.validate()
        self.container.validate()
        self.exec.validate()
        self.observability.validate()


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in _TRUE_VALUES


def _apply_env_overrides(cfg: McpConfig) -> McpConfig:
    """Apply environment variable overrides. ENV beats TOML."""
    if os.getenv("OPENHUE_MCP_ENABLED"):
        cfg.enabled = _env_flag("OPENHUE_MCP_ENABLED")

    if os.getenv("OPENHUE_MCP_LOG_LEVEL"):
        cfg.server.log_level = os.getenv("OPENHUE_MCP_LOG_LEVEL", cfg.server.log_level)

    # Container overrides
    if os.getenv("OPENHUE_MCP_RUNTIME"):
        cfg.container.runtime = os.getenv("OPENHUE_MCP_RUNTIME", cfg.container.runtime)
    if os.getenv("OPENHUE_MCP_IMAGE"):
        cfg.container.image = os.getenv("OPENHUE_MCP_IMAGE", cfg.container.image)
    if os.getenv("OPENHUE_CONFIG_DIR"):
        cfg.container.config_dir = os.getenv("OPENHUE_CONFIG_DIR", cfg.container.config_dir)

    if os.getenv("OPENHUE_MCP_TIMEOUT"):
        raw = cast(str, os.getenv("OPENHUE_MCP_TIMEOUT"))
        try:
            cfg.exec.timeout = float(raw)
        except ValueError as e:
            raise ValueError(f"Invalid OPENHUE_MCP_TIMEOUT: {raw!r}") from e

    # Observability overrides
    if os.getenv("OPENHUE_MCP_OBS_ENABLED"):
        cfg.observability.enabled = _env_flag("OPENHUE_MCP_OBS_ENABLED")
    if os.getenv("OPENHUE_MCP_OBS_LOG_FORMAT"):
        cfg.observability.log_format = os.getenv(
            "OPENHUE_MCP_OBS_LOG_FORMAT", cfg.observability.log_format
        )
    if os.getenv("OPENHUE_MCP_OBS_CSV_ENABLED"):
        cfg.observability.csv_audit_enabled = _env_flag("OPENHUE_MCP_OBS_CSV_ENABLED")
    if os.getenv("OPENHUE_MCP_OBS_CSV_PATH"):
        cfg.observability.csv_path = os.getenv(
            "OPENHUE_MCP_OBS_CSV_PATH", cfg.observability.csv_path
        )

    return cfg


def _apply_toml(cfg: McpConfig, data: dict[str, Any]) -> None:
    mcp_data = data.get("mcp", {})

    cfg.enabled = mcp_data.get("enabled", cfg.enabled)

    srv = mcp_data.get("server", {})
    cfg.server.transport = srv.get("transport", cfg.server.transport)
    cfg.server.log_level = srv.get("log_level", cfg.server.log_level)

    container = mcp_data.get("container", {})
    cfg.container.runtime = container.get("runtime", cfg.container.runtime)
    cfg.container.image = container.get("image", cfg.container.image)
    cfg.container.config_dir = container.get("config_dir", cfg.container.config_dir)
    cfg.container.mount_target = container.get("mount_target", cfg.container.mount_target)
    cfg.container.remove = container.get("remove", cfg.container.remove)

    exec_data = mcp_data.get("exec", {})
    cfg.exec.timeout = exec_data.get("timeout", cfg.exec.timeout)
    cfg.exec.stderr_is_failure = exec_data.get("stderr_is_failure", cfg.exec.stderr_is_failure)

    obs = mcp_data.get("observability", {})
    cfg.observability.enabled = obs.get("enabled", cfg.observability.enabled)
    cfg.observability.log_format = obs.get("log_format", cfg.observability.log_format)
    cfg.observability.log_level = obs.get("log_level", cfg.observability.log_level)
    cfg.observability.include_correlation_id = obs.get(
        "include_correlation_id", cfg.observability.include_correlation_id
    )
    cfg.observability.csv_audit_enabled = obs.get(
        "csv_audit_enabled", cfg.observability.csv_audit_enabled
    )
    cfg.observability.csv_path = obs.get("csv_path", cfg.observability.csv_path)


def load_config(config_path: str | Path | None = None) -> McpConfig:
    """
    Load MCP config from openhue-mcp.toml with ENV overrides.

    Precedence: ENV → TOML → defaults

    Args:
        config_path: Path to openhue-mcp.toml. If None, searches:
            1. OPENHUE_MCP_CONFIG env var
            2. ./openhue-mcp.toml

    Returns:
        McpConfig dataclass with merged settings.
    """
    if config_path is None:
        if os.getenv("OPENHUE_MCP_CONFIG"):
            config_path = Path(cast(str, os.getenv("OPENHUE_MCP_CONFIG")))
        else:
            config_path = Path("openhue-mcp.toml")
    else:
        config_path = Path(config_path)

    cfg = McpConfig()

    if config_path.exists():
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        _apply_toml(cfg, data)

    cfg = _apply_env_overrides(cfg)
    cfg.validate()

    return cfg
