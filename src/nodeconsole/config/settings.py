"""Configuration management for nodeconsole.

Loads settings from a YAML configuration file with environment variable
overrides. Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/nodeconsole.yaml")

# Commands understood by the node's interactive prompt.
DEFAULT_GRAMMAR: dict[str, list[str]] = {
    "application": ["ls", "install"],
    "call": ["<ctx> <method> <payload> <key>"],
    "context": ["ls", "join", "leave", "create", "delete", "state", "transactions"],
    "identity": ["ls", "new"],
    "peers": [],
    "pool": [],
    "gc": [],
    "store": [],
}


class SupervisorConfig(BaseModel):
    backend: Literal["local", "http"] = Field(default="local")
    http_base_url: str = Field(default="http://localhost:8090")
    http_timeout: float = Field(default=10.0, gt=0)
    nodes_dir: Path = Field(default=Path("~/.nodeconsole/nodes"))
    node_binary: str = Field(default="meroctl", description="Executable that runs a node")
    max_log_bytes: int = Field(default=5 * 1024 * 1024, gt=0)
    dashboard_url_template: str = Field(
        default="http://localhost:{server_port}/admin-dashboard",
    )


class EndpointConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8090, ge=1, le=65535)


class ConsoleConfig(BaseModel):
    directive_marker: str = Field(default="/", max_length=1)
    channel_prefix: str = Field(default="node-output-")
    grammar: dict[str, list[str]] = Field(default_factory=lambda: dict(DEFAULT_GRAMMAR))


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for nodeconsole.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "NODECONSOLE_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    supervisor: SupervisorConfig = Field(default_factory=SupervisorConfig)
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    console: ConsoleConfig = Field(default_factory=ConsoleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs and rank below the environment.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply environment variable overrides for non-prefixed vars."""
    nodes_dir = os.environ.get("NODES_DIR", "")
    node_binary = os.environ.get("NODE_BINARY", "")

    if "supervisor" not in yaml_data:
        yaml_data["supervisor"] = {}

    if nodes_dir and not yaml_data["supervisor"].get("nodes_dir"):
        yaml_data["supervisor"]["nodes_dir"] = nodes_dir

    if node_binary and not yaml_data["supervisor"].get("node_binary"):
        yaml_data["supervisor"]["node_binary"] = node_binary
