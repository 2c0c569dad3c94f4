"""
Pydantic Settings for Milvus Wait Operations

This module provides strongly-typed configuration settings using Pydantic,
with support for environment variables and YAML configuration files.
"""

from typing import Optional, Union
from pathlib import Path
import os

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_yaml import to_yaml_str


class ConnectionSettings(BaseSettings):
    """
    Connection settings for establishing connections to the Milvus server.

    These settings control how the transport connects to the Milvus server:
    - Server location and authentication
    - Connection security and per-request timeout
    - Retry behavior for establishing the connection
    """
    model_config = SettingsConfigDict(env_prefix="MILVUS_", case_sensitive=False)

    host: str = Field("localhost",
                      description="Hostname or IP address of the Milvus server")
    port: str = Field("19530",
                      description="Port number on which Milvus server is listening")
    user: str = Field("",
                      description="Username for authentication (if enabled on server)")
    password: str = Field("",
                          description="Password for authentication (if enabled on server)")
    secure: bool = Field(False,
                         description="Whether to use TLS/SSL for secure connection")
    timeout: float = Field(60.0,
                           description="Per-request timeout in seconds for calls to the server")
    retry_count: int = Field(3,
                             description="Number of times to retry establishing the connection")
    retry_interval: float = Field(1.0,
                                  description="Base time in seconds between connection attempts")
    executor_workers: int = Field(4,
                                  description="Worker threads used to run blocking SDK calls")


class WaitSettings(BaseSettings):
    """
    Settings that control how long-running operations are waited on.

    Loading a collection into query nodes and flushing segments complete
    asynchronously on the server. These settings define the default poll
    cadence used when a caller passes a plain number of seconds as timeout.
    """
    model_config = SettingsConfigDict(env_prefix="MILVUS_WAIT_", case_sensitive=False)

    poll_interval: float = Field(0.5,
                                 description="Seconds between successive progress checks")
    progress_log_every: int = Field(5,
                                    description="Log progress at INFO level every N polls")


class MilvusSettings(BaseSettings):
    """
    Main settings class that consolidates all configuration categories.

    Usage:
        # Load from environment variables and defaults
        settings = MilvusSettings()

        # Load from YAML file
        settings = MilvusSettings.from_yaml('config.yaml')

        # Access nested settings
        host = settings.connection.host
        interval = settings.wait.poll_interval
    """
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False, env_nested_delimiter="__")

    connection: ConnectionSettings = Field(default_factory=ConnectionSettings,
                                           description="Connection settings for Milvus server")
    wait: WaitSettings = Field(default_factory=WaitSettings,
                               description="Progress polling settings for long-running operations")

    @classmethod
    def from_yaml(cls, yaml_file: Union[str, Path]) -> "MilvusSettings":
        """Load settings from YAML file"""
        with open(yaml_file, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self) -> str:
        """Serialize settings to a YAML string"""
        return to_yaml_str(self)


def load_settings(config_path: Optional[str] = None) -> MilvusSettings:
    """
    Load settings from file and/or environment variables.

    Args:
        config_path: Path to YAML configuration file. If None or file doesn't exist,
                    falls back to environment variables and default values.

    Returns:
        MilvusSettings object with loaded configuration

    Example:
        # Load from specific config file
        settings = load_settings("/path/to/config.yaml")

        # Load from environment variables and defaults
        settings = load_settings()
    """
    if config_path and os.path.exists(config_path):
        return MilvusSettings.from_yaml(config_path)
    return MilvusSettings()
