"""Configuration management for hidremote.

Loads settings from a YAML configuration file with environment variable
overrides (``HIDREMOTE_`` prefix, ``__`` between nested keys). Supports
.env files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/hidremote.yaml")


class DeviceConfig(BaseModel):
    profile: Literal["remote", "media_keyboard"] = Field(
        default="remote", description="Built-in device profile"
    )
    name: str | None = Field(default=None, description="Overrides the profile's device name")
    manufacturer: str | None = Field(default=None)


class TransportConfig(BaseModel):
    backend: Literal["gadget", "null"] = Field(default="gadget")
    device_path: str = Field(default="/dev/hidg0")
    key_delay: float = Field(default=0.02, ge=0, description="Seconds between press and release")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)


class MonitorConfig(BaseModel):
    buffer_size: int = Field(default=1000, gt=0)
    log_file: str | None = Field(default=None)
    max_log_bytes: int = Field(default=1_000_000, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for hidremote.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "HIDREMOTE_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    device: DeviceConfig = Field(default_factory=DeviceConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    YAML values are passed as init arguments and win over environment
    variables for the same key; env vars and .env fill in everything
    the file leaves out.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
