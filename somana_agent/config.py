"""Loading and saving of the agent's YAML configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_SOMANA_URL = "http://localhost:8081"


@dataclass
class HostRegistrationConfig:
    """Where to register and the id already assigned, if any."""

    somana_url: str = DEFAULT_SOMANA_URL
    host_id: str = ""


@dataclass
class Config:
    """Application configuration."""

    host_registration: HostRegistrationConfig = field(default_factory=HostRegistrationConfig)

    def to_dict(self) -> dict[str, Any]:
        return {
            "host_registration": {
                "somana_url": self.host_registration.somana_url,
                "host_id": self.host_registration.host_id,
            }
        }


def _scalar_to_str(key: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ValueError(f"config field {key!r} must be a scalar")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def load_config(config_path: str | os.PathLike[str]) -> Config:
    """Load the configuration, falling back to defaults when the file is absent."""
    config = Config()
    path = Path(config_path)
    if not path.exists():
        return config

    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if data is None:
        raise ValueError(f"config file {str(path)!r} is empty")
    if not isinstance(data, dict):
        raise ValueError("config file must hold a mapping at the top level")

    section = data.get("host_registration")
    if section is None:
        return config
    if not isinstance(section, dict):
        raise ValueError("'host_registration' must be a mapping")

    reg = config.host_registration
    if "somana_url" in section:
        reg.somana_url = _scalar_to_str("somana_url", section["somana_url"])
    if "host_id" in section:
        reg.host_id = _scalar_to_str("host_id", section["host_id"])
    return config


def save_config(config: Config, config_path: str | os.PathLike[str]) -> None:
    """Write the configuration, creating the parent directory if needed."""
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(config.to_dict(), fh, sort_keys=False, default_flow_style=False)