"""Configuration management for the rental inquiry service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5000

# Keys accepted from the optional YAML file. The webhook secret is only ever
# taken from the environment.
_FILE_KEYS = {"storage", "database_path", "static_dir", "host", "port", "webhook_url", "log_level"}

_ENV_KEYS = {
    "webhook_url": "GS_WEBHOOK_URL",
    "webhook_secret": "WHIRLY_SECRET",
    "storage": "RENTALS_STORAGE",
    "database_path": "RENTALS_DB_PATH",
    "static_dir": "RENTALS_STATIC_DIR",
    "host": "HOST",
    "port": "PORT",
    "log_level": "LOG_LEVEL",
}


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the service."""

    webhook_url: Optional[str] = None
    webhook_secret: Optional[str] = None
    storage: str = "memory"
    database_path: Optional[str] = None
    static_dir: Optional[str] = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "Settings":
        """Create :class:`Settings` from raw values, treating blanks as unset."""
        cleaned: Dict[str, str] = {}
        for key, value in data.items():
            if value is None:
                continue
            text = str(value).strip()
            if text:
                cleaned[key] = text

        raw_port = cleaned.get("port", str(DEFAULT_PORT))
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid port '{raw_port}'") from exc
        if not 0 < port < 65536:
            raise ConfigurationError(f"Port {port} is out of range")

        return Settings(
            webhook_url=cleaned.get("webhook_url"),
            webhook_secret=cleaned.get("webhook_secret"),
            storage=cleaned.get("storage", "memory").lower(),
            database_path=cleaned.get("database_path"),
            static_dir=cleaned.get("static_dir"),
            host=cleaned.get("host", DEFAULT_HOST),
            port=port,
            log_level=cleaned.get("log_level", "INFO").upper(),
        )


def load_config_file(config_path: Path) -> Dict[str, object]:
    """Load non-secret settings from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

    unknown = set(raw) - _FILE_KEYS
    if unknown:
        raise ConfigurationError(
            f"Unsupported configuration keys in {config_path}: {', '.join(sorted(unknown))}"
        )
    return dict(raw)


def resolve_config_path(env_value: Optional[str]) -> Optional[Path]:
    """Resolve the path to the optional configuration file."""
    if not env_value:
        return None
    return Path(env_value).expanduser().resolve(strict=False)


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> Settings:
    """Build settings from the YAML file (if any) overlaid with environment variables."""
    env = os.environ if environ is None else environ

    values: Dict[str, object] = {}
    path = config_path or resolve_config_path(env.get("RENTALS_CONFIG"))
    if path is not None:
        values.update(load_config_file(path))

    for key, env_name in _ENV_KEYS.items():
        env_value = env.get(env_name)
        if env_value is not None and env_value.strip():
            values[key] = env_value

    return Settings.from_dict(values)


__all__ = ["Settings", "load_config_file", "load_settings", "resolve_config_path"]
