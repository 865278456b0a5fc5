"""Configuration loading.

Settings are merged from (lowest to highest precedence): an optional YAML
file, ``IRCLOG_*`` environment variables (a ``.env`` file is honoured), and
command-line values. The merged mapping is validated into a SessionConfig.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from models import SessionConfig

REQUIRED_FIELDS = ("server", "port", "nick", "channel")

# environment variable -> SessionConfig field
ENV_VARS: dict[str, str] = {
    "IRCLOG_SERVER": "server",
    "IRCLOG_PORT": "port",
    "IRCLOG_NICK": "nick",
    "IRCLOG_CHANNEL": "channel",
    "IRCLOG_DIR": "log_dir",
    "IRCLOG_ADMINS": "admins",
    "IRCLOG_HISTORY_MAX": "history_max",
    "IRCLOG_ROTATION_INTERVAL": "rotation_interval",
    "IRCLOG_SEND_DELAY": "send_delay",
    "IRCLOG_MEMO_STORE": "memo_store_path",
}


class ConfigError(ValueError):
    """Raised when the merged settings are incomplete or invalid."""


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Read a YAML mapping of SessionConfig fields.

    Raises:
        ConfigError: If the file is missing or isn't a mapping.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    return data


def env_values(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for var, field in ENV_VARS.items():
        raw = env.get(var, "").strip()
        if raw:
            values[field] = raw
    return values


def build_config(*layers: Mapping[str, Any]) -> SessionConfig:
    """Merge layers (later wins, None values skipped) and validate."""
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update({k: v for k, v in layer.items() if v is not None})

    missing = [f for f in REQUIRED_FIELDS if merged.get(f) in (None, "")]
    if missing:
        raise ConfigError(f"Missing required setting(s): {', '.join(missing)}")
    try:
        return SessionConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(str(e)) from e


def load_config(
    cli_values: Mapping[str, Any],
    *,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    dotenv_path: str | None = ".env",
) -> SessionConfig:
    """Resolve a SessionConfig from YAML file, environment and CLI values."""
    if environ is None and dotenv_path:
        load_dotenv(dotenv_path, override=False)
    file_layer = load_yaml_config(config_path) if config_path else {}
    return build_config(file_layer, env_values(environ), cli_values)
