"""Configuration loading utilities."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from typing import Any

from ..errors import ConfigurationError
from ..logs.logger import logger
from .model import SessionConfig

DEFAULT_CONFIG_FILE = "ircflow.conf"

# Environment variables overriding file values.
ENV_OVERRIDES = {
    "IRCFLOW_HOST": "host",
    "IRCFLOW_PORT": "port",
    "IRCFLOW_USER": "user_name",
    "IRCFLOW_NICK": "nick_name",
    "IRCFLOW_REAL_NAME": "real_name",
    "IRCFLOW_ENCODING": "encoding",
    "IRCFLOW_SECURE": "secure",
    "IRCFLOW_PASSWORD": "password",
    "IRCFLOW_CAPABILITIES": "capabilities",
}


class ConfigLoader:
    """Loads a session configuration from a JSON file plus environment overrides."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self.environ = os.environ if environ is None else environ

    def load_raw(self, config_file: str) -> dict[str, Any]:
        """Read the raw session mapping from ``config_file``.

        Accepts either a flat object or ``{"session": {...}}``. A missing
        file yields an empty mapping so environment variables alone can
        configure a session.
        """
        try:
            with open(config_file, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.log_event(
                "config", "file_missing", level=logging.DEBUG, path=config_file
            )
            return {}
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"cannot read config file {config_file}", data={"error": str(e)}
            ) from e
        if isinstance(data, dict) and isinstance(data.get("session"), dict):
            return dict(data["session"])
        if isinstance(data, dict):
            return data
        raise ConfigurationError(
            f"config file {config_file} must contain a JSON object",
            data={"type": type(data).__name__},
        )

    def apply_env(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        merged = dict(raw)
        for env_name, field in ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value:
                merged[field] = value
        secure = merged.get("secure")
        if isinstance(secure, str):
            merged["secure"] = secure.lower() in ("true", "1", "yes")
        return merged

    def load(self, config_file: str | None = None) -> SessionConfig:
        path = config_file or self.environ.get("IRCFLOW_CONF_FILE", DEFAULT_CONFIG_FILE)
        config = SessionConfig.from_dict(self.apply_env(self.load_raw(path)))
        logger.log_event(
            "config",
            "loaded",
            nick=config.nick_name,
            host=config.host,
            path=path,
        )
        return config


def load_session_config(config_file: str | None = None) -> SessionConfig:
    """Load and validate the session configuration.

    Raises:
        ConfigurationError: If the file is unreadable or the settings are invalid.
    """
    return ConfigLoader().load(config_file)
