# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Configuration loading for ingest-auth.

The management endpoint is configured by one TOML file:

    [server]
    host = "127.0.0.1"
    port = 8080
    log-level = "info"

    [middleware]
    auth = true

    [auth]
    auth-type = "preshared-token"
    token-name = "Bearer"
    token-value = "${INGEST_TOKEN}"

Key constraints:
- TOML keys CANNOT contain underscore (_); use hyphenated names
  (``login-url``). Middleware sections are handed to their middleware with
  hyphens turned into underscores.
- String values may reference the environment: ``${VAR}`` (required) or
  ``${VAR:-default}``.
"""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .authentication import AuthConfig

__all__ = [
    "ConfigError",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "auth_config",
    "find_config_file",
    "load_config",
    "server_settings",
    "validate_keys",
]

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "info"
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


class ConfigError(Exception):
    """Configuration error."""


def validate_keys(data: Any, path: str = "") -> None:
    """
    Validate that no keys contain underscore.

    Raises:
        ConfigError: If a key contains underscore.
    """
    if isinstance(data, dict):
        for key, value in data.items():
            child_path = f"{path}.{key}" if path else key
            if "_" in key:
                raise ConfigError(
                    f"Invalid key '{child_path}': underscore (_) is not allowed in keys. "
                    f"Use hyphenated names instead."
                )
            validate_keys(value, child_path)
    elif isinstance(data, list):
        for i, item in enumerate(data):
            validate_keys(item, f"{path}[{i}]")


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load configuration from TOML file.

    Raises:
        ConfigError: If file not found, invalid TOML, keys contain underscore,
            or a required environment variable is unset.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path, "rb") as f:
            config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse TOML: {e}") from e

    validate_keys(config)
    return dict(_expand_env_vars(config))


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand ``${VAR}`` and ``${VAR:-default}`` in string values."""
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return _expand_string(obj)
    return obj


def _expand_string(s: str) -> str:
    """
    Expand environment variables in a string.

    Raises:
        ConfigError: If required variable is not set.
    """
    pattern = r"\$\{([^}]+)\}"

    def replace(match: re.Match[str]) -> str:
        expr = match.group(1)

        if ":-" in expr:
            var_name, default = expr.split(":-", 1)
            return os.environ.get(var_name, default)
        value = os.environ.get(expr)
        if value is None:
            raise ConfigError(f"Required environment variable not set: {expr}")
        return value

    return re.sub(pattern, replace, s)


def find_config_file() -> Path | None:
    """
    Find configuration file in standard locations.

    Searches:
    1. INGEST_AUTH_CONFIG environment variable
    2. ./ingest-auth.toml
    3. ./config.toml

    Returns:
        Path to config file or None if not found.
    """
    env_config = os.environ.get("INGEST_AUTH_CONFIG")
    if env_config:
        path = Path(env_config)
        if path.is_file():
            return path

    for path in (Path.cwd() / "ingest-auth.toml", Path.cwd() / "config.toml"):
        if path.is_file():
            return path

    return None


def auth_config(config: Mapping[str, Any]) -> AuthConfig:
    """Build the AuthConfig from the ``[auth]`` section (missing section = disabled).

    Raises:
        ConfigError: ``[auth]`` is not a table.
        InvalidAuthTypeError: Unknown ``auth-type``.
    """
    section = config.get("auth") or {}
    if not isinstance(section, Mapping):
        raise ConfigError("[auth] must be a table")
    return AuthConfig.from_mapping(section)


def server_settings(config: Mapping[str, Any]) -> dict[str, Any]:
    """Host, port and log level from ``[server]``, with defaults filled in.

    Raises:
        ConfigError: Port is not an integer in 0-65535, or unknown log level.
    """
    section = config.get("server") or {}
    port = section.get("port", DEFAULT_PORT)
    try:
        port = int(port)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid port: {port!r}") from None
    if not 0 <= port <= 65535:
        raise ConfigError(f"Invalid port: {port}")
    log_level = str(section.get("log-level", DEFAULT_LOG_LEVEL)).lower()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"Invalid log-level: {log_level!r} (expected one of {', '.join(LOG_LEVELS)})")
    return {
        "host": str(section.get("host", DEFAULT_HOST)),
        "port": port,
        "log_level": log_level,
    }
