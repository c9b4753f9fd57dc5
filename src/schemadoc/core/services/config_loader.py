"""Connection file loader with environment variable substitution."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:-]+)(?::-([^}]*))?\}")

SENSITIVE_KEY_PATTERNS = ("secret", "token", "password", "key", "credential")


class ConfigLoadError(Exception):
    """Raised when connection configuration cannot be loaded."""

    pass


def substitute_env_vars(value: Any) -> Any:
    """Recursively replace ``${VAR}`` and ``${VAR:-default}`` with environment values.

    Args:
        value: String, dict, or list to process.

    Returns:
        Value with environment variables substituted.

    Raises:
        ConfigLoadError: If a variable without default is not set.
    """
    if isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value

    def replace(match: re.Match) -> str:
        var_name, default = match.group(1), match.group(2)
        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        if default is not None:
            return default
        raise ConfigLoadError(
            f"Environment variable '{var_name}' is not set and no default provided"
        )

    return _ENV_VAR_PATTERN.sub(replace, value)


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML mapping with environment variable substitution.

    Raises:
        ConfigLoadError: If the file is missing, invalid, empty or not a mapping.
    """
    if not path.exists():
        raise ConfigLoadError(f"Configuration file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in {path}: {e}") from e

    if config is None:
        raise ConfigLoadError(f"Empty configuration file: {path}")
    if not isinstance(config, dict):
        raise ConfigLoadError(f"Configuration file must contain a mapping: {path}")

    return substitute_env_vars(config)


def load_connection_config(
    path: Path,
    engine: str | None = None,
) -> tuple[str, dict[str, Any]]:
    """Load a database connection file.

    The engine comes from ``engine`` when given, otherwise from the file's
    ``type`` key. Example file:

        type: postgresql
        host: ${DB_HOST:-localhost}
        database: shop
        username: app
        password: ${DB_PASSWORD}

    Args:
        path: Path to the connection YAML.
        engine: Engine name overriding the file's ``type``.

    Returns:
        Tuple of (engine name, configuration dict for the adapter).

    Raises:
        ConfigLoadError: If the file cannot be loaded or names no engine.
    """
    config = load_yaml_config(path)
    file_engine = config.pop("type", None)
    resolved = engine or file_engine
    if not resolved:
        raise ConfigLoadError(
            f"No database type given: pass --type or set 'type' in {path}"
        )
    return str(resolved).lower(), config


def mask_sensitive_values(config: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``config`` with secret-looking values replaced by '***'."""

    def should_mask(key: str) -> bool:
        key_lower = key.lower()
        return any(pattern in key_lower for pattern in SENSITIVE_KEY_PATTERNS)

    def mask_value(key: str, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: mask_value(k, v) for k, v in value.items()}
        if isinstance(value, list):
            return [mask_value(key, item) for item in value]
        if should_mask(key) and value is not None:
            return "***"
        return value

    return {k: mask_value(k, v) for k, v in config.items()}
