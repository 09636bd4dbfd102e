"""Configuration resolution for tfetch clients.

A :class:`~tfetch.models.ClientConfig` can come from four places.  When
they are merged by :func:`resolve_config`, the highest wins:

1. Explicit overrides (keyword arguments, CLI flags).
2. ``TFETCH_*`` environment variables (see :data:`ENV_VARS`).
3. A JSON config file -- ``--config``, ``$TFETCH_CONFIG``, or
   ``$XDG_CONFIG_HOME/tfetch/config.json``.
4. Model defaults.

:func:`build_config` is the single entry point the clients use to turn
whatever they were given into a validated config.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from tfetch.exceptions import ConfigurationError
from tfetch.models import ClientConfig

_APP_NAME = "tfetch"
_CONFIG_FILENAME = "config.json"

ENV_VARS: dict[str, tuple[str, ...]] = {
    "TFETCH_DEBUG": ("debug",),
    "TFETCH_BASE_URL": ("base_url",),
    "TFETCH_TIMEOUT": ("timeout",),
    "TFETCH_RETRY_COUNT": ("retry", "count"),
    "TFETCH_RETRY_DELAY_MS": ("retry", "delay_ms"),
    "TFETCH_CACHE_ENABLED": ("cache", "enabled"),
    "TFETCH_CACHE_MAX_AGE_MS": ("cache", "max_age_ms"),
    "TFETCH_CACHE_MAX_ENTRIES": ("cache", "max_entries"),
}
"""Environment variable -> config field path."""


def build_config(config: ClientConfig | Mapping[str, Any] | None) -> ClientConfig:
    """Validate *config* into a :class:`ClientConfig`.

    Args:
        config: An existing config (returned as-is), a partial nested
            mapping, or ``None`` for defaults.

    Raises:
        ConfigurationError: A field has an invalid value or an unknown
            top-level type was passed.
    """
    if isinstance(config, ClientConfig):
        return config
    if config is None:
        return ClientConfig()
    if not isinstance(config, Mapping):
        raise ConfigurationError(
            f"Expected ClientConfig or mapping, got {type(config).__name__}"
        )
    try:
        return ClientConfig.model_validate(dict(config))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid client configuration: {exc}") from exc


# --- Paths ---


def get_config_dir() -> Path:
    """Return ``$XDG_CONFIG_HOME/tfetch`` (default ``~/.config/tfetch``).

    The directory is not created; tfetch only ever reads from it.
    """
    env_value = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(env_value) if env_value else Path.home() / ".config"
    return base / _APP_NAME


def default_config_path() -> Path:
    """Return the config file path, honouring ``$TFETCH_CONFIG``."""
    override = os.environ.get("TFETCH_CONFIG")
    if override:
        return Path(override)
    return get_config_dir() / _CONFIG_FILENAME


# --- Sources ---


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a JSON config file.

    Returns:
        The parsed mapping, or ``{}`` if the file does not exist.

    Raises:
        ConfigurationError: The file is not valid JSON or not an object.
    """
    path = Path(path)
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    return data


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Collect ``TFETCH_*`` variables into a nested partial config.

    Values are left as strings; pydantic coerces them during validation
    (``"true"``/``"1"`` for booleans, digits for integers).
    """
    env = os.environ if environ is None else environ
    result: dict[str, Any] = {}
    for var, field_path in ENV_VARS.items():
        value = env.get(var)
        if value is None or value == "":
            continue
        _set_path(result, field_path, value)
    return result


def resolve_config(
    overrides: Optional[Mapping[str, Any]] = None,
    config_path: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientConfig:
    """Merge file, environment and explicit overrides into a config.

    Args:
        overrides: Highest-precedence partial config.  ``None`` values are
            ignored so unset CLI flags do not mask lower layers.
        config_path: Config file to read instead of the default location.
        environ: Environment mapping; defaults to :data:`os.environ`.

    Raises:
        ConfigurationError: Any layer is malformed or the merged result
            fails validation.
    """
    merged: dict[str, Any] = {}
    path = Path(config_path) if config_path is not None else default_config_path()
    if config_path is not None and not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")
    _deep_merge(merged, load_config_file(path))
    _deep_merge(merged, config_from_env(environ))
    _deep_merge(merged, _drop_none(overrides or {}))
    return build_config(merged)


# --- Internal helpers ---


def _set_path(target: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    for segment in path[:-1]:
        target = target.setdefault(segment, {})
    target[path[-1]] = value


def _deep_merge(base: dict[str, Any], incoming: Mapping[str, Any]) -> None:
    for key, value in incoming.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        elif isinstance(value, Mapping):
            base[key] = dict(value)
        else:
            base[key] = value


def _drop_none(data: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            nested = _drop_none(value)
            if nested:
                result[key] = nested
        elif value is not None:
            result[key] = value
    return result
