# === NAVMAP v1 ===
# {
#   "module": "Publit.Production.config.loader",
#   "purpose": "Configuration Loading with File/Env/CLI Precedence.",
#   "sections": [
#     {
#       "id": "read-file",
#       "name": "_read_file",
#       "anchor": "function-read-file",
#       "kind": "function"
#     },
#     {
#       "id": "merge-env-overrides",
#       "name": "_merge_env_overrides",
#       "anchor": "function-merge-env-overrides",
#       "kind": "function"
#     },
#     {
#       "id": "load-config",
#       "name": "load_config",
#       "anchor": "function-load-config",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Configuration Loading with File/Env/CLI Precedence

Implements three-level config composition:
1. **File level** (YAML/JSON): base configuration
2. **Environment level**: PUBLIT_* prefixed variables override file
3. **CLI level**: programmatic overrides win

Environment variables use double-underscore notation:
  PUBLIT_BASE_URL="https://api.publit.com"  →  base_url="https://api.publit.com"
  PUBLIT_BATCH__WORKERS=8                   →  batch.workers=8
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .models import ProductionConfig

_LOGGER = logging.getLogger(__name__)

DEFAULT_ENV_PREFIX = "PUBLIT_"

# Variables under the prefix that are not config fields
RESERVED_ENV_KEYS = frozenset({"config"})

# ============================================================================
# Helpers
# ============================================================================


def _read_file(path: str) -> dict[str, Any]:
    """
    Read YAML or JSON config file.

    Args:
        path: File path (suffix determines format: .yaml/.yml or .json)

    Returns:
        Parsed config dictionary

    Raises:
        ValueError: If file cannot be read or parsed
    """
    p = Path(path)
    if not p.exists():
        raise ValueError(f"Config file not found: {path}")

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Cannot read config file {path}: {e}") from e

    suffix = p.suffix.lower()
    if suffix in (".yaml", ".yml"):
        try:
            return yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    raise ValueError(f"Unsupported file format: {suffix}. Use .yaml or .json")


def _assign_nested(data: dict[str, Any], dotted_key: str, value: Any) -> None:
    """Assign ``value`` at ``dotted_key`` (``"batch.workers"``) inside ``data``."""
    keys = dotted_key.split(".")
    current = data

    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]

    current[keys[-1]] = value


def _coerce_env_value(value: str) -> Any:
    # Scalars stay strings; pydantic coerces them per field
    if not value.lstrip().startswith(("[", "{")):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _merge_env_overrides(data: dict[str, Any], env_prefix: str) -> dict[str, Any]:
    """
    Overlay environment variables onto config dict.

    Args:
        data: Base config dict (will be modified)
        env_prefix: Environment variable prefix

    Returns:
        Modified data dict
    """
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        relative_key = env_key[len(env_prefix) :].lower()
        if relative_key in RESERVED_ENV_KEYS:
            continue
        dotted_key = relative_key.replace("__", ".")
        _assign_nested(data, dotted_key, _coerce_env_value(env_value))
        _LOGGER.debug(f"Environment override: {env_key} → {dotted_key}")

    return data


def _merge_cli_overrides(
    data: dict[str, Any], cli_overrides: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Recursively merge CLI overrides into ``data``; later values win."""
    if not cli_overrides:
        return data

    for key, value in cli_overrides.items():
        if isinstance(value, Mapping) and isinstance(data.get(key), dict):
            data[key] = _merge_cli_overrides(data[key], value)
        else:
            data[key] = value
        _LOGGER.debug(f"CLI override: {key}")

    return data


# ============================================================================
# Public API
# ============================================================================


def load_config(
    path: str | None = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    cli_overrides: Mapping[str, Any] | None = None,
) -> ProductionConfig:
    """
    Load ProductionConfig from file, environment, and CLI with proper precedence.

    **Precedence:** file < environment < CLI

    Args:
        path: Path to YAML/JSON config file (optional)
        env_prefix: Environment variable prefix (default: PUBLIT_)
        cli_overrides: CLI overrides dict (optional)

    Returns:
        Validated ProductionConfig instance

    Raises:
        ValueError: If config is invalid or file cannot be read
    """
    data: dict[str, Any] = {}

    if path:
        data = _read_file(path)
        _LOGGER.info(f"Loaded config from {path}")

    data = _merge_env_overrides(data, env_prefix)
    data = _merge_cli_overrides(data, cli_overrides)

    try:
        config = ProductionConfig.model_validate(data)
    except ValueError as e:
        _LOGGER.error(f"Configuration validation failed: {e}")
        raise

    _LOGGER.debug(f"Configuration validated. Config hash: {config.config_hash()[:8]}...")
    return config


def export_config_schema() -> dict[str, Any]:
    """Export the JSON Schema of ProductionConfig (Pydantic v2 format)."""
    return ProductionConfig.model_json_schema()
