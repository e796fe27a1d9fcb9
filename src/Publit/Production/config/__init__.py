"""Configuration models and loader for the Production API client."""

from __future__ import annotations

from .loader import DEFAULT_ENV_PREFIX, export_config_schema, load_config
from .models import AuthConfig, BatchSettings, HttpClientConfig, ProductionConfig

__all__ = [
    "AuthConfig",
    "BatchSettings",
    "DEFAULT_ENV_PREFIX",
    "HttpClientConfig",
    "ProductionConfig",
    "export_config_schema",
    "load_config",
]
