"""
Pydantic v2 Configuration Models for the Production API Client

Provides strict, typed configuration for:
- API location and credentials
- HTTP client settings (timeouts, TLS, pool size)
- Batch file operations (worker count, stream chunk size)
- Top-level ProductionConfig as single source of truth

All models use extra="forbid" for strict validation. Environment variables
and CLI overrides follow: file < env < CLI precedence.
"""

from __future__ import annotations

from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

# ============================================================================
# Section Models
# ============================================================================


class AuthConfig(BaseModel):
    """Credentials for the Publit APIs (sent as HTTP basic auth)."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    username: Optional[str] = Field(default=None, description="API user")
    password: Optional[SecretStr] = Field(default=None, description="API password")


class HttpClientConfig(BaseModel):
    """Configuration for HTTP client behavior."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    user_agent: str = Field(default="publit-production", description="User-Agent string")
    timeout_connect_s: float = Field(default=10.0, description="Connection timeout in seconds")
    timeout_read_s: float = Field(default=60.0, description="Read timeout in seconds")
    timeout_write_s: float = Field(default=60.0, description="Write timeout in seconds")
    timeout_pool_s: float = Field(default=10.0, description="Pool acquire timeout in seconds")
    verify_tls: bool = Field(default=True, description="Verify TLS certificates")
    max_connections: int = Field(default=20, description="Connection pool size")

    @field_validator("timeout_connect_s", "timeout_read_s", "timeout_write_s", "timeout_pool_s")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be > 0")
        return v

    @field_validator("max_connections")
    @classmethod
    def validate_max_connections(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_connections must be >= 1")
        return v


class BatchSettings(BaseModel):
    """Configuration for concurrent file batch operations."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    workers: int = Field(default=5, description="Concurrent workers per batch stage")
    chunk_size_bytes: int = Field(default=1 << 16, description="Download stream chunk size")

    @field_validator("workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError("workers must be >= 1")
        return v

    @field_validator("chunk_size_bytes")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("chunk_size_bytes must be > 0")
        return v


# ============================================================================
# Top-Level Configuration
# ============================================================================


class ProductionConfig(BaseModel):
    """
    Single source of truth for client configuration.

    Loaded from file (YAML/JSON), overlaid with environment variables,
    and finally overridden by CLI arguments. Precedence: file < env < CLI.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid", validate_assignment=True)

    base_url: Optional[str] = Field(
        default=None, description="Base URL of the Publit APIs, e.g. https://api.publit.com"
    )
    auth: AuthConfig = Field(default_factory=AuthConfig, description="API credentials")
    http: HttpClientConfig = Field(
        default_factory=HttpClientConfig, description="HTTP client configuration"
    )
    batch: BatchSettings = Field(
        default_factory=BatchSettings, description="Batch file operation settings"
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v

    def config_hash(self) -> str:
        """
        Compute deterministic SHA256 hash of config for reproducibility.

        Credentials are excluded so the hash can be printed safely.

        Returns:
            Hex-encoded SHA256 hash of normalized config JSON.
        """
        import hashlib
        import json

        payload = self.model_dump(mode="json", exclude={"auth"})
        normalized = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(normalized.encode()).hexdigest()
