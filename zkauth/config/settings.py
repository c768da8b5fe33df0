"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CircuitVersion(str, Enum):
    """Public-signal layout expected by the verifier circuit."""

    V1 = "v1"
    V2 = "v2"

    @property
    def width(self) -> int:
        """Number of public signals in this layout."""
        return 70 if self is CircuitVersion.V1 else 61


DEFAULT_CLAIM_WHITELIST = "iss,sub,aud,iat,exp,nonce"


class CircuitSettings(BaseSettings):
    """Circuit layout configuration."""

    model_config = SettingsConfigDict(env_prefix="CIRCUIT_")

    version: CircuitVersion = CircuitVersion.V1

    # Claims kept in the masked JWT embedded by the V1 layout
    claim_whitelist: str = DEFAULT_CLAIM_WHITELIST

    @field_validator("version", mode="before")
    @classmethod
    def lowercase_version(cls, v: str | CircuitVersion) -> CircuitVersion:
        """Accept V1/V2 in any case."""
        if isinstance(v, str):
            return CircuitVersion(v.lower())
        return v

    @property
    def claim_whitelist_list(self) -> list[str]:
        """Parse whitelist string into list."""
        return [c.strip() for c in self.claim_whitelist.split(",") if c.strip()]


class ChainSettings(BaseSettings):
    """Target chain configuration."""

    model_config = SettingsConfigDict(env_prefix="CHAIN_")

    chain_id: int = 31337


class JwksSettings(BaseSettings):
    """JWKS endpoint client configuration."""

    model_config = SettingsConfigDict(env_prefix="JWKS_")

    timeout_seconds: float = 10.0
    max_retries: int = 3
    user_agent: str = "zkauth/0.1.0"


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO
    json_logs: bool = False

    circuit: CircuitSettings = Field(default_factory=CircuitSettings)
    chain: ChainSettings = Field(default_factory=ChainSettings)
    jwks: JwksSettings = Field(default_factory=JwksSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
