"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables with type validation and defaults.

Usage:
    from zkauth.config import settings

    print(settings.circuit.version)
    print(settings.jwks.timeout_seconds)
"""

from zkauth.config.settings import (
    CircuitVersion,
    Environment,
    LogLevel,
    Settings,
    get_settings,
)


# Global settings instance (singleton)
settings = get_settings()

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "Environment",
    "LogLevel",
    "CircuitVersion",
]
