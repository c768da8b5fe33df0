"""
zkauth
======

OIDC-based social recovery for smart-contract accounts: encodes signed
ID tokens into the public signals and inputs of the zkauth circuits.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - jwt: ID token parsing and issuer keys
    - jwks: OIDC provider registry and key fetching
    - zk: Circuit codecs, claim locator, proof encoding
    - auth: Guardian authorization builders

Version: 0.1.0
"""

__version__ = "0.1.0"

from zkauth.config import settings
from zkauth.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
