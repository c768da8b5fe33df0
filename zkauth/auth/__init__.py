"""
Authorization Module
====================

Builds guardian authorizations for social recovery.

Features:
- Public-signal, proof and auth-data build sequencing
- Multi-guardian builds
- Guardian identifier derivation

Usage:
    from zkauth.auth import AuthBuilder

    builder = AuthBuilder(subject_hash, guardian, provider, new_owner, salt)
    auth = builder.build()
"""

from zkauth.auth.builder import (
    AuthBuilder,
    BuildState,
    Guardian,
    MultiAuthBuilder,
    NonceCalculator,
)

__all__ = [
    "AuthBuilder",
    "MultiAuthBuilder",
    "BuildState",
    "Guardian",
    "NonceCalculator",
]
