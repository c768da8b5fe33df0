"""
JWKS Module
===========

OIDC provider registry and signing-key retrieval.

Usage:
    from zkauth.jwks import JwksFetcher

    async with JwksFetcher() as fetcher:
        provider = await fetcher.jwt_provider(id_token)
"""

from zkauth.jwks.fetcher import JwksFetcher
from zkauth.jwks.providers import (
    PROVIDERS,
    OIDCProvider,
    get_provider,
    iss_from_provider_name,
    provider_name_from_iss,
)

__all__ = [
    "JwksFetcher",
    "OIDCProvider",
    "PROVIDERS",
    "get_provider",
    "provider_name_from_iss",
    "iss_from_provider_name",
]
