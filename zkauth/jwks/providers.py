"""
OIDC Provider Registry
======================

Issuers with a deployed guardian circuit, and where their signing keys
are published.

Version: 0.1.0
"""

from dataclasses import dataclass

from zkauth.errors import UnknownProviderError


@dataclass(frozen=True)
class OIDCProvider:
    """An OpenID Connect issuer."""

    name: str
    iss: str
    jwks_url: str

    @property
    def conf_url(self) -> str:
        return f"{self.iss}/.well-known/openid-configuration"


PROVIDERS: dict[str, OIDCProvider] = {
    p.name: p
    for p in (
        OIDCProvider(
            name="google",
            iss="https://accounts.google.com",
            jwks_url="https://www.googleapis.com/oauth2/v3/certs",
        ),
        OIDCProvider(
            name="kakao",
            iss="https://kauth.kakao.com",
            jwks_url="https://kauth.kakao.com/.well-known/jwks.json",
        ),
        OIDCProvider(
            name="apple",
            iss="https://appleid.apple.com",
            jwks_url="https://appleid.apple.com/auth/keys",
        ),
        OIDCProvider(
            name="line",
            iss="https://access.line.me",
            jwks_url="https://api.line.me/oauth2/v2.1/certs",
        ),
        OIDCProvider(
            name="twitch",
            iss="https://id.twitch.tv/oauth2",
            jwks_url="https://id.twitch.tv/oauth2/keys",
        ),
    )
}


def get_provider(name_or_iss: str) -> OIDCProvider:
    """
    Look up a provider by short name (case-insensitive) or issuer URL.

    Raises:
        UnknownProviderError: If the provider is not registered
    """
    provider = PROVIDERS.get(name_or_iss.lower())
    if provider is None:
        provider = next((p for p in PROVIDERS.values() if p.iss == name_or_iss), None)
    if provider is None:
        raise UnknownProviderError(name_or_iss)
    return provider


def provider_name_from_iss(iss: str) -> str | None:
    for provider in PROVIDERS.values():
        if provider.iss == iss:
            return provider.name
    return None


def iss_from_provider_name(name: str) -> str | None:
    provider = PROVIDERS.get(name.lower())
    return provider.iss if provider else None
