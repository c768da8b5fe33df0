"""
Test Configuration
==================

Pytest fixtures for zkauth tests.
"""

import json
import os
from typing import Any

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "testing"

from zkauth.jwt import JwtProvider, RsaJsonWebKey, SignedToken, b64url_encode  # noqa: E402


GOOGLE_ISS = "https://accounts.google.com"
TEST_KID = "test-key-1"


def make_token(payload_text: str, header: dict[str, Any] | None = None) -> str:
    """Compact JWT with the payload segment encoded from `payload_text` verbatim."""
    header = header or {"alg": "RS256", "kid": TEST_KID, "typ": "JWT"}
    header_b64 = b64url_encode(json.dumps(header, separators=(",", ":")).encode())
    payload_b64 = b64url_encode(payload_text.encode())
    signature_b64 = b64url_encode(bytes(range(256)))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


@pytest.fixture
def token_factory():
    """Factory for compact tokens built from exact payload text."""
    return make_token


@pytest.fixture
def payload_text() -> str:
    """ID token payload as the issuer serialized it."""
    return (
        '{"iss":"https://accounts.google.com","aud":"client-123","sub":"12345",'
        '"email":"guardian@example.com","iat":1709430615,"exp":1709434215,'
        '"nonce":"0xabc123"}'
    )


@pytest.fixture
def id_token(payload_text: str) -> str:
    """Compact signed ID token."""
    return make_token(payload_text)


@pytest.fixture
def token(id_token: str) -> SignedToken:
    """Parsed ID token."""
    return SignedToken.parse(id_token)


@pytest.fixture
def modulus() -> bytes:
    """A 256-byte RSA-2048 modulus."""
    return b"\xc0" + bytes(range(255))


@pytest.fixture
def modulus_b64(modulus: bytes) -> str:
    """JWK `n` form of the test modulus."""
    return b64url_encode(modulus)


@pytest.fixture
def salt() -> str:
    """Hex-encoded guardian salt."""
    return "0x" + "5a" * 16


@pytest.fixture
def jwk(modulus_b64: str) -> RsaJsonWebKey:
    """Issuer signing key."""
    return RsaJsonWebKey(kid=TEST_KID, n=modulus_b64, alg="RS256", use="sig")


@pytest.fixture
def jwt_provider(token: SignedToken, jwk: RsaJsonWebKey) -> JwtProvider:
    """Token paired with its issuer key."""
    return JwtProvider(
        conf_url=f"{GOOGLE_ISS}/.well-known/openid-configuration",
        jwks_url="https://www.googleapis.com/oauth2/v3/certs",
        token=token,
        jwk=jwk,
    )


@pytest.fixture
def guardian_address() -> str:
    return "0x" + "ab" * 20


@pytest.fixture
def new_owner() -> str:
    return "0x" + "cd" * 20


@pytest.fixture
def jwks_document(modulus_b64: str) -> dict[str, Any]:
    """JWKS response body with two RSA keys."""
    return {
        "keys": [
            {"kid": TEST_KID, "n": modulus_b64, "e": "AQAB", "kty": "RSA", "alg": "RS256", "use": "sig"},
            {"kid": "test-key-2", "n": modulus_b64, "e": "AQAB", "kty": "RSA", "alg": "RS256", "use": "sig"},
        ]
    }
