"""
Signed Token Handling
=====================

Parses OIDC ID tokens into the segments and payload text the circuit
consumes. Signatures are never verified here; the circuit does that.

Version: 0.1.0
"""

import json
from collections.abc import Iterable
from typing import Any

from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode
from pydantic import BaseModel, ConfigDict, Field

from zkauth.errors import InvalidModulusLengthError, MalformedModulusError, MalformedTokenError
from zkauth.logging import get_logger


logger = get_logger(__name__)

RSA_MODULUS_BYTES = 256


def b64url_decode(data: str) -> bytes:
    """Decode base64url, tolerating missing padding and the standard alphabet."""
    return base64url_decode(data.replace("+", "-").replace("/", "_").rstrip("=").encode())


def b64url_encode(data: bytes) -> str:
    """Encode as unpadded base64url."""
    return base64url_encode(data).decode()


def decode_modulus(n: str) -> bytes:
    """
    Decode an RSA-2048 modulus from its JWK `n` form.

    Raises:
        MalformedModulusError: If `n` is not base64/base64url text
        InvalidModulusLengthError: If the modulus is not 256 bytes
    """
    try:
        modulus = b64url_decode(n)
    except ValueError as e:
        raise MalformedModulusError(str(e)) from e
    if len(modulus) != RSA_MODULUS_BYTES:
        raise InvalidModulusLengthError(len(modulus), RSA_MODULUS_BYTES)
    return modulus


class SignedToken(BaseModel):
    """A JWT split into its base64url segments and decoded JSON parts."""

    model_config = ConfigDict(frozen=True)

    header_b64: str
    payload_b64: str
    signature_b64: str

    header: dict[str, Any]
    payload: dict[str, Any]
    payload_text: str = Field(..., description="Decoded payload exactly as signed")

    @classmethod
    def parse(cls, token: str) -> "SignedToken":
        """
        Split and decode a compact JWT.

        Raises:
            MalformedTokenError: If the token is not header.payload.signature
                with JSON header and payload
        """
        parts = token.strip().split(".")
        if len(parts) != 3:
            raise MalformedTokenError(f"Token must have 3 segments, got {len(parts)}")

        try:
            header = jwt.get_unverified_header(token)
            payload = jwt.get_unverified_claims(token)
            payload_text = b64url_decode(parts[1]).decode()
        except (JWTError, UnicodeDecodeError, ValueError) as e:
            logger.warning("token_parse_failed", error=str(e))
            raise MalformedTokenError(str(e)) from e

        return cls(
            header_b64=parts[0],
            payload_b64=parts[1],
            signature_b64=parts[2],
            header=header,
            payload=payload,
            payload_text=payload_text,
        )

    @property
    def signing_input(self) -> str:
        """`header.payload`, the bytes the signature covers."""
        return f"{self.header_b64}.{self.payload_b64}"

    @property
    def compact(self) -> str:
        return f"{self.signing_input}.{self.signature_b64}"

    @property
    def payload_offset(self) -> int:
        """Position of the payload segment inside the signing input."""
        return len(self.header_b64) + 1

    @property
    def signature(self) -> bytes:
        return b64url_decode(self.signature_b64)

    @property
    def sub(self) -> str:
        return str(self.payload["sub"])

    @property
    def iss(self) -> str | None:
        return self.payload.get("iss")

    @property
    def aud(self) -> str | None:
        return self.payload.get("aud")

    @property
    def kid(self) -> str | None:
        return self.header.get("kid")


def mask_jwt(token: SignedToken, whitelist: Iterable[str]) -> dict[str, Any]:
    """Header plus only the whitelisted payload claims, in payload order."""
    allowed = set(whitelist)
    return {
        "header": token.header,
        "payload": {k: v for k, v in token.payload.items() if k in allowed},
    }


def masked_jwt_text(token: SignedToken, whitelist: Iterable[str]) -> str:
    """Compact JSON of the masked token, as embedded in V1 signals."""
    return json.dumps(mask_jwt(token, whitelist), separators=(",", ":"), ensure_ascii=False)


class RsaJsonWebKey(BaseModel):
    """An RSA signing key from a JWKS document."""

    model_config = ConfigDict(extra="allow")

    kid: str
    n: str = Field(..., description="base64url modulus")
    e: str = "AQAB"
    kty: str = "RSA"
    alg: str | None = None
    use: str | None = None

    @property
    def modulus(self) -> bytes:
        """
        Raw modulus bytes.

        Raises:
            InvalidModulusLengthError: If the key is not RSA-2048
        """
        return decode_modulus(self.n)


class JwtProvider:
    """
    A token together with the key and endpoints of its issuer.

    Usage:
        provider = JwtProvider(
            conf_url="https://accounts.google.com/.well-known/openid-configuration",
            jwks_url="https://www.googleapis.com/oauth2/v3/certs",
            token=SignedToken.parse(id_token),
            jwk=key,
        )
    """

    def __init__(
        self,
        conf_url: str,
        jwks_url: str,
        token: SignedToken | str,
        jwk: RsaJsonWebKey,
    ) -> None:
        self.conf_url = conf_url
        self.jwks_url = jwks_url
        self.token = SignedToken.parse(token) if isinstance(token, str) else token
        self.jwk = jwk

    @property
    def aud(self) -> str | None:
        return self.token.aud

    @property
    def iss(self) -> str | None:
        return self.token.iss
