"""
JWT Module
==========

Parsing of OIDC ID tokens and their issuer keys.

Usage:
    from zkauth.jwt import SignedToken, masked_jwt_text

    token = SignedToken.parse(id_token)
    print(token.payload_text)
"""

from zkauth.jwt.token import (
    JwtProvider,
    RsaJsonWebKey,
    SignedToken,
    b64url_decode,
    b64url_encode,
    decode_modulus,
    mask_jwt,
    masked_jwt_text,
)

__all__ = [
    "SignedToken",
    "RsaJsonWebKey",
    "JwtProvider",
    "mask_jwt",
    "masked_jwt_text",
    "decode_modulus",
    "b64url_decode",
    "b64url_encode",
]
