"""
ZK Circuit Codec Module
=======================

Deterministic conversion between signed OIDC tokens and the public
signals / inputs of the zkauth verifier circuits.

Usage:
    from zkauth.zk import CircuitVersion, get_codec

    codec = get_codec(CircuitVersion.V2)
    vector = codec.assemble(id_token, jwk.n, salt="0x1234...")
    decoded = codec.decode(vector)

Version: 0.1.0
"""

from zkauth.config import CircuitVersion
from zkauth.zk.claims import ClaimLocator, RegexClaimLocator, locate
from zkauth.zk.codec import PublicSignalCodec, V1Codec, V2Codec, get_codec
from zkauth.zk.inputs import build_circuit_inputs
from zkauth.zk.models import (
    AuthData,
    CircuitInputBundle,
    ClaimPosition,
    DecodedPublicSignals,
    PublicSignalVector,
    SignalOverrides,
    ZKProof,
)
from zkauth.zk.proof import PLACEHOLDER_PROOF, encode_proof, guardian_id


__all__ = [
    # Codec
    "CircuitVersion",
    "PublicSignalCodec",
    "V1Codec",
    "V2Codec",
    "get_codec",
    "build_circuit_inputs",
    # Claims
    "ClaimLocator",
    "RegexClaimLocator",
    "locate",
    # Proof
    "PLACEHOLDER_PROOF",
    "encode_proof",
    "guardian_id",
    # Models
    "AuthData",
    "CircuitInputBundle",
    "ClaimPosition",
    "DecodedPublicSignals",
    "PublicSignalVector",
    "SignalOverrides",
    "ZKProof",
]
