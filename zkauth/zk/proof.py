"""
Proof Blob Encoding
===================

ABI encoding of `(kid, pA, pB, pC, publicSignals)` for on-chain
submission, plus the guardian identifier derivation.

Version: 0.1.0
"""

from eth_abi import encode

from zkauth.zk.fields import FieldLike, to_int
from zkauth.zk.models import PublicSignalVector, ZKProof
from zkauth.zk.subject import keccak256


# Development stand-in for a Groth16 proof. Must be replaced by the
# prover's output in production.
PLACEHOLDER_PROOF = ZKProof(
    pi_a=["1", "2"],
    pi_b=[["3", "4"], ["5", "6"]],
    pi_c=["7", "8"],
)


def encode_proof(kid: str, proof: ZKProof, signals: PublicSignalVector | list[FieldLike]) -> bytes:
    """
    ABI-encode a proof for the guardian contract.

    Layout: (string, uint256[2], uint256[2][2], uint256[2], uint256[N]),
    with N the signal count (70 for V1, 61 for V2).
    """
    values = list(signals.signals) if isinstance(signals, PublicSignalVector) else [to_int(s) for s in signals]
    return encode(
        ["string", "uint256[2]", "uint256[2][2]", "uint256[2]", f"uint256[{len(values)}]"],
        [kid, proof.a, proof.b, proof.c, values],
    )


def guardian_id(subject_hash: str | bytes, guardian: str) -> str:
    """keccak256(abi.encode(bytes32 subjectHash, address guardian)) as 0x-hex."""
    if isinstance(subject_hash, str):
        subject_hash = bytes.fromhex(subject_hash.removeprefix("0x"))
    return "0x" + keccak256(encode(["bytes32", "address"], [subject_hash, guardian])).hex()
