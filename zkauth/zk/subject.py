"""
Salted Subject Hashing
======================

Derives the privacy-preserving account identifier from a guardian salt
and the token's `sub` claim.

- V1: keccak256(sub ++ salt), computed here.
- V2: SHA-256(saltBytes ++ '"sub"'), computed by the circuit from the
  padded preimage; the digest is also computed here so the expected
  public signals can be assembled.

Version: 0.1.0
"""

import hashlib
from collections.abc import Callable

from Crypto.Hash import keccak

from zkauth.errors import InvalidSaltError
from zkauth.zk.fields import sha256_pad


HashFunction = Callable[[bytes], bytes]


def keccak256(data: bytes) -> bytes:
    """Ethereum keccak-256 digest."""
    return keccak.new(digest_bits=256, data=data).digest()


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def subject_hash_v1(sub: str, salt: str, hash_fn: HashFunction = keccak256) -> bytes:
    """V1 identifier: hash of the subject string followed by the opaque salt."""
    return hash_fn((sub + salt).encode())


def parse_hex_salt(salt: str) -> bytes:
    """
    Decode a V2 salt.

    Raises:
        InvalidSaltError: If the salt is not hex (an optional 0x prefix is allowed)
    """
    try:
        return bytes.fromhex(salt.removeprefix("0x"))
    except ValueError as e:
        raise InvalidSaltError(salt) from e


def salted_subject_v2(sub: str, salt: str) -> bytes:
    """V2 preimage: salt bytes followed by the JSON-quoted subject."""
    return parse_hex_salt(salt) + f'"{sub}"'.encode()


def padded_salted_subject_v2(sub: str, salt: str) -> bytes:
    """V2 preimage with SHA-256 padding, as fed to the circuit."""
    return sha256_pad(salted_subject_v2(sub, salt))


def subject_hash_v2(sub: str, salt: str) -> bytes:
    """Digest the V2 circuit computes over the salted subject."""
    return sha256(salted_subject_v2(sub, salt))
