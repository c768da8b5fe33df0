"""
Field Element Encoding
======================

Byte-level codecs shared by every circuit layout:

- SHA-256 preimage padding and block counting
- 31-byte chunking into field elements (one zero byte reserved per
  element so every value stays below the BN254 scalar modulus)
- 64-bit little-endian limb decomposition for RSA moduli
- 32-byte digest halving

All functions are pure.

Version: 0.1.0
"""

from collections.abc import Iterable, Sequence

from zkauth.errors import CapacityExceededError


# BN254 scalar field order
FIELD_MODULUS = 21888242871839275222246405745257275088548364400416034343698204186575808495617

CHUNK_WIDTH = 31
ELEMENT_WIDTH = 32
SHA256_BLOCK_SIZE = 64
LIMB_BITS = 64

FieldLike = int | str | bytes


def sha256_pad(data: bytes) -> bytes:
    """
    Append SHA-256 message padding.

    Layout: [ data ][ 0x80 ][ 00..00 ][ 64-bit big-endian bit length ],
    total length a multiple of 64.
    """
    bit_length = len(data) * 8
    padded = data + b"\x80"
    padded += b"\x00" * ((SHA256_BLOCK_SIZE - 8 - len(padded)) % SHA256_BLOCK_SIZE)
    return padded + bit_length.to_bytes(8, "big")


def block_count(data: bytes) -> int:
    """Number of 64-byte blocks the circuit hashes for `data`."""
    return len(data) // SHA256_BLOCK_SIZE + 1


def chunk(data: bytes, slot_count: int, field: str = "data") -> list[int]:
    """
    Split bytes into `slot_count` field elements of 31 usable bytes.

    Chunks are taken left to right. The last partial chunk is zero-padded
    on the right and unused trailing slots are zero.

    Raises:
        CapacityExceededError: If `data` is longer than 31 * slot_count
    """
    capacity = CHUNK_WIDTH * slot_count
    if len(data) > capacity:
        raise CapacityExceededError(field, capacity, len(data))

    padded = data.ljust(capacity, b"\x00")
    return [
        int.from_bytes(padded[i : i + CHUNK_WIDTH], "big")
        for i in range(0, capacity, CHUNK_WIDTH)
    ]


def unchunk(
    elements: Iterable[FieldLike],
    length: int | None = None,
    field: str = "data",
) -> bytes:
    """
    Inverse of `chunk`.

    Args:
        elements: Field elements as ints, decimal/0x-hex strings or 32-byte values
        length: Byte length of the original data; the result keeps all
            padding when omitted
        field: Name reported when `length` exceeds the decoded size

    Raises:
        CapacityExceededError: If `length` exceeds the decoded size
        ValueError: If an element does not fit in 31 bytes
    """
    data = b"".join(to_element_bytes(e)[1:] for e in elements)
    if length is None:
        return data
    if length > len(data):
        raise CapacityExceededError(field, len(data), length)
    return data[:length]


def to_int(value: FieldLike) -> int:
    """Read a field element given as int, bytes, decimal or 0x-hex text."""
    if isinstance(value, int):
        return value
    if isinstance(value, bytes):
        return int.from_bytes(value, "big")
    text = value.strip()
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)


def to_element_bytes(value: FieldLike) -> bytes:
    """32-byte big-endian form of a chunk element."""
    number = to_int(value)
    if number < 0 or number >> (CHUNK_WIDTH * 8):
        raise ValueError(f"Element {number:#x} is not a 31-byte chunk")
    return number.to_bytes(ELEMENT_WIDTH, "big")


def to_limbs(value: int, count: int, bits: int = LIMB_BITS, field: str = "value") -> list[int]:
    """
    Decompose an integer into `count` limbs, least-significant first.

    Raises:
        CapacityExceededError: If `value` needs more than count * bits bits
    """
    if value >> (count * bits):
        raise CapacityExceededError(field, count * bits // 8, (value.bit_length() + 7) // 8)

    mask = (1 << bits) - 1
    limbs = []
    for _ in range(count):
        limbs.append(value & mask)
        value >>= bits
    return limbs


def from_limbs(limbs: Sequence[FieldLike], bits: int = LIMB_BITS) -> int:
    """Recompose limbs produced by `to_limbs`."""
    value = 0
    for i, limb in enumerate(limbs):
        value |= to_int(limb) << (i * bits)
    return value


def split_halves(digest: bytes) -> tuple[int, int]:
    """Split a 32-byte digest into two 16-byte field elements."""
    if len(digest) != 32:
        raise ValueError(f"Digest must be 32 bytes, got {len(digest)}")
    return int.from_bytes(digest[:16], "big"), int.from_bytes(digest[16:], "big")


def join_halves(high: FieldLike, low: FieldLike) -> bytes:
    """Rebuild the 32-byte digest from `split_halves` output."""
    return to_int(high).to_bytes(16, "big") + to_int(low).to_bytes(16, "big")
