"""
Unit tests for field element encoding.
"""

import pytest

from zkauth.errors import CapacityExceededError
from zkauth.zk.fields import (
    FIELD_MODULUS,
    block_count,
    chunk,
    from_limbs,
    join_halves,
    sha256_pad,
    split_halves,
    to_element_bytes,
    to_int,
    to_limbs,
    unchunk,
)


class TestSha256Padding:
    """Tests for SHA-256 preimage padding."""

    def test_pad_short_message(self) -> None:
        """Test padding layout for a 3-byte message."""
        padded = sha256_pad(b"abc")

        assert len(padded) == 64
        assert padded[:3] == b"abc"
        assert padded[3] == 0x80
        assert padded[4:56] == b"\x00" * 52
        assert padded[56:] == (24).to_bytes(8, "big")

    def test_pad_block_boundaries(self) -> None:
        """Test that 55 bytes fit one block and 56 bytes need two."""
        assert len(sha256_pad(b"a" * 55)) == 64
        assert len(sha256_pad(b"a" * 56)) == 128
        assert len(sha256_pad(b"a" * 64)) == 128

    def test_pad_empty(self) -> None:
        """Test padding of an empty message."""
        assert sha256_pad(b"") == b"\x80" + b"\x00" * 63

    def test_block_count(self) -> None:
        """Test block count is floor(len / 64) + 1."""
        assert block_count(b"") == 1
        assert block_count(b"a" * 63) == 1
        assert block_count(b"a" * 64) == 2
        assert block_count(b"a" * 200) == 4


class TestChunking:
    """Tests for 31-byte chunking."""

    def test_chunk_pads_right(self) -> None:
        """Test a partial chunk is zero-padded on the right."""
        assert chunk(b"\x01", 2) == [1 << 240, 0]

    def test_chunk_exact_capacity(self) -> None:
        """Test data exactly filling every slot."""
        elements = chunk(b"\xff" * 62, 2)

        assert elements == [(1 << 248) - 1, (1 << 248) - 1]

    def test_chunk_over_capacity(self) -> None:
        """Test data longer than the slots raises."""
        with pytest.raises(CapacityExceededError) as exc_info:
            chunk(b"a" * 63, 2, field="aud")

        assert exc_info.value.field == "aud"
        assert exc_info.value.limit == 62
        assert exc_info.value.actual == 63

    def test_chunk_elements_in_field(self) -> None:
        """Test every element stays below the scalar field modulus."""
        elements = chunk(b"\xff" * 100, 4)

        assert all(0 <= e < FIELD_MODULUS for e in elements)

    def test_unchunk_restores_data(self) -> None:
        """Test unchunk with the original length restores the bytes."""
        data = "héllo, circuit".encode()

        assert unchunk(chunk(data, 3), len(data)) == data

    def test_unchunk_keeps_padding_without_length(self) -> None:
        """Test unchunk returns the full padded width by default."""
        assert unchunk(chunk(b"ab", 2)) == b"ab" + b"\x00" * 60

    def test_unchunk_accepts_text_elements(self) -> None:
        """Test decimal and hex element forms."""
        element = chunk(b"z", 1)[0]

        assert unchunk([str(element)], 1) == b"z"
        assert unchunk([hex(element)], 1) == b"z"

    def test_unchunk_length_too_long(self) -> None:
        """Test requesting more bytes than decoded raises."""
        with pytest.raises(CapacityExceededError) as exc_info:
            unchunk(chunk(b"a", 1), 32, field="aud")

        assert exc_info.value.field == "aud"
        assert exc_info.value.limit == 31
        assert exc_info.value.actual == 32

    def test_element_wider_than_chunk(self) -> None:
        """Test an element using the reserved byte is rejected."""
        with pytest.raises(ValueError):
            to_element_bytes(1 << 248)


class TestLimbs:
    """Tests for little-endian limb decomposition."""

    def test_to_limbs_least_significant_first(self) -> None:
        """Test limb order."""
        assert to_limbs((1 << 64) + 5, 2) == [5, 1]

    def test_limbs_recompose(self) -> None:
        """Test from_limbs inverts to_limbs."""
        value = int.from_bytes(bytes(range(1, 129)), "big")

        assert from_limbs(to_limbs(value, 16)) == value

    def test_to_limbs_overflow(self) -> None:
        """Test values wider than the limbs raise."""
        with pytest.raises(CapacityExceededError):
            to_limbs(1 << 128, 2)


class TestHalves:
    """Tests for digest halving."""

    def test_split_and_join(self) -> None:
        """Test a digest splits into 16-byte big-endian halves."""
        digest = bytes(range(32))
        high, low = split_halves(digest)

        assert high == int.from_bytes(digest[:16], "big")
        assert low == int.from_bytes(digest[16:], "big")
        assert join_halves(high, low) == digest

    def test_split_wrong_size(self) -> None:
        """Test a non-32-byte digest raises."""
        with pytest.raises(ValueError):
            split_halves(b"\x00" * 31)


class TestToInt:
    """Tests for field element parsing."""

    def test_forms(self) -> None:
        """Test int, decimal, hex and bytes forms."""
        assert to_int(16) == 16
        assert to_int("16") == 16
        assert to_int("0x10") == 16
        assert to_int(" 0X10 ") == 16
        assert to_int(b"\x01\x00") == 256
