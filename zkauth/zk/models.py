"""
ZK Circuit Data Models
======================

Pydantic models for circuit inputs, public signals and proofs.

Version: 0.1.0
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from zkauth.config import CircuitVersion
from zkauth.zk.fields import ELEMENT_WIDTH, FIELD_MODULUS, to_int


class ClaimPosition(BaseModel):
    """
    Where a claim sits inside the decoded JWT payload text.

    All offsets are UTF-8 byte offsets into the payload.
    """

    model_config = ConfigDict(frozen=True)

    claim_offset: int = Field(..., ge=0, description="Start of the match, leading whitespace included")
    match_length: int = Field(..., ge=0)
    colon_index: int = Field(..., ge=0, description="Offset of the ':' separator")
    value_offset: int = Field(..., ge=0, description="Offset of the value, opening quote included")
    value_length: int = Field(..., ge=0, description="Value length, quotes included")

    @property
    def value_end(self) -> int:
        return self.value_offset + self.value_length

    def circuit_tuple(self) -> tuple[int, int, int, int, int]:
        """Position as the circuit reads it: colon and value relative to the match."""
        return (
            self.claim_offset,
            self.match_length,
            self.colon_index - self.claim_offset,
            self.value_offset - self.claim_offset,
            self.value_length,
        )


class ZKProof(BaseModel):
    """
    A Groth16 proof triple.

    Compatible with snarkjs Groth16 proof format; the trailing projective
    coordinate snarkjs emits is accepted and ignored.
    """

    # Proof points (G1 and G2 elements)
    pi_a: list[str] = Field(..., min_length=2, description="Proof point A (G1)")
    pi_b: list[list[str]] = Field(..., min_length=2, description="Proof point B (G2)")
    pi_c: list[str] = Field(..., min_length=2, description="Proof point C (G1)")

    # Protocol info
    protocol: str = Field(default="groth16")
    curve: str = Field(default="bn128")

    @property
    def a(self) -> list[int]:
        return [to_int(v) for v in self.pi_a[:2]]

    @property
    def b(self) -> list[list[int]]:
        return [[to_int(v) for v in row[:2]] for row in self.pi_b[:2]]

    @property
    def c(self) -> list[int]:
        return [to_int(v) for v in self.pi_c[:2]]

    def to_calldata(self) -> list[int]:
        """Convert to Solidity calldata format (8 uint256)."""
        return [*self.a, *self.b[0], *self.b[1], *self.c]


class PublicSignalVector(BaseModel):
    """
    Ordered public signals for one circuit version.

    Length is exactly the version's width and every element is a field
    element below the BN254 scalar modulus.
    """

    model_config = ConfigDict(frozen=True)

    version: CircuitVersion
    signals: tuple[int, ...]

    @field_validator("signals", mode="before")
    @classmethod
    def parse_signals(cls, v: list) -> tuple[int, ...]:
        """Accept ints, decimal strings, 0x-hex strings or raw bytes."""
        return tuple(to_int(s) for s in v)

    @field_validator("signals")
    @classmethod
    def signals_in_field(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        for i, s in enumerate(v):
            if not 0 <= s < FIELD_MODULUS:
                raise ValueError(f"Signal {i} is not a field element")
        return v

    @model_validator(mode="after")
    def width_matches_version(self) -> "PublicSignalVector":
        if len(self.signals) != self.version.width:
            raise ValueError(
                f"{self.version.value} expects {self.version.width} signals, got {len(self.signals)}"
            )
        return self

    def __len__(self) -> int:
        return len(self.signals)

    def __getitem__(self, index: int) -> int:
        return self.signals[index]

    def to_bytes(self) -> list[bytes]:
        """Each signal as a 32-byte big-endian word."""
        return [s.to_bytes(ELEMENT_WIDTH, "big") for s in self.signals]

    def to_hex(self) -> list[str]:
        """Each signal as 0x-prefixed, 32-byte zero-padded hex."""
        return ["0x" + b.hex() for b in self.to_bytes()]

    def to_decimal(self) -> list[str]:
        """Each signal as a decimal string (snarkjs public.json format)."""
        return [str(s) for s in self.signals]


class SignalOverrides(BaseModel):
    """
    Replay/test overrides for public-signal assembly.

    `subject_hash` replaces the salted-subject digest (the salt is then
    unused). `subject_length` and `subject_offset` apply to V1 only.
    """

    subject_hash: bytes | None = None
    subject_length: int | None = Field(default=None, ge=0)
    subject_offset: int | None = Field(default=None, ge=0)

    @field_validator("subject_hash", mode="before")
    @classmethod
    def parse_subject_hash(cls, v: str | bytes | None) -> bytes | None:
        if isinstance(v, str):
            return bytes.fromhex(v.removeprefix("0x"))
        return v

    @field_validator("subject_hash")
    @classmethod
    def subject_hash_is_32_bytes(cls, v: bytes | None) -> bytes | None:
        if v is not None and len(v) != 32:
            raise ValueError(f"subject_hash must be 32 bytes, got {len(v)}")
        return v


class CircuitInputBundle(BaseModel):
    """Private and public inputs for one V2 proving run."""

    model_config = ConfigDict(frozen=True)

    jwt_uints: list[int]
    jwt_len: int
    jwt_blocks: int
    pay_off: int
    pay_len: int

    iss_pos: ClaimPosition
    aud_pos: ClaimPosition
    iat_pos: ClaimPosition
    exp_pos: ClaimPosition
    nonce_pos: ClaimPosition
    sub_pos: ClaimPosition

    salted_sub_uints: list[int]
    salted_sub_blocks: int

    sig_uints: list[int]
    pub_uints: list[int]

    def to_circuit_input(self) -> dict[str, str | list[str]]:
        """Render as the circuit's input.json (decimal strings, camelCase keys)."""

        def numbers(values: list[int] | tuple[int, ...]) -> list[str]:
            return [str(v) for v in values]

        return {
            "jwtUints": numbers(self.jwt_uints),
            "jwtLen": str(self.jwt_len),
            "jwtBlocks": str(self.jwt_blocks),
            "payOff": str(self.pay_off),
            "payLen": str(self.pay_len),
            "issPos": numbers(self.iss_pos.circuit_tuple()),
            "audPos": numbers(self.aud_pos.circuit_tuple()),
            "iatPos": numbers(self.iat_pos.circuit_tuple()),
            "expPos": numbers(self.exp_pos.circuit_tuple()),
            "noncePos": numbers(self.nonce_pos.circuit_tuple()),
            "subPos": numbers(self.sub_pos.circuit_tuple()),
            "saltedSubUints": numbers(self.salted_sub_uints),
            "saltedSubBlocks": str(self.salted_sub_blocks),
            "sigUints": numbers(self.sig_uints),
            "pubUints": numbers(self.pub_uints),
        }


class DecodedPublicSignals(BaseModel):
    """Human-readable view of a V2 public-signal vector."""

    iss: str
    iss_len: int
    aud: str
    aud_len: int
    iat: str
    iat_len: int
    exp: str
    exp_len: int
    nonce: str
    nonce_len: int
    subject_hash_hex: str = Field(..., description="0x-prefixed 32-byte digest")
    modulus_base64: str = Field(..., description="base64url RSA modulus, unpadded")


class AuthData(BaseModel):
    """Authorization handed to the recovery transaction."""

    subject_hash: str
    guardian: str
    proof: str = Field(..., description="0x-prefixed ABI-encoded proof blob")
