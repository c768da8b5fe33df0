"""
Public Signal Codec
===================

Packs token fragments, the salted subject digest and the issuer's RSA
modulus into the fixed-width public-signal vector a circuit version
expects, and unpacks V2 vectors for inspection.

Slot order is part of the verifier contract. Any offset, padding or
chunk-boundary change produces signals that no longer describe the JWT.

Usage:
    codec = get_codec(CircuitVersion.V2)
    vector = codec.assemble(id_token, jwk.n, salt="0x1234...")
    print(codec.decode(vector).iss)

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from zkauth.config import CircuitVersion, settings
from zkauth.errors import ClaimNotFoundError, InvalidModulusLengthError, SignalLengthError
from zkauth.jwt.token import (
    RSA_MODULUS_BYTES,
    SignedToken,
    b64url_encode,
    decode_modulus,
    masked_jwt_text,
)
from zkauth.logging import get_logger
from zkauth.zk.claims import ClaimLocator, claim_text, default_locator
from zkauth.zk.fields import (
    FieldLike,
    chunk,
    join_halves,
    split_halves,
    to_int,
    to_limbs,
    unchunk,
)
from zkauth.zk.models import DecodedPublicSignals, PublicSignalVector, SignalOverrides
from zkauth.zk.subject import HashFunction, keccak256, subject_hash_v1, subject_hash_v2


logger = get_logger(__name__)


def as_token(token: SignedToken | str) -> SignedToken:
    return token if isinstance(token, SignedToken) else SignedToken.parse(token)


def modulus_bytes(modulus: str | bytes) -> bytes:
    """
    RSA-2048 modulus from raw bytes or its base64/base64url text.

    Raises:
        InvalidModulusLengthError: If the modulus is not 256 bytes
    """
    if isinstance(modulus, str):
        return decode_modulus(modulus)
    if len(modulus) != RSA_MODULUS_BYTES:
        raise InvalidModulusLengthError(len(modulus), RSA_MODULUS_BYTES)
    return modulus


class PublicSignalCodec(ABC):
    """
    One public-signal layout.

    Layouts share the chunker, claim locator and subject hasher; they
    differ only in which fragments land in which slots.
    """

    version: CircuitVersion

    def __init__(self, locator: ClaimLocator | None = None) -> None:
        self.locator = locator or default_locator

    @property
    def width(self) -> int:
        return self.version.width

    @abstractmethod
    def assemble(
        self,
        token: SignedToken | str,
        modulus: str | bytes,
        salt: str,
        overrides: SignalOverrides | None = None,
    ) -> PublicSignalVector:
        """
        Build the public-signal vector for a token.

        Args:
            token: Signed ID token, parsed or compact
            modulus: Issuer RSA-2048 modulus (JWK `n` or raw bytes)
            salt: Guardian salt; ignored when overrides carry a subject hash
            overrides: Replay/test values that bypass recomputation

        Raises:
            ClaimNotFoundError: If a required claim is missing
            InvalidModulusLengthError: If the modulus is not 256 bytes
            CapacityExceededError: If a fragment overflows its slots
        """
        ...

    def decode(self, vector: PublicSignalVector | Sequence[FieldLike]) -> DecodedPublicSignals:
        raise NotImplementedError(f"{self.version.value} public signals cannot be decoded")

    def _signal_list(self, vector: PublicSignalVector | Sequence[FieldLike]) -> list[int]:
        if isinstance(vector, PublicSignalVector):
            signals = list(vector.signals)
        else:
            signals = [to_int(s) for s in vector]
        if len(signals) != self.width:
            raise SignalLengthError(self.width, len(signals))
        return signals


class V1Codec(PublicSignalCodec):
    """
    70-slot layout embedding the masked JWT verbatim.

    | slots  | content                                         |
    |--------|-------------------------------------------------|
    | 0-1    | keccak256(sub ++ salt), two 16-byte halves      |
    | 2      | offset of the `sub` value in the masked JWT     |
    | 3      | byte length of `sub`                            |
    | 4-35   | modulus, 64-bit limbs, least significant first  |
    | 36-69  | masked JWT text, 31-byte chunks                 |
    """

    version = CircuitVersion.V1

    MODULUS_LIMBS = 32
    JWT_SLOTS = 34
    # Length of `sub":"`, from the key's first letter to the value
    SUBJECT_VALUE_SHIFT = 6

    def __init__(
        self,
        locator: ClaimLocator | None = None,
        hash_fn: HashFunction = keccak256,
        whitelist: Sequence[str] | None = None,
    ) -> None:
        super().__init__(locator)
        self.hash_fn = hash_fn
        self.whitelist = list(whitelist or settings.circuit.claim_whitelist_list)

    def subject_key_offset(self, masked: str) -> int:
        """
        Byte offset of the first letter of the `sub` key in the masked JWT.

        Raises:
            ClaimNotFoundError: If the locator finds no `sub` claim
        """
        position = self.locator.locate(masked, "sub")
        # Compact JSON: sub":"value
        return position.value_offset - len('sub":')

    def assemble(
        self,
        token: SignedToken | str,
        modulus: str | bytes,
        salt: str,
        overrides: SignalOverrides | None = None,
    ) -> PublicSignalVector:
        token = as_token(token)
        modulus = modulus_bytes(modulus)
        overrides = overrides or SignalOverrides()

        if "sub" not in token.payload:
            raise ClaimNotFoundError("sub")

        masked = masked_jwt_text(token, self.whitelist)

        digest = overrides.subject_hash or subject_hash_v1(token.sub, salt, self.hash_fn)
        subject_offset = (
            overrides.subject_offset
            if overrides.subject_offset is not None
            else self.subject_key_offset(masked)
        )
        subject_length = (
            overrides.subject_length
            if overrides.subject_length is not None
            else len(token.sub.encode())
        )

        signals = [
            *split_halves(digest),
            subject_offset + self.SUBJECT_VALUE_SHIFT,
            subject_length,
            *to_limbs(int.from_bytes(modulus, "big"), self.MODULUS_LIMBS, field="modulus"),
            *chunk(masked.encode(), self.JWT_SLOTS, field="masked_jwt"),
        ]

        logger.debug(
            "public_signals_assembled",
            circuit=self.version.value,
            masked_jwt_len=len(masked.encode()),
        )

        return PublicSignalVector(version=self.version, signals=signals)


class V2Codec(PublicSignalCodec):
    """
    61-slot layout carrying five claims, the subject digest and the modulus.

    | slots  | content                                          |
    |--------|--------------------------------------------------|
    | 0-9    | `iss` as written (quotes kept), 9 chunks + length |
    | 10-19  | `aud`, same                                      |
    | 20-29  | `iat`, same                                      |
    | 30-39  | `exp`, same                                      |
    | 40-49  | `nonce`, same                                    |
    | 50-51  | SHA-256(salt ++ '"sub"'), two 16-byte halves     |
    | 52-60  | modulus, 31-byte chunks                          |
    """

    version = CircuitVersion.V2

    CLAIMS = ("iss", "aud", "iat", "exp", "nonce")
    CLAIM_SLOTS = 9
    MODULUS_SLOTS = 9

    HASH_SLOT = len(CLAIMS) * (CLAIM_SLOTS + 1)
    MODULUS_SLOT = HASH_SLOT + 2

    def assemble(
        self,
        token: SignedToken | str,
        modulus: str | bytes,
        salt: str,
        overrides: SignalOverrides | None = None,
    ) -> PublicSignalVector:
        token = as_token(token)
        modulus = modulus_bytes(modulus)
        overrides = overrides or SignalOverrides()

        signals: list[int] = []
        for claim in self.CLAIMS:
            position = self.locator.locate(token.payload_text, claim)
            value = claim_text(token.payload_text, position).encode()
            signals.extend(chunk(value, self.CLAIM_SLOTS, field=claim))
            signals.append(len(value))

        if overrides.subject_hash is not None:
            digest = overrides.subject_hash
        else:
            if "sub" not in token.payload:
                raise ClaimNotFoundError("sub")
            digest = subject_hash_v2(token.sub, salt)

        signals.extend(split_halves(digest))
        signals.extend(chunk(modulus, self.MODULUS_SLOTS, field="modulus"))

        logger.debug("public_signals_assembled", circuit=self.version.value)

        return PublicSignalVector(version=self.version, signals=signals)

    def decode(self, vector: PublicSignalVector | Sequence[FieldLike]) -> DecodedPublicSignals:
        """
        Read claims, subject digest and modulus back out of a V2 vector.

        Raises:
            SignalLengthError: If the vector does not hold 61 signals
            CapacityExceededError: If a length slot exceeds its claim slots
        """
        signals = self._signal_list(vector)

        fields: dict[str, str | int] = {}
        for i, claim in enumerate(self.CLAIMS):
            start = i * (self.CLAIM_SLOTS + 1)
            length = signals[start + self.CLAIM_SLOTS]
            fields[claim] = unchunk(
                signals[start : start + self.CLAIM_SLOTS], length, field=claim
            ).decode()
            fields[f"{claim}_len"] = length

        digest = join_halves(signals[self.HASH_SLOT], signals[self.HASH_SLOT + 1])
        modulus = unchunk(signals[self.MODULUS_SLOT : self.MODULUS_SLOT + self.MODULUS_SLOTS])

        return DecodedPublicSignals(
            **fields,
            subject_hash_hex="0x" + digest.hex(),
            modulus_base64=b64url_encode(modulus[:RSA_MODULUS_BYTES]),
        )


_CODECS: dict[CircuitVersion, type[PublicSignalCodec]] = {
    CircuitVersion.V1: V1Codec,
    CircuitVersion.V2: V2Codec,
}


def get_codec(
    version: CircuitVersion | str | None = None,
    locator: ClaimLocator | None = None,
) -> PublicSignalCodec:
    """Codec for `version`, or for the configured circuit version."""
    version = CircuitVersion(version or settings.circuit.version)
    return _CODECS[version](locator=locator)
