"""
Guardian Authorization Builder
==============================

Turns a guardian's ID token into the `AuthData` a recovery transaction
carries. One builder walks one signing attempt through:

    UNBUILT -> SIGNALS_BUILT -> PROOF_BUILT -> AUTH_DATA_READY

Version: 0.1.0
"""

from collections.abc import Sequence
from enum import Enum
from typing import Protocol, runtime_checkable

from zkauth.config import settings
from zkauth.errors import (
    LengthMismatchError,
    NonceCalculatorMissingError,
    SignalLengthError,
    SignalsNotBuiltError,
)
from zkauth.jwt.token import JwtProvider, SignedToken
from zkauth.logging import bound_context, get_logger
from zkauth.zk.codec import PublicSignalCodec, get_codec
from zkauth.zk.fields import FieldLike
from zkauth.zk.models import AuthData, PublicSignalVector, SignalOverrides, ZKProof
from zkauth.zk.proof import PLACEHOLDER_PROOF, encode_proof, guardian_id


logger = get_logger(__name__)


class BuildState(str, Enum):
    """Progress of one signing attempt."""

    UNBUILT = "unbuilt"
    SIGNALS_BUILT = "signals_built"
    PROOF_BUILT = "proof_built"
    AUTH_DATA_READY = "auth_data_ready"


@runtime_checkable
class Guardian(Protocol):
    """A deployed guardian contract handle."""

    address: str


class NonceCalculator(Protocol):
    """
    EIP-712 recovery nonce derivation, supplied by the caller.

    Returns 0x-hex of a 32-byte domain/message hash followed by a
    32-byte randomized value.
    """

    def __call__(
        self,
        *,
        verifying_contract: str,
        name: str,
        new_owner: str,
        chain_id: int,
    ) -> str: ...


class AuthBuilder:
    """
    Builds the authorization for one guardian.

    Usage:
        builder = AuthBuilder(
            subject_hash="0x...",
            guardian="0xGuardian...",
            jwt_provider=provider,
            new_owner="0xNewOwner...",
            salt="0x1234...",
        )
        auth = builder.build()
    """

    def __init__(
        self,
        subject_hash: str,
        guardian: str | Guardian,
        jwt_provider: JwtProvider,
        new_owner: str,
        salt: str,
        chain_id: int | None = None,
        codec: PublicSignalCodec | None = None,
        nonce_calculator: NonceCalculator | None = None,
    ) -> None:
        self.subject_hash = subject_hash
        self.guardian = guardian
        self.jwt_provider = jwt_provider
        self.new_owner = new_owner
        self.salt = salt
        self.chain_id = chain_id if chain_id is not None else settings.chain.chain_id
        self.codec = codec or get_codec()
        self.nonce_calculator = nonce_calculator

        self._state = BuildState.UNBUILT
        self._pub_signals: PublicSignalVector | None = None
        self._proof = ""

    @property
    def state(self) -> BuildState:
        return self._state

    @property
    def jwt(self) -> SignedToken:
        return self.jwt_provider.token

    @property
    def pub_signals(self) -> PublicSignalVector | None:
        return self._pub_signals

    @property
    def proof(self) -> str:
        return self._proof

    @property
    def guardian_address(self) -> str:
        if isinstance(self.guardian, str):
            return self.guardian
        return self.guardian.address

    @property
    def guardian_id(self) -> str:
        """Identifier the account stores for this guardian/subject pair."""
        return guardian_id(self.subject_hash, self.guardian_address)

    def build(self) -> AuthData:
        """Run every step with default placeholders."""
        with bound_context(guardian=self.guardian_address, circuit=self.codec.version.value):
            self.build_pub_sig()
            self.build_proof()
            return self.build_auth_data()

    def build_pub_sig(self, overrides: SignalOverrides | None = None) -> PublicSignalVector:
        """
        Assemble the public signals for this guardian's token.

        Args:
            overrides: Test/replay values; a given subject hash makes the salt unused
        """
        self._pub_signals = self.codec.assemble(
            self.jwt_provider.token,
            self.jwt_provider.jwk.n,
            self.salt,
            overrides,
        )
        self._state = BuildState.SIGNALS_BUILT

        logger.info(
            "pub_signals_built",
            circuit=self.codec.version.value,
            guardian=self.guardian_address,
        )
        return self._pub_signals

    def build_proof(
        self,
        kid: str | None = None,
        proof: ZKProof | None = None,
        pub_signals: PublicSignalVector | Sequence[FieldLike] | None = None,
    ) -> str:
        """
        Encode the proof blob.

        The proof triple defaults to `PLACEHOLDER_PROOF`; production callers
        pass the prover's output.

        Args:
            kid: Signing key id (defaults to the provider's JWK kid)
            proof: Groth16 proof from the prover
            pub_signals: Signals to embed instead of the built ones

        Raises:
            SignalsNotBuiltError: If no signals were built or given
            SignalLengthError: If the signals do not match the codec's width
            pydantic.ValidationError: If a given signal is not a field element
        """
        signals = pub_signals if pub_signals is not None else self._pub_signals
        if signals is None or len(signals) == 0:
            logger.warning("proof_requested_before_signals", guardian=self.guardian_address)
            raise SignalsNotBuiltError()

        if len(signals) != self.codec.width:
            raise SignalLengthError(self.codec.width, len(signals))
        if not isinstance(signals, PublicSignalVector):
            signals = PublicSignalVector(version=self.codec.version, signals=list(signals))

        if proof is None:
            logger.debug("placeholder_proof_used", guardian=self.guardian_address)

        blob = encode_proof(
            kid if kid is not None else self.jwt_provider.jwk.kid,
            proof or PLACEHOLDER_PROOF,
            signals,
        )
        self._proof = "0x" + blob.hex()
        self._state = BuildState.PROOF_BUILT
        return self._proof

    def build_auth_data(self) -> AuthData:
        if self._state == BuildState.PROOF_BUILT:
            self._state = BuildState.AUTH_DATA_READY
        return AuthData(
            subject_hash=self.subject_hash,
            guardian=self.guardian_address,
            proof=self._proof,
        )

    def nonce(
        self,
        verifying_contract: str | None = None,
        name: str | None = None,
        new_owner: str | None = None,
    ) -> str:
        """
        Recovery nonce the ID token must carry.

        Defaults: the guardian as verifying contract, the token audience
        as domain name, and this builder's new owner.

        Raises:
            NonceCalculatorMissingError: If no calculator was given
        """
        if self.nonce_calculator is None:
            raise NonceCalculatorMissingError()
        return self.nonce_calculator(
            verifying_contract=verifying_contract or self.guardian_address,
            name=name or self.jwt_provider.aud or "",
            new_owner=new_owner or self.new_owner,
            chain_id=self.chain_id,
        )


class MultiAuthBuilder:
    """One `AuthBuilder` per guardian, built together."""

    def __init__(
        self,
        subject_hashes: Sequence[str],
        guardians: Sequence[str | Guardian],
        jwt_providers: Sequence[JwtProvider],
        new_owner: str,
        salts: Sequence[str],
        chain_id: int | None = None,
        codec: PublicSignalCodec | None = None,
    ) -> None:
        """
        Raises:
            LengthMismatchError: If the per-guardian sequences differ in length
        """
        expected = len(guardians)
        for values in (jwt_providers, subject_hashes, salts):
            if len(values) != expected:
                raise LengthMismatchError(expected, len(values))

        self.builders = [
            AuthBuilder(
                subject_hashes[i],
                guardians[i],
                jwt_providers[i],
                new_owner,
                salts[i],
                chain_id=chain_id,
                codec=codec,
            )
            for i in range(expected)
        ]

    def build(self) -> list[AuthData]:
        auths = []
        for index, builder in enumerate(self.builders):
            with bound_context(guardian_index=index):
                auths.append(builder.build())
        return auths
