"""
zkauth Errors
=============

Every failure is raised synchronously to the immediate caller. Only the
JWKS transport is retried; codec errors reflect bad input or misuse.
"""


class ZkAuthError(Exception):
    """Base class for all zkauth errors."""


class ClaimNotFoundError(ZkAuthError):
    """A named claim is absent from the JWT payload text."""

    def __init__(self, claim: str) -> None:
        self.claim = claim
        super().__init__(f"Claim not found: {claim}")


class InvalidModulusLengthError(ZkAuthError):
    """The RSA modulus is not an RSA-2048 modulus."""

    def __init__(self, actual: int, expected: int = 256) -> None:
        self.actual = actual
        self.expected = expected
        super().__init__(f"Modulus must be {expected} bytes, got {actual}")


class CapacityExceededError(ZkAuthError):
    """Data does not fit in the slots allotted to it."""

    def __init__(self, field: str, limit: int, actual: int) -> None:
        self.field = field
        self.limit = limit
        self.actual = actual
        super().__init__(f"{field} is {actual} bytes, capacity is {limit}")


class InvalidSaltError(ZkAuthError):
    """Salt cannot be read in the encoding the circuit version expects."""

    def __init__(self, salt: str) -> None:
        self.salt = salt
        super().__init__("Salt must be hex-encoded bytes")


class SignalLengthError(ZkAuthError):
    """A public-signal vector has the wrong number of elements."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected} public signals, got {actual}")


class MalformedTokenError(ZkAuthError):
    """A signed token is not three base64url JSON segments."""


class SignalsNotBuiltError(ZkAuthError):
    """A proof was requested before the public signals were built."""

    def __init__(self) -> None:
        super().__init__("Public signals must be built before building the proof")


class LengthMismatchError(ZkAuthError):
    """Parallel inputs for a multi-guardian build differ in length."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Length mismatch: expected {expected}, got {actual}")


class JwksFetchError(ZkAuthError):
    """A JWKS endpoint could not be read."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(f"JWKS fetch failed for {url}: {reason}")


class MalformedModulusError(ZkAuthError):
    """An RSA modulus is not valid base64/base64url text."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Modulus is not valid base64url: {reason}")


class NonceCalculatorMissingError(ZkAuthError):
    """A recovery nonce was requested from a builder without a calculator."""

    def __init__(self) -> None:
        super().__init__("No nonce calculator configured")


class UnknownProviderError(ZkAuthError):
    """An OIDC provider name or issuer is not registered."""

    def __init__(self, name_or_iss: str) -> None:
        self.name_or_iss = name_or_iss
        super().__init__(f"Unknown OIDC provider: {name_or_iss}")


class SigningKeyNotFoundError(ZkAuthError):
    """A provider's JWKS has no key with the token's kid."""

    def __init__(self, provider: str, kid: str | None) -> None:
        self.provider = provider
        self.kid = kid
        super().__init__(f"No key {kid!r} published by {provider}")
