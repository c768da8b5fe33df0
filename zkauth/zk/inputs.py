"""
Circuit Input Generation
========================

Builds the full input set for a V2 proving run: the SHA-256-padded
signing input, claim positions, salted subject preimage, signature and
modulus, each chunked into field elements.

Usage:
    bundle = build_circuit_inputs(id_token, jwk.n, salt="0x1234...")
    json.dump(bundle.to_circuit_input(), f)

Version: 0.1.0
"""

from zkauth.errors import ClaimNotFoundError
from zkauth.jwt.token import SignedToken
from zkauth.logging import get_logger
from zkauth.zk.claims import ClaimLocator, locate
from zkauth.zk.codec import as_token, modulus_bytes
from zkauth.zk.fields import CHUNK_WIDTH, block_count, chunk, sha256_pad
from zkauth.zk.models import CircuitInputBundle
from zkauth.zk.subject import salted_subject_v2


logger = get_logger(__name__)

MAX_JWT_LEN = 1023  # 31 * 33
MAX_SALTED_SUB_LEN = 341  # 31 * 11
MAX_PUB_LEN = 279  # 31 * 9, smallest multiple of 31 above 256
MAX_SIG_LEN = MAX_PUB_LEN

POSITION_CLAIMS = ("iss", "aud", "iat", "exp", "nonce", "sub")


def build_circuit_inputs(
    token: SignedToken | str,
    modulus: str | bytes,
    salt: str,
    locator: ClaimLocator | None = None,
) -> CircuitInputBundle:
    """
    Prepare every input the V2 circuit needs for one token.

    Args:
        token: Signed ID token, parsed or compact
        modulus: Issuer RSA-2048 modulus (JWK `n` or raw bytes)
        salt: Hex-encoded guardian salt
        locator: Claim locator (regex locator by default)

    Returns:
        CircuitInputBundle ready for `to_circuit_input()`

    Raises:
        ClaimNotFoundError: If a positioned claim is missing
        CapacityExceededError: If any padded field overflows its slots
        InvalidModulusLengthError: If the modulus is not 256 bytes
        InvalidSaltError: If the salt is not hex
    """
    token = as_token(token)
    modulus = modulus_bytes(modulus)

    jwt = token.signing_input.encode()
    positions = {
        claim: locate(token.payload_text, claim, locator) for claim in POSITION_CLAIMS
    }

    if "sub" not in token.payload:
        raise ClaimNotFoundError("sub")
    salted_sub = salted_subject_v2(token.sub, salt)

    bundle = CircuitInputBundle(
        jwt_uints=chunk(sha256_pad(jwt), MAX_JWT_LEN // CHUNK_WIDTH, field="jwt"),
        jwt_len=len(jwt),
        jwt_blocks=block_count(jwt),
        pay_off=token.payload_offset,
        pay_len=len(token.payload_b64),
        iss_pos=positions["iss"],
        aud_pos=positions["aud"],
        iat_pos=positions["iat"],
        exp_pos=positions["exp"],
        nonce_pos=positions["nonce"],
        sub_pos=positions["sub"],
        salted_sub_uints=chunk(
            sha256_pad(salted_sub), MAX_SALTED_SUB_LEN // CHUNK_WIDTH, field="salted_sub"
        ),
        salted_sub_blocks=block_count(salted_sub),
        sig_uints=chunk(token.signature, MAX_SIG_LEN // CHUNK_WIDTH, field="signature"),
        pub_uints=chunk(modulus, MAX_PUB_LEN // CHUNK_WIDTH, field="modulus"),
    )

    logger.debug(
        "circuit_inputs_built",
        jwt_len=bundle.jwt_len,
        jwt_blocks=bundle.jwt_blocks,
        salted_sub_blocks=bundle.salted_sub_blocks,
    )

    return bundle
