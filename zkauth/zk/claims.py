"""
Claim Location
==============

Finds where a claim sits in the raw JWT payload text. The circuit reads
the payload as bytes, not as parsed JSON, so the offsets produced here
are what it uses to extract and constrain each claim value.

Version: 0.1.0
"""

import re
from functools import lru_cache
from typing import Protocol

from zkauth.errors import ClaimNotFoundError
from zkauth.zk.models import ClaimPosition


class ClaimLocator(Protocol):
    """Anything that can position a claim inside payload text."""

    def locate(self, payload: str, claim: str) -> ClaimPosition:
        """
        Position `claim` in `payload`.

        Raises:
            ClaimNotFoundError: If the claim is absent
        """
        ...


@lru_cache(maxsize=64)
def _claim_pattern(claim: str) -> re.Pattern[str]:
    # Quoted or bare value, terminated by ',' or '}'
    return re.compile(rf'\s*("{re.escape(claim)}")\s*:\s*("?[^",]*"?)\s*([,}}])')


class RegexClaimLocator:
    """
    Pattern-based locator.

    Does not understand nesting or escaped quotes; the first
    `"claim": value` occurrence anywhere in the text wins.
    """

    def locate(self, payload: str, claim: str) -> ClaimPosition:
        match = _claim_pattern(claim).search(payload)
        if match is None:
            raise ClaimNotFoundError(claim)

        def byte_offset(index: int) -> int:
            return len(payload[:index].encode())

        value_start, value_end = match.span(2)
        colon = payload.index(":", match.end(1))

        return ClaimPosition(
            claim_offset=byte_offset(match.start()),
            match_length=len(match.group(0).encode()),
            colon_index=byte_offset(colon),
            value_offset=byte_offset(value_start),
            value_length=len(payload[value_start:value_end].encode()),
        )


default_locator = RegexClaimLocator()


def locate(payload: str, claim: str, locator: ClaimLocator | None = None) -> ClaimPosition:
    """Position `claim` in `payload` with the given or default locator."""
    return (locator or default_locator).locate(payload, claim)


def claim_text(payload: str, position: ClaimPosition) -> str:
    """The claim value exactly as written, quotes included."""
    raw = payload.encode()
    return raw[position.value_offset : position.value_end].decode()
