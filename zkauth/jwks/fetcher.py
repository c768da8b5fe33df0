"""
JWKS Fetcher
============

Async retrieval of issuer signing keys.

Concurrent requests for the same URL share one in-flight request per
fetcher instance. The entry is dropped as soon as the request settles,
so a failure reaches every waiter and the next call starts fresh.

Usage:
    async with JwksFetcher() as fetcher:
        key = await fetcher.get_key("google", kid=token.kid)

Version: 0.1.0
"""

import asyncio
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from zkauth.config import settings
from zkauth.errors import JwksFetchError, SigningKeyNotFoundError
from zkauth.jwks.providers import get_provider
from zkauth.jwt.token import JwtProvider, RsaJsonWebKey, SignedToken
from zkauth.logging import get_logger


logger = get_logger(__name__)


class JwksFetcher:
    """Fetches and parses JWKS documents from registered providers."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
    ) -> None:
        """
        Args:
            client: HTTP client to use (created lazily when omitted)
            timeout: Request timeout in seconds (default from settings)
            user_agent: User-Agent header (default from settings)
        """
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout or settings.jwks.timeout_seconds
        self._user_agent = user_agent or settings.jwks.user_agent
        self._in_flight: dict[str, asyncio.Task[dict[str, Any]]] = {}

    async def __aenter__(self) -> "JwksFetcher":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @retry(
        retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
        stop=stop_after_attempt(settings.jwks.max_retries),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            "jwks_retry",
            attempt=retry_state.attempt_number,
        ),
    )
    async def _request(self, url: str) -> dict[str, Any]:
        client = await self._get_client()
        response = await client.get(url)
        response.raise_for_status()
        return response.json()

    async def _load(self, url: str) -> dict[str, Any]:
        try:
            document = await self._request(url)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("jwks_fetch_failed", url=url, error=str(e))
            raise JwksFetchError(url, str(e)) from e

        if not isinstance(document, dict) or not isinstance(document.get("keys"), list):
            logger.error("jwks_document_invalid", url=url)
            raise JwksFetchError(url, "response has no 'keys' list")

        logger.debug("jwks_fetched", url=url, keys=len(document["keys"]))
        return document

    async def fetch(self, url: str) -> dict[str, Any]:
        """
        Fetch a JWKS document, joining any identical request in flight.

        Raises:
            JwksFetchError: If the request fails or the body is not a JWKS
        """
        task = self._in_flight.get(url)
        if task is None:
            task = asyncio.ensure_future(self._load(url))
            self._in_flight[url] = task

            def _settle(done: asyncio.Task[dict[str, Any]]) -> None:
                if self._in_flight.get(url) is done:
                    del self._in_flight[url]

            task.add_done_callback(_settle)
        else:
            logger.debug("jwks_request_coalesced", url=url)

        return await asyncio.shield(task)

    async def fetch_keys(self, provider: str) -> list[RsaJsonWebKey]:
        """
        All RSA keys published by a provider.

        Args:
            provider: Provider short name or issuer URL
        """
        document = await self.fetch(get_provider(provider).jwks_url)
        return [
            RsaJsonWebKey.model_validate(key)
            for key in document["keys"]
            if key.get("kty", "RSA") == "RSA"
        ]

    async def get_key(
        self,
        provider: str,
        kid: str | None = None,
        index: int = 0,
    ) -> RsaJsonWebKey | None:
        """
        A single provider key.

        Args:
            provider: Provider short name or issuer URL
            kid: Key id to select; `index` is used when omitted
            index: Position in the key list

        Returns:
            The key, or None if no key matches
        """
        keys = await self.fetch_keys(provider)
        if kid is not None:
            return next((key for key in keys if key.kid == kid), None)
        if 0 <= index < len(keys):
            return keys[index]
        return None

    async def jwt_provider(self, token: SignedToken | str) -> JwtProvider:
        """
        Pair a token with its issuer's signing key.

        Raises:
            UnknownProviderError: If the issuer is not registered
            SigningKeyNotFoundError: If the issuer publishes no key with the token's kid
        """
        if isinstance(token, str):
            token = SignedToken.parse(token)

        provider = get_provider(token.iss or "")
        key = await self.get_key(provider.name, kid=token.kid)
        if key is None:
            raise SigningKeyNotFoundError(provider.name, token.kid)

        return JwtProvider(provider.conf_url, provider.jwks_url, token, key)
