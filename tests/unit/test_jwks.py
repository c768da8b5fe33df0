"""
Unit tests for the OIDC provider registry and JWKS fetcher.
"""

import asyncio
from typing import Any

import httpx
import pytest
from tenacity import wait_none

from zkauth.errors import JwksFetchError, SigningKeyNotFoundError, UnknownProviderError
from zkauth.jwks import (
    PROVIDERS,
    JwksFetcher,
    get_provider,
    iss_from_provider_name,
    provider_name_from_iss,
)


GOOGLE_JWKS = "https://www.googleapis.com/oauth2/v3/certs"


def make_fetcher(handler) -> JwksFetcher:
    return JwksFetcher(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestProviderRegistry:
    """Tests for provider lookups."""

    def test_registered_providers(self) -> None:
        """Test every supported issuer is registered."""
        assert set(PROVIDERS) == {"google", "kakao", "apple", "line", "twitch"}

    def test_name_from_iss(self) -> None:
        """Test issuer to provider name."""
        assert provider_name_from_iss("https://accounts.google.com") == "google"
        assert provider_name_from_iss("https://id.twitch.tv/oauth2") == "twitch"
        assert provider_name_from_iss("https://example.com") is None

    def test_iss_from_name(self) -> None:
        """Test provider name to issuer, case-insensitive."""
        assert iss_from_provider_name("kakao") == "https://kauth.kakao.com"
        assert iss_from_provider_name("Apple") == "https://appleid.apple.com"
        assert iss_from_provider_name("unknown") is None

    def test_get_provider(self) -> None:
        """Test lookup by name or issuer."""
        assert get_provider("LINE").jwks_url == "https://api.line.me/oauth2/v2.1/certs"
        assert get_provider("https://accounts.google.com").name == "google"
        assert get_provider("google").conf_url == (
            "https://accounts.google.com/.well-known/openid-configuration"
        )

    def test_unknown_provider(self) -> None:
        """Test an unknown provider raises."""
        with pytest.raises(UnknownProviderError) as exc_info:
            get_provider("myspace")

        assert exc_info.value.name_or_iss == "myspace"


class TestJwksFetcher:
    """Tests for key retrieval."""

    @pytest.mark.asyncio
    async def test_get_key(self, jwks_document: dict[str, Any]) -> None:
        """Test keys are selected by index and by kid."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=jwks_document)

        async with make_fetcher(handler) as fetcher:
            first = await fetcher.get_key("google")
            second = await fetcher.get_key("google", kid="test-key-2")
            by_index = await fetcher.get_key("google", index=1)
            missing = await fetcher.get_key("google", kid="nope")
            out_of_range = await fetcher.get_key("google", index=5)

        assert seen[0] == GOOGLE_JWKS
        assert first is not None and first.kid == "test-key-1"
        assert second is not None and second.kid == "test-key-2"
        assert by_index == second
        assert missing is None
        assert out_of_range is None

    @pytest.mark.asyncio
    async def test_non_rsa_keys_skipped(self, jwks_document: dict[str, Any]) -> None:
        """Test only RSA keys are returned."""
        document = {"keys": [{"kid": "ec", "kty": "EC", "crv": "P-256"}, *jwks_document["keys"]]}

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=document)

        fetcher = make_fetcher(handler)
        keys = await fetcher.fetch_keys("google")

        assert [k.kid for k in keys] == ["test-key-1", "test-key-2"]

    @pytest.mark.asyncio
    async def test_concurrent_requests_coalesce(self, jwks_document: dict[str, Any]) -> None:
        """Test concurrent fetches of one URL share a single request."""
        calls = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return httpx.Response(200, json=jwks_document)

        fetcher = make_fetcher(handler)
        results = await asyncio.gather(*(fetcher.fetch(GOOGLE_JWKS) for _ in range(3)))

        assert calls == 1
        assert all(r == jwks_document for r in results)
        assert fetcher._in_flight == {}

    @pytest.mark.asyncio
    async def test_settled_requests_not_cached(self, jwks_document: dict[str, Any]) -> None:
        """Test a later fetch issues a new request."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, json=jwks_document)

        fetcher = make_fetcher(handler)
        await fetcher.fetch(GOOGLE_JWKS)
        await fetcher.fetch(GOOGLE_JWKS)

        assert calls == 2

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter(self) -> None:
        """Test a failed shared request fails all callers and is cleared."""
        calls = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return httpx.Response(500)

        fetcher = make_fetcher(handler)
        results = await asyncio.gather(
            *(fetcher.fetch(GOOGLE_JWKS) for _ in range(3)),
            return_exceptions=True,
        )

        assert calls == 1
        assert all(isinstance(r, JwksFetchError) for r in results)
        assert all(r.url == GOOGLE_JWKS for r in results)
        assert fetcher._in_flight == {}

    @pytest.mark.asyncio
    async def test_invalid_document(self) -> None:
        """Test a body without a keys list raises."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"issuer": "x"})

        with pytest.raises(JwksFetchError):
            await make_fetcher(handler).fetch(GOOGLE_JWKS)

    @pytest.mark.asyncio
    async def test_connect_errors_retried(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test connection failures are retried, then reported."""
        monkeypatch.setattr(JwksFetcher._request.retry, "wait", wait_none())
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(JwksFetchError):
            await make_fetcher(handler).fetch(GOOGLE_JWKS)

        assert calls == JwksFetcher._request.retry.stop.max_attempt_number

    @pytest.mark.asyncio
    async def test_jwt_provider(self, id_token: str, jwks_document: dict[str, Any]) -> None:
        """Test a token is paired with its issuer's key."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=jwks_document)

        provider = await make_fetcher(handler).jwt_provider(id_token)

        assert provider.jwk.kid == "test-key-1"
        assert provider.jwks_url == GOOGLE_JWKS
        assert provider.aud == "client-123"

    @pytest.mark.asyncio
    async def test_jwt_provider_unknown_kid(
        self, token_factory, jwks_document: dict[str, Any]
    ) -> None:
        """Test a token signed by an unpublished key raises."""
        token = token_factory(
            '{"iss":"https://accounts.google.com","sub":"1"}',
            header={"alg": "RS256", "kid": "rotated"},
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=jwks_document)

        with pytest.raises(SigningKeyNotFoundError) as exc_info:
            await make_fetcher(handler).jwt_provider(token)

        assert exc_info.value.provider == "google"
        assert exc_info.value.kid == "rotated"

    @pytest.mark.asyncio
    async def test_jwt_provider_unknown_issuer(self, token_factory) -> None:
        """Test a token from an unregistered issuer raises before any request."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(404)

        token = token_factory('{"iss":"https://id.example.com","sub":"1"}')

        with pytest.raises(UnknownProviderError):
            await make_fetcher(handler).jwt_provider(token)

        assert requests == []

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self, jwks_document: dict[str, Any]) -> None:
        """Test close() does not close a caller's client."""
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=jwks_document))
        )
        fetcher = JwksFetcher(client=client)

        await fetcher.close()

        assert not client.is_closed
        await client.aclose()
