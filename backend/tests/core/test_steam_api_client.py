"""
Tests for the Steam Web API client.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from dropstats.core.steam_api.client import RESOLVE_VANITY_URL_PATH, SteamAPIClient
from dropstats.core.steam_api.errors import (
    AuthenticationError,
    InvalidResponseError,
    RateLimitError,
    ServiceUnavailableError,
    SteamAPIError,
)


def make_client(handler, **kwargs):
    return SteamAPIClient(
        api_key="test-key",
        base_url="https://steam.test",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.fixture
def no_backoff():
    with patch("dropstats.core.steam_api.client.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


class TestResolveVanityURL:
    """Test cases for ResolveVanityURL calls."""

    async def test_match(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200, json={"response": {"steamid": "76561198024494988", "success": 1}}
            )

        async with make_client(handler) as client:
            dto = await client.resolve_vanity_url("icewind")

        assert dto.response.is_match
        assert dto.response.steam_id == "76561198024494988"
        assert requests[0].url.path == RESOLVE_VANITY_URL_PATH
        assert requests[0].url.params["vanityurl"] == "icewind"
        assert requests[0].url.params["key"] == "test-key"

    async def test_no_match(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"response": {"success": 42, "message": "No match"}}
            )

        async with make_client(handler) as client:
            dto = await client.resolve_vanity_url("nobody")

        assert not dto.response.is_match
        assert dto.response.message == "No match"

    @pytest.mark.parametrize(
        "status,error_type",
        [(401, AuthenticationError), (403, AuthenticationError), (429, RateLimitError)],
    )
    async def test_client_errors_are_not_retried(self, status, error_type):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(status)

        async with make_client(handler) as client:
            with pytest.raises(error_type) as exc_info:
                await client.resolve_vanity_url("icewind")

        assert exc_info.value.status_code == status
        assert calls == 1

    async def test_server_errors_are_retried(self, no_backoff):
        statuses = iter([503, 502, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            status = next(statuses)
            if status != 200:
                return httpx.Response(status)
            return httpx.Response(
                200, json={"response": {"steamid": "76561198024494988", "success": 1}}
            )

        async with make_client(handler, max_retries=2) as client:
            dto = await client.resolve_vanity_url("icewind")

        assert dto.response.is_match
        assert no_backoff.await_count == 2

    async def test_exhausted_retries(self, no_backoff):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async with make_client(handler, max_retries=1) as client:
            with pytest.raises(ServiceUnavailableError):
                await client.resolve_vanity_url("icewind")

    async def test_transport_errors(self, no_backoff):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler, max_retries=1) as client:
            with pytest.raises(SteamAPIError) as exc_info:
                await client.resolve_vanity_url("icewind")

        assert "connection refused" in str(exc_info.value)

    async def test_unexpected_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        async with make_client(handler) as client:
            with pytest.raises(InvalidResponseError):
                await client.resolve_vanity_url("icewind")

    async def test_non_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        async with make_client(handler) as client:
            with pytest.raises(InvalidResponseError):
                await client.resolve_vanity_url("icewind")


class TestSession:
    """Test cases for session lifecycle."""

    async def test_session_reopened_after_close(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"response": {"success": 42}})

        client = make_client(handler)
        await client.start_session()
        await client.close()

        dto = await client.resolve_vanity_url("nobody")
        await client.close()

        assert dto.response.success == 42
        assert client.session.is_closed
