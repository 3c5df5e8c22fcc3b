"""Tests for request retry helpers and user-facing messages."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from test_utils import make_response
from vod_client.exceptions import ManifestFetchError, ProbeNetworkError, ProbeTimeout
from vod_client.playback import (
    ErrorType,
    is_retryable_error,
    retry_with_backoff,
    user_friendly_message,
)


def status_error(status_code: int) -> httpx.HTTPStatusError:
    response = make_response("https://cdn.example.com/show/index.m3u8", status_code, text="")
    return httpx.HTTPStatusError("error", request=response.request, response=response)


class TestIsRetryableError:
    """Test retry classification."""

    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status):
        assert is_retryable_error(status_error(status))

    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    def test_client_errors_not_retryable(self, status):
        assert not is_retryable_error(status_error(status))

    def test_timeouts(self):
        assert is_retryable_error(asyncio.TimeoutError())
        assert is_retryable_error(httpx.ReadTimeout("slow"))
        assert is_retryable_error(ProbeTimeout())

    def test_transport_error(self):
        assert is_retryable_error(httpx.ConnectError("refused"))

    def test_vod_errors_with_status(self):
        assert is_retryable_error(ManifestFetchError("HTTP 503", status_code=503))
        assert not is_retryable_error(ManifestFetchError("HTTP 404", status_code=404))
        assert not is_retryable_error(ProbeNetworkError("HTTP 403", http_status=403))

    def test_vod_errors_without_status(self):
        assert is_retryable_error(ManifestFetchError("connection reset"))
        assert is_retryable_error(ProbeNetworkError("connection reset"))

    def test_timeout_in_message(self):
        assert is_retryable_error(RuntimeError("upstream Timeout while reading"))

    def test_other_errors(self):
        assert not is_retryable_error(None)
        assert not is_retryable_error(ValueError("bad input"))


class TestRetryWithBackoff:
    """Test the retry loop."""

    @pytest.mark.asyncio
    async def test_first_try_succeeds(self, clock):
        fn = AsyncMock(return_value="ok")

        assert await retry_with_backoff(fn, time_provider=clock) == "ok"
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_retries_with_doubling_delay(self, clock):
        fn = AsyncMock(
            side_effect=[httpx.ConnectError("a"), httpx.ConnectError("b"), "ok"]
        )

        result = await retry_with_backoff(fn, initial_delay=0.5, time_provider=clock)

        assert result == "ok"
        assert fn.await_count == 3
        assert clock.sleeps == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, clock):
        fn = AsyncMock(side_effect=httpx.ConnectError("down"))

        with pytest.raises(httpx.ConnectError):
            await retry_with_backoff(fn, max_retries=3, time_provider=clock)

        assert fn.await_count == 4
        assert clock.sleeps == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_non_retryable_raised_immediately(self, clock):
        fn = AsyncMock(side_effect=status_error(404))

        with pytest.raises(httpx.HTTPStatusError):
            await retry_with_backoff(
                fn, should_retry=is_retryable_error, time_provider=clock
            )

        assert fn.await_count == 1
        assert clock.sleeps == []


class TestUserFriendlyMessage:
    """Test viewer-facing messages."""

    def test_known_types(self):
        assert "internet connection" in user_friendly_message(ErrorType.NETWORK_ERROR)
        assert "timed out" in user_friendly_message("timeout")

    def test_unknown_type(self):
        expected = "An unexpected error occurred. Please try again."

        assert user_friendly_message(ErrorType.UNKNOWN) == expected
        assert user_friendly_message("something_else") == expected
