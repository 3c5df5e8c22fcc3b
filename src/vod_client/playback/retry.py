"""Retry helpers and user-facing error messages for playback requests."""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, TypeVar

import httpx

from ..exceptions import ManifestFetchError, ProbeNetworkError, ProbeTimeout
from ..log_config import get_context_logger
from ..time_provider import RealtimeTimeProvider, TimeProvider
from .recovery import backoff_delay


T = TypeVar("T")

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})

logger = get_context_logger("playback_retry")


class ErrorType(str, Enum):
    """User-facing error categories."""

    NETWORK_ERROR = "network_error"
    MEDIA_ERROR = "media_error"
    HLS_ERROR = "hls_error"
    API_ERROR = "api_error"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


_USER_MESSAGES = {
    ErrorType.NETWORK_ERROR: "Network connection error. Please check your internet connection and try again.",
    ErrorType.MEDIA_ERROR: "Unable to play this video. The media format may not be supported.",
    ErrorType.HLS_ERROR: "Video streaming error. Trying to recover...",
    ErrorType.API_ERROR: "Failed to load video information. Please try again later.",
    ErrorType.TIMEOUT: "Request timed out. The server may be slow or unreachable.",
}
_DEFAULT_MESSAGE = "An unexpected error occurred. Please try again."


def user_friendly_message(error_type: ErrorType | str) -> str:
    """
    Message shown to the viewer for an error category.

    Unknown categories get a generic message.
    """
    try:
        error_type = ErrorType(error_type)
    except ValueError:
        return _DEFAULT_MESSAGE
    return _USER_MESSAGES.get(error_type, _DEFAULT_MESSAGE)


def _status_of(error: BaseException) -> int | None:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    if isinstance(error, ManifestFetchError):
        return error.status_code
    if isinstance(error, ProbeNetworkError):
        return error.http_status
    return None


def is_retryable_error(error: BaseException | None) -> bool:
    """
    Check whether a failed request is worth retrying.

    Timeouts and transport failures are retryable, as are the HTTP statuses
    408, 429, 500, 502, 503 and 504. Any other error is not.
    """
    if error is None:
        return False
    if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException, ProbeTimeout)):
        return True

    status = _status_of(error)
    if status is not None:
        return status in RETRYABLE_STATUSES

    if isinstance(error, (httpx.TransportError, ProbeNetworkError, ManifestFetchError)):
        return True
    return "timeout" in str(error).lower()


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    should_retry: Callable[[BaseException], bool] | None = None,
    time_provider: TimeProvider | None = None,
) -> T:
    """
    Call ``fn`` until it succeeds, waiting initial_delay × 2^attempt between tries.

    Args:
        fn: Coroutine factory
        max_retries: Retries after the first attempt
        initial_delay: First delay in seconds
        should_retry: Predicate deciding whether an error is retried (all errors if None)
        time_provider: Clock used for the delays

    Returns:
        The first successful result

    Raises:
        Exception: The last error once retries are exhausted, or the first
        error that should_retry rejects
    """
    time_provider = time_provider or RealtimeTimeProvider()

    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as e:
            if attempt >= max_retries or (should_retry and not should_retry(e)):
                raise
            delay = backoff_delay(attempt, initial_delay)
            logger.debug(
                "Retrying after error",
                attempt=attempt + 1,
                max_retries=max_retries,
                delay=delay,
                error=str(e),
                error_type=type(e).__name__,
            )
            await time_provider.sleep(delay)
            attempt += 1


__all__ = [
    "ErrorType",
    "RETRYABLE_STATUSES",
    "user_friendly_message",
    "is_retryable_error",
    "retry_with_backoff",
]
