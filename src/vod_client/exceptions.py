"""VOD client custom exception hierarchy.

Provides specific exception types for manifest processing, origin probing,
live stream faults and configuration. Only manifest structural failures and
terminal stream faults are meant to reach callers; probe errors are encoded
into probe results by the race layer.

Exception Hierarchy:
    VodException (base)
    ├── ParseError
    │   └── ManifestParseError
    ├── ManifestFetchError
    ├── ProbeError
    │   ├── ProbeTimeout
    │   ├── ProbeNetworkError
    │   ├── ProbeNotFound
    │   └── ProbeInvalidContent
    ├── StreamFault
    │   └── StreamFatalError
    └── VodConfigError
"""

from typing import Optional


class VodException(Exception):
    """Base exception for all VOD client errors.

    All VOD-specific exceptions inherit from this class to allow
    catching all client errors with a single except clause.
    """

    def __init__(self, message: str, context: Optional[dict] = None):
        """Initialize VOD exception.

        Args:
            message: Error message
            context: Optional context dictionary for debugging
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation with context."""
        if self.context:
            context_str = "; ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# Manifest Errors

class ParseError(VodException):
    """Base exception for parsing errors."""

    pass


class ManifestParseError(ParseError):
    """Raised when a playlist is structurally broken.

    The only structural failure is a duration directive that is never
    followed by a URI line before end of input.

    Attributes:
        line_number: 1-based line number of the dangling directive
        directive: The directive text
    """

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        directive: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if line_number is not None:
            context["line"] = line_number
        if directive:
            context["directive"] = directive[:100]
        super().__init__(message, context)
        self.line_number = line_number
        self.directive = directive


class ManifestFetchError(VodException):
    """Raised when a playlist cannot be downloaded.

    Attributes:
        url: Playlist URL
        status_code: HTTP status code if a response was received
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if url:
            context["url"] = url[:100]
        if status_code:
            context["status_code"] = status_code
        super().__init__(message, context)
        self.url = url
        self.status_code = status_code


# Probe Errors

class ProbeError(VodException):
    """Base exception for per-origin probe failures.

    Probe errors are non-fatal: the race layer converts them into
    unavailable probe results so one bad origin never aborts a race.

    Attributes:
        origin_id: Identifier of the origin being probed
    """

    kind = "error"

    def __init__(
        self,
        message: str,
        origin_id: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if origin_id:
            context["origin_id"] = origin_id
        super().__init__(message, context)
        self.origin_id = origin_id


class ProbeTimeout(ProbeError):
    """Raised when a probe step exceeds its deadline.

    Attributes:
        timeout: The deadline in seconds that was exceeded
    """

    kind = "timeout"

    def __init__(
        self,
        message: str = "timeout",
        origin_id: Optional[str] = None,
        timeout: Optional[float] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if timeout:
            context["timeout"] = timeout
        super().__init__(message, origin_id, context)
        self.timeout = timeout


class ProbeNetworkError(ProbeError):
    """Raised when an origin cannot be reached or answers with an HTTP error.

    Attributes:
        http_status: HTTP status code if available
        network_error: The underlying transport exception
    """

    kind = "network"

    def __init__(
        self,
        message: str,
        origin_id: Optional[str] = None,
        http_status: Optional[int] = None,
        network_error: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if http_status:
            context["http_status"] = http_status
        super().__init__(message, origin_id, context)
        self.http_status = http_status
        self.network_error = network_error


class ProbeNotFound(ProbeError):
    """Raised when the origin has no match for the title or no episodes."""

    kind = "not_found"


class ProbeInvalidContent(ProbeError):
    """Raised when an origin answers with an unusable payload.

    Attributes:
        payload_preview: First 200 characters of the offending payload
    """

    kind = "invalid_content"

    def __init__(
        self,
        message: str,
        origin_id: Optional[str] = None,
        payload_preview: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if payload_preview:
            context["payload_preview"] = payload_preview[:200]
        super().__init__(message, origin_id, context)
        self.payload_preview = payload_preview


# Stream Errors

class StreamFault(VodException):
    """A fault reported by the live playback pipeline.

    Attributes:
        fault_class: "network", "media" or "fatal"
        detail: Player-specific detail (e.g. "bufferStalledError")
    """

    def __init__(
        self,
        message: str,
        fault_class: Optional[str] = None,
        detail: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if fault_class:
            context["fault_class"] = fault_class
        if detail:
            context["detail"] = detail
        super().__init__(message, context)
        self.fault_class = fault_class
        self.detail = detail


class StreamFatalError(StreamFault):
    """Raised when a playback session reaches its terminal state.

    Attributes:
        suggest_switch: Whether the caller should try another origin
    """

    def __init__(
        self,
        message: str,
        fault_class: Optional[str] = None,
        detail: Optional[str] = None,
        suggest_switch: bool = True,
        context: Optional[dict] = None,
    ):
        super().__init__(message, fault_class, detail, context)
        self.suggest_switch = suggest_switch


# Configuration Errors

class VodConfigError(VodException):
    """Raised when configuration is invalid or missing.

    Attributes:
        config_key: Configuration key that failed validation
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if config_key:
            context["config_key"] = config_key
        super().__init__(message, context)
        self.config_key = config_key


__all__ = [
    "VodException",
    "ParseError",
    "ManifestParseError",
    "ManifestFetchError",
    "ProbeError",
    "ProbeTimeout",
    "ProbeNetworkError",
    "ProbeNotFound",
    "ProbeInvalidContent",
    "StreamFault",
    "StreamFatalError",
    "VodConfigError",
]
