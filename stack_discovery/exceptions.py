"""Exception hierarchy for the discovery subsystem.

Source errors are raised by the rate-limited client and isolated per source by
the aggregator. Engine-level errors reach the caller.
"""


class DiscoveryError(Exception):
    """Base class for every error raised by the discovery subsystem."""


class TransientSourceError(DiscoveryError):
    """A single external source could not serve a request."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


class SourceHTTPError(TransientSourceError):
    """Source answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str, source: str | None = None):
        super().__init__(message, source=source)
        self.status_code = status_code


class SourceRateLimitError(SourceHTTPError):
    """Source answered 429. Carries the Retry-After hint when one was sent."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        source: str | None = None,
    ):
        super().__init__(429, message, source=source)
        self.retry_after = retry_after


class SourceTimeoutError(TransientSourceError):
    """Request exceeded the client timeout."""


class SourceConnectionError(TransientSourceError):
    """Transport-level failure (DNS, refused connection, reset)."""


class AllSourcesFailedError(DiscoveryError):
    """Every source queried for a call failed."""

    def __init__(self, operation: str, errors: dict[str, str]):
        details = ", ".join(f"{source}: {error}" for source, error in errors.items())
        super().__init__(f"All sources failed during {operation} ({details})")
        self.operation = operation
        self.errors = errors


class ConfigurationError(DiscoveryError, ValueError):
    """Invalid discovery configuration."""


class EngineInputError(DiscoveryError, ValueError):
    """A raw tool record could not be interpreted."""
