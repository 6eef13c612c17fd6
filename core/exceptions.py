"""Custom exception hierarchy for the prefetch relay."""


class ProxyError(Exception):
    """Base exception for all relay errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class UpstreamError(ProxyError):
    """Raised when a request to the origin fails.

    Attributes:
        message: Error message
        status_code: HTTP status code from upstream (optional)
        provider: Upstream name (e.g., 'origin')
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        provider: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.provider = provider


class UpstreamTimeoutError(UpstreamError):
    """Raised when an origin request times out."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
    ) -> None:
        super().__init__(message, status_code=None, provider=provider)


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to reach the origin."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
    ) -> None:
        super().__init__(message, status_code=None, provider=provider)


class HintParseError(ProxyError):
    """A prefetch hint did not resolve to a well-formed URL.

    Attributes:
        hint: Trimmed hint as sent by the origin
        candidate: URL string built from the hint
    """

    def __init__(self, hint: str, candidate: str) -> None:
        super().__init__(f"Prefetch path parse error: {candidate} (from: {hint})")
        self.hint = hint
        self.candidate = candidate
