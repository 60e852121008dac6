"""Custom exception hierarchy for the Florist One proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors.

    Attributes:
        status_code: HTTP status returned to the client
        error: Value of the ``error`` field in the JSON response body
    """

    status_code = 500
    error = "Proxy error"

    def payload(self) -> dict[str, str]:
        return {"error": self.error}


class InvalidSelectorError(ProxyError):
    """Raised when the `api` query parameter names no configured upstream."""

    status_code = 400
    error = "Invalid API selector"

    def __init__(self, selector: str) -> None:
        super().__init__(f"Unknown API selector: {selector!r}")
        self.selector = selector


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class MissingCredentialsError(ConfigurationError):
    """Raised when the upstream key or password is not configured."""

    error = "Server missing F1 credentials"


class UpstreamError(ProxyError):
    """Raised when the upstream cannot be reached or resolved.

    Attributes:
        message: Error detail reported to the client
        api: Upstream selector the request was routed to
    """

    status_code = 502
    error = "Upstream fetch failed"

    def __init__(self, message: str, api: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.api = api

    def payload(self) -> dict[str, str]:
        return {"error": self.error, "detail": self.message}


class UpstreamTimeoutError(UpstreamError):
    """Raised when an upstream hop times out."""


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to the upstream."""


class TooManyRedirectsError(UpstreamError):
    """Raised when the redirect hop limit is exhausted."""

    def __init__(self, max_redirects: int, api: str | None = None) -> None:
        super().__init__(f"too many redirects (limit {max_redirects})", api=api)
        self.max_redirects = max_redirects
