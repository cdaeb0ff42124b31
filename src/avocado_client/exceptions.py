"""
Client Exceptions

Every error the client raises derives from AvocadoError.
"""


class AvocadoError(Exception):
    """Base exception for all client errors."""


class ConfigurationError(AvocadoError):
    """Raised when required client settings are missing."""


class AuthenticationFailed(AvocadoError):
    """Raised when the API rejects the login credentials."""


class RateLimitExceeded(AvocadoError):
    """Raised before dispatch when the local request quota is used up."""

    def __init__(self, count: int, max_requests: int):
        self.count = count
        self.max_requests = max_requests
        super().__init__(f"Request count {count} has reached the limit of {max_requests}")


class HttpFailure(AvocadoError):
    """Raised for non-success HTTP responses."""

    def __init__(self, status_code: int, url: str = "", message: str | None = None):
        self.status_code = status_code
        self.url = url
        if message is None:
            message = f"HTTP {status_code} from {url}" if url else f"HTTP {status_code}"
        super().__init__(message)


class NotFound(HttpFailure):
    """Raised for a 404 on endpoints that look up a specific entity."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(404, url=url, message=message)


class InvalidResponse(AvocadoError):
    """Raised when a response body does not match the expected shape."""


class TransportFailure(AvocadoError):
    """Raised when the HTTP exchange did not complete (connection error, timeout)."""
