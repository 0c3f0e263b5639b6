"""Exceptions for the readwise_api package.

Every failure the client can report derives from ``ReadwiseError``. Outcomes
of an HTTP exchange are ``ApiError`` subclasses, each tagged with an
``ErrorKind`` so callers can branch on ``err.kind`` or on the class.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of API error kinds."""

    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TRANSPORT = "transport"
    DECODE = "decode"


class ReadwiseError(Exception):
    """Base class for all library errors."""

    pass


class ConfigurationError(ReadwiseError):
    """Error raised when the client cannot be configured (e.g. no token)."""

    pass


class FieldMapError(ReadwiseError, ValueError):
    """Error raised when a field map holds a value of an unsupported kind."""

    pass


class ApiError(ReadwiseError):
    """An HTTP exchange with Readwise did not produce the expected result.

    Attributes:
        kind: The error kind tag
        status_code: HTTP status code, if a response was received
        endpoint: The API path that was called
    """

    kind: ErrorKind

    def __init__(self, message: str, status_code: int | None = None, endpoint: str = ""):
        self.message = message
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)

    def __str__(self) -> str:
        where = f" at {self.endpoint}" if self.endpoint else ""
        status = f" (HTTP {self.status_code})" if self.status_code is not None else ""
        return f"{self.message}{status}{where}"


class UnauthorizedError(ApiError):
    """The token was rejected (HTTP 401/403)."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, status_code: int = 401, endpoint: str = ""):
        super().__init__("Readwise rejected the access token", status_code, endpoint)


class NotFoundError(ApiError):
    """The requested resource does not exist (HTTP 404)."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, endpoint: str = ""):
        super().__init__("Resource not found", 404, endpoint)


class BadRequestError(ApiError):
    """The server refused the request payload (HTTP 400/422).

    ``detail`` carries the server's message verbatim.
    """

    kind = ErrorKind.BAD_REQUEST

    def __init__(self, detail: str, status_code: int = 400, endpoint: str = ""):
        self.detail = detail
        super().__init__(f"Bad request: {detail}", status_code, endpoint)


class RateLimitedError(ApiError):
    """Rate limit exceeded (HTTP 429).

    Includes the ``retry_after`` hint in seconds if the server sent one.
    """

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, retry_after: int | None = None, endpoint: str = ""):
        self.retry_after = retry_after
        message = "Rate limit exceeded"
        if retry_after is not None:
            message += f" (retry after {retry_after}s)"
        super().__init__(message, 429, endpoint)


class ServerError(ApiError):
    """The server failed (HTTP 5xx) or answered with an unexpected status."""

    kind = ErrorKind.SERVER_ERROR

    def __init__(self, status_code: int, body: str = "", endpoint: str = ""):
        self.body = body
        super().__init__("Unexpected response from Readwise", status_code, endpoint)


class TransportError(ApiError):
    """No HTTP response was received (connection failure, timeout, ...)."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, cause: Exception, endpoint: str = ""):
        self.cause = cause
        super().__init__(f"Network error: {cause}", None, endpoint)


class RequestTimeoutError(TransportError):
    """The request did not complete within the configured timeout."""

    pass


class DecodeError(ApiError):
    """A response body could not be decoded into the expected shape."""

    kind = ErrorKind.DECODE

    def __init__(self, cause: Exception, status_code: int | None = None, endpoint: str = ""):
        self.cause = cause
        super().__init__(f"Could not decode response: {cause}", status_code, endpoint)
