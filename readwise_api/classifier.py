"""Map HTTP outcomes onto the ``ApiError`` taxonomy."""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import TypeVar

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import (
    ApiError,
    BadRequestError,
    DecodeError,
    NotFoundError,
    RateLimitedError,
    RequestTimeoutError,
    ServerError,
    TransportError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE = 422
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500

MAX_LOGGED_BODY = 500


def classify_exception(exc: Exception, endpoint: str = "") -> TransportError:
    """Wrap a ``requests`` failure that produced no HTTP response."""
    if isinstance(exc, requests.Timeout):
        return RequestTimeoutError(exc, endpoint=endpoint)
    return TransportError(exc, endpoint=endpoint)


def classify_response(response: requests.Response, endpoint: str = "") -> ApiError:
    """Turn a non-2xx response into the matching ``ApiError``.

    Args:
        response: The response to classify
        endpoint: API path used in error messages

    Returns:
        The error instance; the caller raises it
    """
    status = response.status_code
    logger.debug("Classifying HTTP %d from %s: %s", status, endpoint, response.text[:MAX_LOGGED_BODY])

    if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
        return UnauthorizedError(status, endpoint=endpoint)
    if status == HTTP_NOT_FOUND:
        return NotFoundError(endpoint=endpoint)
    if status == HTTP_TOO_MANY_REQUESTS:
        return RateLimitedError(parse_retry_after(response.headers.get("Retry-After")), endpoint=endpoint)
    if status in (HTTP_BAD_REQUEST, HTTP_UNPROCESSABLE):
        return BadRequestError(extract_detail(response), status, endpoint=endpoint)
    # 5xx and anything else we did not expect (1xx, unfollowed 3xx, other 4xx)
    return ServerError(status, response.text, endpoint=endpoint)


def parse_retry_after(value: str | None) -> int | None:
    """Parse a Retry-After header given either as seconds or as an HTTP date."""
    if value is None:
        return None
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparseable Retry-After header: %r", value)
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0, int((when - datetime.now(timezone.utc)).total_seconds()))


def extract_detail(response: requests.Response) -> str:
    """Return the server's error message: the JSON ``detail`` if present, else the raw body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and "detail" in payload:
        return str(payload["detail"])
    return response.text


def decode_model(response: requests.Response, model: type[ModelT], endpoint: str = "") -> ModelT:
    """Validate a successful response body against ``model``.

    Raises:
        DecodeError: If the body is not JSON or does not match the model
    """
    try:
        return model.model_validate_json(response.content)
    except PydanticValidationError as e:
        logger.error(
            "Could not decode %s from %s. Response: %s", model.__name__, endpoint, response.text[:MAX_LOGGED_BODY]
        )
        raise DecodeError(e, response.status_code, endpoint=endpoint) from e
