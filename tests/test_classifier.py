"""Tests for mapping HTTP outcomes to API errors."""

import json
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import pytest
import requests

from readwise_api import (
    BadRequestError,
    Book,
    DecodeError,
    ErrorKind,
    NotFoundError,
    RateLimitedError,
    RequestTimeoutError,
    ServerError,
    TransportError,
    UnauthorizedError,
)
from readwise_api.classifier import (
    classify_exception,
    classify_response,
    decode_model,
    extract_detail,
    parse_retry_after,
)


def make_response(status, body=b"", headers=None):
    """Build a requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status
    response._content = body if isinstance(body, bytes) else json.dumps(body).encode()
    response.headers.update(headers or {})
    response.encoding = "utf-8"
    return response


@pytest.mark.parametrize(
    ("status", "error_class", "kind"),
    [
        (401, UnauthorizedError, ErrorKind.UNAUTHORIZED),
        (403, UnauthorizedError, ErrorKind.UNAUTHORIZED),
        (404, NotFoundError, ErrorKind.NOT_FOUND),
        (429, RateLimitedError, ErrorKind.RATE_LIMITED),
        (400, BadRequestError, ErrorKind.BAD_REQUEST),
        (422, BadRequestError, ErrorKind.BAD_REQUEST),
        (500, ServerError, ErrorKind.SERVER_ERROR),
        (503, ServerError, ErrorKind.SERVER_ERROR),
        (409, ServerError, ErrorKind.SERVER_ERROR),
        (302, ServerError, ErrorKind.SERVER_ERROR),
    ],
)
def test_classify_response_by_status(status, error_class, kind):
    """Each status maps to exactly one error kind, and the status is recorded."""
    error = classify_response(make_response(status, b"body"), "/books/")

    assert type(error) is error_class
    assert error.kind == kind
    assert error.status_code == status
    assert error.endpoint == "/books/"


def test_unexpected_status_keeps_body():
    error = classify_response(make_response(418, b"I'm a teapot"))

    assert isinstance(error, ServerError)
    assert error.status_code == 418
    assert error.body == "I'm a teapot"


def test_rate_limited_captures_retry_after():
    error = classify_response(make_response(429, headers={"Retry-After": "30"}))

    assert isinstance(error, RateLimitedError)
    assert error.retry_after == 30
    assert "retry after 30s" in str(error)


def test_rate_limited_without_header():
    error = classify_response(make_response(429))

    assert error.retry_after is None


def test_bad_request_detail_from_json():
    error = classify_response(make_response(400, {"detail": "text is required"}))

    assert error.detail == "text is required"


def test_bad_request_detail_raw_body():
    """Bodies without a detail key are surfaced verbatim."""
    error = classify_response(make_response(400, b"plain message"))

    assert error.detail == "plain message"


def test_extract_detail_json_without_detail_key():
    body = {"text": ["This field may not be blank."]}

    assert json.loads(extract_detail(make_response(400, body))) == body


class TestParseRetryAfter:
    """Tests for Retry-After header parsing."""

    def test_seconds(self):
        assert parse_retry_after("120") == 120

    def test_missing(self):
        assert parse_retry_after(None) is None

    def test_garbage(self):
        assert parse_retry_after("soon") is None

    def test_http_date(self):
        when = datetime.now(timezone.utc) + timedelta(seconds=90)
        seconds = parse_retry_after(format_datetime(when, usegmt=True))

        assert 80 <= seconds <= 90

    def test_http_date_in_past(self):
        when = datetime.now(timezone.utc) - timedelta(hours=1)

        assert parse_retry_after(format_datetime(when, usegmt=True)) == 0


def test_classify_timeout():
    error = classify_exception(requests.ConnectTimeout("slow"), "/auth/")

    assert isinstance(error, RequestTimeoutError)
    assert error.kind == ErrorKind.TRANSPORT


def test_classify_connection_error():
    cause = requests.ConnectionError("refused")
    error = classify_exception(cause)

    assert type(error) is TransportError
    assert error.cause is cause


def test_decode_model_success():
    book = decode_model(make_response(200, {"id": 3, "title": "Persuasion"}), Book)

    assert book.id == 3
    assert book.title == "Persuasion"


@pytest.mark.parametrize("body", [b"", b"<html></html>", b'{"title": "no id"}', b"[1, 2]"])
def test_decode_model_failure(body):
    """Unparseable or mismatched bodies raise DecodeError."""
    with pytest.raises(DecodeError) as exc_info:
        decode_model(make_response(200, body), Book, "/books/3/")

    assert exc_info.value.kind == ErrorKind.DECODE
    assert exc_info.value.status_code == 200
    assert exc_info.value.endpoint == "/books/3/"
