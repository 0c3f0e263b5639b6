import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

import requests

from .classifier import HTTP_SERVER_ERROR, MAX_LOGGED_BODY, classify_response, decode_model
from .exceptions import ApiError, DecodeError, RateLimitedError, ServerError, TransportError
from .models import Book, Highlight, HighlightCreateResponse, HighlightEdit, NewHighlight, Page
from .pagination import PagedSequence, get_page, paginate
from .transport import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, Transport

# Initialize logger for this module
logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (RateLimitedError, ServerError, TransportError)

# Successful statuses are 2xx only
HTTP_OK_MIN = 200
HTTP_OK_MAX = 300


class ReadwiseClient:
    """Client for the Readwise v2 books and highlights API."""

    AUTH_ENDPOINT = "/auth/"
    BOOKS_ENDPOINT = "/books/"
    HIGHLIGHTS_ENDPOINT = "/highlights/"

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_read_retries: int = 0,
        retry_backoff: float = 1.0,
        session: requests.Session | None = None,
    ):
        """Initialize the Readwise API client.

        Use ``readwise_api.authenticate`` to get a client whose token has
        already been checked.

        Args:
            api_token: Readwise API token
            base_url: API root
            timeout: Per-request timeout in seconds
            max_read_retries: How many times a failed GET may be retried (0 disables retries)
            retry_backoff: Base delay in seconds for exponential backoff between retries
            session: Optional ``requests.Session`` to send requests with
        """
        logger.debug("Initializing ReadwiseClient.")
        self.transport = Transport(api_token, base_url=base_url, timeout=timeout, session=session)
        self.max_read_retries = max_read_retries
        self.retry_backoff = retry_backoff

    def __repr__(self) -> str:
        return f"ReadwiseClient({self.transport!r})"

    # -- request helpers -------------------------------------------------

    def _request(self, method: str, path: str, params: dict | None = None, json: Any = None) -> requests.Response:
        """Send one request and raise the classified error for any non-2xx status."""
        response = self.transport.send(method, path, params=params, json=json)
        if HTTP_OK_MIN <= response.status_code < HTTP_OK_MAX:
            return response
        error = classify_response(response, path)
        logger.warning("%s %s failed: %s. Response: %s", method, path, error, response.text[:MAX_LOGGED_BODY])
        raise error

    def get(self, path: str, params: dict | None = None) -> requests.Response:
        """GET ``path``, retrying transient failures up to ``max_read_retries`` times.

        Raises:
            ApiError: The classified error of the last attempt
        """
        attempt = 0
        while True:
            try:
                return self._request("GET", path, params=params)
            except RETRYABLE_ERRORS as e:
                if attempt >= self.max_read_retries or not _is_transient(e):
                    raise
                delay = self._retry_delay(e, attempt)
                attempt += 1
                logger.info(
                    "Retrying GET %s in %.2f seconds (attempt %d of %d): %s",
                    path,
                    delay,
                    attempt,
                    self.max_read_retries,
                    e,
                )
                time.sleep(delay)

    def _retry_delay(self, error: ApiError, attempt: int) -> float:
        if isinstance(error, RateLimitedError) and error.retry_after is not None:
            return float(error.retry_after)
        return self.retry_backoff * (2**attempt)

    # -- authentication --------------------------------------------------

    def verify_token(self) -> None:
        """Check the token against the auth endpoint.

        Raises:
            UnauthorizedError: If Readwise rejects the token
            ApiError: For any other failure
        """
        logger.info("Validating Readwise API token...")
        response = self._request("GET", self.AUTH_ENDPOINT)
        logger.info("Readwise API token is valid (HTTP %d).", response.status_code)

    # -- books -------------------------------------------------------------

    def list_books(
        self, page: int = 1, page_size: int | None = None, category: str | None = None
    ) -> PagedSequence[Book]:
        """Lazily iterate over all books, starting at ``page``.

        Args:
            page: First page to fetch
            page_size: Optional number of books per page
            category: Optional category filter (books, articles, tweets, ...)
        """
        return paginate(self, self.BOOKS_ENDPOINT, Book, page, _filters(page_size=page_size, category=category))

    def books_page(self, page: int = 1, page_size: int | None = None, category: str | None = None) -> Page[Book]:
        """Fetch a single page of books."""
        return get_page(self, self.BOOKS_ENDPOINT, Book, page, _filters(page_size=page_size, category=category))

    def get_book(self, book_id: int) -> Book:
        """Fetch a single book by id."""
        path = f"{self.BOOKS_ENDPOINT}{book_id}/"
        return decode_model(self.get(path), Book, path)

    # -- highlights --------------------------------------------------------

    def list_highlights(
        self, page: int = 1, page_size: int | None = None, book_id: int | None = None
    ) -> PagedSequence[Highlight]:
        """Lazily iterate over all highlights, starting at ``page``.

        Args:
            page: First page to fetch
            page_size: Optional number of highlights per page
            book_id: Only list highlights of this book
        """
        return paginate(
            self, self.HIGHLIGHTS_ENDPOINT, Highlight, page, _filters(page_size=page_size, book_id=book_id)
        )

    def highlights_page(
        self, page: int = 1, page_size: int | None = None, book_id: int | None = None
    ) -> Page[Highlight]:
        """Fetch a single page of highlights."""
        return get_page(
            self, self.HIGHLIGHTS_ENDPOINT, Highlight, page, _filters(page_size=page_size, book_id=book_id)
        )

    def get_highlight(self, highlight_id: int) -> Highlight:
        """Fetch a single highlight by id."""
        path = f"{self.HIGHLIGHTS_ENDPOINT}{highlight_id}/"
        return decode_model(self.get(path), Highlight, path)

    def create_highlights(self, new_highlights: Iterable[NewHighlight | Mapping[str, Any]]) -> list[Highlight]:
        """Create highlights in one batched request and return them.

        The batch succeeds or fails as a whole: either every created highlight
        is returned, or an error is raised and nothing is returned.

        Args:
            new_highlights: Field maps of the highlights to create (``text`` is required by Readwise)

        Returns:
            The created highlights, in the order they were submitted

        Raises:
            FieldMapError: If a field map holds an unsupported value
            ApiError: If the request or any follow-up fetch fails
            DecodeError: If the created highlights do not match the submission one to one
        """
        payload = [NewHighlight.coerce(fields).to_dict() for fields in new_highlights]
        if not payload:
            logger.info("No highlights provided to create.")
            return []

        logger.info("Creating %d highlights.", len(payload))
        # Avoid logging the full batch content
        logger.debug("Sending batch data: %s", str(payload)[:MAX_LOGGED_BODY])
        response = self._request("POST", self.HIGHLIGHTS_ENDPOINT, json={"highlights": payload})
        created = decode_model(response, HighlightCreateResponse, self.HIGHLIGHTS_ENDPOINT)

        highlight_ids = created.highlight_ids()
        logger.debug("Readwise reported modified highlight ids: %s", highlight_ids)
        if len(highlight_ids) != len(payload):
            raise DecodeError(
                ValueError(f"submitted {len(payload)} highlights but Readwise reported {len(highlight_ids)}"),
                response.status_code,
                endpoint=self.HIGHLIGHTS_ENDPOINT,
            )

        fetched = [
            (book.title, self.get_highlight(highlight_id))
            for book in created.root
            for highlight_id in book.modified_highlights
        ]
        highlights = _in_submitted_order(payload, fetched, self.HIGHLIGHTS_ENDPOINT)
        logger.info("Created %d highlights.", len(highlights))
        return highlights

    def update_highlight(self, highlight_id: int, edits: HighlightEdit | Mapping[str, Any]) -> Highlight:
        """Change some fields of a highlight and return the updated record.

        Fields absent from ``edits`` are left unchanged by the server.
        """
        body = HighlightEdit.coerce(edits).to_dict()
        path = f"{self.HIGHLIGHTS_ENDPOINT}{highlight_id}/"
        logger.info("Updating highlight %d (fields: %s).", highlight_id, ", ".join(sorted(body)))
        response = self._request("PATCH", path, json=body)
        return decode_model(response, Highlight, path)

    def delete_highlight(self, highlight_id: int) -> None:
        """Delete a highlight.

        Raises:
            NotFoundError: If no highlight has this id
        """
        path = f"{self.HIGHLIGHTS_ENDPOINT}{highlight_id}/"
        logger.info("Deleting highlight %d.", highlight_id)
        self._request("DELETE", path)


def _filters(**filters: Any) -> dict[str, Any]:
    """Drop unset query parameters."""
    return {key: value for key, value in filters.items() if value is not None}


def _is_transient(error: ApiError) -> bool:
    # Unexpected non-5xx statuses will not change on retry
    if isinstance(error, ServerError):
        return error.status_code >= HTTP_SERVER_ERROR
    return True


def _in_submitted_order(
    payload: list[dict[str, Any]], fetched: list[tuple[str | None, Highlight]], endpoint: str
) -> list[Highlight]:
    """Pair each submitted field map with a created highlight, keeping submission order.

    Readwise groups created highlights by book, so they are matched back on
    ``text`` and, when given, the book ``title``. Each highlight is used once.
    """
    remaining = list(fetched)
    ordered = []
    for index, fields in enumerate(payload):
        for position, (book_title, highlight) in enumerate(remaining):
            if highlight.text != fields.get("text"):
                continue
            if "title" in fields and book_title != fields["title"]:
                continue
            ordered.append(highlight)
            del remaining[position]
            break
        else:
            raise DecodeError(
                ValueError(f"no created highlight matches submitted highlight #{index + 1}"), endpoint=endpoint
            )
    return ordered
