"""Lazy, page-by-page iteration over Readwise list endpoints.

A ``PagedSequence`` is an iterable that describes *what* to fetch; each call
to ``iter()`` returns a fresh ``PageCursor`` that fetches pages on demand,
starting over from the first page. Nothing is cached between iterations.
"""

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel

from .classifier import decode_model
from .models import Page

if TYPE_CHECKING:
    from .client import ReadwiseClient

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def get_page(
    client: "ReadwiseClient",
    endpoint: str,
    item_model: type[T],
    page_number: int,
    params: dict[str, Any] | None = None,
) -> Page[T]:
    """Fetch and decode a single page of a list endpoint.

    Args:
        client: Client used to issue the request
        endpoint: List endpoint path, e.g. ``/highlights/``
        item_model: Model each entry of ``results`` is decoded into
        page_number: 1-based page number
        params: Extra query parameters (filters, page size)

    Returns:
        The decoded page envelope

    Raises:
        ApiError: If the request fails or the body cannot be decoded
    """
    query = {**(params or {}), "page": page_number}
    response = client.get(endpoint, params=query)
    page = decode_model(response, Page[item_model], endpoint)
    page.page_number = page_number
    logger.debug(
        "Fetched page %d of %s: %d results, has_next=%s", page_number, endpoint, len(page.results), page.has_next
    )
    return page


class PageCursor(Generic[T]):
    """Walks the items of a list endpoint, one page in memory at a time."""

    def __init__(
        self,
        client: "ReadwiseClient",
        endpoint: str,
        item_model: type[T],
        start_page: int = 1,
        params: dict[str, Any] | None = None,
    ):
        self.client = client
        self.endpoint = endpoint
        self.item_model = item_model
        self.params = params
        self._next_page: int | None = start_page
        self._buffer: list[T] = []
        self._position = 0
        self.pages_fetched = 0

    @property
    def exhausted(self) -> bool:
        return self._next_page is None and self._position >= len(self._buffer)

    def next_item(self) -> T | None:
        """Return the next item, fetching the next page if needed, or None at the end."""
        while self._position >= len(self._buffer):
            if self._next_page is None:
                return None
            page_number = self._next_page
            # Stop here if the fetch fails: already yielded items stay valid
            self._next_page = None
            page = get_page(self.client, self.endpoint, self.item_model, page_number, self.params)
            self.pages_fetched += 1
            self._buffer = page.results
            self._position = 0
            if not page.results:
                logger.debug("Empty page %d of %s, stopping.", page_number, self.endpoint)
                return None
            self._next_page = page.next_page

        item = self._buffer[self._position]
        self._position += 1
        return item

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        item = self.next_item()
        if item is None:
            raise StopIteration
        return item


class PagedSequence(Generic[T]):
    """Restartable lazy sequence over every item of a list endpoint."""

    def __init__(
        self,
        client: "ReadwiseClient",
        endpoint: str,
        item_model: type[T],
        start_page: int = 1,
        params: dict[str, Any] | None = None,
    ):
        self.client = client
        self.endpoint = endpoint
        self.item_model = item_model
        self.start_page = start_page
        self.params = dict(params or {})

    def __repr__(self) -> str:
        return f"PagedSequence({self.endpoint!r}, {self.item_model.__name__}, start_page={self.start_page})"

    def __iter__(self) -> PageCursor[T]:
        return PageCursor(self.client, self.endpoint, self.item_model, self.start_page, self.params)

    def first_page(self) -> Page[T]:
        return get_page(self.client, self.endpoint, self.item_model, self.start_page, self.params)


def paginate(
    client: "ReadwiseClient",
    endpoint: str,
    item_model: type[T],
    start_page: int = 1,
    params: dict[str, Any] | None = None,
) -> PagedSequence[T]:
    """Build a lazy sequence over a list endpoint starting at ``start_page``.

    No request is made until the sequence is iterated.
    """
    return PagedSequence(client, endpoint, item_model, start_page, params)
