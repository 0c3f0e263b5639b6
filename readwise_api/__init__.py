"""Client library for the Readwise v2 books and highlights API."""

import logging

from .auth import authenticate
from .client import ReadwiseClient
from .exceptions import (
    ApiError,
    BadRequestError,
    ConfigurationError,
    DecodeError,
    ErrorKind,
    FieldMapError,
    NotFoundError,
    RateLimitedError,
    ReadwiseError,
    RequestTimeoutError,
    ServerError,
    TransportError,
    UnauthorizedError,
)
from .models import Book, FieldMap, Highlight, HighlightEdit, NewHighlight, Page
from .pagination import PageCursor, PagedSequence, get_page, paginate

# Library default: stay silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "BadRequestError",
    "Book",
    "ConfigurationError",
    "DecodeError",
    "ErrorKind",
    "FieldMap",
    "FieldMapError",
    "Highlight",
    "HighlightEdit",
    "NewHighlight",
    "NotFoundError",
    "Page",
    "PageCursor",
    "PagedSequence",
    "RateLimitedError",
    "ReadwiseClient",
    "ReadwiseError",
    "RequestTimeoutError",
    "ServerError",
    "TransportError",
    "UnauthorizedError",
    "authenticate",
    "get_page",
    "paginate",
]
