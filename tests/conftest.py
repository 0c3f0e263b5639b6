import pytest

from readwise_api import ReadwiseClient

API_URL = "https://readwise.io/api/v2"
AUTH_URL = f"{API_URL}/auth/"
BOOKS_URL = f"{API_URL}/books/"
HIGHLIGHTS_URL = f"{API_URL}/highlights/"


@pytest.fixture
def api_client():
    """Fixture providing a Readwise API client."""
    return ReadwiseClient("test_token_1234567890")


def make_highlight(highlight_id, text="Some highlighted text", **fields):
    """Build a highlight JSON record as Readwise returns it."""
    return {
        "id": highlight_id,
        "text": text,
        "note": "",
        "location": 42,
        "location_type": "location",
        "highlighted_at": "2025-04-15T22:16:21Z",
        "url": None,
        "color": "yellow",
        "updated": "2025-04-16T08:00:00Z",
        "book_id": 7,
        "tags": [],
        **fields,
    }


def make_book(book_id, title="Test Book", **fields):
    """Build a book JSON record as Readwise returns it."""
    return {
        "id": book_id,
        "title": title,
        "author": "Test Author",
        "category": "books",
        "source": "kindle",
        "num_highlights": 2,
        "last_highlight_at": "2025-04-15T22:16:21Z",
        "updated": "2025-04-16T08:00:00Z",
        "cover_image_url": "https://example.com/cover.jpg",
        "highlights_url": f"https://readwise.io/bookreview/{book_id}",
        "source_url": None,
        "asin": None,
        "tags": [],
        "document_note": "",
        **fields,
    }


def envelope(results, next_url=None, count=None):
    """Build a list-endpoint page envelope."""
    return {
        "count": len(results) if count is None else count,
        "next": next_url,
        "previous": None,
        "results": results,
    }
