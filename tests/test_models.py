"""Tests for the Readwise data models."""

from datetime import datetime, timezone
from types import MappingProxyType

import pydantic
import pytest
from conftest import make_book, make_highlight

from readwise_api import Book, FieldMap, FieldMapError, Highlight, HighlightEdit, NewHighlight, Page
from readwise_api.models import HighlightCreateResponse


def test_highlight_minimal_record():
    """Only id and text are required."""
    highlight = Highlight.model_validate({"id": 1, "text": "a"})

    assert highlight.id == 1
    assert highlight.text == "a"
    assert highlight.book_id is None
    assert highlight.tags == []


def test_highlight_full_record():
    highlight = Highlight.model_validate(make_highlight(5, "text", book_id=9))

    assert highlight.book_id == 9
    assert highlight.location == 42
    assert highlight.highlighted_at == datetime(2025, 4, 15, 22, 16, 21, tzinfo=timezone.utc)


def test_highlight_is_immutable():
    highlight = Highlight.model_validate({"id": 1, "text": "a"})

    with pytest.raises(pydantic.ValidationError):
        highlight.text = "b"


def test_unknown_fields_are_kept():
    """Fields added by the server later are preserved."""
    book = Book.model_validate(make_book(1, readable_title="Test Book"))

    assert book.model_extra == {"readable_title": "Test Book"}


def test_book_nullable_title_and_count():
    """Null title or highlight count from the server still decodes."""
    book = Book.model_validate(make_book(1, title=None, num_highlights=None))

    assert book.title is None
    assert book.num_highlights is None


def test_negative_ids_rejected():
    with pytest.raises(pydantic.ValidationError):
        Highlight.model_validate({"id": -1, "text": "a"})


def test_page_navigation():
    page = Page[Highlight].model_validate({"next": "https://readwise.io/api/v2/highlights/?page=3", "results": []})
    page.page_number = 2

    assert page.has_next is True
    assert page.next_page == 3


def test_last_page_navigation():
    page = Page[Book].model_validate({"next": None, "results": [make_book(1)]})

    assert page.has_next is False
    assert page.next_page is None
    assert isinstance(page.results[0], Book)


def test_create_response_highlight_ids():
    response = HighlightCreateResponse.model_validate(
        [{"id": 1, "modified_highlights": [10, 11]}, {"id": 2, "modified_highlights": [12]}]
    )

    assert response.highlight_ids() == [10, 11, 12]


class TestFieldMap:
    """Tests for create/update payloads."""

    def test_accepts_scalar_values(self):
        fields = FieldMap.coerce({"text": "a", "location": 3, "score": 1.5, "note": None})

        assert fields.to_dict() == {"text": "a", "location": 3, "score": 1.5, "note": None}

    def test_does_not_check_field_names(self):
        assert NewHighlight.coerce({"made_up_field": "x"}).to_dict() == {"made_up_field": "x"}

    @pytest.mark.parametrize("value", [True, ["a"], {"a": 1}])
    def test_rejects_other_values(self, value):
        with pytest.raises(FieldMapError):
            HighlightEdit.coerce({"text": value})

    def test_field_map_error_is_value_error(self):
        with pytest.raises(ValueError):
            HighlightEdit.coerce({"note": object()})

    def test_coerce_between_field_map_types(self):
        edit = HighlightEdit.coerce(FieldMap.coerce({"note": "n"}))

        assert isinstance(edit, HighlightEdit)
        assert edit.to_dict() == {"note": "n"}

    def test_accepts_any_mapping(self):
        fields = NewHighlight.coerce(MappingProxyType({"text": "a"}))

        assert fields.to_dict() == {"text": "a"}

    def test_coerce_returns_same_instance(self):
        edit = HighlightEdit.coerce({"note": "n"})

        assert HighlightEdit.coerce(edit) is edit
