from collections.abc import Mapping
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    StrictFloat,
    StrictInt,
    StrictStr,
)
from pydantic import ValidationError as PydanticValidationError

from .exceptions import FieldMapError

T = TypeVar("T")

# Value kinds accepted in create/update payloads
FieldValue = StrictStr | StrictInt | StrictFloat | None


class Book(BaseModel):
    """A book (or article, tweet, podcast...) as returned by the Readwise API."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: int = Field(ge=0, description="Readwise book identifier")
    title: str | None = Field(default="", description="The title of the book")
    author: str | None = Field(default=None, description="The author of the book")
    category: str | None = Field(default=None, description="books, articles, tweets, supplementals or podcasts")
    source: str | None = Field(default=None, description="Where the book was imported from")
    num_highlights: int | None = Field(default=0, description="Number of highlights in the book")
    last_highlight_at: datetime | None = Field(default=None, description="Timestamp of the latest highlight")
    updated: datetime | None = Field(default=None, description="Timestamp of the last update")
    cover_image_url: str | None = Field(default=None, description="URL of the cover image")
    highlights_url: str | None = Field(default=None, description="Readwise URL listing the highlights")
    source_url: str | None = Field(default=None, description="Original URL of the source")
    asin: str | None = Field(default=None, description="Amazon identifier for Kindle books")
    tags: list[dict] = Field(default_factory=list, description="Tags attached to the book")
    document_note: str | None = Field(default=None, description="Note attached to the whole book")


class Highlight(BaseModel):
    """A single highlight as returned by the Readwise API."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: int = Field(ge=0, description="Readwise highlight identifier")
    text: str = Field(description="The text content of the highlight")
    note: str | None = Field(default="", description="The user's note on the highlight")
    location: int | None = Field(default=None, description="Location of the highlight within the book")
    location_type: str | None = Field(default=None, description="The type of location (e.g., 'location', 'page')")
    url: str | None = Field(default=None, description="URL of the highlight in its source")
    color: str | None = Field(default=None, description="Highlight colour")
    book_id: int | None = Field(default=None, ge=0, description="Identifier of the book the highlight belongs to")
    tags: list[dict] = Field(default_factory=list, description="Tags attached to the highlight")
    highlighted_at: datetime | None = Field(default=None, description="When the text was highlighted")
    created_at: datetime | None = Field(default=None, description="When Readwise stored the highlight")
    updated: datetime | None = Field(default=None, description="When the highlight was last changed")


class HighlightCreateResult(BaseModel):
    """One entry of the create-highlights response: a book and the highlight ids it gained."""

    model_config = ConfigDict(extra="allow")

    id: int = Field(ge=0)
    title: str | None = ""
    modified_highlights: list[int] = Field(default_factory=list)


class HighlightCreateResponse(RootModel[list[HighlightCreateResult]]):
    """Body of a successful create-highlights call."""

    def highlight_ids(self) -> list[int]:
        return [highlight_id for book in self.root for highlight_id in book.modified_highlights]


class Page(BaseModel, Generic[T]):
    """Envelope around one page of list results."""

    count: int | None = None
    next: str | None = None
    previous: str | None = None
    results: list[T] = Field(default_factory=list)
    page_number: int = Field(default=1, exclude=True)

    @property
    def has_next(self) -> bool:
        return self.next is not None

    @property
    def next_page(self) -> int | None:
        return self.page_number + 1 if self.has_next else None


class FieldMap(RootModel[dict[str, FieldValue]]):
    """Partial set of highlight attributes sent on create or update.

    Field names are not checked here: the server decides which ones it
    accepts. Values are limited to strings, numbers and null.
    """

    @classmethod
    def coerce(cls, fields: "FieldMap | Mapping[str, Any]") -> "FieldMap":
        if isinstance(fields, cls):
            return fields
        if isinstance(fields, FieldMap):
            fields = fields.root
        try:
            return cls.model_validate(fields)
        except PydanticValidationError as e:
            raise FieldMapError(f"Invalid field map: {e}") from e

    def to_dict(self) -> dict[str, FieldValue]:
        return dict(self.root)


class HighlightEdit(FieldMap):
    """Fields to change on an existing highlight."""


class NewHighlight(FieldMap):
    """Fields of a highlight to be created."""
