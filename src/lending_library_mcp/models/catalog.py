"""
Catalog models for the Lending Library MCP Server.

A library item is either a Book or a Journal. The two variants share the
common catalog fields and are distinguished by the ``type`` tag, so
``LibraryItem`` is a discriminated union rather than a class hierarchy:

    item = item_adapter.validate_python({"type": "JOURNAL", ...})

Rows from the ``library_items`` table are converted with ``item_from_row``.
"""

from datetime import date
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class _CatalogEntry(BaseModel):
    """Fields every lendable item carries."""

    id: int = Field(..., description="Catalog identifier", ge=1)

    title: str = Field(
        ...,
        description="Title of the item",
        min_length=1,
        max_length=500,
        examples=["Clean Code", "Nature Neuroscience"],
    )

    author: str = Field(
        ...,
        description="Author, editor or 'Various'",
        min_length=1,
        max_length=200,
    )

    publication_date: date = Field(..., description="Date of publication")

    available: bool = Field(
        default=True,
        description="Whether the item is on the shelf and can be checked out",
    )

    model_config = ConfigDict(from_attributes=True)


class Book(_CatalogEntry):
    """A book in the catalog."""

    type: Literal["BOOK"] = "BOOK"

    isbn: str = Field(
        ...,
        description="ISBN-10 or ISBN-13, hyphens allowed",
        pattern=r"^[\d-]{9,17}[\dX]$",
        examples=["9780132350884", "978-0-13-235088-4"],
    )

    genre: str = Field(..., description="Genre or subject", examples=["Programming"])

    page_count: int = Field(..., description="Number of pages", gt=0, examples=[464])

    @field_validator("isbn")
    @classmethod
    def normalize_isbn(cls, v: str) -> str:
        """Strip hyphens so the same book always has the same ISBN."""
        normalized = v.replace("-", "")
        if len(normalized) not in (10, 13):
            raise ValueError("ISBN must have 10 or 13 digits")
        return normalized


class Journal(_CatalogEntry):
    """A journal issue in the catalog."""

    type: Literal["JOURNAL"] = "JOURNAL"

    issn: str = Field(
        ...,
        description="International Standard Serial Number",
        pattern=r"^\d{4}-\d{3}[\dX]$",
        examples=["0018-9340"],
    )

    publisher: str = Field(..., description="Publishing house", min_length=1)

    volume: int = Field(..., description="Volume number", ge=1)

    issue: int = Field(..., description="Issue number within the volume", ge=1)


LibraryItem = Annotated[Book | Journal, Field(discriminator="type")]

item_adapter: TypeAdapter[Book | Journal] = TypeAdapter(LibraryItem)


def item_from_row(row: Any) -> Book | Journal:
    """Build the matching variant from a ``library_items`` row."""
    model = Book if row.type == "BOOK" else Journal
    return model.model_validate(row, from_attributes=True)
