"""Content library models: pure Pydantic v2 data types.

A ContentItem is an immutable text snippet tagged with a Category.
QuerySpec describes how a view over the collection is derived: which
category to keep, what to search for, and how to order the result.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

ALL_CATEGORIES = "all"


class Category(StrEnum):
    """Kind of property a snippet describes."""

    HOUSE = "house"
    APARTMENT = "apartment"
    LAND = "land"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS: dict[Category, str] = {
    Category.HOUSE: "House",
    Category.APARTMENT: "Flat/Apartment",
    Category.LAND: "Land",
}


class SortKey(StrEnum):
    """Field a view is ordered by."""

    CREATED = "created"
    ALPHABETICAL = "alphabetical"

    @classmethod
    def _missing_(cls, value: object) -> SortKey | None:
        # Older saved views call creation-time ordering "date".
        if value == "date":
            return cls.CREATED
        return None


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class ContentItem(BaseModel):
    """A single uploaded snippet.

    Serialises with the camelCase keys used by the browser widget's
    ``contentData`` entry (``createdAt``, ``displayDate``) so previously
    saved collections load unchanged.  ``display_label`` is rendered once
    when the item is created and never recomputed.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    text: str
    category: Category
    created_at: datetime = Field(alias="createdAt")
    display_label: str = Field(
        default="",
        validation_alias=AliasChoices("displayDate", "displayLabel", "display_label"),
        serialization_alias="displayDate",
    )

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("text must not be empty")
        return value

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class QuerySpec(BaseModel):
    """Filter, search and sort settings for deriving a view."""

    model_config = ConfigDict(frozen=True)

    category: Category | Literal["all"] = ALL_CATEGORIES
    search: str = ""
    sort_key: SortKey = SortKey.CREATED
    direction: SortDirection = SortDirection.DESC
