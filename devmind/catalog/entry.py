"""Bookmark entry model and the closed category enumeration."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

UNTITLED = "Untitled"


class Category(str, Enum):
    """Categories the classification service may assign."""

    FRONTEND = "Frontend"
    BACKEND = "Backend"
    DEVOPS = "DevOps"
    AI_ML = "AI/ML"
    DESIGN = "Design"
    PRODUCTIVITY = "Productivity"
    OTHER = "Other"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


def generate_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookmarkEntry(BaseModel):
    """
    One bookmark in the catalog.

    Entries are immutable. Enrichment produces a new value through
    :meth:`enriched`; nothing else changes an entry after construction.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    title: str = UNTITLED
    url: str
    description: str | None = None
    category: str | None = None
    tags: tuple[str, ...] | None = None
    processed: bool = False
    added_at: datetime = Field(default_factory=utc_now)

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNTITLED
        return value

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        if not value:
            raise ValueError("url cannot be empty")
        return value

    @model_validator(mode="after")
    def _validate_enrichment(self) -> "BookmarkEntry":
        if not self.id:
            raise ValueError("id cannot be empty")
        if self.processed:
            if not self.category or not self.description or not self.tags:
                raise ValueError("processed entries need category, description and tags")
        return self

    def enriched(self, category: str, description: str, tags: list[str] | tuple[str, ...]) -> "BookmarkEntry":
        """Return the processed copy of this entry."""

        return BookmarkEntry(
            id=self.id,
            title=self.title,
            url=self.url,
            added_at=self.added_at,
            category=category,
            description=description,
            tags=tuple(tags),
            processed=True,
        )


__all__ = ["BookmarkEntry", "Category", "UNTITLED", "generate_id", "utc_now"]
