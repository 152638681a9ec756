"""Content domain models — pure Pydantic v2 data types.

A ContentRecord is one article of the blog corpus: the front-matter
fields the static-site generator reads, plus the free-text body.
Records are frozen; edits go through ``model_copy(update=...)``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from blogmatter.content.body import (
    DEFAULT_VIDEO_SHORTCODES,
    CodeBlock,
    Shortcode,
    VideoEmbed,
    extract_code_blocks,
    extract_shortcodes,
    video_embeds,
)

# Front-matter keys in the order they are written back out.
KNOWN_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "date",
    "lastmod",
    "draft",
    "author",
    "categories",
    "tags",
)


class ContentRecord(BaseModel):
    """Front matter plus body for a single post.

    ``extra`` holds front-matter keys the schema does not name (``slug``,
    ``series``, ``weight``...) so that rewriting a file never drops them.
    """

    model_config = {"frozen": True}

    title: str
    description: str = ""
    date: datetime
    lastmod: datetime | None = None
    draft: bool = False
    author: str = ""
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    body: str = ""
    extra: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value

    @field_validator("date", "lastmod")
    @classmethod
    def _aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.utcoffset() is None:
            raise ValueError("timestamp must carry a UTC offset")
        return value

    @field_validator("extra")
    @classmethod
    def _no_known_keys_in_extra(cls, value: dict[str, Any]) -> dict[str, Any]:
        clash = [k for k in value if k in KNOWN_FIELDS or k == "body"]
        if clash:
            raise ValueError(f"extra repeats schema fields: {', '.join(clash)}")
        return value

    @model_validator(mode="after")
    def _lastmod_not_before_date(self) -> ContentRecord:
        if self.lastmod is not None and self.lastmod < self.date:
            raise ValueError("lastmod precedes date")
        return self

    @property
    def is_published(self) -> bool:
        return not self.draft

    @property
    def updated(self) -> datetime:
        """Most recent modification time: lastmod, falling back to date."""
        return self.lastmod or self.date

    def code_blocks(self) -> list[CodeBlock]:
        return extract_code_blocks(self.body)

    def shortcodes(self) -> list[Shortcode]:
        return extract_shortcodes(self.body)

    def video_embeds(self, names: Iterable[str] = DEFAULT_VIDEO_SHORTCODES) -> list[VideoEmbed]:
        return video_embeds(self.body, names)
