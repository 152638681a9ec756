"""Front-matter parsing, validation and serialization.

A document is a front-matter block followed by the body::

    ---
    title: "Variables and Constants in Swift"
    date: 2025-09-07T10:00:00-06:00
    tags:
      - swift
    ---
    Body text...

YAML blocks are fenced with ``---`` lines and TOML blocks with ``+++``
lines.  Everything after the line closing the block is the body,
byte-for-byte.  Output is always YAML.
"""

from __future__ import annotations

import tomllib
from datetime import UTC, date, datetime, time, tzinfo
from enum import StrEnum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, field_validator

from blogmatter.content.errors import (
    InvalidTimestamp,
    MalformedFrontMatter,
    MissingRequiredField,
)
from blogmatter.content.models import KNOWN_FIELDS, ContentRecord

_BOM = "\ufeff"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class FrontMatterFormat(StrEnum):
    """Front-matter flavour, named after its delimiter."""

    YAML = "---"
    TOML = "+++"


class _FrontMatterLoader(yaml.SafeLoader):
    """Safe loader that leaves timestamps as plain strings."""


class _FrontMatterDumper(yaml.SafeDumper):
    """Safe dumper that writes ISO timestamps unquoted."""


# Timestamps go through datetime.fromisoformat in one place instead of
# PyYAML's resolver, which differs across versions on offset handling.
for _cls in (_FrontMatterLoader, _FrontMatterDumper):
    _cls.yaml_implicit_resolvers = {
        first: [(tag, rx) for tag, rx in resolvers if tag != _TIMESTAMP_TAG]
        for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
    }


def check_timezone(value: str) -> str:
    """Return an IANA timezone name unchanged, or raise ValueError."""
    if value.upper() == "UTC":
        return value
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown timezone: {value}") from exc
    return value


class ParseOptions(BaseModel):
    """Knobs for timestamp validation."""

    require_offset: bool = True
    default_timezone: str = "UTC"

    @field_validator("default_timezone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        return check_timezone(value)

    def tzinfo(self) -> tzinfo:
        if self.default_timezone.upper() == "UTC":
            return UTC
        return ZoneInfo(self.default_timezone)


# ---------------------------------------------------------------------------
# Splitting and decoding
# ---------------------------------------------------------------------------


def split_frontmatter(text: str) -> tuple[FrontMatterFormat, str, str]:
    """Split a document into ``(format, raw front matter, body)``.

    Raises:
        MalformedFrontMatter: no opening delimiter, or it is never closed.
    """
    text = text.removeprefix(_BOM)
    lines = text.splitlines(keepends=True)
    if not lines:
        raise MalformedFrontMatter("document is empty")

    opening = lines[0].rstrip()
    try:
        fmt = FrontMatterFormat(opening)
    except ValueError:
        raise MalformedFrontMatter(
            "document does not start with a '---' or '+++' delimiter line"
        ) from None

    for index in range(1, len(lines)):
        if lines[index].rstrip() == fmt.value:
            raw = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return fmt, raw, body

    raise MalformedFrontMatter(f"front matter opened with '{fmt.value}' is never closed")


def _decode(fmt: FrontMatterFormat, raw: str) -> dict[str, Any]:
    if fmt is FrontMatterFormat.TOML:
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            raise MalformedFrontMatter(f"invalid TOML front matter: {exc}") from exc

    try:
        data = yaml.load(raw, Loader=_FrontMatterLoader)  # noqa: S506
    except yaml.YAMLError as exc:
        raise MalformedFrontMatter(f"invalid YAML front matter: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedFrontMatter(
            f"front matter must be a mapping, got {type(data).__name__}"
        )
    bad_keys = [k for k in data if not isinstance(k, str)]
    if bad_keys:
        raise MalformedFrontMatter(f"front-matter keys must be strings: {bad_keys!r}")
    return data


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _text(fm: dict[str, Any], key: str) -> str:
    value = fm.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    raise MalformedFrontMatter(f"'{key}' must be a string, got {type(value).__name__}")


def _labels(fm: dict[str, Any], key: str) -> list[str]:
    value = fm.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise MalformedFrontMatter(f"'{key}' must be a list of strings")

    labels: list[str] = []
    for item in value:
        if isinstance(item, str):
            labels.append(item)
        elif isinstance(item, int | float) and not isinstance(item, bool):
            labels.append(str(item))
        else:
            raise MalformedFrontMatter(
                f"'{key}' entries must be strings, got {type(item).__name__}"
            )
    return labels


def _yaml_safe(value: Any) -> Any:
    """Turn TOML local times into ISO strings; YAML has no time type."""
    if isinstance(value, time):
        return value.isoformat()
    if isinstance(value, list):
        return [_yaml_safe(v) for v in value]
    if isinstance(value, dict):
        return {k: _yaml_safe(v) for k, v in value.items()}
    return value


def _draft(fm: dict[str, Any]) -> bool:
    value = fm.get("draft")
    if value is None:
        return False
    if not isinstance(value, bool):
        raise MalformedFrontMatter(f"'draft' must be a boolean, got {value!r}")
    return value


def parse_timestamp(value: Any, field: str, *, options: ParseOptions | None = None) -> datetime:
    """Coerce a front-matter value into a timezone-aware datetime.

    Accepts ISO-8601 strings (``Z`` or ``±HH:MM`` offsets), datetimes and
    dates (TOML decodes those natively).  Naive values are rejected
    unless ``options.require_offset`` is off, in which case
    ``options.default_timezone`` is assumed.

    Raises:
        InvalidTimestamp: the value is not a timestamp or lacks an offset.
    """
    options = options or ParseOptions()

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise InvalidTimestamp(field, f"cannot parse {value!r}") from None
    else:
        raise InvalidTimestamp(field, f"expected a timestamp, got {type(value).__name__}")

    if parsed.utcoffset() is None:
        if options.require_offset:
            raise InvalidTimestamp(field, f"{value!s} has no UTC offset")
        parsed = parsed.replace(tzinfo=options.tzinfo())
    return parsed


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_frontmatter(text: str) -> dict[str, Any]:
    """Return the decoded front-matter mapping without validating fields."""
    fmt, raw, _ = split_frontmatter(text)
    return _decode(fmt, raw)


def parse_record(text: str, *, options: ParseOptions | None = None) -> ContentRecord:
    """Parse and validate a document into a ContentRecord.

    Raises:
        MalformedFrontMatter: delimiters or field syntax are not well-formed.
        MissingRequiredField: ``title`` or ``date`` is absent.
        InvalidTimestamp: a timestamp is unparseable or lastmod < date.
    """
    fmt, raw, body = split_frontmatter(text)
    fm = _decode(fmt, raw)

    if "body" in fm:
        raise MalformedFrontMatter("'body' is reserved and cannot be a front-matter key")

    if _is_blank(fm.get("title")):
        raise MissingRequiredField("title")
    title = _text(fm, "title")

    if _is_blank(fm.get("date")):
        raise MissingRequiredField("date")
    published = parse_timestamp(fm["date"], "date", options=options)

    lastmod: datetime | None = None
    if not _is_blank(fm.get("lastmod")):
        lastmod = parse_timestamp(fm["lastmod"], "lastmod", options=options)
        if lastmod < published:
            raise InvalidTimestamp(
                "lastmod",
                f"{lastmod.isoformat()} precedes date {published.isoformat()}",
            )

    extra = {k: _yaml_safe(v) for k, v in fm.items() if k not in KNOWN_FIELDS}

    return ContentRecord(
        title=title,
        description=_text(fm, "description"),
        date=published,
        lastmod=lastmod,
        draft=_draft(fm),
        author=_text(fm, "author"),
        categories=_labels(fm, "categories"),
        tags=_labels(fm, "tags"),
        body=body,
        extra=extra,
    )


def record_frontmatter(record: ContentRecord) -> dict[str, Any]:
    """Front-matter mapping for a record, defaults omitted, canonical order."""
    fm: dict[str, Any] = {"title": record.title}
    if record.description:
        fm["description"] = record.description
    fm["date"] = record.date.isoformat()
    if record.lastmod is not None:
        fm["lastmod"] = record.lastmod.isoformat()
    if record.draft:
        fm["draft"] = True
    if record.author:
        fm["author"] = record.author
    if record.categories:
        fm["categories"] = list(record.categories)
    if record.tags:
        fm["tags"] = list(record.tags)
    fm.update(record.extra)
    return fm


def serialize_record(record: ContentRecord) -> str:
    """Render a record back to a YAML front-matter document.

    ``parse_record(serialize_record(r)) == r`` holds for every record.
    """
    dumped = yaml.dump(
        record_frontmatter(record),
        Dumper=_FrontMatterDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=100,
    )
    return f"---\n{dumped}---\n{record.body}"
