"""Tests for front-matter parsing, validation and serialization."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from blogmatter.content.errors import (
    FrontMatterError,
    InvalidTimestamp,
    MalformedFrontMatter,
    MissingRequiredField,
)
from blogmatter.content.models import ContentRecord
from blogmatter.content.parser import (
    FrontMatterFormat,
    ParseOptions,
    parse_frontmatter,
    parse_record,
    parse_timestamp,
    serialize_record,
    split_frontmatter,
)

MOUNTAIN = timezone(timedelta(hours=-6))

SAMPLE_POST = """\
---
title: "Variables and Constants in Swift"
description: "Learn the difference between var and let."
date: 2025-09-07T10:00:00-06:00
lastmod: 2025-09-08T09:30:00-06:00
draft: false
author: "Jane Doe"
categories:
  - Swift
  - Fundamentals
tags:
  - swift
  - ios
  - beginners
---

## Declaring a variable

```swift
var greeting = "Hello"
let answer = 42
```

{{< youtube id="dQw4w9WgXcQ" title="Swift Variables Explained" >}}
"""

TOML_POST = """\
+++
title = "Strings in Swift"
date = 2025-09-10T08:00:00-06:00
tags = ["swift", "strings"]
weight = 3
+++
Body here.
"""


class TestSplitFrontmatter:
    def test_yaml_block(self):
        fmt, raw, body = split_frontmatter(SAMPLE_POST)
        assert fmt is FrontMatterFormat.YAML
        assert raw.startswith('title: "Variables')
        assert body.startswith("\n## Declaring a variable")

    def test_toml_block(self):
        fmt, raw, body = split_frontmatter(TOML_POST)
        assert fmt is FrontMatterFormat.TOML
        assert "weight = 3" in raw
        assert body == "Body here.\n"

    def test_missing_opening_delimiter(self):
        with pytest.raises(MalformedFrontMatter):
            split_frontmatter("title: X\n---\nBody")

    def test_unterminated_block(self):
        with pytest.raises(MalformedFrontMatter, match="never closed"):
            split_frontmatter("---\ntitle: X\ndate: 2025-09-07T10:00:00Z\n")

    def test_empty_document(self):
        with pytest.raises(MalformedFrontMatter):
            split_frontmatter("")

    def test_mismatched_delimiters(self):
        with pytest.raises(MalformedFrontMatter):
            split_frontmatter("---\ntitle: X\n+++\nBody")

    def test_bom_and_crlf(self):
        text = "\ufeff---\r\ntitle: X\r\n---\r\nBody\r\n"
        fmt, raw, body = split_frontmatter(text)
        assert fmt is FrontMatterFormat.YAML
        assert raw == "title: X\r\n"
        assert body == "Body\r\n"

    def test_delimiter_inside_body_is_kept(self):
        _, _, body = split_frontmatter("---\ntitle: X\n---\nIntro\n\n---\n\nMore")
        assert body == "Intro\n\n---\n\nMore"


class TestParseRecord:
    def test_full_record(self):
        record = parse_record(SAMPLE_POST)
        assert record.title == "Variables and Constants in Swift"
        assert record.description == "Learn the difference between var and let."
        assert record.date == datetime(2025, 9, 7, 10, 0, tzinfo=MOUNTAIN)
        assert record.lastmod == datetime(2025, 9, 8, 9, 30, tzinfo=MOUNTAIN)
        assert record.draft is False
        assert record.author == "Jane Doe"
        assert record.categories == ("Swift", "Fundamentals")
        assert record.tags == ("swift", "ios", "beginners")
        assert "var greeting" in record.body
        assert record.extra == {}

    def test_minimal_record_defaults(self):
        record = parse_record('---\ntitle: "X"\ndate: 2025-09-07T10:00:00-06:00\n---\n')
        assert record.title == "X"
        assert record.draft is False
        assert record.lastmod is None
        assert record.description == ""
        assert record.author == ""
        assert record.categories == ()
        assert record.tags == ()
        assert record.body == ""

    def test_timestamps_keep_their_offset(self):
        record = parse_record(SAMPLE_POST)
        assert record.date.utcoffset() == timedelta(hours=-6)

    def test_zulu_suffix(self):
        record = parse_record("---\ntitle: X\ndate: 2025-09-07T16:00:00Z\n---\n")
        assert record.date == datetime(2025, 9, 7, 10, 0, tzinfo=MOUNTAIN)

    def test_draft_true(self):
        record = parse_record("---\ntitle: X\ndate: 2025-09-07T10:00:00Z\ndraft: true\n---\n")
        assert record.draft is True
        assert record.is_published is False

    def test_toml_record(self):
        record = parse_record(TOML_POST)
        assert record.title == "Strings in Swift"
        assert record.date == datetime(2025, 9, 10, 8, 0, tzinfo=MOUNTAIN)
        assert record.tags == ("swift", "strings")
        assert record.extra == {"weight": 3}

    def test_unknown_keys_go_to_extra(self):
        text = (
            "---\ntitle: X\ndate: 2025-09-07T10:00:00Z\n"
            "slug: swift-singletons\nseries:\n  - swift-basics\n---\n"
        )
        record = parse_record(text)
        assert record.extra == {"slug": "swift-singletons", "series": ["swift-basics"]}

    def test_single_string_tag_becomes_list(self):
        record = parse_record("---\ntitle: X\ndate: 2025-09-07T10:00:00Z\ntags: swift\n---\n")
        assert record.tags == ("swift",)

    def test_numeric_labels_are_stringified(self):
        record = parse_record(
            "---\ntitle: X\ndate: 2025-09-07T10:00:00Z\ntags: [swift, 5]\n---\n"
        )
        assert record.tags == ("swift", "5")

    def test_numeric_title_is_stringified(self):
        record = parse_record("---\ntitle: 1984\ndate: 2025-09-07T10:00:00Z\n---\n")
        assert record.title == "1984"

    def test_lastmod_equal_to_date_is_allowed(self):
        record = parse_record(
            "---\ntitle: X\ndate: 2025-09-07T10:00:00Z\nlastmod: 2025-09-07T10:00:00Z\n---\n"
        )
        assert record.lastmod == record.date

    def test_lastmod_compared_across_offsets(self):
        # 09:00-06:00 is 15:00Z, after 14:00Z
        record = parse_record(
            "---\ntitle: X\ndate: 2025-09-07T14:00:00Z\n"
            "lastmod: 2025-09-07T09:00:00-06:00\n---\n"
        )
        assert record.lastmod is not None


class TestParseRecordErrors:
    def test_missing_title(self):
        with pytest.raises(MissingRequiredField) as exc_info:
            parse_record("---\ndate: 2025-09-07T10:00:00-06:00\n---\nBody")
        assert exc_info.value.field == "title"

    def test_blank_title(self):
        with pytest.raises(MissingRequiredField):
            parse_record('---\ntitle: "  "\ndate: 2025-09-07T10:00:00-06:00\n---\n')

    def test_missing_date(self):
        with pytest.raises(MissingRequiredField) as exc_info:
            parse_record('---\ntitle: "X"\n---\n')
        assert exc_info.value.field == "date"

    def test_empty_frontmatter_reports_title_first(self):
        with pytest.raises(MissingRequiredField) as exc_info:
            parse_record("---\n---\nBody")
        assert exc_info.value.field == "title"

    def test_lastmod_before_date(self):
        text = (
            '---\ntitle: "X"\n'
            "date: 2025-09-07T10:00:00-06:00\n"
            "lastmod: 2025-09-06T10:00:00-06:00\n---\n"
        )
        with pytest.raises(InvalidTimestamp) as exc_info:
            parse_record(text)
        assert exc_info.value.field == "lastmod"

    def test_unparseable_date(self):
        with pytest.raises(InvalidTimestamp) as exc_info:
            parse_record("---\ntitle: X\ndate: next tuesday\n---\n")
        assert exc_info.value.field == "date"

    def test_numeric_date(self):
        with pytest.raises(InvalidTimestamp):
            parse_record("---\ntitle: X\ndate: 2025\n---\n")

    def test_naive_date_rejected_by_default(self):
        with pytest.raises(InvalidTimestamp, match="offset"):
            parse_record("---\ntitle: X\ndate: 2025-09-07T10:00:00\n---\n")

    def test_invalid_yaml(self):
        with pytest.raises(MalformedFrontMatter, match="YAML"):
            parse_record("---\ntitle: [unclosed\ndate: 2025-09-07T10:00:00Z\n---\n")

    def test_invalid_toml(self):
        with pytest.raises(MalformedFrontMatter, match="TOML"):
            parse_record("+++\ntitle = \n+++\n")

    def test_frontmatter_not_a_mapping(self):
        with pytest.raises(MalformedFrontMatter, match="mapping"):
            parse_record("---\n- just\n- a list\n---\n")

    def test_draft_must_be_boolean(self):
        with pytest.raises(MalformedFrontMatter, match="draft"):
            parse_record("---\ntitle: X\ndate: 2025-09-07T10:00:00Z\ndraft: maybe\n---\n")

    def test_tags_must_be_a_list(self):
        with pytest.raises(MalformedFrontMatter, match="tags"):
            parse_record("---\ntitle: X\ndate: 2025-09-07T10:00:00Z\ntags:\n  a: b\n---\n")

    def test_nested_tag_rejected(self):
        with pytest.raises(MalformedFrontMatter):
            parse_record("---\ntitle: X\ndate: 2025-09-07T10:00:00Z\ntags:\n  - [a, b]\n---\n")

    def test_body_key_is_reserved(self):
        with pytest.raises(MalformedFrontMatter, match="body"):
            parse_record("---\ntitle: X\ndate: 2025-09-07T10:00:00Z\nbody: hi\n---\n")

    def test_no_frontmatter(self):
        with pytest.raises(MalformedFrontMatter):
            parse_record("Just some text with no frontmatter")

    def test_errors_share_a_base_class(self):
        for text in ("nope", "---\ndate: 2025-09-07T10:00:00Z\n---\n", "---\ntitle: X\ndate: x\n---\n"):
            with pytest.raises(FrontMatterError):
                parse_record(text)


class TestParseTimestamp:
    def test_string_with_offset(self):
        ts = parse_timestamp("2025-09-07T10:00:00-06:00", "date")
        assert ts == datetime(2025, 9, 7, 16, 0, tzinfo=UTC)

    def test_aware_datetime_passes_through(self):
        value = datetime(2025, 9, 7, 10, tzinfo=MOUNTAIN)
        assert parse_timestamp(value, "date") is value

    def test_naive_with_default_timezone(self):
        options = ParseOptions(require_offset=False, default_timezone="UTC")
        ts = parse_timestamp("2025-09-07T10:00:00", "date", options=options)
        assert ts == datetime(2025, 9, 7, 10, tzinfo=UTC)

    def test_date_only_with_default_timezone(self):
        options = ParseOptions(require_offset=False)
        ts = parse_timestamp("2025-09-07", "date", options=options)
        assert ts == datetime(2025, 9, 7, tzinfo=UTC)

    def test_date_only_rejected_when_offset_required(self):
        with pytest.raises(InvalidTimestamp):
            parse_timestamp("2025-09-07", "date")

    def test_boolean_rejected(self):
        with pytest.raises(InvalidTimestamp):
            parse_timestamp(True, "lastmod")

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValueError):
            ParseOptions(default_timezone="Mars/Olympus_Mons")


class TestParseFrontmatter:
    def test_raw_mapping_keeps_strings(self):
        fm = parse_frontmatter(SAMPLE_POST)
        assert fm["date"] == "2025-09-07T10:00:00-06:00"
        assert fm["tags"] == ["swift", "ios", "beginners"]


class TestSerializeRecord:
    def test_round_trip_sample(self):
        record = parse_record(SAMPLE_POST)
        assert parse_record(serialize_record(record)) == record

    def test_round_trip_toml_source(self):
        record = parse_record(TOML_POST)
        again = parse_record(serialize_record(record))
        assert again == record
        assert again.extra == {"weight": 3}

    def test_round_trip_awkward_values(self):
        record = ContentRecord(
            title="true",
            description="Line one: with a colon\nand a second line",
            date=datetime(2025, 9, 7, 10, 0, 0, 123456, tzinfo=MOUNTAIN),
            draft=True,
            author="O'Brien",
            categories=["Swift", "Design Patterns"],
            tags=["123", "null", "- dash"],
            body="---\nnot front matter\n",
            extra={"aliases": ["/old/path/"], "weight": 2},
        )
        assert parse_record(serialize_record(record)) == record

    def test_round_trip_toml_local_time_extra(self):
        text = (
            '+++\ntitle = "X"\ndate = 2025-09-07T10:00:00Z\n'
            "publishTime = 07:32:00\n[schedule]\nslots = [08:00:00, 17:30:00]\n+++\n"
        )
        record = parse_record(text)
        assert record.extra == {
            "publishTime": "07:32:00",
            "schedule": {"slots": ["08:00:00", "17:30:00"]},
        }
        assert parse_record(serialize_record(record)) == record

    def test_serialization_is_stable(self):
        once = serialize_record(parse_record(SAMPLE_POST))
        twice = serialize_record(parse_record(once))
        assert once == twice

    def test_canonical_order_and_omitted_defaults(self):
        text = serialize_record(
            parse_record("---\ntags: [a]\ndate: 2025-09-07T10:00:00Z\ntitle: X\n---\nBody\n")
        )
        assert text == "---\ntitle: X\ndate: 2025-09-07T10:00:00+00:00\ntags:\n- a\n---\nBody\n"
