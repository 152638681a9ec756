"""Content domain: record model, parser and corpus reader.

A ContentRecord is a post's front matter plus its body.  The parser
turns raw Markdown into validated records and back, and the reader
walks a content directory collecting records and failures.
"""

from blogmatter.content.body import CodeBlock, Shortcode, VideoEmbed
from blogmatter.content.errors import (
    FrontMatterError,
    InvalidTimestamp,
    MalformedFrontMatter,
    MissingRequiredField,
)
from blogmatter.content.lint import LintIssue, Severity, lint_record
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
from blogmatter.content.reader import (
    ContentReader,
    CorpusResult,
    LoadedRecord,
    ReadFailure,
    write_record,
)

__all__ = [
    "CodeBlock",
    "ContentReader",
    "ContentRecord",
    "CorpusResult",
    "FrontMatterError",
    "FrontMatterFormat",
    "InvalidTimestamp",
    "LintIssue",
    "LoadedRecord",
    "MalformedFrontMatter",
    "MissingRequiredField",
    "ParseOptions",
    "ReadFailure",
    "Severity",
    "Shortcode",
    "VideoEmbed",
    "lint_record",
    "parse_frontmatter",
    "parse_record",
    "parse_timestamp",
    "serialize_record",
    "split_frontmatter",
    "write_record",
]
