"""Discovers and reads content records from a content directory."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from blogmatter.content.errors import FrontMatterError
from blogmatter.content.models import ContentRecord
from blogmatter.content.parser import ParseOptions, parse_record, serialize_record

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md", ".markdown")


class LoadedRecord(BaseModel):
    """A record together with the file it came from."""

    model_config = ConfigDict(frozen=True)

    path: Path
    record: ContentRecord


class ReadFailure(BaseModel):
    """A file that could not be turned into a record."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: Path
    error: FrontMatterError


class CorpusResult(BaseModel):
    """Outcome of reading a whole directory."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    records: list[LoadedRecord] = Field(default_factory=list)
    failures: list[ReadFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def published(self) -> list[LoadedRecord]:
        """Records the external renderer would publish (drafts excluded)."""
        return [r for r in self.records if r.record.is_published]


class ContentReader:
    """Reads Markdown documents and validates their front matter."""

    def __init__(
        self,
        options: ParseOptions | None = None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self.options = options or ParseOptions()
        self.extensions = tuple(e.lower() for e in extensions)

    def discover(self, directory: Path) -> list[Path]:
        """Return content files under a directory, sorted by path."""
        if not directory.is_dir():
            return []
        return sorted(
            p
            for p in directory.rglob("*")
            if p.is_file() and p.suffix.lower() in self.extensions
        )

    def read_file(self, path: Path) -> ContentRecord:
        """Parse one file.

        Raises:
            FrontMatterError: the document is invalid; ``path`` is set.
            OSError: the file cannot be read.
        """
        text = path.read_text(encoding="utf-8")
        try:
            return parse_record(text, options=self.options)
        except FrontMatterError as exc:
            raise exc.with_path(path) from None

    def read_all(self, directory: Path) -> CorpusResult:
        """Read every content file, collecting failures instead of raising."""
        result = CorpusResult()
        for path in self.discover(directory):
            try:
                record = self.read_file(path)
            except FrontMatterError as exc:
                logger.warning("Skipping invalid content file: %s", exc)
                result.failures.append(ReadFailure(path=path, error=exc))
                continue
            except UnicodeDecodeError as exc:
                logger.warning("Skipping non-UTF-8 content file: %s", path)
                error = FrontMatterError(f"not valid UTF-8: {exc.reason}", path=path)
                result.failures.append(ReadFailure(path=path, error=error))
                continue
            result.records.append(LoadedRecord(path=path, record=record))

        result.records.sort(key=lambda r: (r.record.date, str(r.path)))
        logger.info(
            "Read %d records from %s (%d failed)",
            len(result.records),
            directory,
            len(result.failures),
        )
        return result


def write_record(record: ContentRecord, path: Path) -> None:
    """Write a record to disk in canonical form."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_record(record), encoding="utf-8")
