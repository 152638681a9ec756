"""Errors raised while parsing and validating content records."""

from __future__ import annotations

from pathlib import Path


class FrontMatterError(ValueError):
    """Base class for every content-record validation failure."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def with_path(self, path: Path) -> FrontMatterError:
        """Attach the source file and return self for re-raising."""
        self.path = path
        return self

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message


class MalformedFrontMatter(FrontMatterError):
    """Delimiters or field syntax are not well-formed."""


class MissingRequiredField(FrontMatterError):
    """A required field (title or date) is absent or blank."""

    def __init__(self, field: str, *, path: Path | None = None) -> None:
        super().__init__(f"missing required field '{field}'", path=path)
        self.field = field


class InvalidTimestamp(FrontMatterError):
    """A timestamp could not be parsed, or lastmod precedes date."""

    def __init__(self, field: str, message: str, *, path: Path | None = None) -> None:
        super().__init__(f"invalid timestamp in '{field}': {message}", path=path)
        self.field = field
