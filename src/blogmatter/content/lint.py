"""Convention checks that do not make a record invalid."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel

from blogmatter.content.body import DEFAULT_VIDEO_SHORTCODES
from blogmatter.content.models import ContentRecord


class Severity(StrEnum):
    WARNING = "warning"
    INFO = "info"


class LintIssue(BaseModel):
    """A single convention problem in a record."""

    code: str
    message: str
    severity: Severity = Severity.WARNING
    line: int | None = None  # body line, when the issue is in the body


def _duplicates(labels: tuple[str, ...]) -> list[str]:
    """One entry per case-insensitive group that repeats."""
    seen: set[str] = set()
    reported: set[str] = set()
    dupes: list[str] = []
    for label in labels:
        key = label.casefold()
        if key in seen and key not in reported:
            dupes.append(label)
            reported.add(key)
        seen.add(key)
    return dupes


def lint_record(
    record: ContentRecord,
    *,
    video_shortcodes: Iterable[str] = DEFAULT_VIDEO_SHORTCODES,
) -> list[LintIssue]:
    """Return convention issues for a record, in a stable order."""
    issues: list[LintIssue] = []

    for field in ("categories", "tags"):
        for label in _duplicates(getattr(record, field)):
            issues.append(
                LintIssue(
                    code="duplicate-tag" if field == "tags" else "duplicate-category",
                    message=f"'{label}' appears more than once in {field}",
                )
            )

    if not record.description.strip():
        issues.append(
            LintIssue(
                code="missing-description",
                message="no description; search snippets will fall back to the body",
                severity=Severity.INFO,
            )
        )

    for block in record.code_blocks():
        if not block.closed:
            issues.append(
                LintIssue(
                    code="unclosed-fence",
                    message="code fence is never closed",
                    line=block.line,
                )
            )
        if not block.language:
            issues.append(
                LintIssue(
                    code="untagged-fence",
                    message="code fence has no language",
                    severity=Severity.INFO,
                    line=block.line,
                )
            )

    for embed in record.video_embeds(video_shortcodes):
        if not embed.video_id:
            issues.append(
                LintIssue(
                    code="video-missing-id",
                    message=f"{embed.provider} embed has no video identifier",
                    line=embed.line,
                )
            )

    return issues
