"""Tests for record convention checks."""

from datetime import UTC, datetime

from blogmatter.content.lint import Severity, lint_record
from blogmatter.content.models import ContentRecord


def _record(**kwargs: object) -> ContentRecord:
    fields: dict[str, object] = {
        "title": "Data Types in Swift",
        "description": "Int, Double, Bool and String.",
        "date": datetime(2025, 9, 7, 16, 0, tzinfo=UTC),
    }
    fields.update(kwargs)
    return ContentRecord(**fields)  # type: ignore[arg-type]


def _codes(record: ContentRecord) -> list[str]:
    return [issue.code for issue in lint_record(record)]


class TestLintRecord:
    def test_clean_record(self):
        record = _record(tags=["swift"], body="```swift\nlet x: Int = 1\n```\n")
        assert lint_record(record) == []

    def test_duplicate_tags_case_insensitive(self):
        issues = lint_record(_record(tags=["swift", "ios", "Swift"]))
        assert [i.code for i in issues] == ["duplicate-tag"]
        assert "Swift" in issues[0].message
        assert issues[0].severity is Severity.WARNING

    def test_duplicate_category_reported_once(self):
        record = _record(categories=["Swift", "Swift", "Swift"])
        assert _codes(record) == ["duplicate-category"]

    def test_case_variants_reported_as_one_group(self):
        issues = lint_record(_record(tags=["Swift", "swift", "SWIFT"]))
        assert [i.code for i in issues] == ["duplicate-tag"]
        assert "'swift'" in issues[0].message

    def test_missing_description_is_info(self):
        issues = lint_record(_record(description=""))
        assert issues[0].code == "missing-description"
        assert issues[0].severity is Severity.INFO

    def test_fence_issues_carry_line(self):
        record = _record(body="Intro\n\n```\nprint(1)\n```\n\n```swift\nlet y = 2\n")
        issues = lint_record(record)
        assert [(i.code, i.line) for i in issues] == [
            ("untagged-fence", 3),
            ("unclosed-fence", 7),
        ]

    def test_video_without_id(self):
        record = _record(body='{{< youtube title="Strings" >}}\n')
        assert _codes(record) == ["video-missing-id"]

    def test_video_shortcode_names_are_configurable(self):
        record = _record(body='{{< youtube title="Strings" >}}\n')
        assert lint_record(record, video_shortcodes=["vimeo"]) == []
