"""Literal inspection of a record body: code fences and shortcodes.

Nothing here renders or resolves anything.  Fenced code is returned as
text tagged with its info-string language, and Hugo-style shortcodes
(``{{< youtube id="..." title="..." >}}``) are returned as a name plus
their raw arguments for the external renderer to interpret.
"""

from __future__ import annotations

import re
import shlex
from collections.abc import Iterable, Iterator

from pydantic import BaseModel, Field

DEFAULT_VIDEO_SHORTCODES: tuple[str, ...] = ("youtube", "youtube-lite", "vimeo")

_FENCE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>[^\n]*)$")
_SHORTCODE_RE = re.compile(
    r"\{\{(?P<kind>[<%])\s*(?P<closing>/)?\s*(?P<name>[A-Za-z0-9_][\w.-]*)"
    r"(?P<args>.*?)\s*/?\s*[>%]\}\}"
)


class CodeBlock(BaseModel):
    """A fenced code block found in a body."""

    model_config = {"frozen": True}

    language: str = ""
    code: str
    line: int  # 1-based line of the opening fence
    closed: bool = True


class Shortcode(BaseModel):
    """A shortcode directive, kept as literal arguments."""

    model_config = {"frozen": True}

    name: str
    positional: list[str] = Field(default_factory=list)
    named: dict[str, str] = Field(default_factory=dict)
    line: int
    raw: str


class VideoEmbed(BaseModel):
    """A video-embed directive: an identifier plus a display label."""

    model_config = {"frozen": True}

    provider: str
    video_id: str
    label: str = ""
    line: int


def _scan(body: str) -> Iterator[tuple[int, str, CodeBlock | None]]:
    """Yield ``(line_no, line, None)`` for prose lines and one CodeBlock per fence."""
    lines = body.splitlines()
    i = 0
    while i < len(lines):
        match = _FENCE_RE.match(lines[i])
        if match is None:
            yield i + 1, lines[i], None
            i += 1
            continue

        fence = match.group("fence")
        info = match.group("info").strip()
        if fence[0] == "`" and "`" in info:
            # Backtick fences may not carry backticks in the info string
            yield i + 1, lines[i], None
            i += 1
            continue

        start = i
        content: list[str] = []
        closed = False
        i += 1
        while i < len(lines):
            stripped = lines[i].strip()
            if (
                stripped
                and stripped[0] == fence[0]
                and len(stripped) >= len(fence)
                and stripped == stripped[0] * len(stripped)
            ):
                closed = True
                i += 1
                break
            content.append(lines[i])
            i += 1

        language = info.split()[0] if info else ""
        yield start + 1, lines[start], CodeBlock(
            language=language.strip("{}."),
            code="\n".join(content),
            line=start + 1,
            closed=closed,
        )


def extract_code_blocks(body: str) -> list[CodeBlock]:
    """Return every fenced code block in document order."""
    return [block for _, _, block in _scan(body) if block is not None]


def _split_args(args: str) -> tuple[list[str], dict[str, str]]:
    try:
        tokens = shlex.split(args)
    except ValueError:
        tokens = args.split()

    positional: list[str] = []
    named: dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if sep and re.fullmatch(r"[A-Za-z_][\w-]*", key):
            named[key] = value
        else:
            positional.append(token)
    return positional, named


def extract_shortcodes(body: str) -> list[Shortcode]:
    """Return opening shortcodes that appear outside fenced code."""
    found: list[Shortcode] = []
    for line_no, line, block in _scan(body):
        if block is not None:
            continue
        for match in _SHORTCODE_RE.finditer(line):
            if match.group("closing"):
                continue
            positional, named = _split_args(match.group("args"))
            found.append(
                Shortcode(
                    name=match.group("name"),
                    positional=positional,
                    named=named,
                    line=line_no,
                    raw=match.group(0),
                )
            )
    return found


def video_embeds(
    body: str, names: Iterable[str] = DEFAULT_VIDEO_SHORTCODES
) -> list[VideoEmbed]:
    """Return video-embed directives, identified by shortcode name."""
    wanted = {n.lower() for n in names}
    embeds: list[VideoEmbed] = []
    for sc in extract_shortcodes(body):
        if sc.name.lower() not in wanted:
            continue
        video_id = sc.named.get("id") or (sc.positional[0] if sc.positional else "")
        label = (
            sc.named.get("title")
            or sc.named.get("label")
            or (sc.positional[1] if len(sc.positional) > 1 else "")
        )
        embeds.append(
            VideoEmbed(provider=sc.name.lower(), video_id=video_id, label=label, line=sc.line)
        )
    return embeds
