"""Unified configuration loaded from .blogmatter.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from blogmatter.content.body import DEFAULT_VIDEO_SHORTCODES
from blogmatter.content.parser import ParseOptions, check_timezone
from blogmatter.content.reader import DEFAULT_EXTENSIONS, ContentReader

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".blogmatter.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "blogmatter" / "config.toml"


class ContentSectionConfig(BaseModel):
    """[content] section."""

    directory: str = "content"
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))


class TimestampsSectionConfig(BaseModel):
    """[timestamps] section."""

    require_offset: bool = True
    default_timezone: str = "UTC"

    @field_validator("default_timezone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        return check_timezone(value)


class ShortcodesSectionConfig(BaseModel):
    """[shortcodes] section."""

    video: list[str] = Field(default_factory=lambda: list(DEFAULT_VIDEO_SHORTCODES))


class BlogmatterConfig(BaseModel):
    """Top-level configuration model."""

    content: ContentSectionConfig = Field(default_factory=ContentSectionConfig)
    timestamps: TimestampsSectionConfig = Field(default_factory=TimestampsSectionConfig)
    shortcodes: ShortcodesSectionConfig = Field(default_factory=ShortcodesSectionConfig)

    def to_parse_options(self) -> ParseOptions:
        """Convert to ParseOptions for the parser."""
        return ParseOptions(
            require_offset=self.timestamps.require_offset,
            default_timezone=self.timestamps.default_timezone,
        )

    def to_reader(self) -> ContentReader:
        """Build a ContentReader honouring the configured extensions."""
        return ContentReader(self.to_parse_options(), extensions=self.content.extensions)


def load_config(path: str | Path | None = None) -> BlogmatterConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .blogmatter.toml in CWD
    3. ~/.config/blogmatter/config.toml

    Then overlay environment variables.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = BlogmatterConfig.model_validate(data) if data else BlogmatterConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: BlogmatterConfig, **cli_kwargs: object) -> BlogmatterConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "content_directory": ("content", "directory"),
        "require_offset": ("timestamps", "require_offset"),
        "default_timezone": ("timestamps", "default_timezone"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return BlogmatterConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: BlogmatterConfig) -> BlogmatterConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    content_dir = os.environ.get("BLOGMATTER_CONTENT_DIR")
    if content_dir is not None:
        data["content"]["directory"] = content_dir

    offset_raw = os.environ.get("BLOGMATTER_REQUIRE_OFFSET")
    if offset_raw is not None:
        data["timestamps"]["require_offset"] = offset_raw.lower() in ("true", "1", "yes")

    tz_raw = os.environ.get("BLOGMATTER_DEFAULT_TIMEZONE")
    if tz_raw is not None:
        data["timestamps"]["default_timezone"] = tz_raw

    return BlogmatterConfig.model_validate(data)
