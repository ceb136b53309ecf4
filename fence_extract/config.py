"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib

from .constants import (
    DEFAULT_EXTENSION,
    DEFAULT_LANGUAGE,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_SKIP_MARKER,
)

CONFIG_TABLE = "fence-extract"


@dataclass
class ExtractConfig:
    """Configuration for extracting fenced code snippets.

    Attributes:
        language: Language token that selects a labeled fence (matched
            case-insensitively anywhere after the opening backticks).
        extension: File extension, without the leading dot, used for files
            written in split mode.
        skip_marker: Lines containing this text (case-insensitive) are dropped
            from selected fences.
        max_file_size: Maximum input file size in bytes.
        max_line_length: Optional maximum input line length in characters;
            None leaves lines unlimited.

    Examples:
        ExtractConfig(language="python", extension="py")
    """

    # Selection
    language: str = DEFAULT_LANGUAGE
    skip_marker: str = DEFAULT_SKIP_MARKER

    # Output
    extension: str = DEFAULT_EXTENSION

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_line_length: int | None = None


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`language` must be a non-empty string")
    """


def find_config_table(search_path: Path) -> tuple[Path, dict] | None:
    """Locate the nearest ``[tool.fence-extract]`` table.

    Checks `pyproject.toml` in `search_path` and then in each parent directory.
    Files that cannot be read or decoded, or that have no such table, are
    passed over. An empty table still counts as found.

    Returns:
        tuple[Path, dict] | None: The file and its table, or None when no
            directory up to the filesystem root defines one.

    Raises:
        ConfigError: If the nearest ``tool.fence-extract`` entry is not a table.
    """
    start = search_path.resolve()
    for directory in (start, *start.parents):
        pyproject = directory / "pyproject.toml"
        if not pyproject.is_file():
            continue

        try:
            with open(pyproject, "rb") as stream:
                data = tomllib.load(stream)
        except (OSError, tomllib.TOMLDecodeError):
            continue

        tool = data.get("tool")
        if not isinstance(tool, dict) or CONFIG_TABLE not in tool:
            continue

        table = tool[CONFIG_TABLE]
        if not isinstance(table, dict):
            raise ConfigError(f"`tool.{CONFIG_TABLE}` in {pyproject} must be a table")
        return pyproject, table

    return None


def load_config(search_path: Path) -> ExtractConfig:
    """Build an `ExtractConfig` from the nearest ``[tool.fence-extract]`` table.

    Keys missing from the table keep their defaults; no table at all yields the
    defaults. Values are not validated here; see `validate_config`.

    Raises:
        ConfigError: If the table is malformed or names an unknown setting.

    Examples:
        load_config(Path("docs"))
    """
    found = find_config_table(search_path)
    if found is None:
        return ExtractConfig()

    pyproject, table = found
    known = {field.name for field in fields(ExtractConfig)}
    unknown = sorted(set(table) - known)
    if unknown:
        raise ConfigError(
            f"Unknown setting(s) in [tool.{CONFIG_TABLE}] of {pyproject}: {', '.join(unknown)}"
        )
    return ExtractConfig(**table)


def validate_config(config: ExtractConfig) -> None:
    """Validate an `ExtractConfig` instance.

    Raises:
        ConfigError: If a text setting is empty or not a string, the extension
            has a leading dot or a path separator, or a limit is not a positive
            integer.

    Examples:
        validate_config(ExtractConfig(language="ruby", extension="rb"))
    """
    for name in ("language", "extension", "skip_marker"):
        value = getattr(config, name)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"`{name}` must be a non-empty string")

    if config.extension.startswith("."):
        raise ConfigError("`extension` must not start with a dot")
    if "/" in config.extension or "\\" in config.extension:
        raise ConfigError("`extension` must not contain path separators")

    limits = {"max_file_size": config.max_file_size}
    if config.max_line_length is not None:
        limits["max_line_length"] = config.max_line_length
    for name, value in limits.items():
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"`{name}` must be a positive integer")


def build_config(search_path: Path, **overrides: str | None) -> ExtractConfig:
    """Load file settings, apply command-line overrides, and validate.

    Overrides set to None are ignored. A leading dot on the extension, from
    either source, is dropped so ``.py`` and ``py`` behave the same.

    Raises:
        ConfigError: If loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), language="python", extension=".py")
    """
    config = load_config(search_path)
    config = replace(config, **{key: value for key, value in overrides.items() if value is not None})
    if isinstance(config.extension, str):
        config = replace(config, extension=config.extension.removeprefix("."))
    validate_config(config)
    return config
