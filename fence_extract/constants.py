"""Constants used across the fence-extract package."""

from __future__ import annotations

FENCE_MARKER = "```"

DEFAULT_LANGUAGE = "pyrope"
DEFAULT_EXTENSION = "prp"
DEFAULT_SKIP_MARKER = "compile error"

# Limits
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

# Split mode writes file1.prp, file2.prp, ...
SNIPPET_FILENAME_TEMPLATE = "file{index}.{extension}"
