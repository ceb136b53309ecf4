"""
fence-extract: pull fenced code snippets out of Markdown files.

Unlabeled fences and fences labeled with a target language are extracted;
everything else is skipped. This package can be used both as a CLI tool and as
a library.

CLI Usage:
    fence-extract docs/*.md
    fence-extract -d snippets/ --lang python --extension py README.md

Library Usage:
    from pathlib import Path
    from fence_extract import ExtractConfig, extract_snippets

    content = Path("README.md").read_text()
    for snippet in extract_snippets(content, ExtractConfig(language="python")):
        print(snippet.index, snippet.text)
"""

from .config import ConfigError, ExtractConfig
from .exceptions import ExtractError, LineTooLongError, ReadError
from .models import ScanState, Snippet
from .output import write_snippets_to_directory, write_snippets_to_stream
from .parser import (
    extract_files,
    extract_snippets,
    finish_scan,
    is_fence_line,
    is_selected_fence,
    is_skipped_line,
    scan_line,
    scan_lines,
)

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "extract_snippets",
    "extract_files",
    "scan_line",
    "scan_lines",
    "finish_scan",
    # Output
    "write_snippets_to_stream",
    "write_snippets_to_directory",
    # Predicates
    "is_fence_line",
    "is_selected_fence",
    "is_skipped_line",
    # Data models
    "ExtractConfig",
    "ScanState",
    "Snippet",
    # Exceptions
    "ConfigError",
    "ExtractError",
    "LineTooLongError",
    "ReadError",
    # Version
    "__version__",
]
