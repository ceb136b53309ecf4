"""Snippet output for concatenation and split modes."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from .constants import DEFAULT_EXTENSION
from .filesystem import ensure_output_dir_exists, snippet_path, write_snippet_file
from .models import Snippet


def format_snippet(snippet: Snippet) -> str:
    """Render a snippet for concatenation mode.

    The text is terminated with a newline when it lacks one, then followed by a
    blank separator line.

    Examples:
        format_snippet(Snippet(1, "a\\nb\\n"))  # "a\\nb\\n\\n"
        format_snippet(Snippet(2, ""))  # "\\n\\n"
    """
    text = snippet.text
    if not text.endswith("\n"):
        text += "\n"
    return f"{text}\n"


def write_snippets_to_stream(snippets: Iterable[Snippet], stream: TextIO) -> int:
    """Write snippets one after another to `stream`.

    Args:
        snippets: Snippets in emission order; consumed lazily.
        stream: Text stream, usually standard output.

    Returns:
        int: Number of snippets written.
    """
    count = 0
    for snippet in snippets:
        stream.write(format_snippet(snippet))
        count += 1
    return count


def write_snippets_to_directory(
    snippets: Iterable[Snippet], directory: Path, extension: str = DEFAULT_EXTENSION
) -> int:
    """Write each snippet to its own ``file<N>.<extension>`` in `directory`.

    The directory must already exist; see `filesystem.prepare_output_dir`.

    Args:
        snippets: Snippets in emission order; consumed lazily.
        directory: Target directory.
        extension: File extension without the leading dot.

    Returns:
        int: Number of files written.

    Raises:
        IOError: If a snippet cannot be written or the directory disappears
            before the run completes.

    Examples:
        write_snippets_to_directory(extract_files([Path("doc.md")]), Path("out"), "prp")
    """
    count = 0
    for snippet in snippets:
        write_snippet_file(snippet_path(directory, snippet.index, extension), snippet.text)
        count += 1

    ensure_output_dir_exists(directory)
    return count
