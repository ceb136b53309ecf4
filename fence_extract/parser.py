"""Fence detection and snippet scanning."""

from __future__ import annotations

import io
import re
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path

from .config import ExtractConfig, validate_config
from .constants import FENCE_MARKER
from .exceptions import LineTooLongError, ReadError
from .filesystem import collect_file_stat, enforce_file_size, safe_read
from .models import ScanState, Snippet


@lru_cache(maxsize=32)
def _labeled_fence_pattern(language: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(FENCE_MARKER)}.*{re.escape(language)}", re.IGNORECASE)


@lru_cache(maxsize=32)
def _skip_pattern(skip_marker: str) -> re.Pattern[str]:
    return re.compile(re.escape(skip_marker), re.IGNORECASE)


def is_fence_line(line: str) -> bool:
    """Return True when `line` contains the triple-backtick marker anywhere."""
    return FENCE_MARKER in line


def is_selected_fence(line: str, language: str) -> bool:
    """Decide whether an opening fence line selects its block.

    A bare fence (nothing but the marker once surrounding whitespace is
    trimmed) is always selected. A labeled fence is selected when the trimmed
    line starts with the marker and `language` appears anywhere after it,
    ignoring case.

    Args:
        line: Opening fence line, line ending included or not.
        language: Target language token.

    Returns:
        bool: True for a bare fence or a fence labeled with `language`.

    Examples:
        is_selected_fence("```\\n", "pyrope")  # True
        is_selected_fence("``` Pyrope linenums\\n", "pyrope")  # True
        is_selected_fence("```python\\n", "pyrope")  # False
    """
    stripped = line.strip()
    if stripped == FENCE_MARKER:
        return True
    return _labeled_fence_pattern(language).search(stripped) is not None


def is_skipped_line(line: str, skip_marker: str) -> bool:
    """Return True when `line` contains `skip_marker`, ignoring case."""
    return _skip_pattern(skip_marker).search(line) is not None


def _line_length(line: str) -> int:
    line_len = len(line)
    if line.endswith("\n"):
        line_len -= 1
        if line_len > 0 and line[line_len - 1] == "\r":
            line_len -= 1
    return line_len


def _emit(state: ScanState, source: Path | None) -> Snippet:
    state.snippet_index += 1
    return Snippet(index=state.snippet_index, text="".join(state.buffer), source=source)


def _open_fence(state: ScanState, line: str, language: str) -> bool:
    """Enter a fence, classifying it as selected or not.

    Args:
        state: Scan state to update.
        line: Current line being scanned.
        language: Target language token.

    Returns:
        bool: True when the line opened a fence; False when a fence is already open
            or the line carries no marker.

    Examples:
        _open_fence(ScanState(), "```pyrope\\n", "pyrope")  # True
    """
    if state.inside_fence or not is_fence_line(line):
        return False

    state.inside_fence = True
    state.inside_selected_fence = is_selected_fence(line, language)
    state.buffer.clear()
    return True


def _close_fence(state: ScanState, source: Path | None = None) -> Snippet | None:
    """Leave the open fence and reset the scan state.

    Returns:
        Snippet | None: The buffered snippet, even when empty, if the fence was
            selected; otherwise None.
    """
    snippet = _emit(state, source) if state.inside_selected_fence else None
    state.inside_fence = False
    state.inside_selected_fence = False
    state.buffer.clear()
    return snippet


def _collect_line(state: ScanState, line: str, skip_marker: str) -> bool:
    """Buffer a content line when inside a selected fence.

    Returns:
        bool: True when the line was appended to the buffer.
    """
    if not (state.inside_fence and state.inside_selected_fence):
        return False
    if is_skipped_line(line, skip_marker):
        return False
    state.buffer.append(line)
    return True


def scan_line(
    state: ScanState,
    line: str,
    config: ExtractConfig | None = None,
    source: Path | None = None,
) -> Snippet | None:
    """Advance `state` by one line.

    Fence lines toggle the fence and are never buffered themselves. Content
    lines are buffered only inside a selected fence.

    Args:
        state: Scan state shared across the whole run.
        line: Line to process, usually with its trailing newline.
        config: Selection settings. Defaults to a new `ExtractConfig`.
        source: File the line comes from, recorded on emitted snippets.

    Returns:
        Snippet | None: The snippet completed by this line, if any.
    """
    config = config or ExtractConfig()

    if not is_fence_line(line):
        _collect_line(state, line, config.skip_marker)
        return None

    if state.inside_fence:
        return _close_fence(state, source)

    _open_fence(state, line, config.language)
    return None


def scan_lines(
    lines: Iterable[str],
    state: ScanState | None = None,
    config: ExtractConfig | None = None,
    source: Path | None = None,
) -> Iterator[Snippet]:
    """Scan lines and yield each snippet as its closing fence is reached.

    No end-of-input flush is performed here; call `finish_scan` once every input
    has been scanned.

    Args:
        lines: Lines to scan, line endings included.
        state: Scan state to continue from. A fresh `ScanState` when omitted.
        config: Selection settings and line-length limit.
        source: File the lines come from.

    Yields:
        Snippet: Completed snippets in input order.

    Raises:
        LineTooLongError: If a limit is configured and a line exceeds
            `config.max_line_length`.
    """
    state = state if state is not None else ScanState()
    config = config or ExtractConfig()

    for line_number, line in enumerate(lines, start=1):
        if config.max_line_length is not None and _line_length(line) > config.max_line_length:
            raise LineTooLongError(line_number, config.max_line_length)

        snippet = scan_line(state, line, config, source)
        if snippet is not None:
            yield snippet


def finish_scan(state: ScanState, source: Path | None = None) -> Snippet | None:
    """Flush a selected fence left open at the end of input.

    Unterminated fences are recovered rather than reported: a non-empty buffer
    becomes one last snippet. The state is reset afterwards, so calling this
    twice never emits the same snippet again.

    Args:
        state: Scan state after the last line of input.
        source: File recorded on the flushed snippet.

    Returns:
        Snippet | None: The flushed snippet, or None when nothing was pending.
    """
    snippet = None
    if state.inside_fence and state.inside_selected_fence and state.buffer:
        snippet = _emit(state, source)

    state.inside_fence = False
    state.inside_selected_fence = False
    state.buffer.clear()
    return snippet


def extract_snippets(content: str, config: ExtractConfig | None = None) -> list[Snippet]:
    """Extract every selected snippet from Markdown text.

    Lines are split on ``\n`` only, exactly as `scan_file` reads a file, so
    the same text yields the same snippets in memory and on disk.

    Args:
        content: The Markdown content to scan.
        config: Selection settings. Defaults to a new `ExtractConfig`.

    Returns:
        list[Snippet]: Snippets numbered from 1, including a flushed trailing
            snippet when the text ends inside a selected fence.

    Raises:
        ConfigError: If the configuration fails validation.
        LineTooLongError: If a limit is configured and a line exceeds it.

    Examples:
        extract_snippets("```\\nprint(1)\\n```\\n")[0].text  # "print(1)\\n"
    """
    config = config or ExtractConfig()
    validate_config(config)

    state = ScanState()
    snippets = list(scan_lines(io.StringIO(content, newline="\n"), state, config))
    trailing = finish_scan(state)
    if trailing is not None:
        snippets.append(trailing)
    return snippets


def scan_file(
    filepath: Path, state: ScanState, config: ExtractConfig | None = None
) -> Iterator[Snippet]:
    """Scan one Markdown file, continuing from `state`.

    The file handle stays open only while the file is being read.

    Args:
        filepath: Markdown file to read.
        state: Scan state shared across the run.
        config: Selection settings and limits.

    Yields:
        Snippet: Snippets completed inside this file.

    Raises:
        FileNotFoundError: If the file does not exist.
        IOError: If the file is inaccessible, not a regular file, or too large.
        ReadError: If the file is not valid UTF-8 or contains an overlong line.
    """
    config = config or ExtractConfig()

    stat_result = collect_file_stat(filepath)
    enforce_file_size(stat_result, config.max_file_size, filepath)

    try:
        with safe_read(filepath) as handle:
            yield from scan_lines(handle, state, config, source=filepath)
    except UnicodeDecodeError as error:
        error_message = f"Invalid UTF-8 sequence in {filepath}: {error}"
        raise ReadError(error_message) from error
    except LineTooLongError as error:
        error_message = (
            f"{filepath} contains a line at line {error.line_number} "
            f"exceeding the maximum allowed length of {error.max_line_length} characters."
        )
        raise ReadError(error_message) from error


def extract_files(
    filepaths: Iterable[Path],
    config: ExtractConfig | None = None,
    state: ScanState | None = None,
) -> Iterator[Snippet]:
    """Extract snippets from several files in order, sharing one scan state.

    Fence flags, the pending buffer, and the snippet counter persist across file
    boundaries. After the last file, a selected fence that is still open is
    flushed as a final snippet.

    Args:
        filepaths: Markdown files, processed in the given order.
        config: Selection settings and limits. Defaults to a new `ExtractConfig`.
        state: Scan state to continue from. A fresh `ScanState` when omitted.

    Yields:
        Snippet: Snippets numbered contiguously from ``state.snippet_index + 1``.

    Raises:
        ConfigError: If the configuration fails validation.
        FileNotFoundError: If an input file does not exist.
        IOError: If an input file cannot be read.
        ReadError: If an input file is not valid UTF-8 or has an overlong line.

    Examples:
        for snippet in extract_files([Path("a.md"), Path("b.md")]):
            print(snippet.index, snippet.text)
    """
    config = config or ExtractConfig()
    validate_config(config)
    state = state if state is not None else ScanState()

    last_source: Path | None = None
    for filepath in filepaths:
        filepath = Path(filepath)
        yield from scan_file(filepath, state, config)
        last_source = filepath

    trailing = finish_scan(state, last_source)
    if trailing is not None:
        yield trailing
