"""Data models for fence-extract."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ScanState:
    """Encapsulate scanner state while walking Markdown text.

    A single instance is threaded through every input file of a run, so fence
    flags, the pending buffer, and the snippet counter carry across file
    boundaries.

    Attributes:
        inside_fence: Whether the scanner is between an opening and closing fence line.
        inside_selected_fence: Whether the open fence is bare or labeled with the
            target language.
        buffer: Lines collected for the current selected fence.
        snippet_index: Number of snippets emitted so far.
    """

    inside_fence: bool = False
    inside_selected_fence: bool = False
    buffer: list[str] = field(default_factory=list)
    snippet_index: int = 0


@dataclass
class Snippet:
    """A code block extracted from a selected fence.

    Attributes:
        index: One-based position of the snippet across the whole run.
        text: Collected lines joined together, line endings included.
        source: File in which the snippet was completed, or None for in-memory input.
    """

    index: int
    text: str
    source: Path | None = None
