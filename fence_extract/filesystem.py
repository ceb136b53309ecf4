"""Filesystem helpers for fence-extract."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import TextIO

from .constants import DEFAULT_MAX_FILE_SIZE, SNIPPET_FILENAME_TEMPLATE

MAX_FILE_SIZE_ENV_VAR = "FENCE_EXTRACT_MAX_FILE_SIZE"
MAX_LINE_LENGTH_ENV_VAR = "FENCE_EXTRACT_MAX_LINE_LENGTH"

SNIPPET_FILE_MODE = 0o644


def _positive_int_from_env(env_var: str, default: int | None) -> int | None:
    env_value = os.environ.get(env_var)
    if env_value is None:
        return default

    try:
        value = int(env_value)
    except ValueError as error:
        error_message = f"Invalid value for {env_var}: {env_value} (expected positive integer)"
        raise ValueError(error_message) from error

    if value <= 0:
        error_message = f"{env_var} must be a positive integer, got {value}."
        raise ValueError(error_message)

    return value


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum allowed input file size.

    Args:
        default: Fallback value in bytes when the environment variable is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["FENCE_EXTRACT_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size(default=102400)
    """
    return _positive_int_from_env(MAX_FILE_SIZE_ENV_VAR, default)


def get_max_line_length(default: int | None = None) -> int | None:
    """Resolve the optional maximum input line length.

    Lines are unlimited unless a limit is configured or set through the
    environment.

    Args:
        default: Fallback value in characters when the environment variable is
            unset; None means no limit.

    Returns:
        int | None: Maximum allowed line length in characters, or None.

    Raises:
        ValueError: If the environment value is not a positive integer.
    """
    return _positive_int_from_env(MAX_LINE_LENGTH_ENV_VAR, default)


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Return stat information for an input file.

    Args:
        filepath: Path to the file.

    Returns:
        os.stat_result: File metadata.

    Raises:
        FileNotFoundError: If the path does not exist.
        IOError: If the path is inaccessible or not a regular file.

    Examples:
        stat_result = collect_file_stat(Path("README.md"))
    """
    try:
        stat_result = os.stat(filepath)
    except FileNotFoundError as error:
        raise FileNotFoundError(f"{filepath} does not exist.") from error
    except OSError as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error

    if not stat.S_ISREG(stat_result.st_mode):
        error_message = f"{filepath} is not a regular file."
        raise IOError(error_message)

    return stat_result


def enforce_file_size(stat_result: os.stat_result, max_size: int, filepath: Path):
    """Guard against input files that exceed the configured maximum size.

    Raises:
        IOError: If `stat_result.st_size` exceeds `max_size`.
    """
    if stat_result.st_size > max_size:
        error_message = f"{filepath} exceeds the maximum allowed size of {max_size} bytes."
        raise IOError(error_message)


def safe_read(filepath: Path) -> TextIO:
    """Open a file for reading with consistent error handling.

    Args:
        filepath: Path to the file.

    Lines are split on ``\n`` only and returned with their endings untranslated,
    so CRLF input keeps its carriage returns.

    Returns:
        TextIO: File handle opened for reading in UTF-8.

    Raises:
        FileNotFoundError: If the path is missing.
        IOError: If the path is inaccessible or not a file.

    Examples:
        with safe_read(Path("README.md")) as handle:
            first_line = handle.readline()
    """
    try:
        return open(filepath, "r", encoding="UTF-8", newline="\n")
    except FileNotFoundError as error:
        raise FileNotFoundError(f"{filepath} does not exist.") from error
    except (
        PermissionError,
        IsADirectoryError,
        NotADirectoryError,
    ) as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error


def prepare_output_dir(directory: Path) -> Path:
    """Create the split-mode output directory and check that it is writable.

    Args:
        directory: Directory that will receive ``file<N>.<ext>`` snippets.

    Returns:
        Path: The directory, unchanged.

    Raises:
        PermissionError: If the directory cannot be created or is not writable.
        NotADirectoryError: If the path exists but is not a directory.

    Examples:
        prepare_output_dir(Path("build/snippets"))
    """
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except FileExistsError as error:
        raise NotADirectoryError(f"{directory} exists and is not a directory.") from error
    except PermissionError as error:
        raise PermissionError(f"Output directory {directory} cannot be created: {error}") from error

    if not os.access(directory, os.W_OK | os.X_OK):
        raise PermissionError(f"Output directory {directory} is not writable")

    return directory


def ensure_output_dir_exists(directory: Path):
    """Fail if the output directory vanished while snippets were being written.

    Raises:
        IOError: If `directory` is no longer a directory.
    """
    if not directory.is_dir():
        raise IOError(f"Output directory {directory} is missing at exit")


def snippet_path(directory: Path, index: int, extension: str) -> Path:
    """Return the split-mode path for the snippet numbered `index`.

    Examples:
        snippet_path(Path("out"), 1, "prp")  # Path("out/file1.prp")
    """
    return directory / SNIPPET_FILENAME_TEMPLATE.format(index=index, extension=extension)


def write_snippet_file(path: Path, text: str):
    """Atomically write snippet text to `path`.

    The text is written to a temporary file in the same directory, synced, and
    moved into place, so a reader never observes a partially written snippet.

    Args:
        path: Destination file; replaced when it already exists.
        text: Snippet contents, written verbatim.

    Returns:
        None.

    Raises:
        IOError: If the temporary file cannot be created, written, or moved.
    """
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", delete=False, dir=path.parent, newline=""
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(text)

            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            os.chmod(tmp_file.name, SNIPPET_FILE_MODE)

        os.replace(temp_path, path)
    except OSError as error:
        raise IOError(f"Error writing {path}: {error}") from error
    finally:
        if temp_path is not None:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                pass
