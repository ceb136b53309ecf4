"""
Extracts unlabeled or language-tagged fenced code snippets from Markdown files.
Snippets are printed to stdout, or written one per file with `--dir`.
"""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import click
from . import __version__
from .config import ConfigError, build_config
from .exceptions import ReadError
from .filesystem import get_max_file_size, get_max_line_length, prepare_output_dir
from .output import write_snippets_to_directory, write_snippets_to_stream
from .parser import extract_files

__all__ = ["cli"]

USAGE_EXIT_CODE = 1


class ExtractCommand(click.Command):
    """Click command that reports usage errors with exit status 1."""

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as error:
            error.exit_code = USAGE_EXIT_CODE
            raise

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError as error:
            error.exit_code = USAGE_EXIT_CODE
            raise


@click.command(cls=ExtractCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="fence-extract")
@click.option(
    "-d",
    "--dir",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory; creates file1.<ext>, file2.<ext>, ...",
)
@click.option("--lang", "language", help="Language label that selects a fence")
@click.option("--extension", help="File extension used with --dir")
@click.option("--skip-marker", help="Drop lines containing this text (case-insensitive)")
@click.argument(
    "filepaths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
def cli(
    filepaths: tuple[Path, ...],
    out_dir: Path | None = None,
    language: str | None = None,
    extension: str | None = None,
    skip_marker: str | None = None,
):
    """
    Extract unlabeled or language-tagged code snippets from Markdown files.

    Args:
        filepaths: Markdown files, processed in order with shared state.
        out_dir: Directory for split mode; stdout is used when omitted.
        language: Override for the target language label.
        extension: Override for the split-mode file extension.
        skip_marker: Override for the marker that drops lines from snippets.

    Returns:
        None.

    Raises:
        click.BadParameter: If configuration values are invalid.
        click.ClickException: If an input cannot be read, a limit is exceeded, or
            the output directory cannot be created or written.

    Examples:
        fence-extract -d snippets --lang python --extension py README.md
    """
    try:
        config = build_config(
            Path.cwd(),
            language=language,
            extension=extension,
            skip_marker=skip_marker,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        config = replace(
            config,
            max_file_size=get_max_file_size(default=config.max_file_size),
            max_line_length=get_max_line_length(default=config.max_line_length),
        )
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    # Fail on an unusable directory before any input is read
    if out_dir is not None:
        try:
            prepare_output_dir(out_dir)
        except OSError as error:
            raise click.ClickException(str(error)) from error

    snippets = extract_files(filepaths, config)

    try:
        if out_dir is None:
            write_snippets_to_stream(snippets, sys.stdout)
        else:
            count = write_snippets_to_directory(snippets, out_dir, config.extension)
            click.echo(f"Wrote {count} snippet(s) to {out_dir}", err=True)
    except (OSError, ReadError) as error:
        raise click.ClickException(str(error)) from error


if __name__ == "__main__":
    cli()
