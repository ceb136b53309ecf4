import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def write_markdown(tmp_path: Path):
    """Writes dedented Markdown into `tmp_path` and returns its path."""

    def _write(filename: str, content: str) -> Path:
        path = tmp_path / filename
        path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return path

    return _write
