from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from fence_extract.config import (
    ConfigError,
    ExtractConfig,
    build_config,
    find_config_table,
    load_config,
    validate_config,
)


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_reads_every_setting_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.fence-extract]
        language = "python"
        extension = "py"
        skip_marker = "doctest: +SKIP"
        max_file_size = 4096
        max_line_length = 120
        """,
    )

    assert load_config(tmp_path) == ExtractConfig(
        language="python",
        extension="py",
        skip_marker="doctest: +SKIP",
        max_file_size=4096,
        max_line_length=120,
    )


def test_missing_keys_keep_defaults(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.fence-extract]
        language = "ruby"
        """,
    )

    config = load_config(tmp_path)

    assert config.language == "ruby"
    assert config.extension == "prp"
    assert config.max_line_length is None


def test_nearest_table_found_from_nested_directory(tmp_path: Path):
    pyproject = _write_pyproject(
        tmp_path,
        """
        [tool.fence-extract]
        language = "go"
        """,
    )
    nested = tmp_path / "docs" / "guide"
    nested.mkdir(parents=True)

    assert find_config_table(nested) == (pyproject.resolve(), {"language": "go"})


def test_pyproject_without_table_is_passed_over(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.fence-extract]
        language = "lua"
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [project]
        name = "unrelated"

        [tool.black]
        line-length = 99
        """,
    )

    assert load_config(child).language == "lua"


def test_empty_table_means_defaults(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.fence-extract]
        language = "lua"
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(child, "[tool.fence-extract]\n")

    assert load_config(child) == ExtractConfig()


def test_undecodable_pyproject_is_passed_over(tmp_path: Path):
    broken = tmp_path / "broken"
    broken.mkdir()
    _write_pyproject(broken, "not = {valid")
    _write_pyproject(
        tmp_path,
        """
        [tool.fence-extract]
        language = "parent"
        """,
    )

    assert load_config(broken).language == "parent"


def test_no_table_anywhere_gives_defaults(tmp_path: Path):
    assert find_config_table(tmp_path) is None
    assert load_config(tmp_path) == ExtractConfig()


def test_unknown_setting_is_named_in_error(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.fence-extract]
        language = "python"
        fence = "~~~"
        """,
    )

    with pytest.raises(ConfigError) as exc_info:
        load_config(tmp_path)
    assert "fence" in str(exc_info.value)


def test_non_table_entry_is_rejected(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool]
        fence-extract = "python"
        """,
    )

    with pytest.raises(ConfigError):
        find_config_table(tmp_path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"language": ""},
        {"language": "   "},
        {"language": 3},
        {"extension": ""},
        {"extension": ".py"},
        {"extension": "a/b"},
        {"extension": "a\\b"},
        {"skip_marker": ""},
        {"max_file_size": 0},
        {"max_file_size": "big"},
        {"max_line_length": -1},
        {"max_line_length": True},
    ],
)
def test_validate_config_rejects_invalid_values(overrides):
    with pytest.raises(ConfigError):
        validate_config(ExtractConfig(**overrides))


def test_validate_config_allows_unlimited_lines():
    validate_config(ExtractConfig())
    validate_config(ExtractConfig(max_line_length=80))


def test_build_config_overrides_file_values(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.fence-extract]
        language = "python"
        extension = "py"
        """,
    )

    config = build_config(tmp_path, language="cython", extension=None, skip_marker=None)

    assert config.language == "cython"
    assert config.extension == "py"
    assert config.skip_marker == "compile error"


@pytest.mark.parametrize("source", ["file", "flag"])
def test_build_config_drops_leading_dot(tmp_path: Path, source: str):
    if source == "file":
        _write_pyproject(tmp_path, '[tool.fence-extract]\nextension = ".rb"\n')
        config = build_config(tmp_path)
    else:
        config = build_config(tmp_path, extension=".rb")

    assert config.extension == "rb"


def test_build_config_raises_on_invalid_override(tmp_path: Path):
    with pytest.raises(ConfigError):
        build_config(tmp_path, language="")
