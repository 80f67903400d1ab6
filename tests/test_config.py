"""Tests for the configuration module."""

from pathlib import Path

import pytest

from nodecalc._cli.config import (
    DEFAULT_VALUE_WIDTH,
    ConfigError,
    NodecalcConfig,
    find_pyproject_toml,
    get_config,
    load_config,
)


def _write_pyproject(directory: Path, body: str) -> Path:
    pyproject = directory / "pyproject.toml"
    pyproject.write_text(body)
    return pyproject


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in current directory."""
        pyproject = _write_pyproject(tmp_path, "[project]\nname = 'test'\n")

        assert find_pyproject_toml(tmp_path) == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in parent directory."""
        pyproject = _write_pyproject(tmp_path, "[project]\nname = 'test'\n")
        subdir = tmp_path / "graphs" / "drafts"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == pyproject

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        """Should return None when no pyproject.toml is found."""
        assert find_pyproject_toml(tmp_path) is None


class TestLoadConfig:
    def test_defaults_without_section(self, tmp_path: Path) -> None:
        """A pyproject.toml without [tool.nodecalc] yields the defaults."""
        pyproject = _write_pyproject(tmp_path, "[project]\nname = 'test'\n")

        config = load_config(pyproject)

        assert config.autosave is False
        assert config.autosave_path == tmp_path / "auto_save.toml"
        assert config.value_width == DEFAULT_VALUE_WIDTH
        assert config.project_root == tmp_path

    def test_full_section(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(
            tmp_path,
            """
[tool.nodecalc]
autosave = true
autosave_path = "state/graph.toml"
value_width = 12
""",
        )

        config = load_config(pyproject)

        assert config.autosave is True
        assert config.autosave_path == tmp_path / "state" / "graph.toml"
        assert config.value_width == 12

    def test_absolute_autosave_path_kept(self, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere" / "auto.toml"
        pyproject = _write_pyproject(tmp_path, f'[tool.nodecalc]\nautosave_path = "{target.as_posix()}"\n')

        assert load_config(pyproject).autosave_path == target

    def test_editor_config(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(tmp_path, "[tool.nodecalc]\nautosave = true\n")

        editor_config = load_config(pyproject).editor_config()

        assert editor_config.auto_persist is True
        assert editor_config.autosave_path == tmp_path / "auto_save.toml"


class TestLoadConfigErrors:
    @pytest.mark.parametrize(
        ("body", "message"),
        [
            pytest.param('[tool.nodecalc]\nautosave = "yes"\n', "autosave", id="autosave-not-bool"),
            pytest.param("[tool.nodecalc]\nautosave_path = 3\n", "autosave_path", id="path-not-string"),
            pytest.param('[tool.nodecalc]\nautosave_path = ""\n', "autosave_path", id="path-empty"),
            pytest.param("[tool.nodecalc]\nvalue_width = 0\n", "value_width", id="width-zero"),
            pytest.param("[tool.nodecalc]\nvalue_width = true\n", "value_width", id="width-bool"),
            pytest.param('[tool.nodecalc]\nvalue_width = "5"\n', "value_width", id="width-string"),
            pytest.param("[tool.nodecalc]\ncolour = true\n", "Unknown", id="unknown-key"),
            pytest.param('[tool]\nnodecalc = "on"\n', "expected a table", id="not-a-table"),
            pytest.param("[tool.nodecalc\n", "Invalid TOML", id="invalid-toml"),
        ],
    )
    def test_invalid(self, tmp_path: Path, body: str, message: str) -> None:
        pyproject = _write_pyproject(tmp_path, body)

        with pytest.raises(ConfigError, match=message):
            load_config(pyproject)


class TestGetConfig:
    def test_defaults_without_pyproject(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert get_config() == NodecalcConfig()

    def test_reads_from_parent(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_pyproject(tmp_path, "[tool.nodecalc]\nvalue_width = 8\n")
        subdir = tmp_path / "graphs"
        subdir.mkdir()
        monkeypatch.chdir(subdir)

        config = get_config()

        assert config.value_width == 8
        assert config.project_root == tmp_path.resolve()
