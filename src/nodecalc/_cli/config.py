"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from nodecalc._editor import DEFAULT_AUTOSAVE_PATH, EditorConfig

DEFAULT_VALUE_WIDTH = 5


class ConfigError(Exception):
    """Error in nodecalc configuration."""


@dataclass(slots=True, frozen=True)
class NodecalcConfig:
    """Configuration loaded from the ``[tool.nodecalc]`` table of pyproject.toml.

    Relative paths are resolved from the project root (directory containing
    pyproject.toml).
    """

    autosave: bool = False
    autosave_path: Path = DEFAULT_AUTOSAVE_PATH
    value_width: int = DEFAULT_VALUE_WIDTH
    project_root: Path | None = None

    def editor_config(self) -> EditorConfig:
        """Build the session settings this configuration describes."""
        return EditorConfig(auto_persist=self.autosave, autosave_path=self.autosave_path)


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    current = (start_dir if start_dir is not None else Path.cwd()).resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def load_config(pyproject_path: Path) -> NodecalcConfig:
    """Load and validate [tool.nodecalc] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed NodecalcConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("nodecalc", {})
    if not isinstance(section, dict):
        msg = "Invalid [tool.nodecalc]: expected a table"
        raise ConfigError(msg)

    unknown = set(section) - {"autosave", "autosave_path", "value_width"}
    if unknown:
        msg = f"Unknown [tool.nodecalc] keys: {', '.join(sorted(unknown))}"
        raise ConfigError(msg)

    autosave = section.get("autosave", False)
    if not isinstance(autosave, bool):
        msg = "Invalid [tool.nodecalc].autosave: expected true or false"
        raise ConfigError(msg)

    autosave_value = section.get("autosave_path", str(DEFAULT_AUTOSAVE_PATH))
    if not isinstance(autosave_value, str) or not autosave_value:
        msg = "Invalid [tool.nodecalc].autosave_path: expected string path"
        raise ConfigError(msg)
    autosave_path = Path(autosave_value)
    if not autosave_path.is_absolute():
        autosave_path = project_root / autosave_path

    value_width = section.get("value_width", DEFAULT_VALUE_WIDTH)
    if isinstance(value_width, bool) or not isinstance(value_width, int) or value_width < 1:
        msg = "Invalid [tool.nodecalc].value_width: expected a positive integer"
        raise ConfigError(msg)

    return NodecalcConfig(
        autosave=autosave,
        autosave_path=autosave_path,
        value_width=value_width,
        project_root=project_root,
    )


def get_config() -> NodecalcConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        NodecalcConfig (defaults if no pyproject.toml or no [tool.nodecalc] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return NodecalcConfig()
    return load_config(pyproject_path)
