"""Path utilities for the enrollment split pipeline."""

import re
from pathlib import Path

# Characters allowed verbatim in carrier file names
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9 ._-]")


def get_project_root() -> Path:
    """Get the project root directory.

    Returns:
        Path to the project root

    """
    return Path(__file__).parent.parent.parent


def ensure_directory_exists(directory_path: str) -> None:
    """Create directory if it doesn't exist.

    Args:
        directory_path: Path to the directory to create

    """
    Path(directory_path).mkdir(parents=True, exist_ok=True)


def get_config_path(filename: str = "settings.yaml") -> Path:
    """Get the path to a config file.

    Looks for a config/ directory holding the file in the current directory
    and its parents, then falls back to the project root.

    Args:
        filename: Name of the config file (default: settings.yaml)

    Returns:
        Path to the config file

    """
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        candidate = parent / "config" / filename
        if candidate.exists():
            return candidate

    return get_project_root() / "config" / filename


def safe_filename_component(value: str) -> str:
    """Make a string safe to use as part of a file name.

    Args:
        value: Raw value, e.g. a carrier name

    Returns:
        The value with path separators and other unsafe characters replaced by
        underscores; dot-only names are prefixed so they never resolve to a
        directory reference

    """
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", value)
    if cleaned.strip(".") == "":
        cleaned = "_" + cleaned
    return cleaned
