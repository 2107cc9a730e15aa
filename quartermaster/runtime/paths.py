"""Centralized path management for quartermaster.

The project root is the directory holding ``config/``. It defaults to the
current working directory and can be pinned with QUARTERMASTER_HOME.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_project_root() -> Path:
    """Determine the project root directory."""
    home = os.environ.get("QUARTERMASTER_HOME")
    if home:
        return Path(home).expanduser()
    return Path.cwd()


@dataclass
class ProjectPaths:
    """Container for all project-related paths."""

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def settings_file(self) -> Path:
        """Client settings TOML file."""
        return self.config / "quartermaster.toml"


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance."""
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Forget the cached root so the next get_paths() re-reads the environment."""
    global _paths
    _paths = None
