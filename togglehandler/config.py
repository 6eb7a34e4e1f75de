"""
Configuration for toggle-handler.

Loaded from environment variables; CLI options override them.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

# Directories never searched for target files
DEFAULT_EXCLUDE = (".git", ".gradle", ".idea", "build", "out", "node_modules")

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ToggleHandlerConfig:
    """Where to look for target files and how to write them.

    Environment variables:
        TOGGLE_HANDLER_PROJECT_DIR: Project root (default: current directory)
        TOGGLE_HANDLER_EXCLUDE: Comma-separated directory names to skip
        TOGGLE_HANDLER_BACKUP: Keep an undo copy of each edited file (default: on)
        TOGGLE_HANDLER_EDITOR: Editor used to open files for manual review
    """

    project_root: Path
    exclude_dirs: Tuple[str, ...] = DEFAULT_EXCLUDE
    backup: bool = True
    editor: Optional[str] = None

    @classmethod
    def from_env(cls, project_root: Optional[str] = None) -> "ToggleHandlerConfig":
        """Build config from the environment.

        Raises:
            ValueError: If the project root is not an existing directory.
        """
        root = Path(project_root or os.getenv("TOGGLE_HANDLER_PROJECT_DIR") or os.getcwd())
        root = root.expanduser().resolve()
        if not root.is_dir():
            raise ValueError(f"Project directory not found: {root}")

        exclude = DEFAULT_EXCLUDE
        raw_exclude = os.getenv("TOGGLE_HANDLER_EXCLUDE")
        if raw_exclude is not None:
            exclude = tuple(part.strip() for part in raw_exclude.split(",") if part.strip())

        backup = os.getenv("TOGGLE_HANDLER_BACKUP", "1").strip().lower() not in _FALSE_VALUES

        return cls(
            project_root=root,
            exclude_dirs=exclude,
            backup=backup,
            editor=os.getenv("TOGGLE_HANDLER_EDITOR") or None,
        )
