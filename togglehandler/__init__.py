"""
Toggle Handler - create and delete feature toggles in a Kotlin codebase.

Edits the toggle registry (Toggle.kt), its documentation (ToggleDoc.kt),
the generated accessors (ServiceExtensions.kt) and the remote settings
defaults (RemoteSettingsDefaults.kt) with plain text strategies.
"""

__version__ = "0.1.0"

from togglehandler.definitions import TargetFileKind, ToggleRecord, to_snake_case  # noqa: E402
from togglehandler.errors import (  # noqa: E402
    DocumentUnavailable,
    EditorUnavailable,
    EntryNotFound,
    InvalidToggle,
    LandmarkNotFound,
    ToggleEditError,
    UnbalancedNesting,
)

__all__ = [
    "__version__",
    "TargetFileKind",
    "ToggleRecord",
    "to_snake_case",
    "ToggleEditError",
    "LandmarkNotFound",
    "UnbalancedNesting",
    "EntryNotFound",
    "DocumentUnavailable",
    "EditorUnavailable",
    "InvalidToggle",
]
