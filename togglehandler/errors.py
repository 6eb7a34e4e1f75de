"""Structured failures raised by the toggle editing strategies.

Every strategy raises one of these instead of returning partial text. The
modifier catches them per file, so one broken landmark never aborts the
edits of the remaining target files.
"""


class ToggleEditError(Exception):
    """Base class for all toggle editing failures."""

    kind = "edit_error"

    def __init__(self, message: str, file_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.file_name = file_name

    def __str__(self) -> str:
        if self.file_name:
            return f"{self.message} ({self.file_name})"
        return self.message


class LandmarkNotFound(ToggleEditError):
    """An expected syntactic marker is absent from the file."""

    kind = "landmark_not_found"


class UnbalancedNesting(ToggleEditError):
    """A parenthesis scan reached end of text without closing."""

    kind = "unbalanced_nesting"


class EntryNotFound(ToggleEditError):
    """The entry to delete is not present."""

    kind = "entry_not_found"


class DocumentUnavailable(ToggleEditError):
    """The file cannot be read or written as text."""

    kind = "document_unavailable"


class EditorUnavailable(ToggleEditError):
    """No editor could be launched to open a file for manual review."""

    kind = "editor_unavailable"


class InvalidToggle(ToggleEditError):
    """The toggle name is empty, already declared, or not declared."""

    kind = "invalid_toggle"
