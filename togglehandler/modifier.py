"""
Create and delete toggles across every discovered target file.

Each file is edited on its own: a failure is recorded as that file's
outcome and the remaining files are still processed. Edits already
committed to other files are not rolled back.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from togglehandler.config import ToggleHandlerConfig
from togglehandler.definitions import TARGET_FILES, TargetFileKind, ToggleRecord
from togglehandler.errors import DocumentUnavailable, InvalidToggle, ToggleEditError
from togglehandler.strategies import (
    add_documentation_entry,
    add_registry_entry,
    add_remote_setting_default,
    add_service_extension,
    extract_toggle_names,
    locate_service_extension,
    remove_registry_entry,
    remove_remote_setting_default,
)
from togglehandler.workspace import Document, TargetFile, find_target_files, open_in_editor

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"[A-Za-z_]\w*")

CREATE_STRATEGIES = {
    TargetFileKind.REGISTRY: add_registry_entry,
    TargetFileKind.DOCUMENTATION: add_documentation_entry,
    TargetFileKind.SERVICE_EXTENSIONS: add_service_extension,
    TargetFileKind.REMOTE_SETTINGS_DEFAULTS: add_remote_setting_default,
}

DELETE_STRATEGIES = {
    TargetFileKind.REGISTRY: remove_registry_entry,
    TargetFileKind.REMOTE_SETTINGS_DEFAULTS: remove_remote_setting_default,
}


class EditStatus(str, Enum):
    MODIFIED = "modified"
    UNCHANGED = "unchanged"
    OPENED = "opened"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class FileEditOutcome:
    """What happened to one target file."""

    target: TargetFile
    status: EditStatus
    message: str = ""
    error: Optional[ToggleEditError] = None
    diff: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is not EditStatus.FAILED


class ToggleFileModifier:
    """Applies the per-file strategies to a project."""

    def __init__(self, config: ToggleHandlerConfig,
                 opener: Optional[Callable[[Path], None]] = None):
        self.config = config
        self.opener = opener or (lambda path: open_in_editor(path, config.editor))

    def find_toggle_files(self) -> List[TargetFile]:
        return find_target_files(self.config.project_root, self.config.exclude_dirs)

    def list_toggles(self, files: Optional[List[TargetFile]] = None) -> List[str]:
        """Toggle names declared in the registry file, in file order.

        Raises:
            DocumentUnavailable: If no registry file exists in the project.
        """
        if files is None:
            files = self.find_toggle_files()
        registries = [t for t in files if t.kind is TargetFileKind.REGISTRY]
        if not registries:
            raise DocumentUnavailable(
                f"Could not find file {TARGET_FILES[TargetFileKind.REGISTRY]}"
            )
        names = []
        for registry in registries:
            for name in extract_toggle_names(Document(registry.path).read()):
                if name not in names:
                    names.append(name)
        return names

    def create_toggle(self, record: ToggleRecord, dry_run: bool = False) -> List[FileEditOutcome]:
        """Add ``record`` to every target file.

        Raises:
            InvalidToggle: If the name is empty, not an identifier, or already declared.
        """
        if not record.name:
            raise InvalidToggle("Toggle name is empty")
        if not _IDENTIFIER.fullmatch(record.name):
            raise InvalidToggle(f"Toggle name {record.name!r} is not a valid identifier")

        files = self.find_toggle_files()
        if any(t.kind is TargetFileKind.REGISTRY for t in files):
            if record.name in self.list_toggles(files):
                raise InvalidToggle(f"Toggle {record.name} already exists")

        logger.info("Creating toggle %s in %d files", record.name, len(files))
        return [
            self._apply(target, lambda text, edit=CREATE_STRATEGIES[target.kind]: edit(text, record), dry_run)
            for target in files
        ]

    def delete_toggle(self, name: str, dry_run: bool = False,
                      open_extensions: bool = True) -> List[FileEditOutcome]:
        """Remove ``name`` from the registry and remote defaults.

        The service extension accessor is never removed automatically
        since other code may call it; its file is opened for review
        instead.

        Raises:
            DocumentUnavailable: If there is no registry file.
            InvalidToggle: If ``name`` is not declared in the registry.
        """
        files = self.find_toggle_files()
        if name not in self.list_toggles(files):
            raise InvalidToggle(f"Toggle {name} is not declared")

        logger.info("Deleting toggle %s from %d files", name, len(files))
        outcomes = []
        for target in files:
            if target.kind in DELETE_STRATEGIES:
                edit = DELETE_STRATEGIES[target.kind]
                outcomes.append(self._apply(target, lambda text, edit=edit: edit(text, name), dry_run))
            elif target.kind is TargetFileKind.SERVICE_EXTENSIONS:
                outcomes.append(self._review(target, name, open_extensions and not dry_run))
            else:
                outcomes.append(FileEditOutcome(
                    target, EditStatus.SKIPPED, "documentation entries are not removed automatically"
                ))
        return outcomes

    def _apply(self, target: TargetFile, edit: Callable[[str], str], dry_run: bool) -> FileEditOutcome:
        document = Document(target.path, backup=self.config.backup)
        try:
            with document.write_command(dry_run=dry_run) as buffer:
                buffer.text = edit(buffer.text)
        except ToggleEditError as e:
            if e.file_name is None:
                e.file_name = target.name
            logger.warning("Could not edit %s: %s", target.path, e.message)
            return FileEditOutcome(target, EditStatus.FAILED, e.message, error=e)

        if not buffer.changed:
            return FileEditOutcome(target, EditStatus.UNCHANGED, "entry already present")
        return FileEditOutcome(target, EditStatus.MODIFIED, diff=buffer.diff(target.name))

    def _review(self, target: TargetFile, name: str, open_file: bool) -> FileEditOutcome:
        try:
            line = locate_service_extension(Document(target.path).read(), name)
        except DocumentUnavailable as e:
            return FileEditOutcome(target, EditStatus.FAILED, e.message, error=e)

        where = f"is{name}Enabled at line {line}" if line else f"no is{name}Enabled accessor found"
        if not open_file:
            return FileEditOutcome(target, EditStatus.SKIPPED, f"review manually ({where})")

        try:
            self.opener(target.path)
        except ToggleEditError as e:
            if e.file_name is None:
                e.file_name = target.name
            logger.warning("Could not open %s: %s", target.path, e.message)
            return FileEditOutcome(target, EditStatus.FAILED, e.message, error=e)
        return FileEditOutcome(target, EditStatus.OPENED, where)
