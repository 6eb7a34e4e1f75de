"""
File-system host for the toggle strategies.

Finds the target files under a project root, wraps each one in a
``Document`` whose ``write_command()`` context applies an edit atomically
and keeps an undo copy, and opens files in an editor for manual review.
"""

import difflib
import logging
import os
import shutil
import sys
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import click

from togglehandler.config import DEFAULT_EXCLUDE
from togglehandler.definitions import TARGET_FILES, TargetFileKind
from togglehandler.errors import DocumentUnavailable, EditorUnavailable

logger = logging.getLogger(__name__)

UNDO_SUFFIX = ".toggle-undo"

_KIND_BY_NAME = {name: kind for kind, name in TARGET_FILES.items()}
_KIND_ORDER = list(TargetFileKind)


@dataclass(frozen=True)
class TargetFile:
    path: Path
    kind: TargetFileKind

    @property
    def name(self) -> str:
        return self.path.name


def find_target_files(root: Path, exclude: Sequence[str] = DEFAULT_EXCLUDE) -> List[TargetFile]:
    """All target files under ``root``, ordered by kind and then path.

    Every copy of a file name is returned; multi-module projects may
    hold more than one.
    """
    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in exclude)
        for filename in filenames:
            kind = _KIND_BY_NAME.get(filename)
            if kind is not None:
                found.append(TargetFile(Path(dirpath) / filename, kind))
    found.sort(key=lambda target: (_KIND_ORDER.index(target.kind), str(target.path)))
    logger.debug("Found %d target files under %s", len(found), root)
    return found


def _safe_replace(src: str, dst: str, *, retries: int = 3, delay: float = 0.1):
    """os.replace() with retry for Windows PermissionError."""
    for attempt in range(retries):
        try:
            os.replace(src, dst)
            return
        except PermissionError:
            if sys.platform != "win32" or attempt == retries - 1:
                raise
            time.sleep(delay * (2 ** attempt))


def _write_atomic(path: Path, text: str):
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        if path.exists():
            shutil.copymode(path, tmp)
        _safe_replace(tmp, str(path))
    except Exception:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


class TextBuffer:
    """Editable text handed to the body of a write command."""

    def __init__(self, text: str):
        self.original = text
        self.text = text

    @property
    def changed(self) -> bool:
        return self.text != self.original

    def diff(self, label: str) -> List[str]:
        return list(difflib.unified_diff(
            self.original.splitlines(keepends=True),
            self.text.splitlines(keepends=True),
            fromfile=f"a/{label}",
            tofile=f"b/{label}",
        ))


class Document:
    """One target file as a text document."""

    def __init__(self, path: Path, backup: bool = True):
        self.path = Path(path)
        self.backup = backup

    @property
    def undo_path(self) -> Path:
        return self.path.with_name(self.path.name + UNDO_SUFFIX)

    def read(self) -> str:
        try:
            with open(self.path, encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentUnavailable(f"Could not access document: {e}", self.path.name) from e

    @contextmanager
    def write_command(self, dry_run: bool = False) -> Iterator[TextBuffer]:
        """Read the file, let the caller edit the buffer, then commit.

        Nothing is written if the body raises, if the text is unchanged,
        or for a dry run. A commit replaces the file in one step after
        saving the previous text for ``undo()``.
        """
        buffer = TextBuffer(self.read())
        yield buffer
        if dry_run or not buffer.changed:
            return
        try:
            if self.backup:
                _write_atomic(self.undo_path, buffer.original)
            _write_atomic(self.path, buffer.text)
        except OSError as e:
            raise DocumentUnavailable(f"Could not write document: {e}", self.path.name) from e
        logger.info("Committed edit to %s", self.path)

    def has_undo(self) -> bool:
        return self.undo_path.is_file()

    def undo(self) -> bool:
        """Restore the text saved before the last commit. False if none."""
        if not self.has_undo():
            return False
        try:
            with open(self.undo_path, encoding="utf-8", newline="") as f:
                previous = f.read()
            _write_atomic(self.path, previous)
            self.undo_path.unlink()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentUnavailable(f"Could not restore document: {e}", self.path.name) from e
        logger.info("Restored %s from %s", self.path, self.undo_path.name)
        return True


def open_in_editor(path: Path, editor: Optional[str] = None):
    """Open ``path`` in the user's editor and wait for it to close.

    Raises:
        EditorUnavailable: If no editor could be launched.
    """
    try:
        click.edit(filename=str(path), editor=editor)
    except click.ClickException as e:
        raise EditorUnavailable(f"Could not open editor: {e.format_message()}", path.name) from e
