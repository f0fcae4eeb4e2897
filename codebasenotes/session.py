"""Editing session facade used by front ends to drive the annotation store.

The session owns UI-only state (which path is being edited) and turns store
results into ``EditOutcome`` values: ignored paths are refusals and failed
saves are reported failures, never raised into the caller.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .annotation_tree import AnnotationEntry
from .annotation_tree.fs import PathLike
from .errors import PersistenceError
from .store import AnnotationStore, ChangeListener

logger = logging.getLogger(__name__)

IGNORED_MESSAGE = "This file/folder is ignored by .gitignore and cannot be edited."
DEFAULT_SUMMARY_WIDTH = 60

_REFERENCE_RE = re.compile(r"\s*\[\s*([^\]]+)\s*\]\s*")


class EditStatus(enum.Enum):
    READY = "ready"
    SAVED = "saved"
    UNCHANGED = "unchanged"
    IGNORED = "ignored"
    NO_TARGET = "no-target"
    FAILED = "failed"


@dataclass(frozen=True)
class EditOutcome:
    """Result of one session request, suitable for a status line."""

    status: EditStatus
    path: str = ""
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (EditStatus.READY, EditStatus.SAVED, EditStatus.UNCHANGED)


def summarize_annotation(annotation: str, width: int = DEFAULT_SUMMARY_WIDTH) -> str:
    """Shorten ``annotation`` to its first line or ``width`` characters.

    Truncated text ends with ``...``.
    """
    newline_index = annotation.find("\n")
    if newline_index != -1 and newline_index < width:
        return annotation[:newline_index] + "..."
    if len(annotation) > width:
        return annotation[:width] + "..."
    return annotation


class AnnotationSession:
    """Collaborator interface between a front end and one ``AnnotationStore``."""

    def __init__(self, store: AnnotationStore) -> None:
        self.store = store
        self._current_edit_target: str | None = None

    @property
    def current_edit_target(self) -> str | None:
        return self._current_edit_target

    def _display(self, path: PathLike) -> str:
        relative = self.store.relative(path)
        return relative if relative is not None else str(path)

    def get_annotation(self, path: PathLike) -> str:
        return self.store.get(path)

    def set_current_edit_target(self, path: PathLike) -> EditOutcome:
        """Select ``path`` for the next ``receive_edited_text`` call.

        Ignored and out-of-root paths are refused and clear the target.
        """
        relative = self.store.relative(path)
        if not relative:
            self._current_edit_target = None
            return EditOutcome(EditStatus.NO_TARGET, str(path), "Path is outside the project root.")
        if self.store.is_ignored(relative):
            self._current_edit_target = None
            return EditOutcome(EditStatus.IGNORED, relative, IGNORED_MESSAGE)
        self._current_edit_target = relative
        return EditOutcome(EditStatus.READY, relative)

    def receive_edited_text(self, text: str) -> EditOutcome:
        """Save ``text`` as the note of the current edit target."""
        target = self._current_edit_target
        if target is None:
            return EditOutcome(EditStatus.NO_TARGET, message="No annotation is being edited.")
        if self.store.is_ignored(target):
            return EditOutcome(EditStatus.IGNORED, target, IGNORED_MESSAGE)
        try:
            saved = self.store.set(target, text)
        except PersistenceError as exc:
            logger.error("%s", exc)
            return EditOutcome(
                EditStatus.FAILED,
                target,
                f"{exc}. The note is kept in memory but may not survive a restart.",
            )
        if not saved:
            return EditOutcome(EditStatus.IGNORED, target, IGNORED_MESSAGE)
        return EditOutcome(EditStatus.SAVED, target)

    def remove_annotation(self, path: PathLike) -> EditOutcome:
        display = self._display(path)
        try:
            removed = self.store.remove(path)
        except PersistenceError as exc:
            logger.error("%s", exc)
            return EditOutcome(EditStatus.FAILED, display, str(exc))
        return EditOutcome(EditStatus.SAVED if removed else EditStatus.UNCHANGED, display)

    def move_annotation(self, old_path: PathLike, new_path: PathLike) -> EditOutcome:
        display = self._display(new_path)
        try:
            moved = self.store.move(old_path, new_path)
        except PersistenceError as exc:
            logger.error("%s", exc)
            return EditOutcome(EditStatus.FAILED, display, str(exc))
        return EditOutcome(EditStatus.SAVED if moved else EditStatus.UNCHANGED, display)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def list_all(self) -> list[AnnotationEntry]:
        return self.store.list_all()

    def handle_path_deleted(self, path: PathLike) -> EditOutcome:
        """Drop the note of a file or folder deleted from the project."""
        if self.store.is_ignored(path):
            return EditOutcome(EditStatus.UNCHANGED, self._display(path))
        return self.remove_annotation(path)

    def handle_path_renamed(self, old_path: PathLike, new_path: PathLike) -> EditOutcome:
        """Carry a note across a rename when neither side is ignored."""
        if self.store.is_ignored(old_path) or self.store.is_ignored(new_path):
            return EditOutcome(EditStatus.UNCHANGED, self._display(new_path))
        if self._current_edit_target is not None and self._current_edit_target == self.store.relative(old_path):
            self._current_edit_target = self.store.relative(new_path)
        return self.move_annotation(old_path, new_path)

    def referenced_files(self, path: PathLike) -> list[Path]:
        """Return existing files named as ``[relative/path]`` in the note at ``path``.

        References to ``path`` itself and duplicates are skipped.
        """
        annotation = self.store.get(path)
        if not annotation:
            return []
        own = self.store.relative(path)
        found: list[Path] = []
        seen: set[str] = set()
        for match in _REFERENCE_RE.finditer(annotation):
            reference = match.group(1).strip().replace("\\", "/")
            relative = self.store.relative(reference)
            if not relative or relative == own or relative in seen:
                continue
            seen.add(relative)
            full_path = self.store.root_path.joinpath(*relative.split("/"))
            if full_path.is_file():
                found.append(full_path)
        return found

    def summary(self, path: PathLike, width: int = DEFAULT_SUMMARY_WIDTH) -> str:
        return summarize_annotation(self.store.get(path), width)


__all__ = [
    "IGNORED_MESSAGE",
    "EditStatus",
    "EditOutcome",
    "summarize_annotation",
    "AnnotationSession",
]
