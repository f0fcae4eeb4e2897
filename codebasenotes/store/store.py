"""Annotation store: tree, persistence, and change notification for one project.

Every mutating call follows the same order: mutate the in-memory tree, save
the sidecar, then notify subscribers. A failed save raises
``PersistenceError`` and notifies nobody; the in-memory change is kept.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from ..annotation_tree import (
    AnnotationEntry,
    AnnotationTree,
    NodeKind,
    classify_node_kind,
    flatten,
    relative_posix,
)
from ..annotation_tree.fs import PathLike
from ..gitignore import DEFAULT_IGNORE_FILE_NAME, IgnoreMatcher
from .events import ChangeListener, ChangeNotifier
from .persistence import DEFAULT_SIDECAR_NAME, SidecarFile
from .watch import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    SIDECAR_CHANGED,
    SIDECAR_CREATED,
    SIDECAR_DELETED,
    SidecarWatch,
    SidecarWatchThread,
)

logger = logging.getLogger(__name__)

ROOT_CHANGE = ""


class AnnotationStore:
    """Owns the annotation tree of one project root.

    Collaborators are injected; ``AnnotationStore.open`` builds the default
    set from a project directory.
    """

    def __init__(
        self,
        root_path: Path,
        matcher: IgnoreMatcher,
        sidecar: SidecarFile,
        notifier: ChangeNotifier | None = None,
        *,
        classify: Callable[[Path], NodeKind] = classify_node_kind,
    ) -> None:
        self.root_path = root_path
        self.matcher = matcher
        self.sidecar = sidecar
        self.notifier = notifier if notifier is not None else ChangeNotifier()
        self._classify = classify
        self._lock = threading.RLock()
        self.watch = SidecarWatch(sidecar.path)
        self._watch_thread: SidecarWatchThread | None = None
        self.tree = sidecar.load(root_path, matcher, classify=classify)

    @classmethod
    def open(
        cls,
        root_path: Path,
        *,
        sidecar_name: str = DEFAULT_SIDECAR_NAME,
        ignore_file_name: str = DEFAULT_IGNORE_FILE_NAME,
    ) -> AnnotationStore:
        """Build a store for ``root_path`` with its ignore file and sidecar."""
        root = root_path.resolve()
        matcher = IgnoreMatcher.for_root(root, ignore_file_name)
        return cls(root, matcher, SidecarFile(root / sidecar_name))

    @property
    def exists(self) -> bool:
        """Whether the sidecar file currently backs this store."""
        return self.sidecar.exists

    def relative(self, path: PathLike) -> str | None:
        return relative_posix(self.root_path, path)

    def is_ignored(self, path: PathLike) -> bool:
        """Return whether ``path`` may not hold a note.

        The directory form is checked when the path is a directory on disk.
        """
        relative = self.relative(path)
        if not relative:
            return False
        is_dir = self.root_path.joinpath(*relative.split("/")).is_dir()
        return self.matcher.is_ignored(relative, is_dir=is_dir)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        return self.notifier.subscribe(listener)

    def get(self, path: PathLike) -> str:
        return self.tree.get(path)

    def list_all(self) -> list[AnnotationEntry]:
        return flatten(self.tree)

    def _persist(self) -> None:
        if not self.sidecar.exists and len(self.tree) == 0:
            # Nothing to keep and no file to update.
            self.tree.prune()
            return
        self.sidecar.save(self.tree)
        self.watch.acknowledge()

    def set(self, path: PathLike, text: str) -> bool:
        """Store ``text`` at ``path``; ``False`` when the path is refused."""
        with self._lock:
            if not self.tree.set(path, text):
                return False
            self._persist()
        self.notifier.emit(self.relative(path) or ROOT_CHANGE)
        return True

    def remove(self, path: PathLike) -> bool:
        """Remove the note at ``path``; ``False`` when nothing was stored."""
        with self._lock:
            if not self.tree.remove(path):
                return False
            self._persist()
        self.notifier.emit(self.relative(path) or ROOT_CHANGE)
        return True

    def move(self, old_path: PathLike, new_path: PathLike) -> bool:
        """Move the note at ``old_path`` to ``new_path``; emits both paths."""
        with self._lock:
            if not self.tree.move(old_path, new_path):
                return False
            self._persist()
        self.notifier.emit(self.relative(old_path) or ROOT_CHANGE)
        self.notifier.emit(self.relative(new_path) or ROOT_CHANGE)
        return True

    def prune(self) -> int:
        """Prune the tree and persist the result when anything was dropped.

        Entries already dropped while loading count too, so the file on disk
        is rewritten without them.
        """
        with self._lock:
            removed = self.tree.prune() + self.sidecar.pruned_on_load
            if not removed:
                return 0
            self._persist()
        self.notifier.emit(ROOT_CHANGE)
        return removed

    def reload(self) -> None:
        """Re-read the sidecar after an external create or edit."""
        with self._lock:
            self.tree = self.sidecar.load(self.root_path, self.matcher, classify=self._classify)
            self.watch.acknowledge()
        logger.info("Reloaded annotations from %s", self.sidecar.path)
        self.notifier.emit(ROOT_CHANGE)

    def handle_sidecar_deleted(self) -> None:
        """Reset to an empty, file-less state after the sidecar was removed."""
        with self._lock:
            self.tree.clear()
            self.sidecar.mark_missing()
            self.watch.acknowledge()
        logger.info("Annotation file %s was deleted", self.sidecar.path)
        self.notifier.emit(ROOT_CHANGE)

    def handle_sidecar_event(self, event: str) -> None:
        """Dispatch one sidecar watch event."""
        if event in (SIDECAR_CREATED, SIDECAR_CHANGED):
            self.reload()
        elif event == SIDECAR_DELETED:
            self.handle_sidecar_deleted()
        else:
            logger.debug("Ignoring unknown sidecar event %r", event)

    def poll_sidecar(self) -> str | None:
        """Poll the sidecar once and apply any external change.

        The poll runs under the store lock so a save and its acknowledge are
        never split by it.
        """
        with self._lock:
            event = self.watch.poll()
        if event is not None:
            self.handle_sidecar_event(event)
        return event

    def start_watching(self, interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS) -> None:
        """Poll the sidecar for external changes in a background thread."""
        if self._watch_thread is None:
            self._watch_thread = SidecarWatchThread(self.poll_sidecar, interval_seconds)
        self._watch_thread.start()

    def stop_watching(self) -> None:
        if self._watch_thread is not None:
            self._watch_thread.stop()
            self._watch_thread = None

    def close(self) -> None:
        self.stop_watching()


__all__ = ["ROOT_CHANGE", "AnnotationStore"]
