"""Sidecar JSON persistence for annotation trees.

Loading fails soft: a missing file yields an empty tree and clears the
``exists`` flag. Saving fails hard with ``PersistenceError`` so callers can
warn that a note may not survive a restart.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from ..annotation_tree import AnnotationTree, NodeKind, classify_node_kind
from ..errors import PersistenceError, SidecarFormatError, UnsupportedFormatError

if TYPE_CHECKING:
    from ..gitignore import IgnoreMatcher

logger = logging.getLogger(__name__)

DEFAULT_SIDECAR_NAME = ".codebasenotes-annotations.json"


class SidecarFile:
    """The single JSON file holding every note of one project.

    ``exists`` distinguishes "no annotations yet" from a file that was loaded,
    even if it decoded to an empty tree. ``locked_reason`` is set when the file
    was written by a newer format; saves are then refused so it is never
    clobbered. ``pruned_on_load`` counts entries dropped from the last load that
    the file on disk still holds.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.exists = False
        self.locked_reason: str | None = None
        self.pruned_on_load = 0

    def load(
        self,
        root_path: Path,
        matcher: IgnoreMatcher | None = None,
        *,
        classify: Callable[[Path], NodeKind] = classify_node_kind,
    ) -> AnnotationTree:
        """Read and decode the sidecar, pruning ignored and empty nodes."""
        empty = AnnotationTree(root_path, matcher, classify=classify)
        self.locked_reason = None
        self.pruned_on_load = 0
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No annotation file at %s", self.path)
            self.exists = False
            return empty
        except OSError as exc:
            logger.warning("Could not read annotation file %s: %s", self.path, exc)
            self.exists = True
            return empty
        except UnicodeDecodeError as exc:
            logger.warning("Annotation file %s is not valid UTF-8, starting empty: %s", self.path, exc)
            self.exists = True
            return empty

        self.exists = True
        try:
            data = json.loads(raw)
            tree = AnnotationTree.deserialize(data, root_path, matcher, classify=classify)
        except UnsupportedFormatError as exc:
            logger.error("Refusing to use %s: %s", self.path, exc)
            self.locked_reason = str(exc)
            return empty
        except (json.JSONDecodeError, SidecarFormatError) as exc:
            logger.warning("Annotation file %s is malformed, starting empty: %s", self.path, exc)
            return empty

        dropped = tree.prune()
        if dropped:
            self.pruned_on_load = dropped
            logger.info("Pruned %d ignored or empty entries from %s", dropped, self.path)
        return tree

    def save(self, tree: AnnotationTree) -> None:
        """Prune ``tree`` and write it atomically as pretty-printed JSON.

        Raises ``PersistenceError`` on any write failure.
        """
        if self.locked_reason is not None:
            raise PersistenceError(self.path, self.locked_reason)
        tree.prune()
        payload = json.dumps(tree.serialize(), indent=2, ensure_ascii=False) + "\n"

        directory = self.path.parent
        tmp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise PersistenceError(self.path, exc.strerror or str(exc)) from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
        self.exists = True
        self.pruned_on_load = 0
        logger.debug("Saved %d annotations to %s", len(tree), self.path)

    def mark_missing(self) -> None:
        """Record that the backing file is gone."""
        self.exists = False
        self.locked_reason = None
        self.pruned_on_load = 0


__all__ = ["DEFAULT_SIDECAR_NAME", "SidecarFile"]
