"""Filesystem helpers for annotation paths: segmentation and node-kind stat."""

from __future__ import annotations

import logging
import os
import posixpath
import stat
from pathlib import Path, PurePath

from .types import NodeKind

logger = logging.getLogger(__name__)

PathLike = str | PurePath


def relative_posix(root: Path, path: PathLike) -> str | None:
    """Return ``path`` relative to ``root`` as a normalized ``/``-joined string.

    Relative inputs are taken as already relative to ``root``; both ``/`` and
    the OS separator are accepted. Returns ``""`` for the root itself and
    ``None`` when the path escapes ``root``.
    """
    raw = os.fspath(path)
    if os.path.isabs(raw):
        try:
            raw = os.path.relpath(os.path.normpath(raw), os.fspath(root))
        except ValueError:
            # Different drive on Windows.
            return None
    text = raw.replace(os.sep, "/")
    if not text:
        return ""
    normalized = posixpath.normpath(text)
    if normalized == ".":
        return ""
    if normalized == ".." or normalized.startswith("../") or normalized.startswith("/"):
        return None
    return normalized


def split_segments(root: Path, path: PathLike) -> tuple[str, ...] | None:
    """Split ``path`` into trie segments, or ``None`` when it is outside ``root``."""
    relative = relative_posix(root, path)
    if relative is None:
        return None
    return tuple(part for part in relative.split("/") if part and part != ".")


def classify_node_kind(full_path: Path) -> NodeKind:
    """Classify the filesystem entry at ``full_path``.

    Directories map to ``dir``; files map to their extension. A failed stat
    degrades to a generic file rather than raising.
    """
    try:
        st = full_path.stat()
    except OSError as exc:
        logger.debug("Could not stat %s, classifying as file: %s", full_path, exc)
        return NodeKind.file()
    if stat.S_ISDIR(st.st_mode):
        return NodeKind.directory()
    return NodeKind.file(full_path.suffix)


__all__ = [
    "PathLike",
    "relative_posix",
    "split_segments",
    "classify_node_kind",
]
