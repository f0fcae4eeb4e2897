"""Flatten an annotation tree into ``(path, annotation)`` rows for listings."""

from __future__ import annotations

from collections.abc import Iterable

from .tree import AnnotationTree
from .types import AnnotationEntry

SORT_KEYS = ("path", "annotation")


def flatten(tree: AnnotationTree) -> list[AnnotationEntry]:
    """Return every node with a non-empty note, depth-first.

    Order follows the tree's child order; nothing is cached between calls.
    """
    return [
        AnnotationEntry(path="/".join(segments), annotation=node.annotation)
        for segments, node in tree.walk()
        if node.annotation
    ]


def sorted_entries(entries: Iterable[AnnotationEntry], key: str = "path") -> list[AnnotationEntry]:
    """Return ``entries`` in a stable display order (``path`` or ``annotation``)."""
    if key not in SORT_KEYS:
        raise ValueError(f"unknown sort key: {key!r}")
    if key == "annotation":
        return sorted(entries, key=lambda entry: (entry.annotation.casefold(), entry.path))
    return sorted(entries, key=lambda entry: (entry.path.casefold(), entry.path))


__all__ = ["SORT_KEYS", "flatten", "sorted_entries"]
