"""Path-keyed annotation trie with get/set/remove/move and pruning.

Keys are single path segments. Nodes for ignored paths are never created, and
``prune`` drops ignored or empty nodes bottom-up in one pass.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from .codec import decode_document, encode_document
from .fs import PathLike, classify_node_kind, split_segments
from .types import AnnotationNode, NodeKind

if TYPE_CHECKING:
    from ..gitignore import IgnoreMatcher

logger = logging.getLogger(__name__)


def _new_root() -> AnnotationNode:
    return AnnotationNode(kind=NodeKind.directory())


class AnnotationTree:
    """In-memory annotation trie rooted at a project directory.

    ``classify`` decides the kind of newly created terminal nodes and is
    injectable so tests can avoid touching the filesystem.
    """

    def __init__(
        self,
        root_path: Path,
        matcher: IgnoreMatcher | None = None,
        *,
        root_node: AnnotationNode | None = None,
        classify: Callable[[Path], NodeKind] = classify_node_kind,
    ) -> None:
        self.root_path = root_path
        self.matcher = matcher
        self.root_node = root_node if root_node is not None else _new_root()
        self._classify = classify

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnnotationTree):
            return NotImplemented
        return self.root_node == other.root_node

    def __len__(self) -> int:
        """Return the number of nodes that carry a note."""
        return sum(1 for _segments, node in self.walk() if node.annotation is not None)

    def _ignored(self, segments: tuple[str, ...], is_dir: bool) -> bool:
        if self.matcher is None or not segments:
            return False
        return self.matcher.is_ignored("/".join(segments), is_dir=is_dir)

    def _refused(self, segments: tuple[str, ...], terminal_is_dir: bool) -> bool:
        """Return whether any prefix of ``segments`` is ignored."""
        if any(self._ignored(segments[:depth], True) for depth in range(1, len(segments))):
            return True
        return self._ignored(segments, terminal_is_dir)

    def _terminal_kind(self, segments: tuple[str, ...]) -> NodeKind:
        existing = self._find(segments)
        if existing is not None:
            return existing.kind
        return self._classify(self.root_path.joinpath(*segments))

    def _find(self, segments: tuple[str, ...]) -> AnnotationNode | None:
        node = self.root_node
        for part in segments:
            child = node.children.get(part)
            if child is None:
                return None
            node = child
        return node

    def segments_for(self, path: PathLike) -> tuple[str, ...] | None:
        """Split ``path`` into segments relative to this tree's root."""
        return split_segments(self.root_path, path)

    def node_at(self, path: PathLike) -> AnnotationNode | None:
        """Return the stored node for ``path`` or ``None``."""
        segments = self.segments_for(path)
        if segments is None:
            return None
        return self._find(segments)

    def get(self, path: PathLike) -> str:
        """Return the note at ``path``; ``""`` when absent, ignored, or unknown."""
        segments = self.segments_for(path)
        if segments is None:
            return ""
        node = self._find(segments)
        if node is None or node.annotation is None:
            return ""
        if self._ignored(segments, node.kind.is_dir):
            return ""
        return node.annotation

    def set(self, path: PathLike, text: str) -> bool:
        """Store ``text`` at ``path``, creating intermediate nodes as needed.

        Intermediate nodes are directories; a new terminal node is classified
        from the filesystem. Returns ``False`` without mutating anything when
        the path is empty, outside the root, or ignored.
        """
        segments = self.segments_for(path)
        if not segments:
            logger.debug("Refusing to annotate empty or out-of-root path %r", path)
            return False

        terminal_kind = self._terminal_kind(segments)
        if self._refused(segments, terminal_kind.is_dir):
            logger.debug("Refusing to annotate ignored path %s", "/".join(segments))
            return False

        node = self.root_node
        last = len(segments) - 1
        for idx, part in enumerate(segments):
            child = node.children.get(part)
            if child is None:
                kind = terminal_kind if idx == last else NodeKind.directory()
                child = AnnotationNode(kind=kind)
                node.children[part] = child
            node = child
        node.annotation = text
        return True

    def remove(self, path: PathLike) -> bool:
        """Drop the node at ``path`` with its subtree; missing paths are a no-op."""
        segments = self.segments_for(path)
        if not segments:
            return False
        parent = self._find(segments[:-1])
        if parent is None:
            return False
        return parent.children.pop(segments[-1], None) is not None

    def move(self, old_path: PathLike, new_path: PathLike) -> bool:
        """Relocate the single note at ``old_path`` to ``new_path``.

        Only the value moves; notes on descendants of ``old_path`` are dropped
        with it. A path without a non-empty note, or an ignored destination,
        leaves the tree unchanged.
        """
        annotation = self.get(old_path)
        if not annotation:
            return False
        new_segments = self.segments_for(new_path)
        if not new_segments:
            return False
        if self._refused(new_segments, self._terminal_kind(new_segments).is_dir):
            return False
        self.remove(old_path)
        return self.set(new_path, annotation)

    def prune(self) -> int:
        """Remove ignored and empty nodes; return how many nodes were dropped."""
        return self._prune_children(self.root_node, ())

    def _prune_children(self, node: AnnotationNode, prefix: tuple[str, ...]) -> int:
        removed = 0
        for name, child in list(node.children.items()):
            child_segments = prefix + (name,)
            if self._ignored(child_segments, child.kind.is_dir):
                del node.children[name]
                removed += 1
                continue
            removed += self._prune_children(child, child_segments)
            if child.is_empty():
                del node.children[name]
                removed += 1
        return removed

    def clear(self) -> None:
        """Drop every node, leaving a bare root."""
        self.root_node = _new_root()

    def walk(self) -> Iterator[tuple[tuple[str, ...], AnnotationNode]]:
        """Yield ``(segments, node)`` depth-first, parents before children."""
        stack: list[tuple[tuple[str, ...], AnnotationNode]] = [((), self.root_node)]
        while stack:
            segments, node = stack.pop()
            yield segments, node
            for name, child in reversed(list(node.children.items())):
                stack.append((segments + (name,), child))

    def serialize(self) -> dict[str, object]:
        """Return the JSON-ready sidecar document for this tree."""
        return encode_document(self.root_node)

    @classmethod
    def deserialize(
        cls,
        data: object,
        root_path: Path,
        matcher: IgnoreMatcher | None = None,
        *,
        classify: Callable[[Path], NodeKind] = classify_node_kind,
    ) -> AnnotationTree:
        """Rebuild a tree from a decoded sidecar document."""
        return cls(root_path, matcher, root_node=decode_document(data), classify=classify)


__all__ = ["AnnotationTree"]
