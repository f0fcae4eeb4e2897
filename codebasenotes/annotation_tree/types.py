"""Domain datatypes for the path-keyed annotation trie."""

from __future__ import annotations

from dataclasses import dataclass, field

DIR_TYPE = "dir"
FILE_TYPE = "file"


@dataclass(frozen=True)
class NodeKind:
    """Classification of one tree node.

    ``extension`` is lower-cased without the leading dot and is only set for
    files that have one.
    """

    is_dir: bool
    extension: str | None = None

    @classmethod
    def directory(cls) -> NodeKind:
        return cls(is_dir=True)

    @classmethod
    def file(cls, extension: str | None = None) -> NodeKind:
        """Return a file kind, normalizing ``extension`` (``".TS"`` -> ``"ts"``)."""
        normalized = (extension or "").lstrip(".").lower()
        return cls(is_dir=False, extension=normalized or None)

    @classmethod
    def from_wire(cls, value: object) -> NodeKind:
        """Decode the sidecar ``type`` string.

        Unknown or non-string values decode as a generic file.
        """
        if not isinstance(value, str) or not value:
            return cls.file()
        if value == DIR_TYPE:
            return cls.directory()
        if value == FILE_TYPE:
            return cls.file()
        return cls.file(value)

    def to_wire(self) -> str:
        """Encode as the sidecar ``type`` string: ``dir``, extension, or ``file``."""
        if self.is_dir:
            return DIR_TYPE
        return self.extension or FILE_TYPE


@dataclass
class AnnotationNode:
    """One path segment with an optional note and nested children.

    ``annotation`` is ``None`` when no note exists; an empty string is a
    real note.
    """

    kind: NodeKind
    annotation: str | None = None
    children: dict[str, AnnotationNode] = field(default_factory=dict)

    def is_empty(self) -> bool:
        """Return whether this node carries neither a note nor children."""
        return self.annotation is None and not self.children


@dataclass(frozen=True)
class AnnotationEntry:
    """Flattened ``(path, annotation)`` pair used for summary listings."""

    path: str
    annotation: str


__all__ = [
    "DIR_TYPE",
    "FILE_TYPE",
    "NodeKind",
    "AnnotationNode",
    "AnnotationEntry",
]
