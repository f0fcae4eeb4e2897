"""Exception types raised by the annotation store."""

from __future__ import annotations

from pathlib import Path


class CodebaseNotesError(Exception):
    """Base class for annotation store failures."""


class PersistenceError(CodebaseNotesError):
    """Writing the sidecar file failed; in-memory notes were kept."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to save annotations to {path}: {reason}")
        self.path = path
        self.reason = reason


class SidecarFormatError(CodebaseNotesError, ValueError):
    """The sidecar document does not have the expected shape."""


class UnsupportedFormatError(SidecarFormatError):
    """The sidecar was written by a newer format version."""

    def __init__(self, found: int, supported: int) -> None:
        super().__init__(f"annotation format version {found} is newer than supported version {supported}")
        self.found = found
        self.supported = supported


__all__ = [
    "CodebaseNotesError",
    "PersistenceError",
    "SidecarFormatError",
    "UnsupportedFormatError",
]
