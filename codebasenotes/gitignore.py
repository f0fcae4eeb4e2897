"""Gitignore-aware path filtering for annotation paths.

Loads the project's root ignore file once and answers whether a
root-relative path is excluded. Paths proven ignored are memoized for the
lifetime of the matcher.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pathspec

from .annotation_tree.fs import PathLike, relative_posix

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_FILE_NAME = ".gitignore"


def _parent_prefixes(relative: str) -> list[str]:
    """Return ancestor directories of ``relative`` from the top down."""
    parts = relative.split("/")
    return ["/".join(parts[:idx]) for idx in range(1, len(parts))]


class IgnoreMatcher:
    """Gitignore snapshot for one project root.

    Patterns follow git wildmatch semantics. A path counts as ignored when it
    matches or any of its parent directories does, so excluded directories hide
    whole subtrees.
    """

    def __init__(self, spec: pathspec.PathSpec | None = None) -> None:
        self._spec = spec
        self._ignored_cache: set[str] = set()

    @classmethod
    def from_text(cls, text: str) -> IgnoreMatcher:
        """Build a matcher from raw ignore-file content."""
        lines = text.splitlines()
        if not any(line.strip() and not line.lstrip().startswith("#") for line in lines):
            return cls(None)
        return cls(pathspec.GitIgnoreSpec.from_lines(lines))

    @classmethod
    def for_root(cls, root: Path, ignore_file_name: str = DEFAULT_IGNORE_FILE_NAME) -> IgnoreMatcher:
        """Load patterns from ``root / ignore_file_name``.

        A missing file means "no patterns". An unreadable file is logged and
        treated the same way.
        """
        ignore_path = root / ignore_file_name
        try:
            text = ignore_path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return cls(None)
        except OSError as exc:
            logger.warning("Could not read ignore file %s: %s", ignore_path, exc)
            return cls(None)
        logger.debug("Loaded ignore patterns from %s", ignore_path)
        return cls.from_text(text)

    @property
    def has_patterns(self) -> bool:
        return self._spec is not None

    def cached_count(self) -> int:
        """Return how many paths have been memoized as ignored."""
        return len(self._ignored_cache)

    def _matches(self, relative: str, is_dir: bool) -> bool:
        assert self._spec is not None
        if self._spec.match_file(relative):
            return True
        if is_dir and self._spec.match_file(f"{relative}/"):
            return True
        return any(self._spec.match_file(f"{parent}/") for parent in _parent_prefixes(relative))

    def is_ignored(self, relative_path: str, *, is_dir: bool = False) -> bool:
        """Return whether the root-relative ``relative_path`` is excluded.

        ``is_dir`` also tests the directory form so directory-only patterns
        such as ``build/`` match the directory itself. The root (``""``) is
        never ignored.
        """
        if self._spec is None:
            return False
        relative = relative_path.replace("\\", "/").strip("/")
        if not relative:
            return False
        key = f"{relative}/" if is_dir else relative
        if key in self._ignored_cache:
            return True
        ignored = self._matches(relative, is_dir)
        if ignored:
            self._ignored_cache.add(key)
        return ignored

    def is_path_ignored(self, root: Path, path: PathLike, *, is_dir: bool = False) -> bool:
        """Return whether ``path`` (absolute or root-relative) is excluded.

        Paths outside ``root`` are reported as not ignored.
        """
        relative = relative_posix(root, path)
        if relative is None:
            return False
        return self.is_ignored(relative, is_dir=is_dir)


__all__ = [
    "DEFAULT_IGNORE_FILE_NAME",
    "IgnoreMatcher",
]
