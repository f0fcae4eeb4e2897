"""Stat-signature watch for the annotation sidecar file.

Compares cheap stat tuples between polls and reports create/change/delete
transitions of the sidecar path. A daemon thread can drive the polling.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)

SIDECAR_CREATED = "created"
SIDECAR_CHANGED = "changed"
SIDECAR_DELETED = "deleted"

DEFAULT_POLL_INTERVAL_SECONDS = 1.0

StatSignature = tuple[str, int, int, int]


def path_stat_signature(path: Path) -> StatSignature:
    """Return a stable stat tuple describing ``path`` existence and metadata."""
    try:
        st = path.stat()
    except FileNotFoundError:
        return ("missing", 0, 0, 0)
    except OSError:
        return ("error", 0, 0, 0)
    return ("ok", st.st_mtime_ns, st.st_size, st.st_mode)


class SidecarWatch:
    """Detect external edits of one file by polling its stat signature."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._signature = path_stat_signature(path)

    def acknowledge(self) -> None:
        """Adopt the current on-disk state so our own writes are not reported."""
        self._signature = path_stat_signature(self.path)

    def poll(self) -> str | None:
        """Return the transition since the last poll, or ``None``.

        A stat error leaves the last known signature in place so a transient
        failure is not mistaken for a deletion.
        """
        current = path_stat_signature(self.path)
        if current[0] == "error":
            return None
        previous = self._signature
        self._signature = current
        if current == previous:
            return None
        was_present = previous[0] == "ok"
        is_present = current[0] == "ok"
        if is_present and not was_present:
            return SIDECAR_CREATED
        if was_present and not is_present:
            return SIDECAR_DELETED
        if is_present:
            return SIDECAR_CHANGED
        return None


class SidecarWatchThread:
    """Call ``poll`` on an interval from a daemon thread.

    ``poll`` is usually ``AnnotationStore.poll_sidecar``, which polls under
    the store lock and applies the event itself. A non-``None`` result is
    forwarded to ``on_event`` when one is given.
    """

    def __init__(
        self,
        poll: Callable[[], str | None],
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        on_event: Callable[[str], None] | None = None,
    ) -> None:
        self._poll = poll
        self._on_event = on_event
        self._interval_seconds = max(0.05, float(interval_seconds))
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _worker(self) -> None:
        while not self._stop.wait(self._interval_seconds):
            try:
                event = self._poll()
                if event is not None and self._on_event is not None:
                    self._on_event(event)
            except Exception:
                logger.exception("Sidecar watch poll failed")

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._worker,
            name="codebasenotes-sidecar-watch",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        thread = self._thread
        self._thread = None
        if thread is not None:
            thread.join(timeout)


__all__ = [
    "SIDECAR_CREATED",
    "SIDECAR_CHANGED",
    "SIDECAR_DELETED",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "path_stat_signature",
    "SidecarWatch",
    "SidecarWatchThread",
]
