"""Publish/subscribe stream of annotation change notifications."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str], None]


class ChangeNotifier:
    """Fan out the affected root-relative path to every subscriber.

    ``""`` means the whole tree changed (reload or reset).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: list[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._listeners.remove(listener)
                except ValueError:
                    pass

        return unsubscribe

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def emit(self, path: str) -> None:
        """Deliver ``path`` to a snapshot of the current subscribers.

        A failing listener is logged and does not stop delivery to others.
        """
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(path)
            except Exception:
                logger.exception("Annotation change listener failed for %r", path)


__all__ = ["ChangeListener", "ChangeNotifier"]
