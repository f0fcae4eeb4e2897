"""Persistent annotation store with sidecar watch and change events."""

from __future__ import annotations

from .events import ChangeListener, ChangeNotifier
from .persistence import DEFAULT_SIDECAR_NAME, SidecarFile
from .watch import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    SIDECAR_CHANGED,
    SIDECAR_CREATED,
    SIDECAR_DELETED,
    SidecarWatch,
    SidecarWatchThread,
    path_stat_signature,
)
from .store import ROOT_CHANGE, AnnotationStore

__all__ = [
    "ChangeListener",
    "ChangeNotifier",
    "DEFAULT_SIDECAR_NAME",
    "SidecarFile",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "SIDECAR_CHANGED",
    "SIDECAR_CREATED",
    "SIDECAR_DELETED",
    "SidecarWatch",
    "SidecarWatchThread",
    "path_stat_signature",
    "ROOT_CHANGE",
    "AnnotationStore",
]
