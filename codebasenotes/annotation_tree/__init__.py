"""Domain model for path-keyed annotations.

This package contains the store's pure data layer:
- node kind and node datatypes
- path segmentation and stat-based node classification
- the annotation trie with get/set/remove/move/prune
- the JSON sidecar codec
- flattening into listing rows
"""

from __future__ import annotations

from .types import AnnotationEntry, AnnotationNode, NodeKind
from .fs import classify_node_kind, relative_posix, split_segments
from .codec import FORMAT_VERSION, decode_document, encode_document
from .tree import AnnotationTree
from .flatten import SORT_KEYS, flatten, sorted_entries

__all__ = [
    "AnnotationEntry",
    "AnnotationNode",
    "NodeKind",
    "classify_node_kind",
    "relative_posix",
    "split_segments",
    "FORMAT_VERSION",
    "decode_document",
    "encode_document",
    "AnnotationTree",
    "SORT_KEYS",
    "flatten",
    "sorted_entries",
]
