"""JSON codec for the annotation sidecar document.

Node := {"type": str, "annotation"?: str, "subNodes"?: {segment: Node}}

The root node additionally carries ``"version"``. Documents written before the
field existed decode as version 1.
"""

from __future__ import annotations

from ..errors import SidecarFormatError, UnsupportedFormatError
from .types import AnnotationNode, NodeKind

FORMAT_VERSION = 1
TYPE_KEY = "type"
ANNOTATION_KEY = "annotation"
CHILDREN_KEY = "subNodes"
VERSION_KEY = "version"


def encode_node(node: AnnotationNode) -> dict[str, object]:
    """Encode one node; ``subNodes`` is emitted only when non-empty."""
    result: dict[str, object] = {TYPE_KEY: node.kind.to_wire()}
    if node.annotation is not None:
        result[ANNOTATION_KEY] = node.annotation
    if node.children:
        result[CHILDREN_KEY] = {name: encode_node(child) for name, child in node.children.items()}
    return result


def encode_document(root: AnnotationNode) -> dict[str, object]:
    """Encode the root node plus the format version."""
    document = encode_node(root)
    document[TYPE_KEY] = NodeKind.directory().to_wire()
    document[VERSION_KEY] = FORMAT_VERSION
    return document


def decode_node(data: object) -> AnnotationNode:
    """Decode one node leniently.

    Non-string notes and non-object child maps are dropped; a missing
    ``annotation`` stays ``None``.
    """
    if not isinstance(data, dict):
        raise SidecarFormatError(f"expected a JSON object for a node, got {type(data).__name__}")
    node = AnnotationNode(kind=NodeKind.from_wire(data.get(TYPE_KEY)))
    annotation = data.get(ANNOTATION_KEY)
    if isinstance(annotation, str):
        node.annotation = annotation
    raw_children = data.get(CHILDREN_KEY)
    if isinstance(raw_children, dict):
        for name, raw_child in raw_children.items():
            if not isinstance(name, str) or not name or "/" in name:
                continue
            if not isinstance(raw_child, dict):
                continue
            node.children[name] = decode_node(raw_child)
    return node


def decode_document(data: object) -> AnnotationNode:
    """Decode a whole sidecar document into its root node.

    Raises ``SidecarFormatError`` for a non-object document and
    ``UnsupportedFormatError`` for a version newer than this code writes.
    """
    if not isinstance(data, dict):
        raise SidecarFormatError("annotation document must be a JSON object")
    version = data.get(VERSION_KEY, FORMAT_VERSION)
    if isinstance(version, bool) or not isinstance(version, int):
        raise SidecarFormatError(f"invalid format version: {version!r}")
    if version > FORMAT_VERSION:
        raise UnsupportedFormatError(version, FORMAT_VERSION)
    root = decode_node(data)
    root.kind = NodeKind.directory()
    return root


__all__ = [
    "FORMAT_VERSION",
    "encode_node",
    "encode_document",
    "decode_node",
    "decode_document",
]
