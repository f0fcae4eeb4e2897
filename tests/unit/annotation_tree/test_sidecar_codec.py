"""Tests for the sidecar JSON document codec."""

from __future__ import annotations

import unittest
from pathlib import Path

from codebasenotes.annotation_tree import AnnotationTree, NodeKind
from codebasenotes.annotation_tree.codec import decode_document, encode_document
from codebasenotes.errors import SidecarFormatError, UnsupportedFormatError


def _by_suffix(path: Path) -> NodeKind:
    if not path.suffix:
        return NodeKind.directory()
    return NodeKind.file(path.suffix)


class SidecarCodecTests(unittest.TestCase):
    def test_serialized_shape_matches_wire_format(self) -> None:
        tree = AnnotationTree(Path("/project"), classify=_by_suffix)
        tree.set("src", "sources")
        tree.set("src/app.ts", "entry")
        tree.set("notes/todo.md", "")

        self.assertEqual(
            tree.serialize(),
            {
                "type": "dir",
                "version": 1,
                "subNodes": {
                    "src": {
                        "type": "dir",
                        "annotation": "sources",
                        "subNodes": {"app.ts": {"type": "ts", "annotation": "entry"}},
                    },
                    "notes": {
                        "type": "dir",
                        "subNodes": {"todo.md": {"type": "md", "annotation": ""}},
                    },
                },
            },
        )

    def test_empty_tree_serializes_to_bare_root(self) -> None:
        tree = AnnotationTree(Path("/project"))

        self.assertEqual(tree.serialize(), {"type": "dir", "version": 1})

    def test_deserialize_restores_equal_tree(self) -> None:
        tree = AnnotationTree(Path("/project"), classify=_by_suffix)
        tree.set("src/app.ts", "entry")
        tree.set("docs", "line one\nline two")

        restored = AnnotationTree.deserialize(tree.serialize(), Path("/project"))

        self.assertEqual(restored, tree)
        self.assertEqual(restored.get("docs"), "line one\nline two")

    def test_document_without_version_reads_as_current_format(self) -> None:
        legacy = {
            "type": "dir",
            "subNodes": {"index.js": {"type": "js", "annotation": "main"}},
        }

        root = decode_document(legacy)

        self.assertEqual(root.children["index.js"].annotation, "main")
        self.assertEqual(root.children["index.js"].kind, NodeKind.file("js"))

    def test_newer_version_is_rejected(self) -> None:
        with self.assertRaises(UnsupportedFormatError) as ctx:
            decode_document({"type": "dir", "version": 2})

        self.assertEqual(ctx.exception.found, 2)
        self.assertEqual(ctx.exception.supported, 1)

    def test_non_object_document_is_rejected(self) -> None:
        for data in ([], "text", None, 3):
            with self.subTest(data=data):
                with self.assertRaises(SidecarFormatError):
                    decode_document(data)

        with self.assertRaises(SidecarFormatError):
            decode_document({"type": "dir", "version": "1"})

    def test_malformed_children_are_skipped(self) -> None:
        root = decode_document(
            {
                "type": "dir",
                "subNodes": {
                    "ok.py": {"type": "py", "annotation": "fine"},
                    "bad": "not a node",
                    "": {"type": "file", "annotation": "no name"},
                    "a/b": {"type": "file", "annotation": "slash"},
                    "numeric.txt": {"type": "txt", "annotation": 42},
                },
            }
        )

        self.assertEqual(sorted(root.children), ["numeric.txt", "ok.py"])
        self.assertIsNone(root.children["numeric.txt"].annotation)

    def test_root_kind_is_always_directory(self) -> None:
        root = decode_document({"type": "md", "annotation": "project"})

        self.assertTrue(root.kind.is_dir)
        self.assertEqual(encode_document(root)["type"], "dir")
        self.assertEqual(encode_document(root)["annotation"], "project")


class NodeKindWireTests(unittest.TestCase):
    def test_wire_values(self) -> None:
        self.assertEqual(NodeKind.directory().to_wire(), "dir")
        self.assertEqual(NodeKind.file(".TS").to_wire(), "ts")
        self.assertEqual(NodeKind.file("").to_wire(), "file")
        self.assertEqual(NodeKind.file(None).to_wire(), "file")

    def test_from_wire(self) -> None:
        self.assertEqual(NodeKind.from_wire("dir"), NodeKind.directory())
        self.assertEqual(NodeKind.from_wire("file"), NodeKind.file())
        self.assertEqual(NodeKind.from_wire("rs"), NodeKind.file("rs"))
        self.assertEqual(NodeKind.from_wire(None), NodeKind.file())
        self.assertEqual(NodeKind.from_wire(7), NodeKind.file())


if __name__ == "__main__":
    unittest.main()
