"""Tests for root-relative path handling."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from codebasenotes.annotation_tree import NodeKind, classify_node_kind, relative_posix, split_segments


class RelativePathTests(unittest.TestCase):
    def setUp(self) -> None:
        self.root = Path("/project")

    def test_relative_inputs_are_normalized(self) -> None:
        self.assertEqual(relative_posix(self.root, "src/app.ts"), "src/app.ts")
        self.assertEqual(relative_posix(self.root, "./src//app.ts"), "src/app.ts")
        self.assertEqual(relative_posix(self.root, os.path.join("src", "app.ts")), "src/app.ts")

    def test_absolute_inputs_are_made_relative(self) -> None:
        self.assertEqual(relative_posix(self.root, "/project/src/app.ts"), "src/app.ts")
        self.assertEqual(relative_posix(self.root, Path("/project")), "")

    def test_root_forms_map_to_empty_string(self) -> None:
        for value in ("", ".", "./", "src/.."):
            with self.subTest(value=value):
                self.assertEqual(relative_posix(self.root, value), "")
        self.assertEqual(split_segments(self.root, "."), ())

    def test_escaping_paths_are_rejected(self) -> None:
        self.assertIsNone(relative_posix(self.root, ".."))
        self.assertIsNone(relative_posix(self.root, "../sibling/file.txt"))
        self.assertIsNone(relative_posix(self.root, "/other/file.txt"))
        self.assertIsNone(split_segments(self.root, "src/../../x"))

    def test_split_segments(self) -> None:
        self.assertEqual(split_segments(self.root, "a/b/c.txt"), ("a", "b", "c.txt"))


class ClassifyNodeKindTests(unittest.TestCase):
    def test_classifies_directories_files_and_missing_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "pkg").mkdir()
            (root / "mod.PY").write_text("", encoding="utf-8")

            self.assertEqual(classify_node_kind(root / "pkg"), NodeKind.directory())
            self.assertEqual(classify_node_kind(root / "mod.PY"), NodeKind.file("py"))
            self.assertEqual(classify_node_kind(root / "gone.rs"), NodeKind.file())


if __name__ == "__main__":
    unittest.main()
