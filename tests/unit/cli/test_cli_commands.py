"""Tests for the command-line interface."""

from __future__ import annotations

import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from codebasenotes import cli, config
from codebasenotes.store import DEFAULT_SIDECAR_NAME


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name).resolve() / "project"
        (self.root / "src").mkdir(parents=True)
        (self.root / "src" / "app.ts").write_text("", encoding="utf-8")
        (self.root / "src" / "util.ts").write_text("", encoding="utf-8")
        (self.root / ".gitignore").write_text("dist/\n", encoding="utf-8")
        (self.root / "dist").mkdir()
        patcher = mock.patch.object(config, "CONFIG_PATH", Path(self._tmp.name) / "config" / "config.json")
        patcher.start()
        self.addCleanup(patcher.stop)

    def _run(self, *argv: str, stdin: str | None = None) -> tuple[int, str, str]:
        out = io.StringIO()
        err = io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            if stdin is None:
                code = cli.main(["--root", str(self.root), *argv])
            else:
                with mock.patch("sys.stdin", io.StringIO(stdin)):
                    code = cli.main(["--root", str(self.root), *argv])
        return code, out.getvalue(), err.getvalue()

    def test_set_then_get(self) -> None:
        code, _out, _err = self._run("set", "src/app.ts", "entry point")
        self.assertEqual(code, cli.EXIT_OK)

        code, out, _err = self._run("get", "src/app.ts")

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(out, "entry point\n")
        self.assertTrue((self.root / DEFAULT_SIDECAR_NAME).exists())

    def test_get_missing_prints_nothing(self) -> None:
        code, out, _err = self._run("get", "src/app.ts")

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(out, "")

    def test_set_reads_stdin_and_strips_one_newline(self) -> None:
        self._run("set", "src/app.ts", stdin="line one\nline two\n")

        _code, out, _err = self._run("get", "src/app.ts")

        self.assertEqual(out, "line one\nline two\n")

    def test_set_on_ignored_path_fails_with_message(self) -> None:
        code, _out, err = self._run("set", "dist", "artifacts")

        self.assertEqual(code, cli.EXIT_REFUSED)
        self.assertIn("ignored by .gitignore", err)
        self.assertFalse((self.root / DEFAULT_SIDECAR_NAME).exists())

    def test_rm_and_mv(self) -> None:
        self._run("set", "src/app.ts", "entry")

        code, _out, _err = self._run("mv", "src/app.ts", "src/main.ts")
        self.assertEqual(code, cli.EXIT_OK)
        code, _out, err = self._run("mv", "src/app.ts", "src/other.ts")
        self.assertEqual(code, cli.EXIT_OK)
        self.assertIn("No note moved", err)

        code, _out, _err = self._run("rm", "src/main.ts")
        self.assertEqual(code, cli.EXIT_OK)
        _code, out, _err = self._run("list")
        self.assertEqual(out, "")

    def test_list_formats_and_sorts(self) -> None:
        self._run("set", "src/util.ts", "helpers")
        self._run("set", "src/app.ts", "entry\nsecond line")
        self._run("set", "src", "Sources")

        _code, out, _err = self._run("list")
        self.assertEqual(out, "src\tSources\nsrc/app.ts\tentry\n\tsecond line\nsrc/util.ts\thelpers\n")

        _code, out, _err = self._run("list", "--sort", "annotation", "--summary")
        self.assertEqual(out, "src/app.ts\tentry...\nsrc/util.ts\thelpers\nsrc\tSources\n")

    def test_show_prints_plain_json_when_not_a_tty(self) -> None:
        self._run("set", "src/app.ts", "entry")

        code, out, _err = self._run("show")

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(json.loads(out)["subNodes"]["src"]["subNodes"]["app.ts"]["annotation"], "entry")
        self.assertNotIn("\x1b[", out)

    def test_prune_reports_count(self) -> None:
        sidecar = self.root / DEFAULT_SIDECAR_NAME
        sidecar.write_text(
            json.dumps({"type": "dir", "subNodes": {"dist": {"type": "dir", "annotation": "old"}}}),
            encoding="utf-8",
        )

        code, out, _err = self._run("prune")

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(out, "Pruned 1 entries\n")
        self.assertNotIn("dist", sidecar.read_text(encoding="utf-8"))

    def test_refs_lists_existing_references(self) -> None:
        self._run("set", "src/app.ts", "see [src/util.ts] and [nope.ts]")

        code, out, _err = self._run("refs", "src/app.ts")

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(out, "src/util.ts\n")

    def test_custom_sidecar_name(self) -> None:
        self._run("--sidecar", "notes.json", "set", "src/app.ts", "entry")

        self.assertTrue((self.root / "notes.json").exists())
        self.assertFalse((self.root / DEFAULT_SIDECAR_NAME).exists())

    def test_missing_root_exits(self) -> None:
        with self.assertRaises(SystemExit):
            cli.main(["--root", str(self.root / "missing"), "list"])

    def test_usage_error_exits_with_two(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["list", "--sort", "size"])

        self.assertEqual(ctx.exception.code, 2)

    def test_positive_float_rejects_non_positive(self) -> None:
        self.assertEqual(cli._positive_float("0.5"), 0.5)
        for value in ("0", "-1", "abc"):
            with self.subTest(value=value):
                with self.assertRaises(Exception):
                    cli._positive_float(value)

    def test_config_sets_then_shows_a_setting(self) -> None:
        code, _out, _err = self._run("config", "log_level", "debug")
        self.assertEqual(code, cli.EXIT_OK)

        code, out, _err = self._run("config", "log_level")

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(out, "DEBUG\n")
        self.assertEqual(config.load_log_level(), "DEBUG")

    def test_config_without_key_lists_every_setting(self) -> None:
        self._run("config", "watch_interval", "0.25")

        code, out, _err = self._run("config")

        self.assertEqual(code, cli.EXIT_OK)
        rows = dict(line.split("\t", 1) for line in out.splitlines())
        self.assertEqual(
            sorted(rows),
            ["ignore_file_name", "log_level", "sidecar_name", "style", "watch_interval"],
        )
        self.assertEqual(rows["watch_interval"], "0.25")
        self.assertEqual(rows["sidecar_name"], DEFAULT_SIDECAR_NAME)

    def test_config_rejects_invalid_values(self) -> None:
        cases = [
            ("log_level", "chatty"),
            ("watch_interval", "0"),
            ("watch_interval", "soon"),
            ("sidecar_name", "nested/notes.json"),
        ]
        for key, value in cases:
            with self.subTest(key=key, value=value):
                code, _out, err = self._run("config", key, value)

                self.assertEqual(code, cli.EXIT_REFUSED)
                self.assertIn(f"Invalid value for {key}", err)
        self.assertFalse(config.CONFIG_PATH.exists())

    def test_config_does_not_need_project_root(self) -> None:
        with redirect_stdout(io.StringIO()) as out:
            code = cli.main(["--root", str(self.root / "missing"), "config", "style"])

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(out.getvalue(), f"{config.load_style()}\n")

    def test_persisted_sidecar_name_is_used_by_later_commands(self) -> None:
        self._run("config", "sidecar_name", "notes.json")

        self._run("set", "src/app.ts", "entry")

        self.assertTrue((self.root / "notes.json").exists())
        self.assertFalse((self.root / DEFAULT_SIDECAR_NAME).exists())


if __name__ == "__main__":
    unittest.main()
