"""Command-line front door for codebasenotes.

Parses CLI options, opens the annotation store for the project root, and
dispatches one subcommand through an ``AnnotationSession``. Relative paths
are taken relative to the project root.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from collections.abc import Callable
from pathlib import Path

from . import config
from .annotation_tree import SORT_KEYS, sorted_entries
from .errors import PersistenceError
from .highlight import format_entries, highlight_json, sanitize_terminal_text
from .session import AnnotationSession, EditOutcome, EditStatus
from .store import AnnotationStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REFUSED = 1

# name -> (loader, saver taking the raw command-line string)
_SETTINGS: dict[str, tuple[Callable[[], object], Callable[[str], None]]] = {
    "sidecar_name": (config.load_sidecar_name, config.save_sidecar_name),
    "ignore_file_name": (config.load_ignore_file_name, config.save_ignore_file_name),
    "style": (config.load_style, config.save_style),
    "log_level": (config.load_log_level, config.save_log_level),
    "watch_interval": (config.load_watch_interval, lambda value: config.save_watch_interval(float(value))),
}


def _positive_float(value: str) -> float:
    """argparse type for positive float values."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def _configure_logging(verbosity: int, default_level: str) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = getattr(logging, default_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _report(outcome: EditOutcome) -> int:
    if outcome.message:
        sys.stderr.write(outcome.message + "\n")
    return EXIT_OK if outcome.ok else EXIT_REFUSED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codebasenotes",
        description="Attach notes to files and folders of a project, kept in a JSON sidecar file.",
    )
    parser.add_argument("--root", default=None, help="Project root. Defaults to current directory.")
    parser.add_argument("--sidecar", default=None, help="Annotation file name at the project root.")
    parser.add_argument("--ignore-file", default=None, help="Ignore file name at the project root.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log more (repeat for debug).")
    commands = parser.add_subparsers(dest="command", required=True)

    get_cmd = commands.add_parser("get", help="Print the note of PATH.")
    get_cmd.add_argument("path")

    set_cmd = commands.add_parser("set", help="Set the note of PATH (reads stdin when TEXT is omitted).")
    set_cmd.add_argument("path")
    set_cmd.add_argument("text", nargs="?", default=None)

    rm_cmd = commands.add_parser("rm", help="Remove the note of PATH.")
    rm_cmd.add_argument("path")

    mv_cmd = commands.add_parser("mv", help="Move the note of OLD to NEW.")
    mv_cmd.add_argument("old")
    mv_cmd.add_argument("new")

    list_cmd = commands.add_parser("list", help="List every note.")
    list_cmd.add_argument(
        "--sort",
        choices=(*SORT_KEYS, "tree"),
        default="path",
        help="Display order (default: path; tree keeps stored order).",
    )
    list_cmd.add_argument("--summary", action="store_true", help="Show only the first line of each note.")

    show_cmd = commands.add_parser("show", help="Print the annotation file as JSON.")
    show_cmd.add_argument("--style", default=None, help="Pygments style name.")
    show_cmd.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")

    commands.add_parser("prune", help="Drop ignored and empty entries from the annotation file.")

    refs_cmd = commands.add_parser("refs", help="List existing files referenced as [path] in the note of PATH.")
    refs_cmd.add_argument("path")

    watch_cmd = commands.add_parser("watch", help="Print change events until interrupted.")
    watch_cmd.add_argument("--interval", type=_positive_float, default=None, help="Poll interval in seconds.")

    config_cmd = commands.add_parser("config", help="Show or change persisted settings.")
    config_cmd.add_argument("key", nargs="?", choices=tuple(_SETTINGS), help="Setting to show or change.")
    config_cmd.add_argument("value", nargs="?", default=None, help="New value; omit to print the current one.")
    return parser


def _cmd_set(session: AnnotationSession, args: argparse.Namespace) -> int:
    text = args.text
    if text is None:
        text = sys.stdin.read()
        if text.endswith("\n"):
            text = text[:-1]
    outcome = session.set_current_edit_target(args.path)
    if not outcome.ok:
        return _report(outcome)
    return _report(session.receive_edited_text(text))


def _cmd_mv(session: AnnotationSession, args: argparse.Namespace) -> int:
    outcome = session.move_annotation(args.old, args.new)
    if outcome.status is EditStatus.UNCHANGED:
        sys.stderr.write(f"No note moved from {args.old}\n")
    return _report(outcome)


def _cmd_list(session: AnnotationSession, args: argparse.Namespace) -> int:
    entries = session.list_all()
    if args.sort != "tree":
        entries = sorted_entries(entries, args.sort)
    sys.stdout.write(format_entries(entries, summary=args.summary))
    return EXIT_OK


def _cmd_show(store: AnnotationStore, args: argparse.Namespace, style: str) -> int:
    source = json.dumps(store.tree.serialize(), indent=2, ensure_ascii=False) + "\n"
    no_color = args.no_color or not sys.stdout.isatty()
    sys.stdout.write(highlight_json(source, args.style or style, no_color=no_color))
    return EXIT_OK


def _cmd_refs(session: AnnotationSession, store: AnnotationStore, args: argparse.Namespace) -> int:
    for path in session.referenced_files(args.path):
        sys.stdout.write(f"{store.relative(path) or path}\n")
    return EXIT_OK


def _cmd_watch(store: AnnotationStore, interval: float) -> int:
    def print_change(path: str) -> None:
        sys.stdout.write(f"changed\t{path or '.'}\n")
        sys.stdout.flush()

    unsubscribe = store.subscribe(print_change)
    store.start_watching(interval)
    try:
        while True:
            time.sleep(interval)
    except KeyboardInterrupt:
        pass
    finally:
        unsubscribe()
        store.close()
    return EXIT_OK


def _cmd_config(args: argparse.Namespace) -> int:
    if args.key is None:
        for name, (load, _save) in _SETTINGS.items():
            sys.stdout.write(f"{name}\t{load()}\n")
        return EXIT_OK
    load, save = _SETTINGS[args.key]
    if args.value is None:
        sys.stdout.write(f"{load()}\n")
        return EXIT_OK
    try:
        save(args.value)
    except ValueError as exc:
        sys.stderr.write(f"Invalid value for {args.key}: {exc}\n")
        return EXIT_REFUSED
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments, run one subcommand, and return its exit code."""
    args = build_parser().parse_args(argv)
    settings = config.load_settings()
    _configure_logging(args.verbose, settings.log_level)
    if args.command == "config":
        return _cmd_config(args)

    root = Path(args.root) if args.root is not None else Path.cwd()
    if not root.is_dir():
        raise SystemExit(f"Project root not found: {root}")
    store = AnnotationStore.open(
        root,
        sidecar_name=args.sidecar or settings.sidecar_name,
        ignore_file_name=args.ignore_file or settings.ignore_file_name,
    )
    session = AnnotationSession(store)
    logger.debug("Opened %s (exists=%s)", store.sidecar.path, store.exists)

    if args.command == "get":
        annotation = session.get_annotation(args.path)
        if annotation:
            sys.stdout.write(sanitize_terminal_text(annotation) + "\n")
        return EXIT_OK
    if args.command == "set":
        return _cmd_set(session, args)
    if args.command == "rm":
        return _report(session.remove_annotation(args.path))
    if args.command == "mv":
        return _cmd_mv(session, args)
    if args.command == "list":
        return _cmd_list(session, args)
    if args.command == "show":
        return _cmd_show(store, args, settings.style)
    if args.command == "prune":
        try:
            removed = store.prune()
        except PersistenceError as exc:
            sys.stderr.write(f"{exc}\n")
            return EXIT_REFUSED
        sys.stdout.write(f"Pruned {removed} entries\n")
        return EXIT_OK
    if args.command == "refs":
        return _cmd_refs(session, store, args)
    if args.command == "watch":
        return _cmd_watch(store, args.interval or settings.watch_interval)
    raise SystemExit(f"Unknown command: {args.command}")
