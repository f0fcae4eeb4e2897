"""Terminal output helpers: control-byte sanitizing and Pygments highlighting.

Notes are free text typed by users, so anything printed to a terminal first
has its control bytes escaped.
"""

from __future__ import annotations

import re

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import JsonLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .annotation_tree import AnnotationEntry
from .session import summarize_annotation

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

_VALID_STYLES: set[str] = set()
_INVALID_STYLES: set[str] = set()
_FORMATTERS: dict[str, TerminalFormatter] = {}


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def normalize_style(style: str) -> str:
    """Return ``style`` when Pygments knows it, otherwise the default style."""
    if style in _VALID_STYLES:
        return style
    if style in _INVALID_STYLES:
        return DEFAULT_STYLE
    try:
        get_style_by_name(style)
    except ClassNotFound:
        _INVALID_STYLES.add(style)
        return DEFAULT_STYLE
    _VALID_STYLES.add(style)
    return style


def _formatter_for_style(style: str) -> TerminalFormatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = TerminalFormatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def highlight_json(source: str, style: str = DEFAULT_STYLE, no_color: bool = False) -> str:
    """Render a JSON document for the terminal, colorized unless ``no_color``."""
    source = sanitize_terminal_text(source)
    if no_color:
        return source
    return highlight(source, JsonLexer(), _formatter_for_style(normalize_style(style)))


def format_entries(entries: list[AnnotationEntry], summary: bool = False, width: int = 60) -> str:
    """Render listing rows as ``path<TAB>note`` lines.

    With ``summary`` each note is shortened to its first line.
    """
    lines: list[str] = []
    for entry in entries:
        if summary:
            text = summarize_annotation(entry.annotation, width)
        else:
            text = entry.annotation.replace("\n", "\n\t")
        lines.append(f"{entry.path or '.'}\t{sanitize_terminal_text(text)}")
    return "\n".join(lines) + ("\n" if lines else "")


__all__ = [
    "DEFAULT_STYLE",
    "sanitize_terminal_text",
    "normalize_style",
    "highlight_json",
    "format_entries",
]
