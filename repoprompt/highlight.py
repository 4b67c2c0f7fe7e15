"""Terminal rendering of assembled payloads.

File bodies are highlighted with Pygments using the lexer for each path;
the ``<file_map>`` and ``<file_contents>`` tags stay plain. Terminal control
bytes from file text are neutralized before anything reaches the terminal.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from pygments import highlight as pygments_highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .prompt import Payload

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

_FORMATTERS: dict[str, TerminalFormatter] = {}
_VALID_STYLES: set[str] = set()
_INVALID_STYLES: set[str] = set()


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


def _normalize_style(style: str) -> str:
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
    if formatter is not None:
        return formatter
    formatter = TerminalFormatter(style=style)
    _FORMATTERS[style] = formatter
    return formatter


def highlight_source(source: str, relative_path: str, style: str = DEFAULT_STYLE) -> str:
    """Highlight ``source`` for the file at ``relative_path``.

    Falls back to plain text when no lexer is registered for the filename.
    The result keeps the trailing-newline shape of ``source``.
    """
    formatter = _formatter_for_style(_normalize_style(style))
    try:
        lexer = get_lexer_for_filename(PurePosixPath(relative_path).name, source)
    except ClassNotFound:
        lexer = TextLexer()

    rendered = pygments_highlight(sanitize_terminal_text(source), lexer, formatter)
    if not source.endswith("\n") and rendered.endswith("\n"):
        rendered = rendered[:-1]
    return rendered


def render_payload(payload: Payload, style: str = DEFAULT_STYLE, no_color: bool = False) -> str:
    """Return ``payload.text`` ready for a terminal."""
    if no_color:
        return sanitize_terminal_text(payload.text)

    out = [sanitize_terminal_text(payload.file_map)]
    for block in payload.blocks:
        body = highlight_source(block.content, block.relative_path, style) if block.content else ""
        out.append(f'<file_contents path="{sanitize_terminal_text(block.relative_path)}">\n{body}\n</file_contents>\n\n')
    return "".join(out)


__all__ = [
    "DEFAULT_STYLE",
    "sanitize_terminal_text",
    "highlight_source",
    "render_payload",
]
