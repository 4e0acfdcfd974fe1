"""ANSI measurement and styling helpers.

Glyph widths follow terminal cell rules; SGR sequences are built from theme
styles using 24-bit colour.
"""

from __future__ import annotations

import re
import unicodedata

from .syntax.theme import Color, Style

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8
RESET = "\033[0m"


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def text_display_width(text: str) -> int:
    """Return display width of a run of text starting at column 0."""
    col = 0
    for ch in text:
        col += char_display_width(ch, col)
    return col


def clip_to_width(text: str, width: int) -> str:
    """Return the longest prefix of ``text`` that fits in ``width`` cells."""
    col = 0
    for idx, ch in enumerate(text):
        col += char_display_width(ch, col)
        if col > width:
            return text[:idx]
    return text


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def sgr_for(
    color: Color,
    *,
    background: Color | None = None,
    bold: bool = False,
    italic: bool = False,
) -> str:
    """Build one SGR escape selecting foreground, background and emphasis."""
    params: list[str] = []
    if bold:
        params.append("1")
    if italic:
        params.append("3")
    params.append(f"38;2;{color.r};{color.g};{color.b}")
    if background is not None:
        params.append(f"48;2;{background.r};{background.g};{background.b}")
    return f"\033[{';'.join(params)}m"


def sgr_for_style(style: Style) -> str:
    return sgr_for(
        style.foreground,
        background=style.background,
        bold=style.bold,
        italic=style.italic,
    )


def styled(text: str, style: Style, no_color: bool = False) -> str:
    """Wrap ``text`` in the SGR for ``style`` followed by a reset."""
    if no_color or not text:
        return text
    return f"{sgr_for_style(style)}{text}{RESET}"


def format_line(line, no_color: bool = False) -> str:
    """Render one laid-out line as an ANSI string."""
    return "".join(styled(fragment.text, fragment.style, no_color) for fragment in line.fragments)
