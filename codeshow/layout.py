"""Turn classified spans into wrapped, styled rows grouped into pages.

Rows never exceed the viewport width: a glyph that would overflow breaks the
row after its last whitespace glyph, or hard-splits the word when the row has
no whitespace to break at. A whitespace glyph that overflows ends the row and
is dropped. Newlines always end a row; tabs expand to spaces up to the row's
next tab stop, and padding that reaches the row end does not carry over to
the next row; carriage returns are ignored.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .ansi import TAB_STOP, char_display_width
from .syntax.theme import Style, Theme
from .syntax.tokenizer import Span
from .syntax.tokens import DEFAULT


@dataclass(frozen=True)
class CellMetrics:
    """Font metrics of a character-cell surface (one cell per glyph)."""

    line_height: int = 1

    def advance(self, ch: str, col: int) -> int:
        return char_display_width(ch, col)


@dataclass(frozen=True)
class Fragment:
    text: str
    style: Style
    width: int = 0


@dataclass(frozen=True)
class Line:
    """One visual row after wrapping."""

    fragments: tuple[Fragment, ...]
    width: int

    @property
    def text(self) -> str:
        return "".join(fragment.text for fragment in self.fragments)


@dataclass(frozen=True)
class Page:
    """Consecutive rows filling one viewport height."""

    lines: tuple[Line, ...]
    first_line: int

    def __len__(self) -> int:
        return len(self.lines)


class _RowBuilder:
    """Greedy row accumulator implementing the wrap policy."""

    def __init__(self, width: int, metrics) -> None:
        self.width = width
        self.metrics = metrics
        self.rows: list[Line] = []
        self._cells: list[tuple[str, Style, int]] = []
        self._col = 0
        self._soft_broken = False

    def _emit(self, cells: list[tuple[str, Style, int]]) -> None:
        fragments: list[Fragment] = []
        run: list[str] = []
        run_style: Style | None = None
        run_width = 0
        for glyph, style, glyph_width in cells:
            if run and style != run_style:
                fragments.append(Fragment("".join(run), run_style, run_width))
                run = []
                run_width = 0
            run_style = style
            run.append(glyph)
            run_width += glyph_width
        if run:
            fragments.append(Fragment("".join(run), run_style, run_width))
        self.rows.append(Line(fragments=tuple(fragments), width=sum(f.width for f in fragments)))

    def _append(self, glyph: str, style: Style, glyph_width: int) -> None:
        self._cells.append((glyph, style, glyph_width))
        self._col += glyph_width
        self._soft_broken = False

    def _soft_break(self, carry: list[tuple[str, Style, int]]) -> None:
        self._cells = carry
        self._col = sum(cell[2] for cell in carry)
        self._soft_broken = not carry

    def newline(self) -> None:
        if not self._cells and self._soft_broken:
            # The row was already closed by wrapping; don't add a blank one.
            self._soft_broken = False
            return
        self._emit(self._cells)
        self._cells = []
        self._col = 0
        self._soft_broken = False

    def glyph(self, ch: str, style: Style) -> None:
        if ch == "\t":
            rows_before = len(self.rows)
            for _ in range(TAB_STOP - (self._col % TAB_STOP)):
                self.glyph(" ", style)
                if len(self.rows) != rows_before:
                    # Padding ends at a row break.
                    break
            return

        glyph_width = self.metrics.advance(ch, self._col)
        if self._col + glyph_width <= self.width or not self._cells:
            self._append(ch, style, glyph_width)
            return

        if ch.isspace():
            self._emit(self._cells)
            self._soft_break([])
            return

        break_at = None
        for idx in range(len(self._cells) - 1, -1, -1):
            if self._cells[idx][0].isspace():
                break_at = idx
                break
        if break_at is not None and break_at < len(self._cells) - 1:
            self._emit(self._cells[: break_at + 1])
            self._soft_break(self._cells[break_at + 1 :])
            if self._col + glyph_width <= self.width:
                self._append(ch, style, glyph_width)
                return

        self._emit(self._cells)
        self._soft_break([])
        self._append(ch, style, glyph_width)

    def finish(self) -> list[Line]:
        if self._cells:
            self._emit(self._cells)
            self._cells = []
            self._col = 0
        return self.rows


def layout_lines(
    text: str,
    spans: Sequence[Span],
    theme: Theme,
    viewport_width: int,
    font_metrics=None,
) -> tuple[Line, ...]:
    """Lay out ``text`` into rows no wider than ``viewport_width``.

    Text not covered by any span is drawn with the ``default`` style.
    """
    metrics = font_metrics if font_metrics is not None else CellMetrics()
    builder = _RowBuilder(max(1, viewport_width), metrics)
    default_style = theme.style_for(DEFAULT)

    def feed(start: int, end: int, style: Style) -> None:
        for ch in text[start:end]:
            if ch == "\n":
                builder.newline()
            elif ch == "\r":
                continue
            else:
                builder.glyph(ch, style)

    cursor = 0
    for span in spans:
        if span.start > cursor:
            feed(cursor, span.start, default_style)
        start = max(span.start, cursor)
        if span.end > start:
            feed(start, span.end, theme.style_for(span.token_class))
            cursor = span.end
    if cursor < len(text):
        feed(cursor, len(text), default_style)
    return tuple(builder.finish())


def paginate(lines: Sequence[Line], page_height: int) -> tuple[Page, ...]:
    """Group rows into pages of ``page_height``; empty input yields one empty page."""
    page_height = max(1, page_height)
    if not lines:
        return (Page(lines=(), first_line=0),)
    return tuple(
        Page(lines=tuple(lines[start : start + page_height]), first_line=start)
        for start in range(0, len(lines), page_height)
    )


def page_height_for(viewport_height: int, font_metrics=None) -> int:
    metrics = font_metrics if font_metrics is not None else CellMetrics()
    return max(1, viewport_height // max(1, metrics.line_height))


def layout(
    text: str,
    spans: Sequence[Span],
    theme: Theme,
    viewport_width: int,
    viewport_height: int,
    font_metrics=None,
) -> tuple[Page, ...]:
    """Lay out spans into pages sized to the viewport."""
    lines = layout_lines(text, spans, theme, viewport_width, font_metrics)
    return paginate(lines, page_height_for(viewport_height, font_metrics))


def flatten_pages(pages: Sequence[Page]) -> tuple[Line, ...]:
    return tuple(line for page in pages for line in page.lines)
