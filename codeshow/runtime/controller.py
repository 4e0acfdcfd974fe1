"""Per-frame orchestration of fetch, tokenize, layout and drawing.

The controller is a small state machine:

* ``loading`` until the fetcher reports a result;
* ``displaying`` once pages are built;
* ``error`` when the source could not be loaded.

``tick`` is called once per frame by the host loop. It only polls and draws;
layout is recomputed solely when the text, the viewport size or the theme
changes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import PurePath

from ..ansi import clip_to_width
from ..layout import Line, Page, flatten_pages, layout, layout_lines, page_height_for
from ..syntax.language import DEFAULT_GRAMMAR, language_name, resolve_language
from ..syntax.theme import Style, Theme
from ..syntax.tokenizer import Span, sanitize_terminal_text, tokenize
from .fetch import ContentFetcher, Failed, Ready, Source

logger = logging.getLogger(__name__)

LOADING = "loading"
DISPLAYING = "displaying"
RELAYOUT = "relayout"
ERROR = "error"

LOADING_MESSAGE = "Loading…"
STATUS_ROWS = 1
WHEEL_SCROLL_LINES = 3

_LINE_SCROLL_KEYS = {"DOWN": 1, "j": 1, "UP": -1, "k": -1}
_PAGE_SCROLL_KEYS = {"PAGE_DOWN": 1, " ": 1, "PAGE_UP": -1, "b": -1}
_TOP_KEYS = {"HOME", "g"}
_BOTTOM_KEYS = {"END", "G"}


class DisplayController:
    """Drive one display session against a render surface.

    The surface provides ``viewport_size()``, ``font_metrics()``,
    ``begin_frame()``, ``draw_text(...)`` and ``end_frame()``.
    """

    def __init__(
        self,
        fetcher: ContentFetcher,
        theme: Theme,
        surface,
        *,
        language: str | None = None,
        show_status: bool = True,
    ) -> None:
        self.fetcher = fetcher
        self.theme = theme
        self.surface = surface
        self.language = language
        self.show_status = show_status

        self.state = LOADING
        self.error_message = ""
        self.text = ""
        self.filename: str | None = None
        self.grammar = DEFAULT_GRAMMAR
        self.spans: tuple[Span, ...] = ()
        self.pages: tuple[Page, ...] = ()
        self.lines: tuple[Line, ...] = ()
        self.page_height = 1
        self.offset = 0
        self.layout_count = 0
        self._laid_out_viewport: tuple[int, int] | None = None
        self._laid_out_theme: Theme | None = None

    # -- source lifecycle -------------------------------------------------

    def open(self, source: Source) -> None:
        """Re-target the view to ``source``; any state goes back to loading."""
        self.fetcher.begin(source)
        self.state = LOADING
        self.error_message = ""
        self.pages = ()
        self.lines = ()
        self.offset = 0
        self._laid_out_viewport = None
        self._laid_out_theme = None

    def set_theme(self, theme: Theme) -> None:
        self.theme = theme

    def _poll_fetcher(self) -> None:
        fetch_state = self.fetcher.poll()
        if isinstance(fetch_state, Ready):
            self._accept(fetch_state)
        elif isinstance(fetch_state, Failed):
            self.state = ERROR
            self.error_message = fetch_state.message
            logger.error("Encountered an error: %s", fetch_state.message)

    def _accept(self, ready: Ready) -> None:
        self.text = sanitize_terminal_text(ready.text)
        self.filename = ready.filename
        self.grammar = resolve_language(self.language, ready.filename)
        self.spans = tokenize(self.text, self.grammar)
        self.offset = 0
        self._laid_out_viewport = None
        self.state = DISPLAYING
        logger.info(
            "displaying %s as %s (%d chars, %d spans)",
            ready.filename,
            self.grammar,
            len(self.text),
            len(self.spans),
        )

    # -- layout -----------------------------------------------------------

    def content_viewport(self) -> tuple[int, int]:
        width, height = self.surface.viewport_size()
        if self.show_status:
            height -= STATUS_ROWS
        return max(1, width), max(1, height)

    def _ensure_layout(self) -> None:
        viewport = self.content_viewport()
        if viewport == self._laid_out_viewport and self.theme is self._laid_out_theme:
            return
        self.state = RELAYOUT
        width, height = viewport
        metrics = self.surface.font_metrics()
        self.pages = layout(self.text, self.spans, self.theme, width, height, metrics)
        self.lines = flatten_pages(self.pages)
        self.page_height = page_height_for(height, metrics)
        self._laid_out_viewport = viewport
        self._laid_out_theme = self.theme
        self.layout_count += 1
        self.offset = self._clamp(self.offset)
        self.state = DISPLAYING
        logger.debug("layout %dx%d -> %d lines, %d pages", width, height, len(self.lines), len(self.pages))

    # -- scrolling --------------------------------------------------------

    @property
    def max_offset(self) -> int:
        return max(0, len(self.lines) - self.page_height)

    @property
    def page_index(self) -> int:
        return self.offset // max(1, self.page_height)

    def _clamp(self, offset: int) -> int:
        return max(0, min(offset, self.max_offset))

    def scroll(self, delta: int) -> bool:
        """Move by ``delta`` lines; returns whether the offset changed."""
        if self.state != DISPLAYING:
            return False
        previous = self.offset
        self.offset = self._clamp(self.offset + delta)
        return self.offset != previous

    def page(self, delta: int) -> bool:
        return self.scroll(delta * self.page_height)

    def scroll_to(self, offset: int) -> bool:
        if self.state != DISPLAYING:
            return False
        return self.scroll(offset - self.offset)

    def handle_key(self, key: str) -> bool:
        """Apply one key token; returns whether it was consumed."""
        if self.state != DISPLAYING:
            return False
        if key in _LINE_SCROLL_KEYS:
            self.scroll(_LINE_SCROLL_KEYS[key])
            return True
        if key in _PAGE_SCROLL_KEYS:
            self.page(_PAGE_SCROLL_KEYS[key])
            return True
        if key in _TOP_KEYS:
            self.scroll_to(0)
            return True
        if key in _BOTTOM_KEYS:
            self.scroll_to(self.max_offset)
            return True
        if key.startswith("MOUSE_WHEEL_DOWN"):
            self.scroll(WHEEL_SCROLL_LINES)
            return True
        if key.startswith("MOUSE_WHEEL_UP"):
            self.scroll(-WHEEL_SCROLL_LINES)
            return True
        return False

    # -- drawing ----------------------------------------------------------

    def visible_lines(self) -> Sequence[Line]:
        return self.lines[self.offset : self.offset + self.page_height]

    def tick(self) -> None:
        """Advance one frame: poll, relayout if needed, then draw."""
        if self.state == LOADING:
            self._poll_fetcher()
        if self.state == DISPLAYING:
            self._ensure_layout()
        self.draw()

    def _draw_line(self, line: Line, y: int, x: int = 0) -> None:
        for fragment in line.fragments:
            self._draw_text(fragment.text, x, y, fragment.style)
            x += fragment.width

    def _draw_text(self, text: str, x: int, y: int, style: Style) -> None:
        self.surface.draw_text(
            text,
            x,
            y,
            style.foreground,
            background=style.background,
            bold=style.bold,
            italic=style.italic,
        )

    def _draw_centered(self, message: str) -> None:
        width, height = self.surface.viewport_size()
        rows = layout_lines(message, (), self.theme, width, self.surface.font_metrics())
        top = max(0, (height - len(rows)) // 2)
        for idx, row in enumerate(rows):
            self._draw_line(row, top + idx, max(0, (width - row.width) // 2))

    def status_text(self) -> str:
        name = PurePath(self.filename).name if self.filename else ""
        total = len(self.lines)
        first = self.offset + 1 if total else 0
        last = min(total, self.offset + self.page_height)
        return f" {name} | {language_name(self.grammar)} | {first}-{last}/{total} "

    def draw(self) -> None:
        self.surface.begin_frame()
        if self.state == ERROR:
            self._draw_centered(self.error_message)
        elif self.state == LOADING:
            self._draw_centered(LOADING_MESSAGE)
        else:
            for row, line in enumerate(self.visible_lines()):
                self._draw_line(line, row)
            if self.show_status:
                width, height = self.surface.viewport_size()
                default = self.theme.default_style
                self.surface.draw_text(
                    clip_to_width(self.status_text(), width),
                    0,
                    height - STATUS_ROWS,
                    default.foreground,
                    background=default.background,
                    bold=True,
                )
        self.surface.end_frame()
