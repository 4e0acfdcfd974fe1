"""Terminal control and the ANSI render surface.

``TerminalController`` owns raw-mode and alternate-screen lifecycle.
``TerminalSurface`` implements the render-surface contract used by the
display controller: text draw calls are collected into a frame and written
out only when the composed frame differs from the last one.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

from ..ansi import RESET, sgr_for
from ..layout import CellMetrics
from ..syntax.theme import Color


class TerminalController:
    """Manage terminal mode transitions for the interactive view."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with mouse wheel reporting enabled."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        # Enter alternate screen, hide cursor, enable SGR mouse reporting.
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l\x1b[?1000h\x1b[?1006h")

    def disable_tui_mode(self) -> None:
        """Restore normal terminal state."""
        os.write(self.stdout_fd, b"\x1b[?1000l\x1b[?1006l\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()


class TerminalSurface:
    """Character-cell render surface writing ANSI frames to a file descriptor."""

    def __init__(self, stdout_fd: int, *, no_color: bool = False, background: Color | None = None) -> None:
        self.stdout_fd = stdout_fd
        self.no_color = no_color
        self.background = background
        self._metrics = CellMetrics()
        self._ops: list[str] = []
        self._last_frame: str | None = None

    def viewport_size(self) -> tuple[int, int]:
        term = shutil.get_terminal_size((80, 24))
        return max(1, term.columns), max(1, term.lines)

    def font_metrics(self) -> CellMetrics:
        return self._metrics

    def begin_frame(self) -> None:
        self._ops = []

    def draw_text(
        self,
        text: str,
        x: int,
        y: int,
        color: Color,
        *,
        background: Color | None = None,
        bold: bool = False,
        italic: bool = False,
    ) -> None:
        """Queue ``text`` at zero-based cell ``(x, y)``."""
        if not text:
            return
        position = f"\033[{y + 1};{x + 1}H"
        if self.no_color:
            self._ops.append(f"{position}{text}")
            return
        fill = background if background is not None else self.background
        style = sgr_for(color, background=fill, bold=bold, italic=italic)
        self._ops.append(f"{position}{style}{text}{RESET}")

    def compose_frame(self) -> str:
        clear = "\033[H\033[2J"
        if self.background is not None and not self.no_color:
            bg = self.background
            clear = f"\033[48;2;{bg.r};{bg.g};{bg.b}m{clear}{RESET}"
        return clear + "".join(self._ops)

    def end_frame(self) -> bool:
        """Write the frame if it changed; return whether anything was written."""
        frame = self.compose_frame()
        if frame == self._last_frame:
            return False
        self._last_frame = frame
        payload = memoryview(frame.encode("utf-8", errors="replace"))
        while payload:
            written = os.write(self.stdout_fd, payload)
            payload = payload[written:]
        return True
