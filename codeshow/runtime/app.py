"""Wire fetcher, controller, terminal surface and frame loop together."""

from __future__ import annotations

import os
import sys

from ..syntax.theme import Theme
from .config import DEFAULT_FETCH_TIMEOUT_SECONDS, DEFAULT_FRAMES_PER_SECOND
from .controller import DisplayController
from .fetch import ContentFetcher, Source
from .loop import RuntimeLoopTiming, run_main_loop
from .terminal import TerminalController, TerminalSurface


def run_viewer(
    source: Source,
    theme: Theme,
    *,
    language: str | None = None,
    no_color: bool = False,
    frames_per_second: int = DEFAULT_FRAMES_PER_SECOND,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
) -> None:
    """Show ``source`` interactively until the user quits."""
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    if not os.isatty(stdin_fd) or not os.isatty(stdout_fd):
        raise SystemExit("codeshow needs an interactive terminal (use --print otherwise).")

    terminal = TerminalController(stdin_fd, stdout_fd)
    surface = TerminalSurface(stdout_fd, no_color=no_color, background=theme.default_style.background)
    controller = DisplayController(
        ContentFetcher(timeout=fetch_timeout),
        theme,
        surface,
        language=language,
    )
    controller.open(source)
    run_main_loop(
        controller,
        terminal,
        stdin_fd,
        RuntimeLoopTiming.from_frames_per_second(frames_per_second),
    )
