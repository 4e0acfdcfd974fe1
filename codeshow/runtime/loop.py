"""Main interactive frame loop.

Each iteration ticks the display controller once, then waits up to one
frame for input. Key reads time out so remote fetches keep being polled and
the loading screen stays responsive while no key is pressed.
"""

from __future__ import annotations

from dataclasses import dataclass

from .controller import DisplayController
from .keys import read_key
from .terminal import TerminalController

QUIT_KEYS = frozenset({"q", "Q", "ESC", "CTRL_C"})


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    frame_seconds: float

    @classmethod
    def from_frames_per_second(cls, frames_per_second: int) -> "RuntimeLoopTiming":
        return cls(frame_seconds=1.0 / max(1, frames_per_second))


def run_main_loop(
    controller: DisplayController,
    terminal: TerminalController,
    stdin_fd: int,
    timing: RuntimeLoopTiming,
) -> None:
    """Run the frame loop until a quit key is pressed."""
    timeout_ms = max(1, int(timing.frame_seconds * 1000))
    with terminal.raw_mode():
        while True:
            controller.tick()
            key = read_key(stdin_fd, timeout_ms=timeout_ms)
            if not key:
                continue
            if key in QUIT_KEYS:
                break
            controller.handle_key(key)
