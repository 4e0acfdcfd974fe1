"""Runtime package: content fetching, display control and the frame loop."""

from __future__ import annotations

from .app import run_viewer
from .controller import DISPLAYING, ERROR, LOADING, DisplayController
from .fetch import ContentFetcher, FileSource, InlineSource, RemoteSource, select_source
from .loop import RuntimeLoopTiming, run_main_loop

__all__ = [
    "ContentFetcher",
    "DISPLAYING",
    "DisplayController",
    "ERROR",
    "FileSource",
    "InlineSource",
    "LOADING",
    "RemoteSource",
    "RuntimeLoopTiming",
    "run_main_loop",
    "run_viewer",
    "select_source",
]
