"""Resolve a code source into text behind a small fetch state machine.

Inline code and local files resolve immediately. Gists are fetched on a
background thread; the frame loop calls ``poll`` each tick and only the
result of the most recent request is accepted, so a superseded fetch can
never overwrite newer content.
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue
from typing import Union

from ..errors import NetworkError, SourceError, SourceReadError
from .gist import GistFile, fetch_gist

logger = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"
DEFAULT_SOURCE_PATH = ASSETS_DIR / "helloworld.rs"
INLINE_FILENAME = "noname.txt"


@dataclass(frozen=True)
class InlineSource:
    text: str


@dataclass(frozen=True)
class FileSource:
    path: Path


@dataclass(frozen=True)
class RemoteSource:
    gist_id: str


Source = Union[InlineSource, FileSource, RemoteSource]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Pending:
    request_id: int
    source: Source


@dataclass(frozen=True)
class Ready:
    text: str
    filename: str | None = None


@dataclass(frozen=True)
class Failed:
    error: SourceError

    @property
    def message(self) -> str:
        return self.error.message


FetchState = Union[Idle, Pending, Ready, Failed]


def select_source(
    code: str | None = None,
    gist: str | None = None,
    filename: str | Path | None = None,
) -> Source:
    """Pick the effective source with ``code > gist > filename`` precedence.

    An empty ``code`` string still counts as inline code; with nothing given
    the bundled sample file is shown.
    """
    if code is not None:
        return InlineSource(code)
    if gist:
        return RemoteSource(gist)
    if filename:
        return FileSource(Path(filename))
    return FileSource(DEFAULT_SOURCE_PATH)


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1. ``OSError`` becomes
    ``SourceReadError``.
    """
    try:
        for encoding in ("utf-8", "utf-8-sig"):
            try:
                return path.read_text(encoding=encoding)
            except UnicodeDecodeError:
                continue
        return path.read_text(encoding="latin-1")
    except OSError as exc:
        raise SourceReadError(str(path)) from exc


class ContentFetcher:
    """Own the current fetch state for one display session."""

    def __init__(
        self,
        fetch_remote: Callable[[str], GistFile] | None = None,
        *,
        timeout: float = 15.0,
    ) -> None:
        self._fetch_remote = fetch_remote or functools.partial(fetch_gist, timeout=timeout)
        self._lock = threading.Lock()
        self._next_request_id = 1
        self._results: Queue[tuple[int, FetchState]] = Queue()
        self._state: FetchState = Idle()

    @property
    def state(self) -> FetchState:
        return self._state

    def _worker(self, request_id: int, gist_id: str) -> None:
        try:
            gist_file = self._fetch_remote(gist_id)
            outcome: FetchState = Ready(text=gist_file.content, filename=gist_file.filename)
        except SourceError as exc:
            outcome = Failed(exc)
        except Exception as exc:
            logger.exception("gist %s fetch crashed", gist_id)
            outcome = Failed(NetworkError(gist_id, type(exc).__name__))
        self._results.put((request_id, outcome))

    def begin(self, source: Source) -> FetchState:
        """Start resolving ``source``, replacing whatever state was current."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1

        if isinstance(source, InlineSource):
            self._state = Ready(text=source.text, filename=INLINE_FILENAME)
        elif isinstance(source, FileSource):
            try:
                self._state = Ready(text=read_text(source.path), filename=str(source.path))
            except SourceReadError as exc:
                self._state = Failed(exc)
        elif isinstance(source, RemoteSource):
            self._state = Pending(request_id=request_id, source=source)
            worker = threading.Thread(
                target=self._worker,
                args=(request_id, source.gist_id),
                name=f"codeshow-gist-{request_id}",
                daemon=True,
            )
            worker.start()
        else:
            raise TypeError(f"unsupported source: {source!r}")
        logger.info("fetch %d (%s) -> %s", request_id, type(source).__name__, type(self._state).__name__)
        return self._state

    def poll(self) -> FetchState:
        """Drain finished remote requests and return the current state."""
        while True:
            try:
                request_id, outcome = self._results.get_nowait()
            except Empty:
                break
            current = self._state
            if isinstance(current, Pending) and current.request_id == request_id:
                self._state = outcome
                logger.info("fetch %d completed -> %s", request_id, type(outcome).__name__)
            else:
                logger.debug("discarding stale result of fetch %d", request_id)
        return self._state


__all__ = [
    "ContentFetcher",
    "DEFAULT_SOURCE_PATH",
    "FetchState",
    "Failed",
    "FileSource",
    "Idle",
    "InlineSource",
    "Pending",
    "Ready",
    "RemoteSource",
    "Source",
    "read_text",
    "select_source",
]
