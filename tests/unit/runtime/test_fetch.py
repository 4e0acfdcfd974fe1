"""Tests for source selection and the content fetch state machine."""

from __future__ import annotations

import tempfile
import threading
import time
import unittest
from pathlib import Path

from codeshow.errors import NetworkError, NotFoundError, SourceReadError
from codeshow.runtime.fetch import (
    DEFAULT_SOURCE_PATH,
    ContentFetcher,
    Failed,
    FileSource,
    Idle,
    InlineSource,
    Pending,
    Ready,
    RemoteSource,
    read_text,
    select_source,
)
from codeshow.runtime.gist import GistFile


def _wait_until_settled(fetcher: ContentFetcher, timeout_seconds: float = 2.0):
    deadline = time.monotonic() + timeout_seconds
    state = fetcher.poll()
    while isinstance(state, Pending) and time.monotonic() < deadline:
        time.sleep(0.01)
        state = fetcher.poll()
    return state


def _never_called(gist_id: str) -> GistFile:
    raise AssertionError(f"remote fetch should not run for {gist_id}")


class SelectSourceTests(unittest.TestCase):
    def test_code_wins_over_gist_and_filename(self) -> None:
        self.assertEqual(select_source(code="x", gist="g1", filename="f.rs"), InlineSource("x"))

    def test_empty_code_still_counts_as_inline(self) -> None:
        self.assertEqual(select_source(code="", gist="g1"), InlineSource(""))

    def test_gist_wins_over_filename(self) -> None:
        self.assertEqual(select_source(gist="g1", filename="f.rs"), RemoteSource("g1"))

    def test_filename_and_default(self) -> None:
        self.assertEqual(select_source(filename="f.rs"), FileSource(Path("f.rs")))
        self.assertEqual(select_source(), FileSource(DEFAULT_SOURCE_PATH))
        self.assertTrue(DEFAULT_SOURCE_PATH.is_file())


class ReadTextTests(unittest.TestCase):
    def test_falls_back_to_latin1_for_non_utf8_bytes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "legacy.txt"
            path.write_bytes(b"caf\xe9\n")
            self.assertEqual(read_text(path), "café\n")

    def test_missing_file_raises_source_read_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "missing.rs"
            with self.assertRaises(SourceReadError) as ctx:
                read_text(missing)
        self.assertEqual(ctx.exception.message, f"Couldn't load file: {missing}")


class ContentFetcherTests(unittest.TestCase):
    def test_starts_idle(self) -> None:
        self.assertEqual(ContentFetcher(_never_called).state, Idle())

    def test_inline_source_is_ready_immediately(self) -> None:
        fetcher = ContentFetcher(_never_called)
        state = fetcher.begin(select_source(code="x", gist="g1", filename="f.rs"))

        self.assertEqual(state, Ready(text="x", filename="noname.txt"))
        self.assertEqual(fetcher.poll(), state)

    def test_file_source_reads_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "main.rs"
            path.write_text("fn main() {}\n", encoding="utf-8")
            state = ContentFetcher(_never_called).begin(FileSource(path))

        self.assertEqual(state, Ready(text="fn main() {}\n", filename=str(path)))

    def test_missing_file_fails_without_raising(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            state = ContentFetcher(_never_called).begin(FileSource(Path(tmp) / "gone.rs"))

        self.assertIsInstance(state, Failed)
        self.assertIsInstance(state.error, SourceReadError)
        self.assertTrue(state.message.startswith("Couldn't load file: "))

    def test_remote_source_is_pending_until_worker_finishes(self) -> None:
        release = threading.Event()

        def fetch_remote(gist_id: str) -> GistFile:
            release.wait(timeout=2.0)
            return GistFile(filename=f"{gist_id}.rs", content="fn main() {}")

        fetcher = ContentFetcher(fetch_remote)
        state = fetcher.begin(RemoteSource("abc"))

        self.assertIsInstance(state, Pending)
        self.assertIsInstance(fetcher.poll(), Pending)
        release.set()
        self.assertEqual(_wait_until_settled(fetcher), Ready(text="fn main() {}", filename="abc.rs"))

    def test_remote_errors_become_failed_state(self) -> None:
        def fetch_remote(gist_id: str) -> GistFile:
            raise NotFoundError(gist_id, 404)

        fetcher = ContentFetcher(fetch_remote)
        fetcher.begin(RemoteSource("doesnotexist"))
        state = _wait_until_settled(fetcher)

        self.assertIsInstance(state, Failed)
        self.assertIsInstance(state.error, NotFoundError)
        self.assertIn("doesnotexist", state.message)

    def test_unexpected_worker_exception_is_network_error(self) -> None:
        def fetch_remote(_gist_id: str) -> GistFile:
            raise RuntimeError("socket exploded")

        fetcher = ContentFetcher(fetch_remote)
        with self.assertLogs("codeshow.runtime.fetch", level="ERROR"):
            fetcher.begin(RemoteSource("abc"))
            state = _wait_until_settled(fetcher)

        self.assertIsInstance(state, Failed)
        self.assertIsInstance(state.error, NetworkError)

    def test_superseded_remote_result_is_discarded(self) -> None:
        first_started = threading.Event()
        release_first = threading.Event()
        first_done = threading.Event()

        def fetch_remote(gist_id: str) -> GistFile:
            if gist_id == "slow":
                first_started.set()
                release_first.wait(timeout=2.0)
                first_done.set()
                return GistFile(filename="slow.rs", content="stale")
            raise AssertionError("only the slow gist is remote")

        fetcher = ContentFetcher(fetch_remote)
        fetcher.begin(RemoteSource("slow"))
        self.assertTrue(first_started.wait(timeout=2.0))

        newer = fetcher.begin(InlineSource("fresh"))
        release_first.set()
        self.assertTrue(first_done.wait(timeout=2.0))
        time.sleep(0.05)

        self.assertEqual(fetcher.poll(), newer)
        self.assertEqual(fetcher.state, Ready(text="fresh", filename="noname.txt"))

    def test_latest_of_two_remote_requests_wins(self) -> None:
        release = {"one": threading.Event(), "two": threading.Event()}

        def fetch_remote(gist_id: str) -> GistFile:
            release[gist_id].wait(timeout=2.0)
            return GistFile(filename=f"{gist_id}.txt", content=gist_id)

        fetcher = ContentFetcher(fetch_remote)
        fetcher.begin(RemoteSource("one"))
        fetcher.begin(RemoteSource("two"))
        release["two"].set()
        self.assertEqual(_wait_until_settled(fetcher), Ready(text="two", filename="two.txt"))

        release["one"].set()
        time.sleep(0.05)
        self.assertEqual(fetcher.poll(), Ready(text="two", filename="two.txt"))

    def test_unsupported_source_raises_type_error(self) -> None:
        with self.assertRaises(TypeError):
            ContentFetcher(_never_called).begin("not a source")


if __name__ == "__main__":
    unittest.main()
