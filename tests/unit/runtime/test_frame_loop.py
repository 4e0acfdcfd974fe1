from __future__ import annotations

import unittest
from contextlib import contextmanager
from unittest import mock

from codeshow.runtime import RuntimeLoopTiming, run_main_loop


class _FakeTerminal:
    def __init__(self) -> None:
        self.entered = 0
        self.exited = 0

    @contextmanager
    def raw_mode(self):
        self.entered += 1
        try:
            yield
        finally:
            self.exited += 1


class _RecordingController:
    def __init__(self) -> None:
        self.ticks = 0
        self.keys: list[str] = []

    def tick(self) -> None:
        self.ticks += 1

    def handle_key(self, key: str) -> bool:
        self.keys.append(key)
        return True


class RuntimeLoopTests(unittest.TestCase):
    def _run(self, key_tokens: list[str]) -> tuple[_RecordingController, _FakeTerminal, mock.MagicMock]:
        controller = _RecordingController()
        terminal = _FakeTerminal()
        with mock.patch("codeshow.runtime.loop.read_key", side_effect=key_tokens) as read_key:
            run_main_loop(controller, terminal, 0, RuntimeLoopTiming.from_frames_per_second(50))
        return controller, terminal, read_key

    def test_ticks_every_frame_and_forwards_keys_until_quit(self) -> None:
        controller, terminal, read_key = self._run(["", "j", "", "PAGE_DOWN", "q", "k"])

        self.assertEqual(controller.ticks, 5)
        self.assertEqual(controller.keys, ["j", "PAGE_DOWN"])
        self.assertEqual((terminal.entered, terminal.exited), (1, 1))
        self.assertEqual(read_key.call_args.kwargs["timeout_ms"], 20)

    def test_escape_and_ctrl_c_quit(self) -> None:
        for token in ("Q", "ESC", "CTRL_C"):
            with self.subTest(token=token):
                controller, _, _ = self._run([token])
                self.assertEqual(controller.ticks, 1)
                self.assertEqual(controller.keys, [])

    def test_terminal_is_restored_when_tick_raises(self) -> None:
        controller = _RecordingController()
        controller.tick = mock.Mock(side_effect=RuntimeError("boom"))
        terminal = _FakeTerminal()

        with self.assertRaises(RuntimeError):
            run_main_loop(controller, terminal, 0, RuntimeLoopTiming(frame_seconds=0.01))
        self.assertEqual(terminal.exited, 1)

    def test_timing_clamps_frame_rate(self) -> None:
        self.assertEqual(RuntimeLoopTiming.from_frames_per_second(0).frame_seconds, 1.0)
        self.assertAlmostEqual(RuntimeLoopTiming.from_frames_per_second(30).frame_seconds, 1 / 30)


if __name__ == "__main__":
    unittest.main()
