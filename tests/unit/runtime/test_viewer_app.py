from __future__ import annotations

import unittest
from unittest import mock

from codeshow.runtime import app
from codeshow.runtime.fetch import InlineSource
from codeshow.syntax.theme import Theme

THEME = Theme.from_mapping({"default": {"foreground": "#ffffff", "background": "#101010"}})


class RunViewerTests(unittest.TestCase):
    def test_requires_interactive_terminal(self) -> None:
        with mock.patch("codeshow.runtime.app.sys.stdin") as stdin, mock.patch(
            "codeshow.runtime.app.sys.stdout"
        ) as stdout, mock.patch("codeshow.runtime.app.os.isatty", return_value=False):
            stdin.fileno.return_value = 0
            stdout.fileno.return_value = 1
            with self.assertRaises(SystemExit) as ctx:
                app.run_viewer(InlineSource("x"), THEME)

        self.assertIn("--print", str(ctx.exception.code))

    def test_wires_controller_into_frame_loop(self) -> None:
        with mock.patch("codeshow.runtime.app.sys.stdin") as stdin, mock.patch(
            "codeshow.runtime.app.sys.stdout"
        ) as stdout, mock.patch("codeshow.runtime.app.os.isatty", return_value=True), mock.patch(
            "codeshow.runtime.app.TerminalController"
        ) as terminal_cls, mock.patch("codeshow.runtime.app.run_main_loop") as run_main_loop:
            stdin.fileno.return_value = 0
            stdout.fileno.return_value = 1
            app.run_viewer(InlineSource("fn main() {}"), THEME, language="rust", frames_per_second=10)

        terminal_cls.assert_called_once_with(0, 1)
        controller, terminal, stdin_fd, timing = run_main_loop.call_args.args
        self.assertIs(terminal, terminal_cls.return_value)
        self.assertEqual(stdin_fd, 0)
        self.assertAlmostEqual(timing.frame_seconds, 0.1)
        self.assertEqual(controller.language, "rust")
        self.assertEqual(controller.surface.background, THEME.default_style.background)
        self.assertEqual(controller.fetcher.state.text, "fn main() {}")


if __name__ == "__main__":
    unittest.main()
