"""Command-line front door for codeshow.

Parses options, picks the code source (``code > gist > filename``), loads the
theme and then either prints the laid-out code or starts the interactive
viewer.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
import time
from pathlib import Path

from .ansi import format_line
from .errors import ConfigError, SourceError
from .layout import layout_lines
from .logging_setup import configure_logging
from .runtime import config
from .runtime.app import run_viewer
from .runtime.fetch import ASSETS_DIR, ContentFetcher, Failed, Pending, Source, select_source
from .syntax.language import resolve_language
from .syntax.theme import Theme, load_theme, theme_from_pygments_style
from .syntax.tokenizer import sanitize_terminal_text, tokenize

logger = logging.getLogger(__name__)

DEFAULT_THEME_PATH = ASSETS_DIR / "theme.json"
PRINT_POLL_SECONDS = 0.05


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _default_render_width() -> int:
    """Resolve default print width from current terminal size."""
    term = shutil.get_terminal_size((80, 24))
    return max(1, term.columns)


def resolve_theme(theme_path: str | None, style: str | None) -> Theme:
    """Pick the theme: CLI file, CLI style, config file, config style, bundled file."""
    if theme_path:
        return load_theme(Path(theme_path).expanduser())
    if style:
        return theme_from_pygments_style(style)
    configured_path = config.load_theme_path()
    if configured_path is not None:
        return load_theme(configured_path)
    configured_style = config.load_style_name()
    if configured_style is not None:
        return theme_from_pygments_style(configured_style)
    return load_theme(DEFAULT_THEME_PATH)


def render_source_view(
    source: Source,
    theme: Theme,
    *,
    language: str | None,
    no_color: bool,
    max_cols: int,
    fetch_timeout: float = config.DEFAULT_FETCH_TIMEOUT_SECONDS,
) -> str:
    """Fetch, tokenize and lay out ``source``; return it as printable text.

    Raises the fetch error when the source cannot be loaded.
    """
    fetcher = ContentFetcher(timeout=fetch_timeout)
    state = fetcher.begin(source)
    while isinstance(state, Pending):
        time.sleep(PRINT_POLL_SECONDS)
        state = fetcher.poll()
    if isinstance(state, Failed):
        raise state.error

    text = sanitize_terminal_text(state.text)
    grammar = resolve_language(language, state.filename)
    lines = layout_lines(text, tokenize(text, grammar), theme, max_cols)
    return "".join(f"{format_line(line, no_color)}\n" for line in lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codeshow",
        description="A small tool to display source code with syntax highlighting.",
    )
    parser.add_argument("-c", "--code", default=None, help="Code to display, overrides both --filename and --gist.")
    parser.add_argument(
        "-f",
        "--filename",
        default=None,
        help="Path to source file to display (default: bundled helloworld.rs).",
    )
    parser.add_argument("-g", "--gist", default=None, help="Gist id to display, overrides --filename.")
    parser.add_argument(
        "-l",
        "--language",
        default=None,
        help="Language of the code; if empty, detected from the file extension.",
    )
    parser.add_argument("-t", "--theme", default=None, help="Path to theme.json file.")
    parser.add_argument("--style", default=None, help="Build the theme from a Pygments style (e.g. monokai).")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--print", dest="print_only", action="store_true", help="Print laid-out code and exit.")
    parser.add_argument(
        "--max-cols",
        type=_positive_int,
        default=None,
        help="Column width for --print output (default: terminal width).",
    )
    parser.add_argument("--log-level", default="INFO", help="Log level for the log file (default: INFO).")
    return parser


def main() -> None:
    """Parse CLI arguments and display the selected code."""
    args = build_parser().parse_args()
    configure_logging(args.log_level, console=args.print_only)

    try:
        theme = resolve_theme(args.theme, args.style)
    except ConfigError as exc:
        logger.error("startup failed: %s", exc.message)
        raise SystemExit(exc.message) from exc

    source = select_source(code=args.code, gist=args.gist, filename=args.filename)
    logger.info("selected source %s", type(source).__name__)

    if args.print_only:
        max_cols = args.max_cols if args.max_cols is not None else _default_render_width()
        try:
            rendered = render_source_view(
                source,
                theme,
                language=args.language,
                no_color=args.no_color,
                max_cols=max_cols,
                fetch_timeout=config.load_fetch_timeout_seconds(),
            )
        except SourceError as exc:
            logger.info("print failed: %s", exc.message)
            raise SystemExit(exc.message) from exc
        sys.stdout.write(rendered)
        return

    run_viewer(
        source,
        theme,
        language=args.language,
        no_color=args.no_color,
        frames_per_second=config.load_frames_per_second(),
        fetch_timeout=config.load_fetch_timeout_seconds(),
    )


if __name__ == "__main__":
    main()
