"""Split source text into classified spans.

Pygments does the lexing; its output is normalized so that spans are
ordered, contiguous, non-overlapping and cover the text exactly once.
Grammars Pygments does not know, and any lexer failure, degrade to a single
``default`` span. Also neutralizes terminal control bytes before display.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .tokens import DEFAULT, token_class_for

logger = logging.getLogger(__name__)

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` range of the source text with its token class."""

    start: int
    end: int
    token_class: str

    def __len__(self) -> int:
        return self.end - self.start


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def normalize_spans(raw: Iterable[tuple[int, int, str]], length: int) -> tuple[Span, ...]:
    """Turn possibly gappy/overlapping ``(start, end, class)`` triples into full coverage.

    Gaps become ``default`` spans, overlaps are clipped in favour of the
    earlier span, out-of-range offsets are clamped and neighbouring spans of
    the same class are merged.
    """
    spans: list[Span] = []
    cursor = 0

    def push(start: int, end: int, token_class: str) -> None:
        if spans and spans[-1].token_class == token_class and spans[-1].end == start:
            spans[-1] = Span(spans[-1].start, end, token_class)
        else:
            spans.append(Span(start, end, token_class))

    for start, end, token_class in sorted(raw, key=lambda item: item[0]):
        start = max(start, cursor)
        end = min(end, length)
        if end <= start:
            continue
        if start > cursor:
            push(cursor, start, DEFAULT)
        push(start, end, token_class)
        cursor = end
    if cursor < length:
        push(cursor, length, DEFAULT)
    return tuple(spans)


def _pygments_spans(text: str, grammar: str) -> list[tuple[int, int, str]]:
    lexer = get_lexer_by_name(grammar, stripnl=False, stripall=False, ensurenl=False)
    out: list[tuple[int, int, str]] = []
    for index, token_type, value in lexer.get_tokens_unprocessed(text):
        if not value:
            continue
        out.append((index, index + len(value), token_class_for(token_type)))
    return out


@lru_cache(maxsize=16)
def tokenize(text: str, grammar: str) -> tuple[Span, ...]:
    """Classify ``text`` with ``grammar`` into spans covering it exactly once.

    Pure and deterministic, so results are cached by ``(text, grammar)``.
    """
    if not text:
        return ()
    try:
        raw = _pygments_spans(text, grammar)
    except ClassNotFound:
        logger.info("no lexer for grammar %r, using a single default span", grammar)
        raw = []
    except Exception:
        logger.exception("lexer for grammar %r failed, using a single default span", grammar)
        raw = []
    return normalize_spans(raw, len(text))
