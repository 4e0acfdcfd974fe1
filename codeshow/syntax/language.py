"""Map language hints and filenames to grammar ids.

Grammar ids are canonical Pygments lexer aliases. Resolution never fails:
an unrecognized hint falls through to the filename, and an unrecognized
filename falls through to plain text.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import PurePath

from pygments.lexers import find_lexer_class_by_name, find_lexer_class_for_filename
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

DEFAULT_GRAMMAR = "text"


def _canonical_alias(lexer_class) -> str | None:
    aliases = getattr(lexer_class, "aliases", None) or ()
    return aliases[0] if aliases else None


@lru_cache(maxsize=256)
def grammar_for_hint(hint: str) -> str | None:
    """Return the grammar id for an explicit language name, or ``None``."""
    name = hint.strip().lower()
    if not name:
        return None
    try:
        lexer_class = find_lexer_class_by_name(name)
    except ClassNotFound:
        return None
    return _canonical_alias(lexer_class)


@lru_cache(maxsize=256)
def grammar_for_filename(filename: str) -> str | None:
    """Return the grammar id matching a filename's extension/pattern, or ``None``."""
    name = PurePath(filename).name
    if not name:
        return None
    lexer_class = find_lexer_class_for_filename(name)
    if lexer_class is None:
        return None
    return _canonical_alias(lexer_class)


def resolve_language(hint: str | None = None, filename: str | None = None) -> str:
    """Resolve explicit hint, then filename, then the plain-text default."""
    if hint:
        grammar = grammar_for_hint(hint)
        if grammar is not None:
            return grammar
        logger.info("unrecognized language hint %r, falling back", hint)
    if filename:
        grammar = grammar_for_filename(filename)
        if grammar is not None:
            return grammar
    return DEFAULT_GRAMMAR


def language_name(grammar: str) -> str:
    """Human-readable name for a grammar id (``"Rust"`` for ``"rust"``)."""
    try:
        lexer_class = find_lexer_class_by_name(grammar)
    except ClassNotFound:
        return grammar
    return getattr(lexer_class, "name", grammar)
