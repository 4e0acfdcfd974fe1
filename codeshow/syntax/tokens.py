"""Closed set of token classes and their mapping from Pygments token types.

Themes are keyed by these class names. Every Pygments token type maps onto
exactly one class by walking up its type hierarchy; anything unmatched is
``default``.
"""

from __future__ import annotations

from functools import lru_cache

from pygments.token import (
    Comment,
    Error,
    Generic,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Token,
)

DEFAULT = "default"
KEYWORD = "keyword"
TYPE = "type"
CONSTANT = "constant"
STRING = "string"
ESCAPE = "escape"
NUMBER = "number"
COMMENT = "comment"
PREPROCESSOR = "preprocessor"
OPERATOR = "operator"
PUNCTUATION = "punctuation"
FUNCTION = "function"
CLASS = "class"
BUILTIN = "builtin"
DECORATOR = "decorator"
ATTRIBUTE = "attribute"
TAG = "tag"
ERROR = "error"
HEADING = "heading"
INSERTED = "inserted"
DELETED = "deleted"

TOKEN_CLASSES: frozenset[str] = frozenset(
    {
        DEFAULT,
        KEYWORD,
        TYPE,
        CONSTANT,
        STRING,
        ESCAPE,
        NUMBER,
        COMMENT,
        PREPROCESSOR,
        OPERATOR,
        PUNCTUATION,
        FUNCTION,
        CLASS,
        BUILTIN,
        DECORATOR,
        ATTRIBUTE,
        TAG,
        ERROR,
        HEADING,
        INSERTED,
        DELETED,
    }
)

# Lookup walks from a token type towards the root; the first hit wins.
_CLASS_BY_TOKEN_TYPE: dict[object, str] = {
    Keyword: KEYWORD,
    Keyword.Type: TYPE,
    Keyword.Constant: CONSTANT,
    Name.Builtin: BUILTIN,
    Name.Builtin.Pseudo: CONSTANT,
    Name.Function: FUNCTION,
    Name.Class: CLASS,
    Name.Namespace: CLASS,
    Name.Decorator: DECORATOR,
    Name.Constant: CONSTANT,
    Name.Attribute: ATTRIBUTE,
    Name.Tag: TAG,
    Name.Exception: CLASS,
    String: STRING,
    String.Escape: ESCAPE,
    String.Doc: COMMENT,
    Number: NUMBER,
    Comment: COMMENT,
    Comment.Preproc: PREPROCESSOR,
    Operator: OPERATOR,
    Operator.Word: KEYWORD,
    Punctuation: PUNCTUATION,
    Error: ERROR,
    Generic.Heading: HEADING,
    Generic.Subheading: HEADING,
    Generic.Inserted: INSERTED,
    Generic.Deleted: DELETED,
}

# Representative Pygments token type per class, used to derive themes from
# Pygments styles.
REPRESENTATIVE_TOKEN_TYPES: dict[str, object] = {
    DEFAULT: Token.Text,
    KEYWORD: Keyword,
    TYPE: Keyword.Type,
    CONSTANT: Keyword.Constant,
    STRING: String,
    ESCAPE: String.Escape,
    NUMBER: Number,
    COMMENT: Comment,
    PREPROCESSOR: Comment.Preproc,
    OPERATOR: Operator,
    PUNCTUATION: Punctuation,
    FUNCTION: Name.Function,
    CLASS: Name.Class,
    BUILTIN: Name.Builtin,
    DECORATOR: Name.Decorator,
    ATTRIBUTE: Name.Attribute,
    TAG: Name.Tag,
    ERROR: Error,
    HEADING: Generic.Heading,
    INSERTED: Generic.Inserted,
    DELETED: Generic.Deleted,
}


@lru_cache(maxsize=512)
def token_class_for(token_type) -> str:
    """Return the token class for a Pygments token type."""
    current = token_type
    while current is not None:
        token_class = _CLASS_BY_TOKEN_TYPE.get(current)
        if token_class is not None:
            return token_class
        current = current.parent
    return DEFAULT
