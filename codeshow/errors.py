"""Error taxonomy for the display pipeline.

``ConfigError`` is fatal at startup. The source errors (file, network,
not-found, decode) are captured by the content fetcher into a failed fetch
state and shown to the user instead of crashing the viewer.
"""

from __future__ import annotations


class CodeShowError(Exception):
    """Base class for errors with a user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(CodeShowError):
    """Theme or configuration resource is missing or malformed."""


class SourceError(CodeShowError):
    """Code source could not be turned into text."""


class SourceReadError(SourceError):
    """Local file is missing or unreadable."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Couldn't load file: {path}")
        self.path = path


class NetworkError(SourceError):
    """Transport-level failure while fetching a gist."""

    def __init__(self, gist_id: str, detail: str = "") -> None:
        message = f"Couldn't load Gist with ID: {gist_id}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.gist_id = gist_id


class NotFoundError(SourceError):
    """Gist does not exist or the server answered with a non-2xx status."""

    def __init__(self, gist_id: str, status_code: int) -> None:
        super().__init__(f"Couldn't load Gist with ID: {gist_id} (HTTP {status_code})")
        self.gist_id = gist_id
        self.status_code = status_code


class DecodeError(SourceError):
    """Gist response is not valid JSON or carries no text file."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Couldn't parse gist response: {detail}")


__all__ = [
    "CodeShowError",
    "ConfigError",
    "DecodeError",
    "NetworkError",
    "NotFoundError",
    "SourceError",
    "SourceReadError",
]
