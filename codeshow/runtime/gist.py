"""GitHub gist client.

Fetches ``https://api.github.com/gists/<id>`` and returns the first file of
the gist. Transport failures, non-2xx answers and unusable payloads map onto
the fetch error taxonomy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from ..errors import DecodeError, NetworkError, NotFoundError

logger = logging.getLogger(__name__)

GIST_API_URL = "https://api.github.com/gists/{gist_id}"
GIST_HEADERS = {
    "Accept": "application/vnd.github.v3+json",
    "User-Agent": "codeshow",
}


@dataclass(frozen=True)
class GistFile:
    filename: str
    content: str


def _get(client: httpx.Client, url: str, gist_id: str) -> httpx.Response:
    try:
        response = client.get(url, headers=GIST_HEADERS)
    except httpx.HTTPError as exc:
        raise NetworkError(gist_id, type(exc).__name__) from exc
    if not response.is_success:
        raise NotFoundError(gist_id, response.status_code)
    return response


def parse_gist_payload(payload: object) -> tuple[GistFile, str | None]:
    """Extract the first file from a decoded gist payload.

    Returns the file and, when GitHub truncated the content, the raw URL to
    fetch the full text from.
    """
    if not isinstance(payload, dict):
        raise DecodeError("expected a JSON object")
    files = payload.get("files")
    if not isinstance(files, dict) or not files:
        raise DecodeError("gist has no files")
    entry = next(iter(files.values()))
    if not isinstance(entry, dict):
        raise DecodeError("malformed file entry")
    filename = entry.get("filename")
    content = entry.get("content")
    if not isinstance(filename, str) or not isinstance(content, str):
        raise DecodeError("file entry has no text content")
    raw_url = entry.get("raw_url") if entry.get("truncated") else None
    return GistFile(filename=filename, content=content), raw_url if isinstance(raw_url, str) else None


def fetch_gist(gist_id: str, *, client: httpx.Client | None = None, timeout: float = 15.0) -> GistFile:
    """Fetch one gist synchronously. Meant to run off the frame loop."""
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        url = GIST_API_URL.format(gist_id=gist_id)
        logger.info("fetching gist %s", gist_id)
        response = _get(client, url, gist_id)
        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(str(exc)) from exc
        gist_file, raw_url = parse_gist_payload(payload)
        if raw_url is not None:
            logger.info("gist %s file %s is truncated, fetching %s", gist_id, gist_file.filename, raw_url)
            raw = _get(client, raw_url, gist_id)
            try:
                content = raw.content.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise DecodeError(f"{gist_file.filename} is not UTF-8 text") from exc
            gist_file = GistFile(filename=gist_file.filename, content=content)
        return gist_file
    finally:
        if owns_client:
            client.close()
