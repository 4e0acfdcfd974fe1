"""Tests for the GitHub gist client, driven through ``httpx.MockTransport``."""

from __future__ import annotations

import unittest

import httpx

from codeshow.errors import DecodeError, NetworkError, NotFoundError
from codeshow.runtime.gist import GistFile, fetch_gist, parse_gist_payload


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _gist_payload(**entry) -> dict:
    file_entry = {"filename": "hello.rs", "content": "fn main() {}\n"}
    file_entry.update(entry)
    return {"id": "abc", "files": {file_entry["filename"]: file_entry}}


class FetchGistTests(unittest.TestCase):
    def test_returns_first_file_and_sends_github_headers(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_gist_payload())

        with _client(handler) as client:
            gist_file = fetch_gist("abc", client=client)

        self.assertEqual(gist_file, GistFile(filename="hello.rs", content="fn main() {}\n"))
        self.assertEqual(str(seen[0].url), "https://api.github.com/gists/abc")
        self.assertEqual(seen[0].headers["Accept"], "application/vnd.github.v3+json")

    def test_missing_gist_is_not_found(self) -> None:
        def handler(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Not Found"})

        with _client(handler) as client:
            with self.assertRaises(NotFoundError) as ctx:
                fetch_gist("doesnotexist", client=client)

        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.message, "Couldn't load Gist with ID: doesnotexist (HTTP 404)")

    def test_transport_failure_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler) as client:
            with self.assertRaises(NetworkError) as ctx:
                fetch_gist("abc", client=client)

        self.assertIn("Couldn't load Gist with ID: abc", ctx.exception.message)

    def test_invalid_json_is_decode_error(self) -> None:
        def handler(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>nope</html>")

        with _client(handler) as client:
            with self.assertRaises(DecodeError):
                fetch_gist("abc", client=client)

    def test_gist_without_files_is_decode_error(self) -> None:
        def handler(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"id": "abc", "files": {}})

        with _client(handler) as client:
            with self.assertRaises(DecodeError):
                fetch_gist("abc", client=client)

    def test_truncated_file_is_fetched_from_raw_url(self) -> None:
        raw_url = "https://gist.githubusercontent.com/u/abc/raw/hello.rs"

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == raw_url:
                return httpx.Response(200, content="fn main() { /* full */ }\n".encode("utf-8"))
            return httpx.Response(200, json=_gist_payload(content="fn ma", truncated=True, raw_url=raw_url))

        with _client(handler) as client:
            gist_file = fetch_gist("abc", client=client)

        self.assertEqual(gist_file.content, "fn main() { /* full */ }\n")


class ParseGistPayloadTests(unittest.TestCase):
    def test_rejects_unusable_payloads(self) -> None:
        cases = [
            [],
            {"files": None},
            {"files": {"a": "text"}},
            {"files": {"a": {"filename": "a", "content": None}}},
        ]
        for payload in cases:
            with self.subTest(payload=payload):
                with self.assertRaises(DecodeError):
                    parse_gist_payload(payload)

    def test_untruncated_file_has_no_raw_url(self) -> None:
        gist_file, raw_url = parse_gist_payload(_gist_payload(raw_url="https://example.invalid/raw"))
        self.assertEqual(gist_file.filename, "hello.rs")
        self.assertIsNone(raw_url)


if __name__ == "__main__":
    unittest.main()
