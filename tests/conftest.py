"""Shared test fixtures for reprofetch."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from pathlib import Path

import httpx
import pytest

from reprofetch.core.cache import ContentCache
from reprofetch.core.hasher import sha256_hex
from reprofetch.models.filespec import FileSpec


class FakeServer:
    """In-memory HTTP origin for ``httpx.MockTransport``.

    ``routes`` maps absolute URLs to a body (bytes), an HTTP status (int)
    or an exception to raise. Every request URL is recorded.
    """

    def __init__(self) -> None:
        self.routes: dict[str, bytes | int | Exception] = {}
        self.requests: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        route = self.routes.get(url, 404)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, int):
            return httpx.Response(route)
        return httpx.Response(200, content=route)


class FakeRunner:
    """CommandRunner returning canned output keyed by the program name."""

    def __init__(self, outputs: dict[str, str | Exception] | None = None) -> None:
        self.outputs = outputs or {}
        self.calls: list[list[str]] = []

    def run(
        self,
        argv: Sequence[str],
        *,
        capture: bool = True,
        cancel: threading.Event | None = None,
    ) -> str:
        self.calls.append(list(argv))
        out = self.outputs.get(argv[0], "")
        if isinstance(out, Exception):
            raise out
        return out

    def calls_to(self, program: str) -> list[list[str]]:
        return [c for c in self.calls if c[0] == program]


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def http_client(server: FakeServer) -> httpx.Client:
    client = httpx.Client(transport=httpx.MockTransport(server.handler))
    yield client
    client.close()


@pytest.fixture
def cache(tmp_dir: Path, http_client: httpx.Client) -> ContentCache:
    """Provide a fresh ContentCache in a temp directory, wired to the fake server."""
    return ContentCache(tmp_dir / "cache", client=http_client)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_spec() -> Callable[..., FileSpec]:
    """Factory fixture: build a FileSpec whose digest matches *content*."""

    def _factory(filename: str, content: bytes) -> FileSpec:
        return FileSpec.from_manifest_entry(filename, sha256_hex(content))

    return _factory
