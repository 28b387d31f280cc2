"""Content-addressed blob cache keyed by SHA-256.

Storage layout under the cache root::

    blobs/sha256/<digest>        blob bytes
    origins/sha256/<url-key>     digest previously imported from a URL
    tmp/                         in-flight downloads

A blob only ever appears under its digest after its bytes were hashed and
checked, by renaming a fully written temp file into place. Concurrent
writers of the same digest write identical bytes, so the rename is the
only synchronization needed.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

import httpx

from reprofetch.core.hasher import is_sha256_hex, redact_url, url_key
from reprofetch.errors import (
    ConfigurationError,
    DigestMismatchError,
    FetchCancelledError,
    FetchError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

SUPPORTED_SCHEMES = ("http", "https", "file")


def _check_digest(sha256: str) -> str:
    if not is_sha256_hex(sha256):
        raise ConfigurationError(f"invalid SHA256 digest {sha256!r}")
    return sha256


def _check_cancel(cancel: threading.Event | None, url: str) -> None:
    if cancel is not None and cancel.is_set():
        raise FetchCancelledError(f"fetching {redact_url(url)} was cancelled")


class ContentCache:
    """SHA-256 keyed, immutable blob store with URL import.

    Parameters
    ----------
    root:
        Cache directory; created if missing.
    client:
        HTTP client used for ``http``/``https`` URLs. One is created on
        first use (and closed by ``close()``) when omitted.
    timeout:
        Timeout in seconds for the client created here.
    """

    def __init__(
        self,
        root: str | Path,
        *,
        client: httpx.Client | None = None,
        timeout: float = 300.0,
    ) -> None:
        self.root = Path(root).absolute()
        self._blobs = self.root / "blobs" / "sha256"
        self._origins = self.root / "origins" / "sha256"
        self._tmp = self.root / "tmp"
        for d in (self._blobs, self._origins, self._tmp):
            d.mkdir(parents=True, exist_ok=True)
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def __enter__(self) -> ContentCache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _blob_path(self, sha256: str) -> Path:
        return self._blobs / _check_digest(sha256)

    def cached(self, sha256: str) -> bool:
        """Whether a blob with this digest is present. Never downloads.

        Local I/O errors other than absence propagate as ``OSError``.
        """
        try:
            os.stat(self._blob_path(sha256))
        except FileNotFoundError:
            return False
        return True

    def blob_abs_path(self, sha256: str) -> Path:
        """Absolute path of the blob, for handing to an external installer."""
        path = self._blob_path(sha256)
        if not path.is_file():
            raise NotFoundError(f"blob {sha256} is not cached")
        return path

    def sha256_by_origin_url(self, url: str) -> str:
        """Digest of the blob previously imported from *url*."""
        index = self._origins / url_key(url)
        try:
            sha256 = index.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            raise NotFoundError(f"no blob was imported from {redact_url(url)}") from None
        if not is_sha256_hex(sha256) or not self.cached(sha256):
            raise NotFoundError(f"stale origin entry for {redact_url(url)}")
        return sha256

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def ensure(
        self,
        url: str,
        sha256: str,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Make the blob *sha256* available, downloading *url* if needed.

        The downloaded bytes must hash to *sha256*; otherwise
        ``DigestMismatchError`` is raised and nothing is committed.
        """
        if self.cached(sha256):
            return
        tmp, actual = self._fetch_to_temp(url, cancel)
        if actual != sha256:
            tmp.unlink(missing_ok=True)
            raise DigestMismatchError(redact_url(url), sha256, actual)
        self._commit(tmp, sha256)
        logger.debug("Stored %s from %s", sha256, redact_url(url))

    def import_with_url(
        self,
        url: str,
        *,
        cancel: threading.Event | None = None,
    ) -> str:
        """Download *url* without knowing its digest, store it, return the digest.

        The ``url → digest`` association is recorded for
        ``sha256_by_origin_url``.
        """
        tmp, sha256 = self._fetch_to_temp(url, cancel)
        self._commit(tmp, sha256)
        self._write_atomic(self._origins / url_key(url), sha256 + "\n")
        logger.debug("Imported %s as %s", redact_url(url), sha256)
        return sha256

    def _commit(self, tmp: Path, sha256: str) -> None:
        # mkstemp creates 0600 files; blobs are read by external installers
        os.chmod(tmp, 0o644)
        os.replace(tmp, self._blob_path(sha256))

    def _write_atomic(self, dest: Path, text: str) -> None:
        fd, name = tempfile.mkstemp(dir=self._tmp, prefix="origin-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(name, dest)
        except BaseException:
            Path(name).unlink(missing_ok=True)
            raise

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def _fetch_to_temp(
        self, url: str, cancel: threading.Event | None
    ) -> tuple[Path, str]:
        """Stream *url* into a temp file, hashing on the fly."""
        _check_cancel(cancel, url)
        fd, name = tempfile.mkstemp(dir=self._tmp, prefix="blob-")
        tmp = Path(name)
        hasher = hashlib.sha256()
        try:
            with os.fdopen(fd, "wb") as f, self._open(url) as chunks:
                for chunk in chunks:
                    _check_cancel(cancel, url)
                    hasher.update(chunk)
                    f.write(chunk)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        return tmp, hasher.hexdigest()

    @contextmanager
    def _open(self, url: str) -> Iterator[Iterator[bytes]]:
        scheme = urlsplit(url).scheme
        if scheme == "file":
            with self._open_file(url) as chunks:
                yield chunks
        elif scheme in ("http", "https"):
            with self._open_http(url) as chunks:
                yield chunks
        else:
            raise ConfigurationError(
                f"unsupported URL scheme {scheme!r} in {redact_url(url)} "
                f"(supported: {', '.join(SUPPORTED_SCHEMES)})"
            )

    @contextmanager
    def _open_file(self, url: str) -> Iterator[Iterator[bytes]]:
        path = Path(url2pathname(urlsplit(url).path))
        try:
            f = path.open("rb")
        except OSError as exc:
            raise FetchError(f"failed to open {url}: {exc}") from exc
        with f:
            yield iter(lambda: f.read(CHUNK_SIZE), b"")

    @contextmanager
    def _open_http(self, url: str) -> Iterator[Iterator[bytes]]:
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout, follow_redirects=True)
        redacted = redact_url(url)
        try:
            with self._client.stream("GET", url) as resp:
                if resp.status_code >= 400:
                    raise FetchError(f"GET {redacted}: HTTP {resp.status_code}")
                yield resp.iter_bytes(CHUNK_SIZE)
        except httpx.HTTPError as exc:
            raise FetchError(f"GET {redacted}: {exc}") from exc
