"""Alpine driver (apk). Experimental.

apk indices only carry SHA-1 checksums, so hashes are generated by
downloading each package into the cache and hashing it there. The
``origin URL → digest`` index of the cache makes regeneration cheap.
"""

from __future__ import annotations

import logging
import tempfile
import threading
from collections.abc import Sequence
from pathlib import Path, PurePosixPath
from urllib.parse import urlsplit

from reprofetch.core.cache import ContentCache
from reprofetch.core.hasher import redact_url
from reprofetch.distro.base import PackageManagerDriver, Snapshot, resolve_blob_paths
from reprofetch.distro.runner import CommandRunner, SubprocessRunner
from reprofetch.errors import ConfigurationError, ExternalToolError, NotFoundError
from reprofetch.manifest import HashWriter
from reprofetch.models.distro import DistroInfo
from reprofetch.models.filespec import FileSpec, PackageIdentity, split_apk_name

logger = logging.getLogger(__name__)

NAME = "alpine"

ALPINE_PROVIDERS = [
    "https://dl-cdn.alpinelinux.org/alpine/{name}",
]


class AlpineDriver(PackageManagerDriver):
    def __init__(self, runner: CommandRunner | None = None) -> None:
        super().__init__(
            DistroInfo(
                name=NAME,
                default_providers=ALPINE_PROVIDERS,
                experimental=True,
                cache_needed_for_hash=True,
                required_scheme="https",
            )
        )
        self.runner = runner or SubprocessRunner()

    def _load_installed(self, cancel: threading.Event | None) -> Snapshot:
        argv = ["apk", "info", "-v"]
        out = self.runner.run(argv, cancel=cancel)
        try:
            return parse_apk_info(out)
        except ValueError as exc:
            raise ExternalToolError(argv, detail=f"unexpected output: {exc}") from exc

    def generate_hash(
        self,
        writer: HashWriter,
        names: Sequence[str] = (),
        *,
        cache: ContentCache | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        if cache is None:
            raise ConfigurationError(f"distro driver {NAME!r} needs a cache to generate hashes")
        names = sorted(names) if names else self.installed_names(cancel)
        with tempfile.TemporaryDirectory(prefix="reprofetch-apk-") as dummy:
            out = self.runner.run(
                ["apk", "fetch", "--simulate", f"--output={dummy}", "--url", *names],
                cancel=cancel,
            )
        entries: dict[str, str] = {}
        for line in out.splitlines():
            url = line.strip()
            if url:
                fname, sha256 = self._hash_url(cache, url, cancel)
                entries[fname] = sha256
        for fname in sorted(entries):
            writer(entries[fname], fname)

    def _hash_url(
        self,
        cache: ContentCache,
        url: str,
        cancel: threading.Event | None,
    ) -> tuple[str, str]:
        redacted = redact_url(url)
        logger.debug("Generating the hash for %s", redacted)
        if urlsplit(url).scheme != "https":
            raise ConfigurationError(f"expected an https url, got {redacted!r}")
        fname = url_to_filename(url)
        try:
            sha256 = cache.sha256_by_origin_url(url)
            logger.debug("%s: found cached sha256 %s", PurePosixPath(fname).name, sha256)
        except NotFoundError:
            logger.debug("%s: downloading from %s", PurePosixPath(fname).name, redacted)
            sha256 = cache.import_with_url(url, cancel=cancel)
        return fname, sha256

    def install(
        self,
        cache: ContentCache,
        specs: Sequence[FileSpec],
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        if not specs:
            return
        blobs = resolve_blob_paths(cache, specs)
        with tempfile.TemporaryDirectory(prefix="reprofetch-apk-") as tmp:
            links: list[str] = []
            for sp, blob in zip(specs, blobs):
                # basename is validated on FileSpec, so the link stays inside tmp
                ln = Path(tmp) / sp.basename
                ln.symlink_to(blob)
                links.append(str(ln))
            logger.info("Running 'apk add --no-network ...' with %d packages", len(links))
            self.runner.run(["apk", "add", "--no-network", *links], capture=False, cancel=cancel)


def url_to_filename(url: str) -> str:
    """Strip the provider from an Alpine package URL.

    ``https://dl-cdn.alpinelinux.org/alpine/v3.16/main/x86_64/musl-1.2.3-r0.apk``
    becomes ``v3.16/main/x86_64/musl-1.2.3-r0.apk``.
    """
    parts = urlsplit(url).path.split("/")
    for i in range(1, len(parts)):
        seg = parts[i]
        if (
            parts[i - 1].startswith("alpine")
            and len(seg) >= 2
            and seg[0] == "v"
            and "1" <= seg[1] <= "9"
        ):
            return "/".join(parts[i:])
    raise ConfigurationError(f"failed to parse {redact_url(url)!r}")


def parse_apk_info(text: str) -> dict[str, PackageIdentity]:
    """Parse ``apk info -v`` output (``name-version-rN`` per line), keyed by name."""
    pkgs: dict[str, PackageIdentity] = {}
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        pkg = split_apk_name(trimmed)
        if pkg is None:
            raise ValueError(f"failed to split {trimmed!r} into the package name and the version")
        pkgs[pkg.package] = pkg
    return pkgs
