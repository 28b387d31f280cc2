"""Fetch orchestrator — resolves wanted FileSpecs against cache and providers.

For each spec, in filename order:

1. skip it when ``skip_installed`` is set and the driver reports the exact
   version installed,
2. otherwise accept it when the cache already holds its digest,
3. otherwise try each provider in order until ``cache.ensure`` succeeds.

A spec that no provider can deliver aborts the whole batch.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from reprofetch.core.cache import ContentCache
from reprofetch.core.hasher import redact_url
from reprofetch.errors import (
    ConfigurationError,
    DownloadError,
    OperationCancelledError,
    ReproFetchError,
)
from reprofetch.models.filespec import FileSpec

if TYPE_CHECKING:
    from reprofetch.distro.base import DistroDriver

logger = logging.getLogger(__name__)


class DownloadOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    providers: list[str] = Field(default_factory=list)
    skip_installed: bool = False


class DownloadResult(BaseModel):
    """Outcome of ``download``.

    ``packages_to_be_installed`` holds the specs that are cache-resident
    (already cached or freshly fetched) and is what installation consumes.
    ``already_installed`` holds the specs skipped because the exact version
    is installed. ``satisfied`` holds both, in processing order (sorted by
    the keys of the requested mapping).
    """

    packages_to_be_installed: list[FileSpec] = Field(default_factory=list)
    already_installed: list[FileSpec] = Field(default_factory=list)
    satisfied: list[FileSpec] = Field(default_factory=list)


def resolve_providers(driver: DistroDriver, providers: list[str]) -> list[str]:
    """Pick the provider list and validate it before any network access."""
    info = driver.info
    resolved = list(providers) or list(info.default_providers)
    if not resolved:
        raise ConfigurationError(
            f"no provider configured (distro driver {info.name!r} has no default providers)"
        )
    if info.required_scheme:
        for provider in resolved:
            scheme = urlsplit(provider).scheme
            if scheme != info.required_scheme:
                raise ConfigurationError(
                    f"distro driver {info.name!r} requires {info.required_scheme!r} "
                    f"providers, got {redact_url(provider)!r}"
                )
    return resolved


def download(
    driver: DistroDriver,
    cache: ContentCache,
    file_specs: Mapping[str, FileSpec],
    opts: DownloadOptions | None = None,
    *,
    cancel: threading.Event | None = None,
) -> DownloadResult:
    """Make every spec in *file_specs* installed or cache-resident."""
    if driver is None:
        raise ConfigurationError("distro driver needs to be specified")
    if cache is None:
        raise ConfigurationError("cache needs to be specified")
    opts = opts or DownloadOptions()
    providers = resolve_providers(driver, opts.providers)

    fnames = sorted(file_specs)
    total = len(fnames)
    res = DownloadResult()
    for i, fname in enumerate(fnames):
        sp = file_specs[fname]

        def status(msg: str, *args: object) -> None:
            logger.info("(%03d/%03d) %s " + msg, i + 1, total, sp.basename, *args)

        if opts.skip_installed:
            try:
                installed = driver.is_installed(sp, cancel=cancel)
            except OperationCancelledError:
                raise
            except ReproFetchError as exc:
                logger.warning("Failed to check whether %s is installed: %s", sp.basename, exc)
                installed = False
            if installed:
                status("Already installed")
                res.already_installed.append(sp)
                res.satisfied.append(sp)
                continue

        try:
            cached = cache.cached(sp.sha256)
        except OSError as exc:
            logger.warning(
                "Failed to check whether %s (%s) is cached: %s", sp.sha256, sp.basename, exc
            )
            cached = False
        if cached:
            status("Cached")
            res.packages_to_be_installed.append(sp)
            res.satisfied.append(sp)
            continue

        _fetch_with_fallback(cache, sp, providers, status, cancel)
        res.packages_to_be_installed.append(sp)
        res.satisfied.append(sp)
    return res


def _fetch_with_fallback(
    cache: ContentCache,
    sp: FileSpec,
    providers: list[str],
    status: Callable[..., None],
    cancel: threading.Event | None,
) -> None:
    last = len(providers) - 1
    for j, provider in enumerate(providers):
        url = sp.url(provider)
        redacted = redact_url(url)
        status("Downloading from %s", redacted)
        try:
            cache.ensure(url, sp.sha256, cancel=cancel)
        except OperationCancelledError:
            raise
        except ReproFetchError as exc:
            if j == last:
                raise DownloadError(sp.basename, redacted, exc) from exc
            logger.warning(
                "Failed to download %s (%s), trying the next provider: %s",
                sp.basename,
                redacted,
                exc,
            )
        else:
            return
