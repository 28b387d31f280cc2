"""``reprofetch download`` and ``reprofetch install``.

Both read one or more SHA256SUMS files, optionally narrow them down to
named packages, and make every entry cache-resident (or already
installed). ``install`` then hands the cached blobs to the distro's
package manager.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from reprofetch.cli.state import CliState, get_state, load_hash_files, reported_errors
from reprofetch.core.cache import ContentCache
from reprofetch.core.downloader import DownloadOptions, DownloadResult, download
from reprofetch.models.filespec import filespecs_from_manifest

logger = logging.getLogger(__name__)

console = Console()

HASH_FILES_ARG = typer.Argument(..., help="SHA256SUMS files to read.", exists=True, dir_okay=False)
PACKAGE_OPT = typer.Option(
    None, "--package", "-p", help="Only fetch these packages (repeatable)."
)
PROVIDER_OPT = typer.Option(
    None,
    "--provider",
    help="Provider URL template, e.g. 'http://deb.debian.org/debian/{name}' (repeatable).",
)
SKIP_INSTALLED_OPT = typer.Option(
    None,
    "--skip-installed/--no-skip-installed",
    help="Skip packages whose exact version is already installed.",
)


def _download(
    state: CliState,
    cache: ContentCache,
    hash_files: list[Path],
    packages: list[str] | None,
    providers: list[str] | None,
    skip_installed: bool | None,
) -> DownloadResult:
    specs = filespecs_from_manifest(load_hash_files(hash_files), packages)
    opts = DownloadOptions(
        providers=providers or state.config.providers,
        skip_installed=state.config.skip_installed if skip_installed is None else skip_installed,
    )
    return download(state.driver, cache, specs, opts)


def download_cmd(
    ctx: typer.Context,
    hash_files: list[Path] = HASH_FILES_ARG,
    packages: list[str] = PACKAGE_OPT,
    providers: list[str] = PROVIDER_OPT,
    skip_installed: bool = SKIP_INSTALLED_OPT,
) -> None:
    """Fetch pinned packages into the cache without installing them."""
    state = get_state(ctx)
    with reported_errors(), state.open_cache() as cache:
        res = _download(state, cache, hash_files, packages, providers, skip_installed)
        for sp in res.packages_to_be_installed:
            console.print(
                f"{sp.sha256}  {cache.blob_abs_path(sp.sha256)}", highlight=False, soft_wrap=True
            )


def install_cmd(
    ctx: typer.Context,
    hash_files: list[Path] = HASH_FILES_ARG,
    packages: list[str] = PACKAGE_OPT,
    providers: list[str] = PROVIDER_OPT,
    skip_installed: bool = SKIP_INSTALLED_OPT,
) -> None:
    """Fetch pinned packages and install them with the distro's package manager."""
    state = get_state(ctx)
    with reported_errors(), state.open_cache() as cache:
        res = _download(state, cache, hash_files, packages, providers, skip_installed)
        if not res.packages_to_be_installed:
            logger.info("Nothing to install")
            return
        state.driver.install(cache, res.packages_to_be_installed)
