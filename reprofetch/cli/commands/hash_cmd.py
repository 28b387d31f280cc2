"""``reprofetch hash generate`` — write a SHA256SUMS file to stdout."""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from reprofetch import manifest
from reprofetch.cli.state import get_state, reported_errors
from reprofetch.errors import ManifestFormatError

hash_app = typer.Typer(help="Generate and inspect hash files.", no_args_is_help=True)


@hash_app.command(name="generate")
def generate_cmd(
    ctx: typer.Context,
    packages: list[str] = typer.Argument(
        None,
        help="Packages to hash. Defaults to every installed package.",
    ),
    dedupe: Path = typer.Option(
        None,
        "--dedupe",
        help="Skip entries already present with the same digest in this file.",
    ),
) -> None:
    """Generate the hash file.

    The file is written to stdout, e.g.
    ``reprofetch hash generate >SHA256SUMS-amd64``.
    """
    state = get_state(ctx)
    with reported_errors():
        writer: manifest.HashWriter = manifest.StreamHashWriter(sys.stdout)
        if dedupe is not None:
            try:
                prior = manifest.load(dedupe)
            except ManifestFormatError as exc:
                raise ManifestFormatError(f"failed to parse {dedupe} as SHA256SUMS: {exc}") from exc
            writer = manifest.DedupeHashWriter(writer, prior)

        driver = state.driver
        if driver.info.cache_needed_for_hash:
            with state.open_cache() as cache:
                driver.generate_hash(writer, packages or [], cache=cache)
        else:
            driver.generate_hash(writer, packages or [])
