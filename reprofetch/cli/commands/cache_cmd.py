"""``reprofetch cache`` — inspect and populate the content cache."""

from __future__ import annotations

import typer
from rich.console import Console

from reprofetch.cli.state import get_state, reported_errors

cache_app = typer.Typer(help="Inspect and populate the content cache.", no_args_is_help=True)

console = Console()


@cache_app.command(name="import")
def import_cmd(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL to download into the cache."),
) -> None:
    """Download URL into the cache and print its SHA256 digest."""
    state = get_state(ctx)
    with reported_errors(), state.open_cache() as cache:
        console.print(cache.import_with_url(url), highlight=False)


@cache_app.command(name="path")
def path_cmd(
    ctx: typer.Context,
    sha256: str = typer.Argument(..., help="SHA256 digest of a cached blob."),
) -> None:
    """Print the absolute path of a cached blob."""
    state = get_state(ctx)
    with reported_errors(), state.open_cache() as cache:
        console.print(str(cache.blob_abs_path(sha256)), highlight=False, soft_wrap=True)
