"""The ``reprofetch`` command.

Global flags pick the distro driver and cache directory; the commands pin
packages into SHA256SUMS files and replay them from the cache.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from reprofetch import __version__
from reprofetch.cli.commands.cache_cmd import cache_app
from reprofetch.cli.commands.fetch_cmds import download_cmd, install_cmd
from reprofetch.cli.commands.hash_cmd import hash_app
from reprofetch.cli.commands.script_cmd import generate_script_cmd
from reprofetch.cli.state import get_state, setup_logging

app = typer.Typer(
    name="reprofetch",
    help="reprofetch: reproducible package fetching by SHA256.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    distro: str = typer.Option(
        None, "--distro", help="Distro driver: auto, debian, ubuntu, alpine or none."
    ),
    cache: Path = typer.Option(None, "--cache", help="Cache directory."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Global options shared by every command."""
    state = get_state(ctx)
    overrides: dict[str, object] = {}
    if distro is not None:
        overrides["distro"] = distro
    if cache is not None:
        overrides["cache_dir"] = cache
    if debug:
        overrides["log_level"] = "DEBUG"
    if overrides:
        state.config = state.config.model_copy(update=overrides)
    setup_logging(state.config.log_level)


# Register subcommands
app.add_typer(hash_app, name="hash")
app.add_typer(cache_app, name="cache")
app.command(name="download", help="Fetch pinned packages into the cache.")(download_cmd)
app.command(name="install", help="Fetch and install pinned packages.")(install_cmd)
app.command(name="generate-script", help="Write a script that replays an install.")(
    generate_script_cmd
)


@app.command(name="version", help="Show the reprofetch version.")
def version_cmd() -> None:
    Console().print(f"reprofetch {__version__}", highlight=False)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
