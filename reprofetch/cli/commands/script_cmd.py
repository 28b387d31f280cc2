"""``reprofetch generate-script DIR HASH_FILES...`` — write an install script."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from reprofetch.cli.state import get_state, reported_errors
from reprofetch.models.distro import InstallScriptArgs

console = Console()


def generate_script_cmd(
    ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Directory to write install.sh into."),
    hash_files: list[str] = typer.Argument(..., help="SHA256SUMS file names, as seen by the script."),
    packages: list[str] = typer.Option(None, "--package", "-p", help="Only install these packages."),
    providers: list[str] = typer.Option(None, "--provider", help="Provider URL templates."),
) -> None:
    """Generate a shell script that replays the pinned installation."""
    state = get_state(ctx)
    with reported_errors():
        args = InstallScriptArgs(
            hash_files=hash_files,
            packages=packages or [],
            providers=providers or state.config.providers,
        )
        path = state.driver.generate_install_script(directory, args)
    console.print(f"[green]Wrote[/green] {path}", highlight=False, soft_wrap=True)
