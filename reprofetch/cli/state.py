"""Shared CLI state: configuration, logging setup and error reporting."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from reprofetch import manifest
from reprofetch.config import ReproFetchConfig
from reprofetch.core.cache import ContentCache
from reprofetch.distro import new_driver
from reprofetch.distro.base import DistroDriver
from reprofetch.errors import ReproFetchError

err_console = Console(stderr=True)


@dataclass
class CliState:
    config: ReproFetchConfig = field(default_factory=ReproFetchConfig)
    driver_instance: DistroDriver | None = None

    @property
    def driver(self) -> DistroDriver:
        if self.driver_instance is None:
            self.driver_instance = new_driver(self.config.distro)
        return self.driver_instance

    def open_cache(self) -> ContentCache:
        return ContentCache(self.config.cache_dir, timeout=self.config.http_timeout)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def get_state(ctx: typer.Context) -> CliState:
    if not isinstance(ctx.obj, CliState):
        ctx.obj = CliState()
    return ctx.obj


@contextmanager
def reported_errors() -> Iterator[None]:
    """Turn expected failures into a red message and exit code 1."""
    try:
        yield
    except ReproFetchError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", highlight=False, soft_wrap=True)
        raise typer.Exit(code=1) from exc
    except OSError as exc:
        err_console.print(f"[bold red]I/O error:[/bold red] {escape(str(exc))}", highlight=False, soft_wrap=True)
        raise typer.Exit(code=1) from exc


def load_hash_files(paths: list[Path]) -> dict[str, str]:
    return manifest.merge(*(manifest.load(p) for p in paths))
