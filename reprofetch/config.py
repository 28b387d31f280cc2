"""Settings for the reprofetch CLI.

Where the cache lives, which distro driver and providers to use, and how
long HTTP fetches may take. Values come from REPROFETCH_* variables or a
local .env file; global CLI flags such as ``--cache`` take precedence.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_cache_dir() -> Path:
    return Path.home() / ".cache" / "reprofetch"


class ReproFetchConfig(BaseSettings):
    """reprofetch settings; every field maps to a REPROFETCH_<FIELD> variable.

    List fields such as ``providers`` take JSON in the environment.

    Examples
    --------
    Override via environment::

        export REPROFETCH_CACHE_DIR=/var/cache/reprofetch
        export REPROFETCH_DISTRO=debian
        export REPROFETCH_PROVIDERS='["http://mirror.example/debian/{name}"]'
        export REPROFETCH_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="REPROFETCH_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    cache_dir: Path = Field(default_factory=_default_cache_dir)

    # Distro driver: "auto", "debian", "ubuntu", "alpine" or "none"
    distro: str = "auto"

    # Provider URL templates; empty means the driver defaults
    providers: list[str] = Field(default_factory=list)

    skip_installed: bool = True

    # Network
    http_timeout: float = 300.0

    # Observability
    log_level: str = "INFO"
