"""Distro driver descriptors."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DistroInfo(BaseModel):
    """Static facts about a distro driver."""

    model_config = ConfigDict(frozen=True)

    name: str
    default_providers: list[str] = Field(default_factory=list)
    experimental: bool = False
    # generate_hash() has to download artifacts to learn their digests
    cache_needed_for_hash: bool = False
    # every provider URL must use this scheme when set (e.g. "https")
    required_scheme: str | None = None


class InstallScriptArgs(BaseModel):
    """Inputs for rendering a reproducible install script."""

    model_config = ConfigDict(frozen=True)

    hash_files: list[str]
    packages: list[str] = Field(default_factory=list)
    providers: list[str] = Field(default_factory=list)
    cache_dir: str = "/var/cache/reprofetch"
