"""Debian and Ubuntu driver (dpkg / apt)."""

from __future__ import annotations

import io
import logging
import shlex
import threading
from collections.abc import Sequence
from pathlib import Path
from string import Template

from debian.deb822 import Packages
from debian.debian_support import version_compare

from reprofetch.core.cache import ContentCache
from reprofetch.distro.base import PackageManagerDriver, Snapshot, resolve_blob_paths
from reprofetch.distro.runner import CommandRunner, SubprocessRunner
from reprofetch.errors import ConfigurationError, ExternalToolError
from reprofetch.manifest import HashWriter
from reprofetch.models.distro import DistroInfo, InstallScriptArgs
from reprofetch.models.filespec import FileSpec, PackageIdentity

logger = logging.getLogger(__name__)

NAME_DEBIAN = "debian"
NAME_UBUNTU = "ubuntu"

# apt does not use HTTPS by default; integrity comes from the digests
DEBIAN_PROVIDERS = [
    "http://deb.debian.org/debian/{name}",  # fast, multi-arch, ephemeral
    "http://deb.debian.org/debian-security/{name}",  # fast, multi-arch, ephemeral
    "http://debian.notset.fr/snapshot/by-hash/SHA256/{sha256}",  # slow, amd64 only, persistent
]

UBUNTU_PROVIDERS = [
    "http://ports.ubuntu.com/{name}",  # multi-arch, ephemeral
    "http://archive.ubuntu.com/ubuntu/{name}",  # amd64 only, ephemeral
]

DPKG_QUERY_FORMAT = "${Package},${Version},${Architecture}\n"

INSTALL_SCRIPT_TEMPLATE = Template(
    """\
#!/bin/sh
# Generated by reprofetch. Installs the packages pinned in $hash_files_text
# by SHA256, from the cache first and the providers below otherwise.
set -eu
exec reprofetch --distro debian --cache $cache_dir install $options$hash_files $packages
"""
)


class DebianDriver(PackageManagerDriver):
    """Driver for Debian-family systems.

    Hashes come from ``apt-cache show``; installed state from
    ``dpkg-query``; installation runs ``dpkg -i`` on the cached blobs.
    """

    def __init__(self, info: DistroInfo, runner: CommandRunner | None = None) -> None:
        super().__init__(info)
        self.runner = runner or SubprocessRunner()

    @classmethod
    def debian(cls, runner: CommandRunner | None = None) -> DebianDriver:
        return cls(DistroInfo(name=NAME_DEBIAN, default_providers=DEBIAN_PROVIDERS), runner)

    @classmethod
    def ubuntu(cls, runner: CommandRunner | None = None) -> DebianDriver:
        return cls(DistroInfo(name=NAME_UBUNTU, default_providers=UBUNTU_PROVIDERS), runner)

    def _load_installed(self, cancel: threading.Event | None) -> Snapshot:
        argv = ["dpkg-query", "-f", DPKG_QUERY_FORMAT, "-W"]
        out = self.runner.run(argv, cancel=cancel)
        try:
            return parse_dpkg_query(out)
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
        names = sorted(names) if names else self.installed_names(cancel)
        # /var/lib/dpkg/available is only updated by dselect, so ask apt-cache
        out = self.runner.run(["apt-cache", "show", *names], cancel=cancel)
        generate_hash_from_index(writer, out)

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
        logger.info("Running 'dpkg -i ...' with %d packages", len(blobs))
        self.runner.run(["dpkg", "-i", *map(str, blobs)], capture=False, cancel=cancel)

    def generate_install_script(self, directory: Path, args: InstallScriptArgs) -> Path:
        if self.info.name != NAME_DEBIAN:
            raise ConfigurationError(
                f"generating install scripts needs the distro driver to be set to "
                f"{NAME_DEBIAN!r}, not {self.info.name!r}"
            )
        if not args.hash_files:
            raise ConfigurationError("at least one hash file is needed")
        options = "".join(f"--provider {shlex.quote(p)} " for p in args.providers)
        script = INSTALL_SCRIPT_TEMPLATE.substitute(
            hash_files_text=", ".join(args.hash_files),
            cache_dir=shlex.quote(args.cache_dir),
            options=options,
            hash_files=" ".join(shlex.quote(f) for f in args.hash_files),
            packages=" ".join(f"--package {shlex.quote(p)}" for p in args.packages),
        )
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "install.sh"
        path.write_text(script.rstrip(" \n") + "\n", encoding="utf-8")
        path.chmod(0o755)
        return path


def parse_dpkg_query(text: str) -> dict[str, PackageIdentity]:
    """Parse ``dpkg-query -f '${Package},${Version},${Architecture}\\n' -W``.

    Keys are ``package:architecture`` (or ``package`` without one).
    """
    pkgs: dict[str, PackageIdentity] = {}
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        fields = trimmed.split(",", 2)
        if len(fields) != 3:
            raise ValueError(f"line {line!r}: expected 3 fields, got {len(fields)}")
        pkg = PackageIdentity(package=fields[0], version=fields[1], architecture=fields[2])
        pkgs[pkg.key] = pkg
    return pkgs


def generate_hash_from_index(writer: HashWriter, index_text: str) -> None:
    """Emit one entry per ``package:architecture`` from ``apt-cache show`` output.

    When a package appears more than once, only its highest version is
    written. Entries are written sorted by filename.
    """
    best: dict[str, Packages] = {}
    for para in Packages.iter_paragraphs(io.StringIO(index_text), use_apt_pkg=False):
        package = para.get("Package")
        if not package:
            continue
        key = f"{package}:{para.get('Architecture', '')}"
        seen = best.get(key)
        if seen is not None:
            try:
                if version_compare(seen.get("Version", ""), para.get("Version", "")) > 0:
                    continue
            except ValueError as exc:
                logger.warning("Failed to compare versions of %s: %s", package, exc)
                continue
        best[key] = para

    entries: dict[str, str] = {}
    for para in best.values():
        package = para["Package"]
        filename = para.get("Filename")
        if not filename:
            logger.warning("No Filename found for package %s (Hint: try 'apt-get update')", package)
            continue
        sha256 = para.get("SHA256")
        if not sha256:
            logger.warning("No SHA256 found for package %s (Hint: try 'apt-get update')", package)
            continue
        entries[filename] = sha256
    for filename in sorted(entries):
        writer(entries[filename], filename)
