"""Distro driver interface.

A driver bridges reprofetch to one package ecosystem. Capabilities:

- ``generate_hash``: emit SHA256SUMS entries for a set of packages,
- ``package_name``: the package a FileSpec belongs to,
- ``is_installed``: whether the exact version of a FileSpec is installed,
- ``install``: install cache-resident blobs with the real package manager,
- ``generate_install_script``: write a script that replays an install.

A driver that lacks a capability raises ``UnsupportedOperationError``.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from reprofetch.core.cache import ContentCache
from reprofetch.errors import ConfigurationError, UnsupportedOperationError
from reprofetch.manifest import HashWriter
from reprofetch.models.distro import DistroInfo, InstallScriptArgs
from reprofetch.models.filespec import FileSpec, PackageIdentity

Snapshot = Mapping[str, PackageIdentity]


@runtime_checkable
class DistroDriver(Protocol):
    """Protocol every distro driver satisfies."""

    @property
    def info(self) -> DistroInfo: ...

    def generate_hash(
        self,
        writer: HashWriter,
        names: Sequence[str] = (),
        *,
        cache: ContentCache | None = None,
        cancel: threading.Event | None = None,
    ) -> None: ...

    def package_name(self, sp: FileSpec) -> str: ...

    def is_installed(self, sp: FileSpec, *, cancel: threading.Event | None = None) -> bool: ...

    def install(
        self,
        cache: ContentCache,
        specs: Sequence[FileSpec],
        *,
        cancel: threading.Event | None = None,
    ) -> None: ...

    def generate_install_script(self, directory: Path, args: InstallScriptArgs) -> Path: ...


class InstalledSnapshot:
    """Installed-package map, computed at most once (single-flight).

    Concurrent first callers block on one computation; later callers read
    the published mapping without locking. A failed computation is not
    cached, so the next call tries again.
    """

    def __init__(self, loader: Callable[[threading.Event | None], Snapshot]) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._value: Snapshot | None = None

    def get(self, cancel: threading.Event | None = None) -> Snapshot:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = self._loader(cancel)
            return self._value


class PackageManagerDriver:
    """Shared behaviour of drivers backed by a real package manager.

    Subclasses provide ``info``, ``_load_installed`` and the capabilities
    that need package-manager specific commands.
    """

    info: DistroInfo

    def __init__(self, info: DistroInfo) -> None:
        self.info = info
        self.installed = InstalledSnapshot(self._load_installed)

    def _load_installed(self, cancel: threading.Event | None) -> Snapshot:
        raise NotImplementedError

    def _identity(self, sp: FileSpec) -> PackageIdentity:
        if sp.package is None:
            raise ConfigurationError(
                f"{self.info.name} package information not available for {sp.name!r}"
            )
        return sp.package

    def package_name(self, sp: FileSpec) -> str:
        return self._identity(sp).package

    def is_installed(self, sp: FileSpec, *, cancel: threading.Event | None = None) -> bool:
        want = self._identity(sp)
        inst = self.installed.get(cancel).get(want.key)
        if inst is None:
            return False
        return inst.version == want.version

    def installed_names(self, cancel: threading.Event | None = None) -> list[str]:
        """Keys of the installed snapshot; what an empty name list expands to."""
        names = sorted(self.installed.get(cancel))
        if not names:
            raise ConfigurationError("no package is installed, nothing to generate hashes for")
        return names

    def generate_install_script(self, directory: Path, args: InstallScriptArgs) -> Path:
        raise UnsupportedOperationError(self.info.name, "generate_install_script")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.info.name!r})"


def resolve_blob_paths(cache: ContentCache, specs: Iterable[FileSpec]) -> list[Path]:
    """Blob path for every spec; any uncached digest fails before installing."""
    return [cache.blob_abs_path(sp.sha256) for sp in specs]
