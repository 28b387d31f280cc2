"""The ``none`` driver, for plain files that belong to no package manager."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from pathlib import Path

from reprofetch.core.cache import ContentCache
from reprofetch.errors import UnsupportedOperationError
from reprofetch.manifest import HashWriter
from reprofetch.models.distro import DistroInfo, InstallScriptArgs
from reprofetch.models.filespec import FileSpec

NAME = "none"


class NoneDriver:
    """Implements nothing except ``is_installed`` (always False).

    That keeps download pipelines working with ``skip_installed`` set.
    """

    def __init__(self) -> None:
        self.info = DistroInfo(name=NAME)

    def generate_hash(
        self,
        writer: HashWriter,
        names: Sequence[str] = (),
        *,
        cache: ContentCache | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        raise UnsupportedOperationError(NAME, "generate_hash")

    def package_name(self, sp: FileSpec) -> str:
        raise UnsupportedOperationError(NAME, "package_name")

    def is_installed(self, sp: FileSpec, *, cancel: threading.Event | None = None) -> bool:
        return False

    def install(
        self,
        cache: ContentCache,
        specs: Sequence[FileSpec],
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        if not specs:
            return
        raise UnsupportedOperationError(NAME, "install")

    def generate_install_script(self, directory: Path, args: InstallScriptArgs) -> Path:
        raise UnsupportedOperationError(NAME, "generate_install_script")
