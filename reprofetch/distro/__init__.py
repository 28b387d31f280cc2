"""Distro drivers and driver lookup.

Drivers: ``debian``, ``ubuntu``, ``alpine`` and ``none``. ``auto`` picks
one from ``/etc/os-release``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from reprofetch.distro.alpine import AlpineDriver
from reprofetch.distro.base import DistroDriver, InstalledSnapshot, PackageManagerDriver
from reprofetch.distro.debian import DebianDriver
from reprofetch.distro.none import NoneDriver
from reprofetch.distro.runner import CommandRunner, SubprocessRunner
from reprofetch.errors import ConfigurationError

logger = logging.getLogger(__name__)

AUTO = "auto"

OS_RELEASE_PATHS = (Path("/etc/os-release"), Path("/usr/lib/os-release"))

DRIVERS: dict[str, Callable[[CommandRunner | None], DistroDriver]] = {
    "debian": DebianDriver.debian,
    "ubuntu": DebianDriver.ubuntu,
    "alpine": AlpineDriver,
    "none": lambda runner=None: NoneDriver(),
}


def read_os_release(path: Path) -> dict[str, str]:
    """Parse the KEY=value lines of an os-release file."""
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key] = value.strip().strip("\"'")
    return values


def detect(paths: tuple[Path, ...] = OS_RELEASE_PATHS) -> str:
    """Driver name for the running system; ``none`` when unrecognized."""
    for path in paths:
        if not path.is_file():
            continue
        release = read_os_release(path)
        candidates = [release.get("ID", ""), *release.get("ID_LIKE", "").split()]
        for c in candidates:
            if c in DRIVERS:
                logger.debug("Detected distro %s from %s", c, path)
                return c
        break
    return "none"


def new_driver(name: str = AUTO, runner: CommandRunner | None = None) -> DistroDriver:
    """Construct a driver by name (``auto`` to detect)."""
    if name == AUTO:
        name = detect()
    try:
        factory = DRIVERS[name]
    except KeyError:
        raise ConfigurationError(
            f"unknown distro driver {name!r} (known: {', '.join(sorted(DRIVERS))}, {AUTO})"
        ) from None
    driver = factory(runner)
    if driver.info.experimental:
        logger.warning("Distro driver %r is experimental", driver.info.name)
    return driver


__all__ = [
    "AUTO",
    "AlpineDriver",
    "CommandRunner",
    "DRIVERS",
    "DebianDriver",
    "DistroDriver",
    "InstalledSnapshot",
    "NoneDriver",
    "PackageManagerDriver",
    "SubprocessRunner",
    "detect",
    "new_driver",
]
