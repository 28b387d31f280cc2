"""FileSpec — one wanted artifact, addressed by its SHA-256 digest."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from pathlib import PurePosixPath
from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reprofetch.errors import ConfigurationError, NotFoundError

_APK_RELEASE_RE = re.compile(r"^r[0-9]+$")


class PackageIdentity(BaseModel):
    """Distro-specific identity used to query installed state."""

    model_config = ConfigDict(frozen=True)

    package: str
    version: str
    architecture: str = ""

    @property
    def key(self) -> str:
        """``package:architecture``, or just ``package`` without an architecture."""
        if self.architecture:
            return f"{self.package}:{self.architecture}"
        return self.package


class FileSpec(BaseModel):
    """A wanted artifact: logical name, file name and content digest.

    The digest is the only basis for cache addressing and verification;
    two FileSpecs with the same ``sha256`` are content-equivalent whatever
    their names.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    basename: str
    sha256: str = Field(pattern=r"^[0-9a-f]{64}$")
    package: PackageIdentity | None = None

    @field_validator("basename")
    @classmethod
    def _check_basename(cls, v: str) -> str:
        if not v or v in (".", "..") or "/" in v:
            raise ValueError(f"invalid basename {v!r}")
        return v

    def url(self, provider: str) -> str:
        """Resolve a provider URL template against this spec.

        Templates may reference ``{name}``, ``{basename}`` and ``{sha256}``,
        e.g. ``http://deb.debian.org/debian/{name}``.
        """
        fields = {"name": self.name, "basename": self.basename, "sha256": self.sha256}
        try:
            return provider.format_map(fields)
        except (KeyError, IndexError, ValueError) as exc:
            raise ConfigurationError(
                f"invalid provider template {provider!r}: {exc!r} "
                f"(available fields: {', '.join(sorted(fields))})"
            ) from exc

    @classmethod
    def from_manifest_entry(cls, filename: str, sha256: str) -> FileSpec:
        """Build a FileSpec from a SHA256SUMS entry.

        The package identity is derived from ``.deb`` and ``.apk`` file
        names; other files get none.
        """
        basename = PurePosixPath(filename).name
        return cls(
            name=filename,
            basename=basename,
            sha256=sha256,
            package=identity_from_basename(basename),
        )


def split_deb_basename(basename: str) -> PackageIdentity | None:
    """``hello_2.10-2_amd64.deb`` -> (hello, 2.10-2, amd64)."""
    if not basename.endswith(".deb"):
        return None
    fields = basename[: -len(".deb")].split("_")
    if len(fields) != 3 or not all(fields):
        return None
    package, version, arch = fields
    # Pool file names escape the epoch colon as %3a
    return PackageIdentity(package=package, version=unquote(version), architecture=arch)


def split_apk_name(s: str) -> PackageIdentity | None:
    """``musl-1.2.3-r0`` -> (musl, 1.2.3-r0).

    Accepts an ``.apk`` suffix. Returns None when *s* does not look like
    ``<name>-<version>-r<N>``.
    """
    if s.endswith(".apk"):
        s = s[: -len(".apk")]
    parts = s.rsplit("-", 2)
    if len(parts) != 3:
        return None
    package, version, release = parts
    if not package or not version[:1].isdigit() or not _APK_RELEASE_RE.match(release):
        return None
    return PackageIdentity(package=package, version=f"{version}-{release}")


def identity_from_basename(basename: str) -> PackageIdentity | None:
    if basename.endswith(".deb"):
        return split_deb_basename(basename)
    if basename.endswith(".apk"):
        return split_apk_name(basename)
    return None


def filespecs_from_manifest(
    manifest: Mapping[str, str],
    packages: Iterable[str] | None = None,
) -> dict[str, FileSpec]:
    """Turn a filename→digest manifest into FileSpecs keyed by filename.

    When *packages* is given, only entries whose package name is listed are
    kept, and every listed name must match at least one entry.
    """
    specs = {
        filename: FileSpec.from_manifest_entry(filename, digest)
        for filename, digest in manifest.items()
    }
    if packages is None:
        return specs
    wanted = list(packages)
    if not wanted:
        return specs
    selected: dict[str, FileSpec] = {}
    matched: set[str] = set()
    for filename, sp in specs.items():
        if sp.package is not None and sp.package.package in wanted:
            selected[filename] = sp
            matched.add(sp.package.package)
    missing = [p for p in wanted if p not in matched]
    if missing:
        raise NotFoundError(f"package(s) not found in the hash file: {', '.join(missing)}")
    return selected
