"""reprofetch data models — all Pydantic v2, all frozen (immutable)."""

from reprofetch.models.distro import DistroInfo, InstallScriptArgs
from reprofetch.models.filespec import (
    FileSpec,
    PackageIdentity,
    filespecs_from_manifest,
    identity_from_basename,
    split_apk_name,
    split_deb_basename,
)

__all__ = [
    # filespec
    "FileSpec",
    "PackageIdentity",
    "filespecs_from_manifest",
    "identity_from_basename",
    "split_apk_name",
    "split_deb_basename",
    # distro
    "DistroInfo",
    "InstallScriptArgs",
]
