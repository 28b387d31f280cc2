"""reprofetch: reproducible package fetching by SHA-256.

Packages are pinned in SHA256SUMS hash files and fetched into a
content-addressed cache from an ordered list of mirrors, so a later
installation is bit-identical no matter when or from where it runs.
"""

__version__ = "0.1.0"

from reprofetch.core.cache import ContentCache
from reprofetch.core.downloader import DownloadOptions, DownloadResult, download
from reprofetch.distro import new_driver
from reprofetch.models.filespec import FileSpec, filespecs_from_manifest

__all__ = [
    "ContentCache",
    "DownloadOptions",
    "DownloadResult",
    "FileSpec",
    "__version__",
    "download",
    "filespecs_from_manifest",
    "new_driver",
]
