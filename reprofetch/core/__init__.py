"""Content cache and fetch orchestration."""

from reprofetch.core.cache import ContentCache
from reprofetch.core.downloader import DownloadOptions, DownloadResult, download

__all__ = ["ContentCache", "DownloadOptions", "DownloadResult", "download"]
