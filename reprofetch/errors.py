"""Error types shared across reprofetch.

Every error raised on purpose derives from ``ReproFetchError`` so callers
(the CLI in particular) can tell an expected failure apart from a bug.
"""

from __future__ import annotations

from collections.abc import Sequence


class ReproFetchError(RuntimeError):
    """Base class for all reprofetch errors."""


class ConfigurationError(ReproFetchError):
    """Raised before any side effect when the inputs cannot work at all.

    Examples: no provider configured, a provider template with an unknown
    field, a URL scheme the driver refuses, a FileSpec lacking the package
    identity a driver needs.
    """


class NotFoundError(ReproFetchError, LookupError):
    """Raised when a digest or origin URL is absent from the cache."""


class DigestMismatchError(ReproFetchError):
    """Raised when fetched bytes do not hash to the expected digest.

    The partial blob is never committed to the cache.
    """

    def __init__(self, url: str, expected: str, actual: str) -> None:
        super().__init__(
            f"SHA256 mismatch for {url}: expected {expected}, got {actual}"
        )
        self.url = url
        self.expected = expected
        self.actual = actual


class FetchError(ReproFetchError):
    """Raised when a URL cannot be retrieved (transport or HTTP status)."""


class OperationCancelledError(ReproFetchError):
    """Raised when a blocking operation is aborted through its cancellation event."""


class FetchCancelledError(FetchError, OperationCancelledError):
    """Raised when a fetch is aborted; no partial blob is committed."""


class ManifestFormatError(ReproFetchError):
    """Raised when a SHA256SUMS document has a malformed line."""


class ExternalToolError(ReproFetchError):
    """Raised when a package-manager command fails.

    Carries the argv so the failing command can be reported verbatim.
    """

    def __init__(
        self,
        argv: Sequence[str],
        returncode: int | None = None,
        detail: str = "",
    ) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        msg = f"command {self.argv!r} failed"
        if returncode is not None:
            msg += f" with exit code {returncode}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class UnsupportedOperationError(ReproFetchError):
    """Raised when a distro driver does not implement a capability."""

    def __init__(self, driver: str, feature: str) -> None:
        super().__init__(
            f"distro driver {driver!r} does not implement the requested feature ({feature})"
        )
        self.driver = driver
        self.feature = feature


class DownloadError(ReproFetchError):
    """Raised when no provider could deliver a FileSpec; aborts the batch."""

    def __init__(self, name: str, url: str, cause: Exception) -> None:
        super().__init__(f"failed to download {name} ({url}): {cause}")
        self.name = name
        self.url = url
        self.cause = cause
