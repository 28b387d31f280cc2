"""SHA256SUMS hash manifests.

A manifest maps file names to SHA-256 digests. The text form is the
conventional checksum-file layout, one entry per line::

    <digest>  <filename>

Parsing keeps document order and lets a repeated filename overwrite the
earlier entry (last wins). Producers decide which entries to emit through
a ``HashWriter``; ``DedupeHashWriter`` drops entries already present with
the same digest in a previous manifest so regenerated files only carry
what changed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import TextIO

from reprofetch.core.hasher import is_sha256_hex
from reprofetch.errors import ManifestFormatError

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"(\S+)\s+(.*)")

HashWriter = Callable[[str, str], None]
"""Receives ``(sha256, filename)`` for each generated entry."""


def format_line(sha256: str, filename: str) -> str:
    """One SHA256SUMS line.

    File names that start with whitespace or span lines cannot be parsed
    back and are rejected.
    """
    if not filename or filename[0].isspace() or "\n" in filename or "\r" in filename:
        raise ManifestFormatError(f"file name {filename!r} cannot be written to SHA256SUMS")
    return f"{sha256}  {filename}\n"


def parse_lines(lines: Iterable[str]) -> dict[str, str]:
    """Parse SHA256SUMS lines into an ordered filename→digest mapping.

    The digest and the file name are separated by the first whitespace
    run. Only the line terminator is stripped from the file name, so
    trailing whitespace belongs to it.
    """
    sums: dict[str, str] = {}
    for lineno, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        m = _LINE_RE.fullmatch(line.lstrip())
        if m is None or not m.group(2):
            raise ManifestFormatError(
                f"line {lineno}: expected '<sha256>  <filename>', got {line!r}"
            )
        sha256, filename = m.groups()
        if not is_sha256_hex(sha256):
            raise ManifestFormatError(
                f"line {lineno}: {sha256!r} is not a lowercase hex SHA-256 digest"
            )
        sums[filename] = sha256
    return sums


def parse(text: str) -> dict[str, str]:
    return parse_lines(text.split("\n"))


def serialize(sums: Mapping[str, str], *, sort: bool = False) -> str:
    """Render a mapping in SHA256SUMS form, in mapping order unless *sort*."""
    filenames = sorted(sums) if sort else list(sums)
    return "".join(format_line(sums[f], f) for f in filenames)


def load(path: str | Path) -> dict[str, str]:
    path = Path(path)
    with path.open(encoding="utf-8", newline="") as f:
        try:
            return parse_lines(f)
        except ManifestFormatError as exc:
            raise ManifestFormatError(f"{path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ManifestFormatError(f"{path}: not valid UTF-8 text: {exc}") from exc


def dump(sums: Mapping[str, str], path: str | Path, *, sort: bool = False) -> None:
    Path(path).write_text(serialize(sums, sort=sort), encoding="utf-8")


def merge(*manifests: Mapping[str, str]) -> dict[str, str]:
    """Combine manifests left to right; later files win on repeated names."""
    merged: dict[str, str] = {}
    for m in manifests:
        merged.update(m)
    return merged


class StreamHashWriter:
    """HashWriter that prints SHA256SUMS lines to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self.written = 0

    def __call__(self, sha256: str, filename: str) -> None:
        self._stream.write(format_line(sha256, filename))
        self.written += 1


class CollectingHashWriter:
    """HashWriter that accumulates entries into an ordered mapping."""

    def __init__(self) -> None:
        self.sums: dict[str, str] = {}

    def __call__(self, sha256: str, filename: str) -> None:
        self.sums[filename] = sha256


class DedupeHashWriter:
    """Suppress entries whose filename already maps to the same digest.

    Entries that are new, or whose digest changed, pass through to *inner*.
    """

    def __init__(self, inner: HashWriter, prior: Mapping[str, str]) -> None:
        self._inner = inner
        self._prior = prior
        self.skipped = 0

    def __call__(self, sha256: str, filename: str) -> None:
        if self._prior.get(filename) == sha256:
            logger.debug("Skipping unchanged entry %s", filename)
            self.skipped += 1
            return
        self._inner(sha256, filename)
