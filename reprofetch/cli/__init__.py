"""reprofetch CLI — Typer-based command-line interface.

Provides the ``reprofetch`` command with subcommands for generating hash
files, downloading and installing pinned packages, and inspecting the
cache.

Diagnostics go to stderr through Rich; hash files go to stdout.
"""
