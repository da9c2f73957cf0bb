"""File listing helpers for recorded and buffered frame directories."""

from __future__ import annotations

import re
from pathlib import Path

_DIGITS = re.compile(r"(\d+)")


def natural_key(path: str | Path) -> list:
    """Sort key ordering embedded numbers numerically (``f2`` before ``f10``)."""
    name = Path(path).name
    return [int(part) if part.isdigit() else part.lower() for part in _DIGITS.split(name)]


def list_data_files(directory: str | Path, suffixes: tuple[str, ...] | None = None) -> list[Path]:
    """Regular, non-hidden files in *directory* in natural order.

    If *suffixes* is given only files with one of those (lower-case)
    extensions are listed.

    Raises:
        FileNotFoundError: If *directory* does not exist.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Data directory not found: {directory}")
    files = [p for p in directory.iterdir() if p.is_file() and not p.name.startswith(".")]
    if suffixes is not None:
        files = [p for p in files if p.suffix.lower() in suffixes]
    return sorted(files, key=natural_key)
