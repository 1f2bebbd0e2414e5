"""Directory listing with a traversal guard."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from hostpanel.schemas.files import FileEntry

logger = logging.getLogger(__name__)


class PathTraversalError(Exception):
    """Requested path contains ``..`` or resolves outside the allowed root."""


class DirectoryUnreadableError(Exception):
    """Path does not exist, is not a directory, or cannot be read."""


def check_traversal(path: str) -> None:
    """Reject any path containing the literal substring ``..``."""
    if ".." in path:
        raise PathTraversalError(path)


def resolve_within_root(path: str, root: str | Path) -> Path:
    """Resolve ``path`` (symlinks followed) and require it below ``root``.

    Relative paths are resolved against the working directory.
    """
    check_traversal(path)
    resolved = Path(path).resolve()
    root_resolved = Path(root).resolve()
    if resolved != root_resolved and root_resolved not in resolved.parents:
        raise PathTraversalError(path)
    return resolved


def sort_entries(entries: list[FileEntry]) -> list[FileEntry]:
    """Directories first, then case-insensitive name ascending."""
    return sorted(entries, key=lambda e: (not e.is_directory, e.name.casefold()))


def list_directory(path: str | Path) -> list[FileEntry]:
    """List one directory level."""
    entries: list[FileEntry] = []
    try:
        with os.scandir(path) as it:
            for entry in it:
                try:
                    is_dir = entry.is_dir()
                    size = entry.stat().st_size
                except OSError:
                    # Dangling symlink or entry removed mid-listing
                    is_dir, size = False, 0
                entries.append(FileEntry(name=entry.name, is_directory=is_dir, size_bytes=size))
    except OSError as exc:
        logger.info("Cannot list %s: %s", path, exc)
        raise DirectoryUnreadableError(str(path)) from exc
    return sort_entries(entries)
