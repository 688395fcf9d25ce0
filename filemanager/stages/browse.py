"""On-demand, non-recursive directory listing for the storage browser."""

import logging
import os
from pathlib import Path

from filemanager.data_models.files import StorageEntry
from filemanager.storage.capabilities import (
    FileSystem,
    LocalFileSystem,
    MetadataIndex,
    NullMetadataIndex,
)

logger = logging.getLogger(__name__)


def calculate_directory_size(directory: str, filesystem: FileSystem) -> int:
    """
    Total size of the visible files under ``directory``.

    Walks with an explicit stack; canonical paths already visited are skipped
    so directory links cannot loop. Unreadable directories count as empty.
    """
    total_size = 0
    stack = [directory]
    visited: set[str] = set()

    while stack:
        current = stack.pop()
        try:
            canonical = filesystem.canonical_path(current)
        except OSError:
            canonical = os.path.abspath(current)
        if canonical in visited:
            continue
        visited.add(canonical)

        try:
            children = filesystem.list_dir(current)
        except OSError as e:
            logger.debug(f"Cannot list {current} while sizing {directory}: {e}")
            continue

        for child in children:
            if child.hidden:
                continue
            if child.is_file:
                total_size += child.size
            elif child.is_dir:
                stack.append(child.path)

    return total_size


def _relative_to_root(directory: str, storage_root: str | None) -> str | None:
    if not storage_root:
        return None
    directory = os.path.abspath(directory)
    storage_root = os.path.abspath(storage_root)
    if os.path.commonpath([directory, storage_root]) != storage_root:
        return None
    relative = os.path.relpath(directory, storage_root)
    if relative == ".":
        return None
    return relative.replace(os.sep, "/")


def query_directory_via_index(
    directory: str, index: MetadataIndex, storage_root: str | None
) -> tuple[int, int] | None:
    """(item_count, total_size) of ``directory`` according to the metadata index."""
    relative = _relative_to_root(directory, storage_root)
    if relative is None:
        return None

    try:
        rows = index.query_prefix(relative)
    except Exception as e:
        logger.warning(f"Metadata index query for {relative} failed: {e}")
        return None

    if rows is None:
        return None
    return len(rows), sum(row.size or 0 for row in rows)


def directory_metrics(
    directory: str,
    filesystem: FileSystem,
    index: MetadataIndex,
    storage_root: str | None = None,
) -> tuple[int, int]:
    """(visible child count, subtree size) for one directory entry.

    Falls back to the metadata index when the directory cannot be listed,
    and to (0, 0) when the index cannot answer either.
    """
    try:
        visible_children = [
            child for child in filesystem.list_dir(directory) if not child.hidden
        ]
    except OSError as e:
        logger.info(f"Listing {directory} failed ({e}), asking the metadata index")
        return query_directory_via_index(directory, index, storage_root) or (0, 0)

    return len(visible_children), calculate_directory_size(directory, filesystem)


def _sort_key(entry: StorageEntry):
    return (not entry.is_directory, entry.name.lower())


def list_children(
    path: Path | str,
    filesystem: FileSystem | None = None,
    index: MetadataIndex | None = None,
    storage_root: Path | str | None = None,
) -> list[StorageEntry]:
    """Visible children of ``path``, directories first, then by name."""
    filesystem = filesystem or LocalFileSystem()
    index = index or NullMetadataIndex()
    path = os.path.abspath(path)
    root = str(storage_root) if storage_root is not None else None

    if not filesystem.is_dir(path):
        return []

    try:
        children = filesystem.list_dir(path)
    except OSError as e:
        logger.warning(f"Cannot list {path}: {e}")
        return []

    entries = []
    for child in children:
        if child.hidden:
            continue

        if child.is_dir:
            item_count, size = directory_metrics(child.path, filesystem, index, root)
        else:
            item_count, size = 0, child.size

        entries.append(
            StorageEntry(
                path=child.path,
                name=child.name if child.name.strip() else child.path,
                is_directory=child.is_dir,
                size=size,
                item_count=item_count,
                last_modified=child.mtime_ms,
            )
        )

    entries.sort(key=_sort_key)
    return entries
