"""Capabilities the core needs from its host.

The scanner, browser and overview stages never touch ``os`` directly; they
receive one of these objects instead. ``LocalFileSystem``,
``SystemMimeResolver`` and ``LocalVolumeInfo`` cover a regular machine;
a host with a media index (or a test) supplies its own ``MetadataIndex``.
"""

import logging
import mimetypes
import os
import shutil
from dataclasses import dataclass
from typing import Iterable, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileStat:
    path: str
    name: str
    is_dir: bool
    is_file: bool
    size: int
    mtime_ms: int
    hidden: bool
    is_symlink: bool = False


@dataclass(frozen=True)
class IndexedEntry:
    """One row from a metadata index.

    Either ``path`` or ``relative_path`` (relative to the storage root, with
    ``display_name`` appended) locates the file. ``date_modified`` is in
    seconds, as media indexes usually report it.
    """

    display_name: str | None
    path: str | None = None
    relative_path: str | None = None
    size: int | None = None
    date_modified: int | None = None


class FileSystem(Protocol):
    def list_dir(self, path: str) -> list[FileStat]:
        """Children of ``path`` in name order. Raises ``OSError``."""
        ...

    def stat(self, path: str) -> FileStat: ...

    def exists(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def canonical_path(self, path: str) -> str: ...


class MetadataIndex(Protocol):
    def query_documents(self) -> Iterable[IndexedEntry]:
        """Rows with no media type (documents and other non-media files)."""
        ...

    def query_prefix(self, relative_dir: str) -> list[IndexedEntry] | None:
        """Rows under ``relative_dir``; ``None`` when the index cannot answer."""
        ...


class MimeResolver(Protocol):
    def mime_type(self, extension: str) -> str | None: ...


class VolumeInfo(Protocol):
    def usage(self, path: str) -> tuple[int, int]:
        """(total, used) bytes of the volume holding ``path``."""
        ...


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


class LocalFileSystem:
    def _from_dir_entry(self, entry: os.DirEntry) -> FileStat | None:
        try:
            stat = entry.stat()
            is_dir = entry.is_dir()
            is_file = entry.is_file()
            is_symlink = entry.is_symlink()
        except OSError as e:
            logger.debug(f"Cannot stat {entry.path}: {e}")
            return None
        return FileStat(
            path=entry.path,
            name=entry.name,
            is_dir=is_dir,
            is_file=is_file,
            size=stat.st_size if is_file else 0,
            mtime_ms=int(stat.st_mtime * 1000),
            hidden=_is_hidden(entry.name),
            is_symlink=is_symlink,
        )

    def list_dir(self, path: str) -> list[FileStat]:
        with os.scandir(path) as entries:
            stats = [self._from_dir_entry(entry) for entry in entries]
        return sorted((s for s in stats if s is not None), key=lambda s: s.name)

    def stat(self, path: str) -> FileStat:
        stat = os.stat(path)
        name = os.path.basename(os.path.normpath(path))
        is_dir = os.path.isdir(path)
        is_file = os.path.isfile(path)
        return FileStat(
            path=path,
            name=name,
            is_dir=is_dir,
            is_file=is_file,
            size=stat.st_size if is_file else 0,
            mtime_ms=int(stat.st_mtime * 1000),
            hidden=_is_hidden(name),
            is_symlink=os.path.islink(path),
        )

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def canonical_path(self, path: str) -> str:
        return os.path.realpath(path)


class SystemMimeResolver:
    """Extension lookup against Python's built-in MIME table.

    Uses a private ``MimeTypes`` instance so results do not depend on the
    host's mime.types files.
    """

    def __init__(self):
        self._types = mimetypes.MimeTypes()

    def mime_type(self, extension: str) -> str | None:
        if not extension:
            return None
        mime, _ = self._types.guess_type(f"file.{extension}", strict=False)
        return mime.lower() if mime else None


class LocalVolumeInfo:
    def usage(self, path: str) -> tuple[int, int]:
        usage = shutil.disk_usage(path)
        return usage.total, usage.used


class NullMetadataIndex:
    """Host without a metadata index."""

    def query_documents(self) -> Iterable[IndexedEntry]:
        return []

    def query_prefix(self, relative_dir: str) -> list[IndexedEntry] | None:
        return None


class InMemoryMetadataIndex:
    """Metadata index over a fixed list of rows."""

    def __init__(self, entries: Iterable[IndexedEntry] = ()):
        self.entries = list(entries)

    def query_documents(self) -> Iterable[IndexedEntry]:
        return list(self.entries)

    def query_prefix(self, relative_dir: str) -> list[IndexedEntry] | None:
        prefix = relative_dir if relative_dir.endswith("/") else relative_dir + "/"
        return [
            entry
            for entry in self.entries
            if (entry.relative_path or "").startswith(prefix)
        ]
