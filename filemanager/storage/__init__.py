"""Host capabilities: filesystem access, metadata index, MIME lookup and volume usage.

The core stages receive these as arguments instead of calling platform APIs
directly (see filemanager/storage/capabilities.py).
"""

from filemanager.storage.capabilities import (
    FileStat,
    FileSystem,
    IndexedEntry,
    InMemoryMetadataIndex,
    LocalFileSystem,
    LocalVolumeInfo,
    MetadataIndex,
    MimeResolver,
    NullMetadataIndex,
    SystemMimeResolver,
    VolumeInfo,
)

__all__ = [
    "FileStat",
    "FileSystem",
    "IndexedEntry",
    "InMemoryMetadataIndex",
    "LocalFileSystem",
    "LocalVolumeInfo",
    "MetadataIndex",
    "MimeResolver",
    "NullMetadataIndex",
    "SystemMimeResolver",
    "VolumeInfo",
]
