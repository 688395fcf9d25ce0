import logging
import os
from pathlib import Path

from filemanager.data_models.files import CategoryData, FileCategory, FileItem
from filemanager.stages.aggregate import aggregate
from filemanager.stages.classify import classify
from filemanager.storage.capabilities import (
    FileStat,
    FileSystem,
    LocalFileSystem,
    MetadataIndex,
    MimeResolver,
    NullMetadataIndex,
    SystemMimeResolver,
)
from filemanager.utils.config import ScanConfig, get_config

logger = logging.getLogger(__name__)

# category -> source path -> files, in discovery order
CategoryMap = dict[FileCategory, dict[str, list[FileItem]]]


def new_category_map() -> CategoryMap:
    return {category: {} for category in FileCategory}


def _is_within(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def get_source_path(file_path: str, config: ScanConfig) -> str:
    """
    Grouping folder for a classified file.

    Files under a well-known root are grouped by the root itself, or by the
    root's immediate subfolder when they live deeper (so
    Pictures/Screenshots/2024/a.png groups under Pictures/Screenshots).
    Everything else groups under its parent directory.
    """
    parent = os.path.dirname(file_path)
    for root in config.well_known_roots:
        if not _is_within(file_path, root):
            continue
        if parent == root:
            return root
        first_segment = os.path.relpath(parent, root).split(os.sep)[0]
        return os.path.join(root, first_segment)

    return parent or config.storage_root or os.sep


def should_descend(directory: FileStat, parent_name: str, config: ScanConfig) -> bool:
    if directory.hidden or config.is_ignored_directory(directory.name):
        return False
    # App-private folders such as Android/data; Android/media is still scanned
    if config.is_restricted(parent_name, directory.name):
        return False
    return True


def _add_file(
    category_map: CategoryMap,
    category: FileCategory,
    item: FileItem,
    config: ScanConfig,
) -> None:
    source = get_source_path(item.path, config)
    category_map[category].setdefault(source, []).append(item)


def scan_directory(
    directory: str,
    category_map: CategoryMap,
    config: ScanConfig,
    filesystem: FileSystem,
    mime_resolver: MimeResolver,
) -> None:
    """Depth-first walk of ``directory``, adding classified files to ``category_map``.

    A directory that cannot be listed is logged and skipped; the rest of the
    walk continues.
    """
    try:
        children = filesystem.list_dir(directory)
    except OSError as e:
        logger.warning(f"Skipping unreadable directory {directory}: {e}")
        return

    parent_name = os.path.basename(directory.rstrip(os.sep))

    for child in children:
        if child.hidden:
            continue

        if child.is_file:
            category = classify(child.name, mime_resolver)
            if category is None:
                continue
            item = FileItem(
                path=child.path,
                name=child.name,
                size=child.size,
                date_modified=child.mtime_ms,
                category=category,
            )
            _add_file(category_map, category, item, config)

        elif child.is_dir:
            if not should_descend(child, parent_name, config):
                logger.debug(f"Not descending into {child.path}")
                continue
            if child.is_symlink:
                logger.debug(f"Not following directory link {child.path}")
                continue
            scan_directory(child.path, category_map, config, filesystem, mime_resolver)


def _resolve_indexed_path(entry, storage_root: str | None) -> str | None:
    if entry.path:
        return entry.path
    if entry.relative_path is not None and storage_root:
        return os.path.join(storage_root, entry.relative_path, entry.display_name)
    return None


def collect_indexed_documents(
    category_map: CategoryMap,
    index: MetadataIndex,
    config: ScanConfig,
    filesystem: FileSystem,
    mime_resolver: MimeResolver,
) -> int:
    """
    Merge documents known only to the metadata index into ``category_map``.

    Some locations are only visible through the host's media index. Rows are
    keyed by absolute path; paths already found by the walk are left alone.
    Returns the number of documents added.
    """
    documents = category_map[FileCategory.DOCUMENTS]
    known_paths = {item.path for files in documents.values() for item in files}

    try:
        rows = list(index.query_documents())
    except Exception as e:
        logger.warning(f"Metadata index query failed, skipping augmentation: {e}")
        return 0

    added = 0
    for row in rows:
        if not row.display_name or not row.display_name.strip():
            continue

        path = _resolve_indexed_path(row, config.storage_root)
        if path is None:
            continue
        path = os.path.abspath(path)
        name = os.path.basename(path)

        if classify(name, mime_resolver) != FileCategory.DOCUMENTS:
            continue
        if path in known_paths:
            continue
        known_paths.add(path)

        stat = None
        if row.size is None or row.date_modified is None:
            try:
                stat = filesystem.stat(path)
            except OSError:
                stat = None

        size = row.size if row.size is not None else (stat.size if stat else 0)
        if row.date_modified is not None:
            modified = row.date_modified * 1000
        else:
            modified = stat.mtime_ms if stat else 0

        item = FileItem(
            path=path,
            name=name,
            size=size,
            date_modified=modified,
            category=FileCategory.DOCUMENTS,
        )
        _add_file(category_map, FileCategory.DOCUMENTS, item, config)
        added += 1

    return added


def scan_files(
    root: Path | str,
    config: ScanConfig | None = None,
    filesystem: FileSystem | None = None,
    mime_resolver: MimeResolver | None = None,
    index: MetadataIndex | None = None,
) -> dict[FileCategory, CategoryData]:
    """
    Scan ``root`` and return the per-category summary.

    ``config`` is resolved against ``root`` when its well-known roots are
    still relative. The result is a fresh snapshot; nothing is cached.
    """
    root = os.path.abspath(root)
    if config is None:
        config = get_config()
    if config.storage_root is None:
        config = config.for_root(root)
    filesystem = filesystem or LocalFileSystem()
    mime_resolver = mime_resolver or SystemMimeResolver()
    index = index or NullMetadataIndex()

    logger.info(f"Scanning {root}")
    category_map = new_category_map()
    scan_directory(root, category_map, config, filesystem, mime_resolver)
    added = collect_indexed_documents(
        category_map, index, config, filesystem, mime_resolver
    )

    categories = aggregate(category_map, config)
    total = sum(data.item_count for data in categories.values())
    logger.info(
        f"Scan of {root} complete: {total} files ({added} from metadata index)"
    )
    return categories
