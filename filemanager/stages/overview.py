"""Home screen summaries: volume usage, Downloads and per-category totals."""

import logging
import os
from pathlib import Path
from typing import Mapping

from filemanager.data_models.files import CategoryData, FileCategory
from filemanager.data_models.operations import DestPreset
from filemanager.data_models.overview import (
    CategoryItem,
    DownloadsItem,
    DownloadsSummary,
    HomeItem,
    StorageItem,
    StorageSummary,
)
from filemanager.storage.capabilities import FileSystem, LocalFileSystem, VolumeInfo
from filemanager.utils.formatting import format_file_size

logger = logging.getLogger(__name__)

HOME_CATEGORY_ORDER = (
    FileCategory.IMAGES,
    FileCategory.AUDIO,
    FileCategory.VIDEOS,
    FileCategory.DOCUMENTS,
    FileCategory.APKS,
    FileCategory.ARCHIVES,
)


def storage_summary(path: Path | str, volumes: VolumeInfo) -> StorageSummary:
    path = str(path)
    try:
        total, used = volumes.usage(path)
    except OSError as e:
        logger.warning(f"Cannot read volume usage for {path}: {e}")
        return StorageSummary(path=path)
    return StorageSummary(path=path, total_space=total, used_space=used)


def downloads_summary(
    storage_root: Path | str, filesystem: FileSystem | None = None
) -> DownloadsSummary:
    """Regular files directly inside the Downloads directory."""
    filesystem = filesystem or LocalFileSystem()
    downloads = resolve_destination(DestPreset.DOWNLOADS, storage_root)

    try:
        files = [child for child in filesystem.list_dir(downloads) if child.is_file]
    except OSError as e:
        logger.info(f"Cannot list {downloads}: {e}")
        return DownloadsSummary(path=downloads)

    return DownloadsSummary(
        path=downloads,
        item_count=len(files),
        total_size=sum(child.size for child in files),
    )


def _size_and_count(total_size: int, item_count: int) -> str:
    return f"{format_file_size(total_size)} ({item_count})"


def build_home_items(
    categories: Mapping[FileCategory, CategoryData],
    storage: StorageSummary,
    downloads: DownloadsSummary,
) -> list[HomeItem]:
    items: list[HomeItem] = [
        StorageItem(
            title="Main storage",
            subtitle=(
                f"{format_file_size(storage.used_space)} / "
                f"{format_file_size(storage.total_space)}"
            ),
            icon="storage",
            path=storage.path,
            total_space=storage.total_space,
            used_space=storage.used_space,
        ),
        DownloadsItem(
            title="Downloads",
            subtitle=_size_and_count(downloads.total_size, downloads.item_count),
            icon="downloads",
            path=downloads.path,
            item_count=downloads.item_count,
            total_size=downloads.total_size,
        ),
    ]

    for category in HOME_CATEGORY_ORDER:
        data = categories.get(category)
        item_count = data.item_count if data else 0
        total_size = data.total_size if data else 0
        items.append(
            CategoryItem(
                title=category.display_name,
                subtitle=_size_and_count(total_size, item_count),
                icon=category.value,
                category=category,
                item_count=item_count,
                total_size=total_size,
            )
        )

    return items


def resolve_destination(preset: DestPreset, storage_root: Path | str) -> str:
    root = os.path.abspath(storage_root)
    if not preset.relative_path:
        return root
    return os.path.join(root, preset.relative_path)
