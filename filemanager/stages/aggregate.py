import os
from typing import Iterable, Mapping

from filemanager.data_models.files import (
    CategoryData,
    FileCategory,
    FileItem,
    SourceFolderData,
)
from filemanager.utils.config import ScanConfig

OTHER_SOURCE_NAME = "Other"


def get_folder_display_name(path: str, meaningless_segments: Iterable[str]) -> str:
    """
    Readable name for a source folder.

    Mount point artifacts such as /storage/emulated/0 make poor names, so
    those fall back to the parent segment, then to "Other".
    """
    skip = set(meaningless_segments)
    path = path.rstrip(os.sep) or os.sep

    name = os.path.basename(path)
    if name.strip() and name not in skip:
        return name

    parent_name = os.path.basename(os.path.dirname(path))
    if parent_name.strip() and parent_name not in skip:
        return parent_name

    return OTHER_SOURCE_NAME


def sort_by_recency(files: Iterable[FileItem]) -> tuple[FileItem, ...]:
    return tuple(sorted(files, key=lambda item: item.date_modified, reverse=True))


def build_source(
    path: str, files: list[FileItem], meaningless_segments: Iterable[str]
) -> SourceFolderData:
    return SourceFolderData(
        path=path,
        name=get_folder_display_name(path, meaningless_segments),
        item_count=len(files),
        total_size=sum(item.size for item in files),
        files=sort_by_recency(files),
    )


def aggregate(
    category_map: Mapping[FileCategory, Mapping[str, list[FileItem]]],
    config: ScanConfig,
) -> dict[FileCategory, CategoryData]:
    """Turn raw per-source file lists into sorted category summaries.

    Every category is present in the result, in declaration order.
    """
    result: dict[FileCategory, CategoryData] = {}

    for category in FileCategory:
        source_map = category_map.get(category, {})
        sources = [
            build_source(path, files, config.meaningless_segments)
            for path, files in source_map.items()
        ]
        sources.sort(key=lambda source: (source.name.lower(), source.path))

        result[category] = CategoryData(
            category=category,
            item_count=sum(source.item_count for source in sources),
            total_size=sum(source.total_size for source in sources),
            sources={source.path: source for source in sources},
        )

    return result
