from typing import Iterable, Mapping

from filemanager.data_models.files import CategoryData, FileCategory, FileItem
from filemanager.data_models.quick_filter import (
    QuickFilter,
    QuickFilterGroup,
    QuickFilterState,
)
from filemanager.utils.config import DEFAULT_QUICK_FILTER_LIMIT


def collect_all_files(categories: Mapping[FileCategory, CategoryData]) -> list[FileItem]:
    """Every scanned file, in category, source and recency order."""
    return [
        item
        for data in categories.values()
        for source in data.sources.values()
        for item in source.files
    ]


def _top(files: list[FileItem], key, limit: int) -> QuickFilterGroup:
    ranked = sorted(files, key=key, reverse=True)
    return QuickFilterGroup(title=None, files=tuple(ranked[:limit]))


def find_duplicates(files: Iterable[FileItem]) -> list[QuickFilterGroup]:
    """
    Group files sharing a lowercased name and an exact size.

    Each group with two or more distinct paths becomes a titled group,
    newest first. Groups are ordered by file size, largest first.
    """
    buckets: dict[tuple[str, int], dict[str, FileItem]] = {}
    for item in files:
        bucket = buckets.setdefault((item.name.lower(), item.size), {})
        bucket.setdefault(item.path, item)

    groups = []
    for bucket in buckets.values():
        if len(bucket) < 2:
            continue
        duplicates = list(bucket.values())
        groups.append(
            QuickFilterGroup(
                title=f"{duplicates[0].name} ({len(duplicates)})",
                files=tuple(
                    sorted(duplicates, key=lambda item: item.date_modified, reverse=True)
                ),
            )
        )

    groups.sort(key=lambda group: group.files[0].size, reverse=True)
    return groups


def build_quick_filter(
    kind: QuickFilter,
    categories: Mapping[FileCategory, CategoryData],
    limit: int = DEFAULT_QUICK_FILTER_LIMIT,
) -> QuickFilterState:
    files = collect_all_files(categories)

    if kind == QuickFilter.RECENT:
        groups = [_top(files, lambda item: item.date_modified, limit)]
    elif kind == QuickFilter.LARGE:
        groups = [_top(files, lambda item: item.size, limit)]
    elif kind == QuickFilter.DUPLICATES:
        groups = find_duplicates(files)
    else:
        raise ValueError(f"Unknown quick filter: {kind}")

    return QuickFilterState(filter=kind, groups=tuple(groups))
