from pathlib import Path

import pytest

from filemanager.data_models.files import FileCategory
from filemanager.data_models.operations import DestPreset
from filemanager.data_models.overview import (
    CategoryItem,
    DownloadsItem,
    DownloadsSummary,
    StorageItem,
    StorageSummary,
)
from filemanager.stages.overview import (
    build_home_items,
    downloads_summary,
    resolve_destination,
    storage_summary,
)
from filemanager.stages.scan import scan_files


class FixedVolume:
    def usage(self, path):
        return 4 * 1024**3, 1024**3


class BrokenVolume:
    def usage(self, path):
        raise FileNotFoundError(path)


def test_storage_summary_reads_volume(tmp_path: Path):
    summary = storage_summary(tmp_path, FixedVolume())

    assert summary.path == str(tmp_path)
    assert summary.total_space == 4 * 1024**3
    assert summary.used_space == 1024**3


def test_storage_summary_errors_yield_zero(tmp_path: Path):
    summary = storage_summary(tmp_path, BrokenVolume())
    assert (summary.total_space, summary.used_space) == (0, 0)


def test_downloads_summary_counts_direct_files(tmp_path: Path, make_file):
    make_file(tmp_path / "Download" / "a.pdf", 100)
    make_file(tmp_path / "Download" / "b.zip", 50)
    make_file(tmp_path / "Download" / "nested" / "c.txt", 999)

    summary = downloads_summary(tmp_path)

    assert summary.path == str(tmp_path / "Download")
    assert summary.item_count == 2
    assert summary.total_size == 150


def test_downloads_summary_without_downloads(tmp_path: Path):
    summary = downloads_summary(tmp_path)
    assert (summary.item_count, summary.total_size) == (0, 0)


def test_build_home_items(storage_root: Path, scan_config):
    categories = scan_files(storage_root, scan_config)
    storage = StorageSummary(path=str(storage_root), total_space=2048, used_space=1024)
    downloads = DownloadsSummary(path="/d", item_count=2, total_size=1100)

    items = build_home_items(categories, storage, downloads)

    assert isinstance(items[0], StorageItem)
    assert items[0].subtitle == "1.00 KB / 2.00 KB"
    assert isinstance(items[1], DownloadsItem)
    assert items[1].subtitle == "1.07 KB (2)"
    assert [item.category for item in items[2:]] == [
        FileCategory.IMAGES,
        FileCategory.AUDIO,
        FileCategory.VIDEOS,
        FileCategory.DOCUMENTS,
        FileCategory.APKS,
        FileCategory.ARCHIVES,
    ]
    apks = items[6]
    assert isinstance(apks, CategoryItem)
    assert apks.title == "APKs"
    assert apks.subtitle == "600 B (1)"


def test_home_items_for_an_empty_scan():
    items = build_home_items(
        {}, StorageSummary(path="/s"), DownloadsSummary(path="/s/Download")
    )
    assert all(item.subtitle == "0 B (0)" for item in items[1:])


@pytest.mark.parametrize(
    "preset, relative",
    [
        (DestPreset.INTERNAL, ""),
        (DestPreset.DOWNLOADS, "Download"),
        (DestPreset.DOCUMENTS, "Documents"),
        (DestPreset.PICTURES, "Pictures"),
        (DestPreset.MUSIC, "Music"),
        (DestPreset.MOVIES, "Movies"),
    ],
)
def test_resolve_destination(tmp_path: Path, preset, relative):
    expected = tmp_path / relative if relative else tmp_path
    assert resolve_destination(preset, tmp_path) == str(expected)
