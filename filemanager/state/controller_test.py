import threading
from pathlib import Path

import pytest

from filemanager.data_models.files import FileCategory
from filemanager.data_models.operations import DestPreset
from filemanager.data_models.quick_filter import QuickFilter
from filemanager.stages import operations
from filemanager.state.controller import FileManagerController
from filemanager.storage.capabilities import LocalFileSystem


@pytest.fixture
def controller(storage_root: Path, inline_executor) -> FileManagerController:
    return FileManagerController(storage_root, executor=inline_executor)


@pytest.fixture
def scanned(controller: FileManagerController) -> FileManagerController:
    controller.scan_files().result()
    return controller


def _path(storage_root: Path, relative: str) -> str:
    return str(storage_root / relative)


def test_scan_publishes_categories(controller: FileManagerController):
    snapshots = []
    controller.subscribe(snapshots.append)

    categories = controller.scan_files().result()

    assert categories[FileCategory.IMAGES].item_count == 5
    assert snapshots[0].is_loading
    assert not snapshots[-1].is_loading
    assert snapshots[-1].categories == categories
    assert controller.state is snapshots[-1]


def test_unsubscribe_stops_notifications(controller: FileManagerController):
    snapshots = []
    unsubscribe = controller.subscribe(snapshots.append)
    unsubscribe()

    controller.scan_files().result()

    assert snapshots == []


def test_category_and_quick_filter_selection(scanned: FileManagerController, storage_root):
    scanned.select_category(FileCategory.AUDIO)
    scanned.toggle_file_selection(_path(storage_root, "Music/song.mp3"))
    assert scanned.state.is_selection_mode

    state = scanned.select_quick_filter(QuickFilter.LARGE)

    assert scanned.state.selected_category is None
    assert not scanned.state.is_selection_mode
    assert state.groups[0].files[0].name == "index.html"

    scanned.clear_quick_filter()
    assert scanned.state.quick_filter_state is None


def test_rescan_refreshes_active_quick_filter(
    scanned: FileManagerController, storage_root: Path, make_file
):
    scanned.select_quick_filter(QuickFilter.DUPLICATES)
    assert scanned.state.quick_filter_state.groups == ()

    make_file(storage_root / "Documents" / "report.pdf", 500)
    scanned.scan_files().result()

    [group] = scanned.state.quick_filter_state.groups
    assert group.title == "report.pdf (2)"


def test_selection_toggle_and_select_all(scanned: FileManagerController, storage_root):
    song = _path(storage_root, "Music/song.mp3")

    scanned.toggle_file_selection(song)
    assert scanned.state.selected_files == {song}
    scanned.toggle_file_selection(song)
    assert not scanned.state.is_selection_mode

    images = scanned.state.categories[FileCategory.IMAGES]
    files = [item for source in images.sources.values() for item in source.files]
    scanned.select_all_files(files)
    assert len(scanned.selected_file_items()) == 5

    scanned.clear_selection()
    assert scanned.selected_file_items() == []


def test_delete_selected_rescans(scanned: FileManagerController, storage_root: Path):
    scanned.toggle_file_selection(_path(storage_root, "Music/song.mp3"))

    result = scanned.delete_selected_files().result()

    assert result.processed == 1
    assert not (storage_root / "Music" / "song.mp3").exists()
    assert scanned.state.categories[FileCategory.AUDIO].item_count == 0
    assert not scanned.state.is_selection_mode


def test_rename_requires_single_selection(scanned: FileManagerController, storage_root):
    assert not scanned.rename_selected_file("x").result()

    scanned.toggle_file_selection(_path(storage_root, "Documents/notes.txt"))
    assert scanned.rename_selected_file("todo").result()

    assert (storage_root / "Documents" / "todo.txt").exists()
    documents = scanned.state.categories[FileCategory.DOCUMENTS]
    assert "todo.txt" in {
        item.name for source in documents.sources.values() for item in source.files
    }


def test_copy_to_preset(scanned: FileManagerController, storage_root: Path):
    scanned.toggle_file_selection(_path(storage_root, "Documents/notes.txt"))

    result = scanned.copy_selected_files(DestPreset.DOWNLOADS).result()

    assert result.processed == 1
    assert (storage_root / "Download" / "notes.txt").exists()
    assert (storage_root / "Documents" / "notes.txt").exists()


def test_move_to_missing_destination_fails_every_item(
    scanned: FileManagerController, storage_root: Path
):
    song = _path(storage_root, "Music/song.mp3")
    scanned.toggle_file_selection(song)

    result = scanned.move_selected_files(storage_root / "nowhere").result()

    assert not result.success
    assert [failure.path for failure in result.failed] == [song]
    assert Path(song).exists()
    # nothing changed, so the selection survives
    assert scanned.state.selected_files == {song}


def test_storage_browser_navigation(controller: FileManagerController, storage_root):
    controller.open_storage_root()
    browser = controller.state.storage_browser
    assert browser.stack == (str(storage_root),)
    assert not browser.is_loading
    assert [entry.name for entry in browser.entries][:3] == ["Android", "DCIM", "Documents"]

    controller.open_storage_folder(_path(storage_root, "Pictures"))
    assert [entry.name for entry in controller.state.storage_browser.entries] == [
        "Screenshots",
        "wallpaper.png",
    ]
    assert controller.open_storage_folder(_path(storage_root, "Pictures")) is None

    assert controller.navigate_storage_back()
    assert controller.state.storage_browser.current_path == str(storage_root)
    assert controller.navigate_storage_back()
    assert not controller.state.storage_browser.is_open
    assert not controller.navigate_storage_back()


class GatedFileSystem(LocalFileSystem):
    """Blocks the first listing of ``root`` until ``gate`` is set."""

    def __init__(self, root: str):
        self.root = root
        self.gate = threading.Event()
        self.entered = threading.Event()
        self._blocked_once = False
        self._lock = threading.Lock()

    def list_dir(self, path):
        with self._lock:
            block = path == self.root and not self._blocked_once
            self._blocked_once = self._blocked_once or block
        if block:
            self.entered.set()
            self.gate.wait(timeout=10)
        return super().list_dir(path)


def test_superseded_scan_is_discarded(storage_root: Path, make_file):
    filesystem = GatedFileSystem(str(storage_root))
    controller = FileManagerController(storage_root, filesystem=filesystem, max_workers=2)
    try:
        stale = controller.scan_files()
        assert filesystem.entered.wait(timeout=10)

        make_file(storage_root / "Music" / "new.mp3", 1)
        fresh = controller.scan_files().result(timeout=10)
        (storage_root / "Music" / "new.mp3").unlink()
        filesystem.gate.set()

        assert stale.result(timeout=10)[FileCategory.AUDIO].item_count == 1
        assert fresh[FileCategory.AUDIO].item_count == 2
        assert controller.state.categories == fresh
        assert not controller.state.is_loading
    finally:
        filesystem.gate.set()
        controller.shutdown()


def test_stale_listing_is_discarded(storage_root: Path):
    filesystem = GatedFileSystem(str(storage_root / "Pictures"))
    controller = FileManagerController(storage_root, filesystem=filesystem, max_workers=2)
    try:
        controller.open_storage_root(storage_root / "Pictures")
        assert filesystem.entered.wait(timeout=10)

        controller.open_storage_root(storage_root / "Music").result(timeout=10)
        filesystem.gate.set()
        controller.shutdown()

        browser = controller.state.storage_browser
        assert browser.current_path == str(storage_root / "Music")
        assert [entry.name for entry in browser.entries] == ["song.mp3"]
    finally:
        filesystem.gate.set()
        controller.shutdown()


def test_storage_root_with_parent_segments_is_normalized(
    storage_root: Path, inline_executor
):
    controller = FileManagerController(
        storage_root / ".." / storage_root.name, executor=inline_executor
    )

    categories = controller.scan_files().result()

    assert controller.storage_root == str(storage_root)
    screenshots = categories[FileCategory.IMAGES].sources[
        _path(storage_root, "Pictures/Screenshots")
    ]
    assert [item.name for item in screenshots.files] == ["shot.png", "old.png"]


def test_unexpected_transfer_error_becomes_failed_result(
    scanned: FileManagerController, storage_root: Path, monkeypatch
):
    song = _path(storage_root, "Music/song.mp3")
    scanned.toggle_file_selection(song)

    def exploding_copy(items, destination):
        raise RecursionError("maximum recursion depth exceeded")

    monkeypatch.setattr(operations, "copy_files", exploding_copy)

    result = scanned.copy_selected_files(DestPreset.DOWNLOADS).result()

    assert [failure.path for failure in result.failed] == [song]
    assert "recursion" in result.failed[0].reason
    assert scanned.state.selected_files == {song}


def test_unexpected_delete_and_rename_errors_are_contained(
    scanned: FileManagerController, storage_root: Path, monkeypatch
):
    notes = _path(storage_root, "Documents/notes.txt")
    scanned.toggle_file_selection(notes)

    def explode(*args):
        raise RuntimeError("boom")

    monkeypatch.setattr(operations, "delete_files", explode)
    monkeypatch.setattr(operations, "rename_file", explode)

    result = scanned.delete_selected_files().result()
    assert [failure.reason for failure in result.failed] == ["boom"]
    assert scanned.rename_selected_file("todo").result() is False
    assert Path(notes).exists()
