"""Observable state holder tying the scan, browser and file operations together.

The controller publishes immutable ``FileManagerState`` snapshots. Long-running
work (scans, directory listings, file operations) runs on a thread pool and
returns a ``Future``; results that a newer request has superseded are dropped.
"""

import logging
import os
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Mapping

from pydantic import BaseModel, ConfigDict

from filemanager.data_models.files import CategoryData, FileCategory, FileItem
from filemanager.data_models.operations import DestPreset, OperationResult
from filemanager.data_models.quick_filter import QuickFilter, QuickFilterState
from filemanager.stages import operations
from filemanager.stages.browse import list_children
from filemanager.stages.overview import resolve_destination
from filemanager.stages.quick_filter import build_quick_filter
from filemanager.stages.scan import scan_files
from filemanager.state import browser_state
from filemanager.state.browser_state import StorageBrowserState
from filemanager.storage.capabilities import (
    FileSystem,
    LocalFileSystem,
    MetadataIndex,
    MimeResolver,
    NullMetadataIndex,
    SystemMimeResolver,
)
from filemanager.utils.config import ScanConfig, get_config

logger = logging.getLogger(__name__)

Subscriber = Callable[["FileManagerState"], None]


class FileManagerState(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_loading: bool = False
    categories: dict[FileCategory, CategoryData] = {}
    selected_category: FileCategory | None = None
    quick_filter_state: QuickFilterState | None = None
    selected_files: frozenset[str] = frozenset()
    storage_browser: StorageBrowserState = browser_state.CLOSED

    @property
    def is_selection_mode(self) -> bool:
        return bool(self.selected_files)


def _files_by_path(categories: Mapping[FileCategory, CategoryData]) -> dict[str, FileItem]:
    return {
        item.path: item
        for data in categories.values()
        for source in data.sources.values()
        for item in source.files
    }


class FileManagerController:
    def __init__(
        self,
        storage_root: Path | str,
        config: ScanConfig | None = None,
        filesystem: FileSystem | None = None,
        mime_resolver: MimeResolver | None = None,
        index: MetadataIndex | None = None,
        executor: Executor | None = None,
        max_workers: int = 4,
    ):
        self.storage_root = os.path.abspath(storage_root)
        self.config = (config or get_config()).for_root(self.storage_root)
        self.filesystem = filesystem or LocalFileSystem()
        self.mime_resolver = mime_resolver or SystemMimeResolver()
        self.index = index or NullMetadataIndex()

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="filemanager"
        )
        self._lock = threading.RLock()
        self._state = FileManagerState()
        self._subscribers: list[Subscriber] = []
        self._scan_generation = 0

    # ===== Observation =====

    @property
    def state(self) -> FileManagerState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for every new snapshot. Returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _update(self, transform: Callable[[FileManagerState], FileManagerState]):
        with self._lock:
            new_state = transform(self._state)
            if new_state == self._state:
                return
            self._state = new_state
            for callback in list(self._subscribers):
                try:
                    callback(new_state)
                except Exception:
                    logger.exception("State subscriber failed")

    def _set(self, **changes):
        self._update(lambda state: state.model_copy(update=changes))

    def shutdown(self, wait: bool = True):
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    # ===== Categories and scanning =====

    def scan_files(self) -> "Future[dict[FileCategory, CategoryData] | None]":
        with self._lock:
            self._scan_generation += 1
            generation = self._scan_generation
            self._set(is_loading=True)
        return self._executor.submit(self._run_scan, generation)

    def _run_scan(self, generation: int):
        try:
            categories = scan_files(
                self.storage_root,
                self.config,
                self.filesystem,
                self.mime_resolver,
                self.index,
            )
        except Exception:
            logger.exception(f"Scan of {self.storage_root} failed")
            self._update(
                lambda state: state.model_copy(update={"is_loading": False})
                if generation == self._scan_generation
                else state
            )
            return None

        def apply(state: FileManagerState) -> FileManagerState:
            if generation != self._scan_generation:
                logger.debug(f"Discarding superseded scan {generation}")
                return state
            quick_filter_state = state.quick_filter_state
            if quick_filter_state is not None:
                quick_filter_state = build_quick_filter(
                    quick_filter_state.filter, categories, self.config.quick_filter_limit
                )
            return state.model_copy(
                update={
                    "is_loading": False,
                    "categories": categories,
                    "quick_filter_state": quick_filter_state,
                }
            )

        self._update(apply)
        return categories

    def select_category(self, category: FileCategory):
        self._set(selected_category=category, selected_files=frozenset())

    def clear_category_selection(self):
        self._set(selected_category=None, selected_files=frozenset())

    def select_quick_filter(self, kind: QuickFilter) -> QuickFilterState:
        quick_filter_state = build_quick_filter(
            kind, self._state.categories, self.config.quick_filter_limit
        )
        self._set(
            selected_files=frozenset(),
            selected_category=None,
            quick_filter_state=quick_filter_state,
        )
        return quick_filter_state

    def clear_quick_filter(self):
        self._set(quick_filter_state=None)

    # ===== Storage browser =====

    def open_storage_root(self, path: Path | str | None = None) -> Future | None:
        root = str(path) if path is not None else self.storage_root
        self._set(selected_files=frozenset(), selected_category=None)
        return self._set_browser(browser_state.open_root(root))

    def open_storage_folder(self, path: Path | str) -> Future | None:
        return self._set_browser(
            browser_state.open_folder(self._state.storage_browser, str(path))
        )

    def navigate_storage_back(self) -> bool:
        new_browser, handled = browser_state.navigate_back(self._state.storage_browser)
        if handled and not new_browser.is_open:
            self._set(selected_files=frozenset())
        self._set_browser(new_browser)
        return handled

    def close_storage_browser(self):
        self._set(selected_files=frozenset())
        self._set_browser(browser_state.close())

    def _set_browser(self, new_browser: StorageBrowserState) -> Future | None:
        if new_browser == self._state.storage_browser:
            return None
        self._set(storage_browser=new_browser)
        if new_browser.current_path is None:
            return None
        return self._executor.submit(self._load_entries, new_browser.current_path)

    def _load_entries(self, path: str):
        try:
            entries = list_children(path, self.filesystem, self.index, self.storage_root)
        except Exception:
            logger.exception(f"Listing {path} failed")
            entries = []

        self._update(
            lambda state: state.model_copy(
                update={
                    "storage_browser": browser_state.apply_entries(
                        state.storage_browser, path, entries
                    )
                }
            )
        )
        return entries

    # ===== Selection =====

    def toggle_file_selection(self, path: str):
        def toggle(state: FileManagerState) -> FileManagerState:
            selected = set(state.selected_files)
            if path in selected:
                selected.remove(path)
            else:
                selected.add(path)
            return state.model_copy(update={"selected_files": frozenset(selected)})

        self._update(toggle)

    def select_all_files(self, files):
        self._set(selected_files=frozenset(item.path for item in files))

    def clear_selection(self):
        self._set(selected_files=frozenset())

    def selected_file_items(self) -> list[FileItem]:
        state = self._state
        return [
            item
            for path, item in _files_by_path(state.categories).items()
            if path in state.selected_files
        ]

    # ===== File operations =====

    def _after_change(self):
        self.clear_selection()
        self.scan_files()

    def delete_selected_files(self) -> "Future[OperationResult]":
        items = self.selected_file_items()

        def run():
            try:
                result = operations.delete_files(items)
            except Exception as e:
                logger.exception("Deleting selected files failed")
                return OperationResult.failure([item.path for item in items], str(e))
            if result.success:
                self._after_change()
            return result

        return self._executor.submit(run)

    def rename_selected_file(self, new_name: str) -> "Future[bool]":
        state = self._state
        target = None
        if len(state.selected_files) == 1:
            [path] = state.selected_files
            target = _files_by_path(state.categories).get(path)

        def run():
            if target is None:
                return False
            try:
                renamed = operations.rename_file(target, new_name)
            except Exception:
                logger.exception(f"Renaming {target.path} failed")
                return False
            if renamed:
                self._after_change()
            return renamed

        return self._executor.submit(run)

    def copy_selected_files(
        self, destination: DestPreset | Path | str
    ) -> "Future[OperationResult]":
        return self._transfer_selected(operations.copy_files, destination)

    def move_selected_files(
        self, destination: DestPreset | Path | str
    ) -> "Future[OperationResult]":
        return self._transfer_selected(operations.move_files, destination)

    def _transfer_selected(self, operation, destination) -> "Future[OperationResult]":
        if isinstance(destination, DestPreset):
            destination = resolve_destination(destination, self.storage_root)
        items = self.selected_file_items()

        def run():
            try:
                result = operation(items, destination)
            except NotADirectoryError as e:
                logger.warning(str(e))
                return OperationResult.failure([item.path for item in items], str(e))
            except Exception as e:
                logger.exception(f"Transfer to {destination} failed")
                return OperationResult.failure([item.path for item in items], str(e))
            if result.success:
                self._after_change()
            return result

        return self._executor.submit(run)
