"""Navigation state for the storage browser.

Every transition returns a new ``StorageBrowserState``; the old snapshot is
never changed, so it can be handed to observers safely.
"""

from pydantic import BaseModel, ConfigDict

from filemanager.data_models.files import StorageEntry


class StorageBrowserState(BaseModel):
    model_config = ConfigDict(frozen=True)

    stack: tuple[str, ...] = ()
    current_path: str | None = None
    entries: tuple[StorageEntry, ...] = ()
    is_loading: bool = False

    @property
    def is_open(self) -> bool:
        return self.current_path is not None


CLOSED = StorageBrowserState()


def open_root(root_path: str) -> StorageBrowserState:
    return StorageBrowserState(stack=(root_path,), current_path=root_path, is_loading=True)


def open_folder(state: StorageBrowserState, path: str) -> StorageBrowserState:
    """Push ``path``; opening the folder already on top changes nothing."""
    if state.stack and state.stack[-1] == path:
        return state
    return StorageBrowserState(
        stack=state.stack + (path,), current_path=path, is_loading=True
    )


def navigate_back(state: StorageBrowserState) -> tuple[StorageBrowserState, bool]:
    """
    Pop one level. With a single level left the browser closes.

    Returns the new state and whether the back action was handled; a closed
    browser does not handle it.
    """
    if not state.stack:
        return state, False
    if len(state.stack) == 1:
        return CLOSED, True

    stack = state.stack[:-1]
    return StorageBrowserState(stack=stack, current_path=stack[-1], is_loading=True), True


def close() -> StorageBrowserState:
    return CLOSED


def apply_entries(
    state: StorageBrowserState, path: str, entries
) -> StorageBrowserState:
    """Install a finished listing, unless the user has moved on from ``path``."""
    if state.current_path != path:
        return state
    return state.model_copy(update={"entries": tuple(entries), "is_loading": False})
