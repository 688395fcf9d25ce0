from enum import Enum

from pydantic import BaseModel, ConfigDict


class DestPreset(str, Enum):
    """Quick destinations offered for copy and move, relative to the storage root."""

    INTERNAL = "internal"
    DOWNLOADS = "downloads"
    DOCUMENTS = "documents"
    PICTURES = "pictures"
    MUSIC = "music"
    MOVIES = "movies"

    @property
    def display_name(self) -> str:
        return DEST_PRESET_DISPLAY_NAMES[self]

    @property
    def relative_path(self) -> str:
        return DEST_PRESET_DIRECTORIES[self]


DEST_PRESET_DISPLAY_NAMES = {
    DestPreset.INTERNAL: "Internal Storage",
    DestPreset.DOWNLOADS: "Downloads",
    DestPreset.DOCUMENTS: "Documents",
    DestPreset.PICTURES: "Pictures",
    DestPreset.MUSIC: "Music",
    DestPreset.MOVIES: "Movies",
}

DEST_PRESET_DIRECTORIES = {
    DestPreset.INTERNAL: "",
    DestPreset.DOWNLOADS: "Download",
    DestPreset.DOCUMENTS: "Documents",
    DestPreset.PICTURES: "Pictures",
    DestPreset.MUSIC: "Music",
    DestPreset.MOVIES: "Movies",
}


class FailedItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    reason: str


class OperationResult(BaseModel):
    """Per-item outcome of a copy, move or delete batch."""

    model_config = ConfigDict(frozen=True)

    processed: int = 0
    skipped: int = 0
    failed: tuple[FailedItem, ...] = ()

    @property
    def success(self) -> bool:
        return not self.failed

    @classmethod
    def failure(cls, paths, reason: str) -> "OperationResult":
        """Every item failed for the same reason (e.g. unusable destination)."""
        return cls(failed=tuple(FailedItem(path=path, reason=reason) for path in paths))
