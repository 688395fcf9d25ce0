from enum import Enum

from pydantic import BaseModel, ConfigDict

from filemanager.data_models.files import FileItem


class QuickFilter(str, Enum):
    RECENT = "recent"
    LARGE = "large"
    DUPLICATES = "duplicates"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class QuickFilterGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str | None = None
    files: tuple[FileItem, ...] = ()


class QuickFilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    filter: QuickFilter
    groups: tuple[QuickFilterGroup, ...] = ()
