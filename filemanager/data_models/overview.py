from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from filemanager.data_models.files import FileCategory


class StorageSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    total_space: int = 0
    used_space: int = 0


class DownloadsSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    item_count: int = 0
    total_size: int = 0


class HomeItemType(str, Enum):
    storage = "storage"
    category = "category"
    downloads = "downloads"


class HomeItemBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: HomeItemType
    title: str
    subtitle: str
    icon: str


class StorageItem(HomeItemBase):
    type: Literal[HomeItemType.storage] = Field(default=HomeItemType.storage)
    path: str
    total_space: int
    used_space: int


class CategoryItem(HomeItemBase):
    type: Literal[HomeItemType.category] = Field(default=HomeItemType.category)
    category: FileCategory
    item_count: int
    total_size: int


class DownloadsItem(HomeItemBase):
    type: Literal[HomeItemType.downloads] = Field(default=HomeItemType.downloads)
    path: str
    item_count: int
    total_size: int


HomeItem = StorageItem | CategoryItem | DownloadsItem
