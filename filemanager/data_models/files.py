from enum import Enum

from pydantic import BaseModel, ConfigDict


class FileCategory(str, Enum):
    """File type buckets. Declaration order is the classification order."""

    IMAGES = "images"
    VIDEOS = "videos"
    AUDIO = "audio"
    DOCUMENTS = "documents"
    APKS = "apks"
    ARCHIVES = "archives"

    @property
    def display_name(self) -> str:
        return CATEGORY_DISPLAY_NAMES[self]

    @property
    def extensions(self) -> frozenset[str]:
        return CATEGORY_EXTENSIONS[self]


CATEGORY_DISPLAY_NAMES = {
    FileCategory.IMAGES: "Images",
    FileCategory.VIDEOS: "Videos",
    FileCategory.AUDIO: "Audio",
    FileCategory.DOCUMENTS: "Documents",
    FileCategory.APKS: "APKs",
    FileCategory.ARCHIVES: "Archives",
}

CATEGORY_EXTENSIONS = {
    FileCategory.IMAGES: frozenset(
        {"jpg", "jpeg", "png", "gif", "bmp", "webp", "heic", "heif", "svg", "ico"}
    ),
    FileCategory.VIDEOS: frozenset(
        {"mp4", "mkv", "avi", "mov", "wmv", "flv", "webm", "m4v", "3gp", "ts"}
    ),
    FileCategory.AUDIO: frozenset(
        {"mp3", "wav", "flac", "aac", "ogg", "m4a", "wma", "opus", "amr"}
    ),
    FileCategory.DOCUMENTS: frozenset(
        {
            # office
            "pdf", "doc", "docx", "docm", "dot", "dotx", "dotm",
            "xls", "xlsx", "xlsm", "xlsb",
            "ppt", "pptx", "pptm", "pps", "ppsx", "ppsm", "pot", "potx", "potm",
            "odt", "ods", "odp", "odg", "rtf", "wps", "wpt", "xps",
            "numbers", "pages", "key",
            # text and markup
            "txt", "csv", "tsv", "xml", "json", "html", "htm", "md", "markdown",
            "tex", "rtx", "ps", "log",
            # config
            "cfg", "conf", "ini", "properties", "prop", "yaml", "yml",
            # ebooks
            "epub", "mobi", "azw", "fb2", "chm",
            # databases
            "sqlite", "db", "db3", "sql",
        }
    ),
    FileCategory.APKS: frozenset({"apk"}),
    FileCategory.ARCHIVES: frozenset({"zip", "rar", "7z", "tar", "gz", "bz2", "xz"}),
}


class FileItem(BaseModel):
    """One file found by a scan."""

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    size: int
    date_modified: int  # epoch millis
    category: FileCategory | None = None


class SourceFolderData(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    item_count: int
    total_size: int
    files: tuple[FileItem, ...] = ()


class CategoryData(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: FileCategory
    item_count: int
    total_size: int
    # Ordered by (lowercased display name, path)
    sources: dict[str, SourceFolderData] = {}


class StorageEntry(BaseModel):
    """One child of a browsed directory."""

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    is_directory: bool
    size: int
    item_count: int
    last_modified: int  # epoch millis
