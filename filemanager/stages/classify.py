"""Extension and MIME based file classification."""

from itertools import combinations

from filemanager.data_models.files import CATEGORY_EXTENSIONS, FileCategory
from filemanager.storage.capabilities import MimeResolver

# Source, config, script and backup files that count as documents
DOCUMENT_ADDITIONAL_EXTENSIONS = frozenset(
    {
        "bak", "backup", "lst", "nfo", "info", "cfg", "config",
        "bat", "sh", "py", "java", "kt", "c", "cpp", "h", "hpp", "gradle",
    }
)

# application/* types that are archives or packages, not documents
DOCUMENT_MIME_EXCLUSIONS = frozenset(
    {
        "application/zip",
        "application/x-7z-compressed",
        "application/x-rar-compressed",
        "application/x-tar",
        "application/gzip",
        "application/x-bzip2",
        "application/x-xz",
        "application/vnd.android.package-archive",
    }
)


def _check_disjoint_extensions() -> None:
    owned = dict(CATEGORY_EXTENSIONS)
    owned[FileCategory.DOCUMENTS] = (
        owned[FileCategory.DOCUMENTS] | DOCUMENT_ADDITIONAL_EXTENSIONS
    )
    for (first, first_exts), (second, second_exts) in combinations(owned.items(), 2):
        overlap = first_exts & second_exts
        if overlap:
            raise ValueError(
                f"Extensions {sorted(overlap)} claimed by both "
                f"{first.display_name} and {second.display_name}"
            )


_check_disjoint_extensions()


def get_extension(name: str) -> str:
    """Lowercased text after the last dot, or "" when there is none."""
    _, dot, extension = name.rpartition(".")
    return extension.lower() if dot else ""


def _is_document_mime(mime_type: str | None) -> bool:
    if mime_type is None:
        return False
    mime_type = mime_type.lower()
    if mime_type.startswith("text/"):
        return True
    return (
        mime_type.startswith("application/")
        and mime_type not in DOCUMENT_MIME_EXCLUSIONS
    )


def matches(category: FileCategory, name: str, mime_resolver: MimeResolver) -> bool:
    extension = get_extension(name)
    if extension in category.extensions:
        return True

    if category != FileCategory.DOCUMENTS:
        return False

    if extension in DOCUMENT_ADDITIONAL_EXTENSIONS:
        return True

    if extension:
        return _is_document_mime(mime_resolver.mime_type(extension))

    return False


def classify(name: str, mime_resolver: MimeResolver) -> FileCategory | None:
    """First category, in declaration order, that matches ``name``."""
    for category in FileCategory:
        if matches(category, name, mime_resolver):
            return category
    return None
