"""factory_boy factories for core records, used by the test suite."""

import factory

from filemanager.data_models.files import (
    CategoryData,
    FileCategory,
    FileItem,
    SourceFolderData,
)
from filemanager.stages.classify import get_extension


def _category_for(name: str) -> FileCategory | None:
    extension = get_extension(name)
    for category in FileCategory:
        if extension in category.extensions:
            return category
    return None


class FileItemFactory(factory.Factory):
    class Meta:
        model = FileItem

    name = factory.Sequence(lambda n: f"file_{n}.txt")
    path = factory.LazyAttribute(lambda o: f"/storage/emulated/0/Download/{o.name}")
    size = factory.Faker("random_int", min=1, max=10_000_000)
    date_modified = factory.Faker("random_int", min=1_600_000_000_000, max=1_700_000_000_000)
    category = factory.LazyAttribute(lambda o: _category_for(o.name))


class SourceFolderDataFactory(factory.Factory):
    class Meta:
        model = SourceFolderData

    path = factory.Sequence(lambda n: f"/storage/emulated/0/Folder{n}")
    name = factory.LazyAttribute(lambda o: o.path.rsplit("/", 1)[-1])
    files = factory.LazyFunction(
        lambda: tuple(
            sorted(
                FileItemFactory.build_batch(2),
                key=lambda item: item.date_modified,
                reverse=True,
            )
        )
    )
    item_count = factory.LazyAttribute(lambda o: len(o.files))
    total_size = factory.LazyAttribute(lambda o: sum(item.size for item in o.files))


class CategoryDataFactory(factory.Factory):
    class Meta:
        model = CategoryData

    category = FileCategory.DOCUMENTS
    sources = factory.LazyFunction(
        lambda: {
            source.path: source for source in SourceFolderDataFactory.build_batch(2)
        }
    )
    item_count = factory.LazyAttribute(
        lambda o: sum(source.item_count for source in o.sources.values())
    )
    total_size = factory.LazyAttribute(
        lambda o: sum(source.total_size for source in o.sources.values())
    )
