from pydantic import BaseModel

from filemanager.api.tasks import TaskStatus
from filemanager.data_models.files import FileCategory
from filemanager.data_models.operations import DestPreset


class AsyncTaskResponse(BaseModel):
    task_id: str
    message: str
    status: TaskStatus


class CategorySummary(BaseModel):
    category: FileCategory
    display_name: str
    item_count: int
    total_size: int
    source_count: int


class TransferRequest(BaseModel):
    """Copy or move ``paths`` to either ``destination`` or a ``preset`` folder."""

    paths: list[str]
    destination: str | None = None
    preset: DestPreset | None = None


class DeleteRequest(BaseModel):
    paths: list[str]


class RenameRequest(BaseModel):
    path: str
    new_name: str


class RenameResponse(BaseModel):
    renamed: bool
