import logging
from functools import lru_cache
from typing import Dict

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from filemanager.api.models import (
    AsyncTaskResponse,
    CategorySummary,
    DeleteRequest,
    RenameRequest,
    RenameResponse,
    TransferRequest,
)
from filemanager.api.tasks import TaskInfo, TaskStatus, create_task, tasks, update_task
from filemanager.data_models.files import CategoryData, FileCategory, StorageEntry
from filemanager.data_models.operations import OperationResult
from filemanager.data_models.quick_filter import QuickFilter, QuickFilterState
from filemanager.stages import operations
from filemanager.stages.browse import list_children
from filemanager.stages.overview import resolve_destination
from filemanager.stages.quick_filter import build_quick_filter
from filemanager.state.controller import FileManagerController
from filemanager.utils.config import FileManagerSettings, get_config
from filemanager.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

app = FastAPI(title="File manager")
app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_controller() -> FileManagerController:
    settings = FileManagerSettings()
    setup_logging(settings.log_file_prefix)
    logger.info(f"Serving storage root {settings.storage_root}")
    return FileManagerController(
        settings.storage_root,
        config=get_config(settings.config_path),
        max_workers=settings.max_workers,
    )


def _summaries(categories: Dict[FileCategory, CategoryData]) -> list[CategorySummary]:
    return [
        CategorySummary(
            category=category,
            display_name=category.display_name,
            item_count=data.item_count,
            total_size=data.total_size,
            source_count=len(data.sources),
        )
        for category, data in categories.items()
    ]


def _require_scan(controller: FileManagerController) -> Dict[FileCategory, CategoryData]:
    categories = controller.state.categories
    if not categories:
        raise HTTPException(status_code=404, detail="No scan results yet")
    return categories


def run_scan_task(task_id: str, controller: FileManagerController):
    """Background task that scans the storage root"""
    update_task(
        task_id,
        status=TaskStatus.RUNNING,
        message=f"Scanning {controller.storage_root}",
        progress=0.1,
    )

    categories = controller.scan_files().result()
    if categories is None:
        update_task(
            task_id,
            status=TaskStatus.FAILED,
            error=f"Scan of {controller.storage_root} failed",
        )
        return

    summaries = _summaries(categories)
    update_task(
        task_id,
        status=TaskStatus.COMPLETED,
        message="Scan complete",
        progress=1.0,
        result={
            "item_count": sum(summary.item_count for summary in summaries),
            "categories": [summary.model_dump(mode="json") for summary in summaries],
        },
    )


@app.post("/api/scan")
async def api_scan(
    background_tasks: BackgroundTasks,
    controller: FileManagerController = Depends(get_controller),
) -> AsyncTaskResponse:
    """
    Start a scan of the storage root.
    Returns a task ID that can be used to track progress.
    """
    task_id = create_task("Scan task created")
    background_tasks.add_task(run_scan_task, task_id, controller)

    return AsyncTaskResponse(
        task_id=task_id, message="Scan task started", status=TaskStatus.PENDING
    )


@app.get("/api/tasks/{task_id}")
async def get_task_status(task_id: str) -> TaskInfo:
    if task_id not in tasks:
        raise HTTPException(status_code=404, detail="Task not found")

    return tasks[task_id]


@app.get("/api/tasks")
async def get_all_tasks() -> Dict[str, TaskInfo]:
    return tasks


@app.get("/api/categories")
async def get_categories(
    controller: FileManagerController = Depends(get_controller),
) -> list[CategorySummary]:
    return _summaries(_require_scan(controller))


@app.get("/api/categories/{category}")
async def get_category(
    category: FileCategory,
    controller: FileManagerController = Depends(get_controller),
) -> CategoryData:
    """Sources and files of one category, as grouped by the last scan"""
    return _require_scan(controller)[category]


@app.get("/api/quick-filters/{kind}")
async def get_quick_filter(
    kind: QuickFilter,
    controller: FileManagerController = Depends(get_controller),
) -> QuickFilterState:
    return build_quick_filter(
        kind, _require_scan(controller), controller.config.quick_filter_limit
    )


def _inside_storage(
    path: str, controller: FileManagerController, include_root: bool = False
) -> str:
    """Reject any request path that leaves the storage root"""
    if not operations.is_within(controller.storage_root, path, include_root):
        logger.warning(f"Rejected path outside {controller.storage_root}: {path}")
        raise HTTPException(
            status_code=403, detail=f"Path is outside the storage root: {path}"
        )
    return path


@app.get("/api/browse")
def browse(
    path: str | None = None,
    controller: FileManagerController = Depends(get_controller),
) -> list[StorageEntry]:
    """Visible children of ``path`` (the storage root when omitted)"""
    if path:
        _inside_storage(path, controller, include_root=True)
    return list_children(
        path or controller.storage_root,
        controller.filesystem,
        controller.index,
        controller.storage_root,
    )


def _transfer(operation, request: TransferRequest, controller) -> OperationResult:
    if request.preset is not None:
        destination = resolve_destination(request.preset, controller.storage_root)
    elif request.destination:
        destination = _inside_storage(
            request.destination, controller, include_root=True
        )
    else:
        raise HTTPException(status_code=400, detail="destination or preset is required")
    paths = [_inside_storage(path, controller) for path in request.paths]

    try:
        result = operation(paths, destination)
    except NotADirectoryError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if result.processed:
        controller.scan_files()
    return result


@app.post("/api/files/copy")
def copy_files(
    request: TransferRequest,
    controller: FileManagerController = Depends(get_controller),
) -> OperationResult:
    return _transfer(operations.copy_files, request, controller)


@app.post("/api/files/move")
def move_files(
    request: TransferRequest,
    controller: FileManagerController = Depends(get_controller),
) -> OperationResult:
    return _transfer(operations.move_files, request, controller)


@app.post("/api/files/delete")
def delete_files(
    request: DeleteRequest,
    controller: FileManagerController = Depends(get_controller),
) -> OperationResult:
    paths = [_inside_storage(path, controller) for path in request.paths]
    result = operations.delete_files(paths)
    if result.processed:
        controller.scan_files()
    return result


@app.post("/api/files/rename")
def rename_file(
    request: RenameRequest,
    controller: FileManagerController = Depends(get_controller),
) -> RenameResponse:
    path = _inside_storage(request.path, controller)
    renamed = operations.rename_file(path, request.new_name)
    if renamed:
        controller.scan_files()
    return RenameResponse(renamed=renamed)
