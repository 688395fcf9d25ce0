from logging import getLogger
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel

logger = getLogger(__name__)


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskInfo(BaseModel):
    task_id: str
    status: TaskStatus
    message: str
    progress: float = 0.0  # 0.0 to 1.0
    result: Dict[str, Any] | None = None
    error: str | None = None
    created_at: datetime
    updated_at: datetime


# Process-local; scan results live in the controller, not here
tasks: Dict[str, TaskInfo] = {}


def create_task(message: str) -> str:
    """Register a pending task and return its ID"""
    task_id = str(uuid.uuid4())
    now = datetime.now()

    tasks[task_id] = TaskInfo(
        task_id=task_id,
        status=TaskStatus.PENDING,
        message=message,
        created_at=now,
        updated_at=now,
    )
    logger.info(f"Created task {task_id}: {message}")
    return task_id


def update_task(
    task_id: str,
    status: TaskStatus | None = None,
    message: str | None = None,
    progress: float | None = None,
    result: Dict[str, Any] | None = None,
    error: str | None = None,
):
    if task_id not in tasks:
        logger.warning(f"Update for task {task_id} requested, but that task doesn't exist")
        return

    changes: Dict[str, Any] = {"updated_at": datetime.now()}
    if status is not None:
        changes["status"] = status
    if message is not None:
        changes["message"] = message
    if progress is not None:
        changes["progress"] = progress
    if result is not None:
        changes["result"] = result
    if error is not None:
        changes["error"] = error

    tasks[task_id] = tasks[task_id].model_copy(update=changes)
