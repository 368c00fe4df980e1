from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_stores
from ..repositories import ListQuery, Stores
from ..schemas import TaskCreate, TaskOut, TaskStatus, TaskStatusUpdate, TaskUpdate

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[TaskOut],
    summary="List Tasks",
    description=(
        "List tasks for the kanban board.\n\n"
        "Query parameters:\n"
        "- status: todo, in-progress, review or done\n"
        "- project_id: only tasks of this project\n"
        "- q: search text for the title"
    ),
)
async def list_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    project_id: Optional[int] = Query(None),
    q: Optional[str] = Query(None),
    stores: Stores = Depends(get_stores),
) -> List[TaskOut]:
    query = ListQuery(status=status_filter, project_id=project_id, search=q.strip() if q else None)
    return [TaskOut(**t) for t in await stores.tasks.get_all(query)]


# PUBLIC_INTERFACE
@router.get("/{task_id}", response_model=TaskOut, summary="Get Task")
async def get_task(task_id: int, stores: Stores = Depends(get_stores)) -> TaskOut:
    return TaskOut(**await stores.tasks.get_by_id(task_id))


# PUBLIC_INTERFACE
@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED, summary="Create Task")
async def create_task(payload: TaskCreate, stores: Stores = Depends(get_stores)) -> TaskOut:
    return TaskOut(**await stores.tasks.create(payload))


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Partially update a task. Time tracking is changed through the time-tracking endpoints only.",
)
async def update_task(task_id: int, payload: TaskUpdate, stores: Stores = Depends(get_stores)) -> TaskOut:
    return TaskOut(**await stores.tasks.update(task_id, payload))


# PUBLIC_INTERFACE
@router.patch("/{task_id}/status", response_model=TaskOut, summary="Move Task")
async def update_task_status(task_id: int, payload: TaskStatusUpdate, stores: Stores = Depends(get_stores)) -> TaskOut:
    """Move a task to another kanban column."""
    return TaskOut(**await stores.tasks.update_status(task_id, payload.status))


# PUBLIC_INTERFACE
@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Task")
async def delete_task(task_id: int, stores: Stores = Depends(get_stores)) -> None:
    await stores.tasks.delete(task_id)
    return None
