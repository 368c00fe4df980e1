from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends

from ..schemas import ActiveTimerModel, ProjectTimeTracking, TimeLogModel, TimeTrackingOverview
from ..dependencies import get_time_tracker
from ..time_tracking import TimeTracker

router = APIRouter(
    prefix="/api/v1/time-tracking",
    tags=["time-tracking"],
)


# PUBLIC_INTERFACE
@router.get("/", response_model=TimeTrackingOverview, summary="Time Tracking Overview")
async def get_overview(tracker: TimeTracker = Depends(get_time_tracker)) -> TimeTrackingOverview:
    """Tracked time across all tasks with a per-task breakdown."""
    return await tracker.get_all_time_tracking()


# PUBLIC_INTERFACE
@router.get("/projects/{project_id}", response_model=ProjectTimeTracking, summary="Project Time Tracking")
async def get_project_time(project_id: int, tracker: TimeTracker = Depends(get_time_tracker)) -> ProjectTimeTracking:
    return await tracker.get_project_time_tracking(project_id)


# PUBLIC_INTERFACE
@router.post(
    "/tasks/{task_id}/start",
    response_model=ActiveTimerModel,
    summary="Start Timer",
    responses={404: {"description": "Task not found"}, 422: {"description": "Timer already running"}},
)
async def start_timer(task_id: int, tracker: TimeTracker = Depends(get_time_tracker)) -> ActiveTimerModel:
    return ActiveTimerModel(**await tracker.start_timer(task_id))


# PUBLIC_INTERFACE
@router.post(
    "/tasks/{task_id}/stop",
    response_model=TimeLogModel,
    summary="Stop Timer",
    responses={404: {"description": "Task not found"}, 422: {"description": "No active timer"}},
)
async def stop_timer(task_id: int, tracker: TimeTracker = Depends(get_time_tracker)) -> TimeLogModel:
    """Stop the running timer and return the time log it produced."""
    return TimeLogModel(**await tracker.stop_timer(task_id))


# PUBLIC_INTERFACE
@router.get("/tasks/{task_id}/active", response_model=Optional[ActiveTimerModel], summary="Active Timer")
async def get_active_timer(task_id: int, tracker: TimeTracker = Depends(get_time_tracker)) -> Optional[ActiveTimerModel]:
    timer = await tracker.get_active_timer(task_id)
    return ActiveTimerModel(**timer) if timer else None


# PUBLIC_INTERFACE
@router.get("/tasks/{task_id}/logs", response_model=List[TimeLogModel], summary="Task Time Logs")
async def get_time_logs(task_id: int, tracker: TimeTracker = Depends(get_time_tracker)) -> List[TimeLogModel]:
    return [TimeLogModel(**log) for log in await tracker.get_time_logs(task_id)]
