from __future__ import annotations

import logging
from typing import Any, List, Optional

from .models import ActiveTimer, TimeLog
from .repositories import ListQuery, TaskStore, coerce_id
from .schemas import ProjectTimeTracking, TaskTimeBreakdown, TimeLogOut, TimeTrackingOverview
from .utils import format_duration

logger = logging.getLogger(__name__)

RECENT_LOG_LIMIT = 10


# PUBLIC_INTERFACE
class TimeTracker:
    """
    Per-task start/stop timers and the time summaries derived from them.

    Timer transitions are delegated to the task store, which owns the task
    collection; the summaries are recomputed from the tasks on every call.
    """

    def __init__(self, tasks: TaskStore) -> None:
        self._tasks = tasks

    async def start_timer(self, task_id: Any) -> ActiveTimer:
        return await self._tasks.start_timer(task_id)

    async def stop_timer(self, task_id: Any) -> TimeLog:
        return await self._tasks.stop_timer(task_id)

    async def get_active_timer(self, task_id: Any) -> Optional[ActiveTimer]:
        return await self._tasks.get_active_timer(task_id)

    async def get_time_logs(self, task_id: Any) -> List[TimeLog]:
        return await self._tasks.get_time_logs(task_id)

    async def get_project_time_tracking(self, project_id: Any) -> ProjectTimeTracking:
        """
        Totals over the tasks of one project, with its ten most recently
        finished logs (newest first).
        """
        pid = coerce_id(project_id)
        if pid is None:
            return ProjectTimeTracking()
        tasks = await self._tasks.get_all(ListQuery(project_id=pid))

        summary = ProjectTimeTracking()
        logs: List[TimeLogOut] = []
        for task in tasks:
            tracking = task["time_tracking"]
            summary.total_time += tracking["total_time"]
            if tracking["active_timer"] is not None:
                summary.active_timers += 1
            summary.total_entries += len(tracking["time_logs"])
            logs.extend(
                TimeLogOut(**log, task_id=task["id"], task_title=task["title"])
                for log in tracking["time_logs"]
            )

        logs.sort(key=lambda log: log.end_time, reverse=True)
        summary.time_logs = logs[:RECENT_LOG_LIMIT]
        summary.formatted_total = format_duration(summary.total_time)
        return summary

    async def get_all_time_tracking(self) -> TimeTrackingOverview:
        """
        Totals over every task, plus a breakdown of the tasks that have any
        tracked time or a running timer, largest total first.
        """
        tasks = await self._tasks.get_all()

        overview = TimeTrackingOverview()
        for task in tasks:
            tracking = task["time_tracking"]
            running = tracking["active_timer"] is not None
            overview.total_time += tracking["total_time"]
            overview.active_timers += int(running)
            overview.total_entries += len(tracking["time_logs"])
            if tracking["total_time"] > 0 or running:
                overview.task_breakdown.append(
                    TaskTimeBreakdown(
                        task_id=task["id"],
                        task_title=task["title"],
                        project_id=task["project_id"],
                        total_time=tracking["total_time"],
                        has_active_timer=running,
                        entry_count=len(tracking["time_logs"]),
                    )
                )

        overview.task_breakdown.sort(key=lambda row: row.total_time, reverse=True)
        overview.formatted_total = format_duration(overview.total_time)
        logger.debug(
            "Time overview: %d ms over %d tasks, %d running",
            overview.total_time,
            len(overview.task_breakdown),
            overview.active_timers,
        )
        return overview
