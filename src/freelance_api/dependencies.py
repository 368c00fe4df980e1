from __future__ import annotations

from fastapi import Depends, Request

from .dashboard import DashboardService
from .repositories import Stores
from .time_tracking import TimeTracker


# PUBLIC_INTERFACE
def get_stores(request: Request) -> Stores:
    """Return the stores owned by the running application."""
    return request.app.state.stores


def get_time_tracker(stores: Stores = Depends(get_stores)) -> TimeTracker:
    return TimeTracker(stores.tasks)


def get_dashboard_service(stores: Stores = Depends(get_stores)) -> DashboardService:
    return DashboardService(stores)
