from __future__ import annotations

from fastapi import APIRouter, Depends

from ..dashboard import DashboardService
from ..dependencies import get_dashboard_service
from ..schemas import ClientDetail, DashboardSnapshot, ProjectDetail

router = APIRouter(
    prefix="/api/v1/dashboard",
    tags=["dashboard"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=DashboardSnapshot,
    summary="Dashboard",
    description=(
        "Landing page snapshot: summary counters, recent activity and quick stats. "
        "Recomputed on every request; never fails (an empty snapshot is returned when "
        "data cannot be loaded). Activity time labels are placeholders."
    ),
)
async def get_dashboard(service: DashboardService = Depends(get_dashboard_service)) -> DashboardSnapshot:
    return await service.get_dashboard()


# PUBLIC_INTERFACE
@router.get("/projects/{project_id}", response_model=ProjectDetail, summary="Project Detail")
async def get_project_detail(project_id: int, service: DashboardService = Depends(get_dashboard_service)) -> ProjectDetail:
    """
    Project page data: progress, schedule, task counts, tracked time and the
    estimated spend (a fixed share of the budget).
    """
    return await service.get_project_detail(project_id)


# PUBLIC_INTERFACE
@router.get("/clients/{client_id}", response_model=ClientDetail, summary="Client Detail")
async def get_client_detail(client_id: int, service: DashboardService = Depends(get_dashboard_service)) -> ClientDetail:
    return await service.get_client_detail(client_id)
