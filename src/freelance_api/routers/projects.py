from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_stores
from ..repositories import ListQuery, Stores
from ..schemas import ProjectCreate, ProjectOut, ProjectStatus, ProjectUpdate

router = APIRouter(
    prefix="/api/v1/projects",
    tags=["projects"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[ProjectOut],
    summary="List Projects",
    description="List projects, optionally filtered by status, client or search text.",
)
async def list_projects(
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    client_id: Optional[int] = Query(None, description="Only projects of this client"),
    q: Optional[str] = Query(None, description="Search text for name/description"),
    stores: Stores = Depends(get_stores),
) -> List[ProjectOut]:
    query = ListQuery(status=status_filter, client_id=client_id, search=q.strip() if q else None)
    return [ProjectOut(**p) for p in await stores.projects.get_all(query)]


# PUBLIC_INTERFACE
@router.get("/{project_id}", response_model=ProjectOut, summary="Get Project")
async def get_project(project_id: int, stores: Stores = Depends(get_stores)) -> ProjectOut:
    return ProjectOut(**await stores.projects.get_by_id(project_id))


# PUBLIC_INTERFACE
@router.post("/", response_model=ProjectOut, status_code=status.HTTP_201_CREATED, summary="Create Project")
async def create_project(payload: ProjectCreate, stores: Stores = Depends(get_stores)) -> ProjectOut:
    """
    Create a project. The end date may not be before the start date.
    """
    return ProjectOut(**await stores.projects.create(payload))


# PUBLIC_INTERFACE
@router.patch("/{project_id}", response_model=ProjectOut, summary="Update Project")
async def update_project(project_id: int, payload: ProjectUpdate, stores: Stores = Depends(get_stores)) -> ProjectOut:
    return ProjectOut(**await stores.projects.update(project_id, payload))


# PUBLIC_INTERFACE
@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Project")
async def delete_project(project_id: int, stores: Stores = Depends(get_stores)) -> None:
    await stores.projects.delete(project_id)
    return None
