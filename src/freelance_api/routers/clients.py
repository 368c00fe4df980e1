from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_stores
from ..repositories import ListQuery, Stores
from ..schemas import ClientCreate, ClientOut, ClientStatus, ClientUpdate

router = APIRouter(
    prefix="/api/v1/clients",
    tags=["clients"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[ClientOut],
    summary="List Clients",
    description=(
        "List clients in creation order.\n\n"
        "Query parameters:\n"
        "- status: 'active' or 'inactive'\n"
        "- q: search text matched against name, email and company"
    ),
)
async def list_clients(
    status_filter: Optional[ClientStatus] = Query(None, alias="status", description="Filter by status"),
    q: Optional[str] = Query(None, description="Search text for name/email/company"),
    stores: Stores = Depends(get_stores),
) -> List[ClientOut]:
    """
    List clients with optional filters.
    """
    query = None
    if status_filter or (q and q.strip()):
        query = ListQuery(status=status_filter, search=q.strip() if q else None)
    return [ClientOut(**c) for c in await stores.clients.get_all(query)]


# PUBLIC_INTERFACE
@router.get(
    "/{client_id}",
    response_model=ClientOut,
    summary="Get Client",
    responses={404: {"description": "Client not found"}},
)
async def get_client(client_id: int, stores: Stores = Depends(get_stores)) -> ClientOut:
    """Retrieve a single client by id."""
    return ClientOut(**await stores.clients.get_by_id(client_id))


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=ClientOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Client",
    responses={422: {"description": "Validation error"}},
)
async def create_client(payload: ClientCreate, stores: Stores = Depends(get_stores)) -> ClientOut:
    """Create a client; its id and creation time are assigned by the store."""
    return ClientOut(**await stores.clients.create(payload))


# PUBLIC_INTERFACE
@router.patch(
    "/{client_id}",
    response_model=ClientOut,
    summary="Update Client",
    responses={404: {"description": "Client not found"}},
)
async def update_client(client_id: int, payload: ClientUpdate, stores: Stores = Depends(get_stores)) -> ClientOut:
    """Partially update a client."""
    return ClientOut(**await stores.clients.update(client_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Client",
    description="Delete a client. Its projects and invoices are kept.",
    responses={404: {"description": "Client not found"}},
)
async def delete_client(client_id: int, stores: Stores = Depends(get_stores)) -> None:
    await stores.clients.delete(client_id)
    return None
