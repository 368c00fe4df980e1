from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_stores
from ..repositories import ListQuery, Stores
from ..schemas import InvoiceCreate, InvoiceOut, InvoicePayment, InvoiceStatus, InvoiceUpdate, OutstandingOut
from ..utils import format_currency

router = APIRouter(
    prefix="/api/v1/invoices",
    tags=["invoices"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[InvoiceOut],
    summary="List Invoices",
    description="List invoices, optionally filtered by status, client, project, or search text (id/amount).",
)
async def list_invoices(
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    client_id: Optional[int] = Query(None),
    project_id: Optional[int] = Query(None),
    q: Optional[str] = Query(None),
    stores: Stores = Depends(get_stores),
) -> List[InvoiceOut]:
    query = ListQuery(
        status=status_filter,
        client_id=client_id,
        project_id=project_id,
        search=q.strip() if q else None,
    )
    return [InvoiceOut(**i) for i in await stores.invoices.get_all(query)]


# PUBLIC_INTERFACE
@router.get("/outstanding", response_model=OutstandingOut, summary="Outstanding Amount")
async def get_outstanding(
    client_id: Optional[int] = Query(None, description="Only invoices of this client"),
    stores: Stores = Depends(get_stores),
) -> OutstandingOut:
    """Total of all invoices that are not paid yet."""
    amount = await stores.invoices.outstanding_amount(client_id)
    return OutstandingOut(outstanding_amount=amount, formatted=format_currency(amount))


# PUBLIC_INTERFACE
@router.get("/{invoice_id}", response_model=InvoiceOut, summary="Get Invoice")
async def get_invoice(invoice_id: int, stores: Stores = Depends(get_stores)) -> InvoiceOut:
    return InvoiceOut(**await stores.invoices.get_by_id(invoice_id))


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=InvoiceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Invoice",
    description=(
        "Create an invoice. A project, a due date and at least one line item are required; "
        "the amount must be positive and equal to the sum of the line items (it is computed "
        "from them when omitted)."
    ),
    responses={422: {"description": "Validation error"}},
)
async def create_invoice(payload: InvoiceCreate, stores: Stores = Depends(get_stores)) -> InvoiceOut:
    return InvoiceOut(**await stores.invoices.create(payload))


# PUBLIC_INTERFACE
@router.patch("/{invoice_id}", response_model=InvoiceOut, summary="Update Invoice")
async def update_invoice(invoice_id: int, payload: InvoiceUpdate, stores: Stores = Depends(get_stores)) -> InvoiceOut:
    return InvoiceOut(**await stores.invoices.update(invoice_id, payload))


# PUBLIC_INTERFACE
@router.post("/{invoice_id}/send", response_model=InvoiceOut, summary="Mark Invoice Sent")
async def mark_invoice_sent(invoice_id: int, stores: Stores = Depends(get_stores)) -> InvoiceOut:
    return InvoiceOut(**await stores.invoices.mark_sent(invoice_id))


# PUBLIC_INTERFACE
@router.post("/{invoice_id}/pay", response_model=InvoiceOut, summary="Mark Invoice Paid")
async def mark_invoice_paid(invoice_id: int, payload: InvoicePayment, stores: Stores = Depends(get_stores)) -> InvoiceOut:
    """Mark an invoice paid; `payment_date` is required."""
    return InvoiceOut(**await stores.invoices.mark_paid(invoice_id, payload.payment_date))


# PUBLIC_INTERFACE
@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Invoice")
async def delete_invoice(invoice_id: int, stores: Stores = Depends(get_stores)) -> None:
    await stores.invoices.delete(invoice_id)
    return None
