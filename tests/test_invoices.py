from datetime import date, datetime
from decimal import Decimal

import pytest

from freelance_api.errors import NotFoundError, ValidationError
from freelance_api.repositories import ListQuery
from freelance_api.schemas import InvoiceCreate, InvoiceUpdate

pytestmark = pytest.mark.anyio


def invoice_payload(**overrides):
    payload = {
        "project_id": 3,
        "amount": 150,
        "due_date": "2025-01-01",
        "line_items": [{"description": "Design", "amount": 150}],
    }
    payload.update(overrides)
    return payload


class TestCreateInvoice:
    async def test_create_valid_invoice(self, seeded_stores):
        invoice = await seeded_stores.invoices.create(invoice_payload())
        assert invoice["id"] == 6
        assert invoice["amount"] == Decimal("150")
        assert invoice["status"] == "draft"
        assert invoice["due_date"] == date(2025, 1, 1)
        assert invoice["payment_date"] is None
        assert invoice["line_items"] == [{"description": "Design", "amount": Decimal("150")}]

    async def test_client_is_taken_from_project(self, seeded_stores):
        invoice = await seeded_stores.invoices.create(invoice_payload())
        assert invoice["client_id"] == 3

    async def test_explicit_client_is_kept(self, seeded_stores):
        invoice = await seeded_stores.invoices.create(invoice_payload(client_id=2))
        assert invoice["client_id"] == 2

    async def test_zero_amount_rejected(self, seeded_stores):
        before = await seeded_stores.invoices.get_all()
        with pytest.raises(ValidationError) as exc_info:
            await seeded_stores.invoices.create(invoice_payload(amount=0))
        assert exc_info.value.message == "Amount must be greater than 0"
        assert await seeded_stores.invoices.get_all() == before

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"project_id": None}, "Project ID is required"),
            ({"due_date": None}, "Due date is required"),
            ({"line_items": []}, "At least one line item with description and amount is required"),
            ({"amount": 200}, "Amount must equal the sum of the line items"),
            ({"line_items": [{"description": "", "amount": 150}]}, "Line item description is required"),
            ({"line_items": [{"description": "Design", "amount": -150}]}, "Line item amount must be greater than 0"),
            ({"status": "paid"}, "Payment date is required for paid invoices"),
        ],
    )
    async def test_invalid_invoices(self, stores, overrides, message):
        with pytest.raises(ValidationError) as exc_info:
            await stores.invoices.create(invoice_payload(**overrides))
        assert exc_info.value.message == message

    @pytest.mark.parametrize(
        "overrides, message",
        [
            (
                {"amount": 0, "line_items": [{"description": "Design", "amount": 0}]},
                "Amount must be greater than 0",
            ),
            (
                {"due_date": None, "line_items": [{"description": "", "amount": 150}]},
                "Due date is required",
            ),
        ],
    )
    async def test_invoice_fields_checked_before_line_items(self, stores, overrides, message):
        with pytest.raises(ValidationError) as exc_info:
            await stores.invoices.create(invoice_payload(**overrides))
        assert exc_info.value.message == message

    async def test_omitted_amount_with_bad_line_item(self, stores):
        payload = invoice_payload(amount=None, line_items=[{"description": "Design", "amount": -5}])
        with pytest.raises(ValidationError) as exc_info:
            await stores.invoices.create(payload)
        assert exc_info.value.message == "Line item amount must be greater than 0"

    async def test_amount_computed_from_line_items(self, stores):
        payload = invoice_payload(
            amount=None,
            line_items=[
                {"description": "Design", "amount": "99.50"},
                {"description": "Copy", "amount": 50.5},
            ],
        )
        invoice = await stores.invoices.create(payload)
        assert invoice["amount"] == Decimal("150.0")

    async def test_blank_line_item_rows_are_dropped(self, stores):
        payload = invoice_payload(
            line_items=[
                {"description": "Design", "amount": 150},
                {"description": "  ", "amount": 0},
                {},
            ]
        )
        invoice = await stores.invoices.create(InvoiceCreate(**payload))
        assert len(invoice["line_items"]) == 1

    async def test_non_paid_status_drops_payment_date(self, stores):
        invoice = await stores.invoices.create(invoice_payload(status="sent", payment_date="2025-01-02"))
        assert invoice["payment_date"] is None


class TestLifecycle:
    async def test_mark_sent(self, seeded_stores):
        invoice = await seeded_stores.invoices.mark_sent(4)
        assert invoice["status"] == "sent"
        assert (await seeded_stores.invoices.get_by_id(4))["status"] == "sent"

    async def test_mark_sent_from_paid_clears_payment_date(self, seeded_stores):
        invoice = await seeded_stores.invoices.mark_sent(1)
        assert invoice["status"] == "sent"
        assert invoice["payment_date"] is None

    async def test_mark_paid_normalizes_to_utc(self, seeded_stores):
        invoice = await seeded_stores.invoices.mark_paid(3, "2025-06-01T10:00:00Z")
        assert invoice["status"] == "paid"
        assert invoice["payment_date"] == datetime(2025, 6, 1, 10, 0, 0)

    async def test_mark_paid_converts_offsets(self, seeded_stores):
        invoice = await seeded_stores.invoices.mark_paid(3, "2025-06-01T12:00:00+02:00")
        assert invoice["payment_date"] == datetime(2025, 6, 1, 10, 0, 0)

    @pytest.mark.parametrize("payment_date", [None, ""])
    async def test_mark_paid_requires_date(self, seeded_stores, payment_date):
        with pytest.raises(ValidationError) as exc_info:
            await seeded_stores.invoices.mark_paid(3, payment_date)
        assert exc_info.value.message == "Payment date is required"
        assert (await seeded_stores.invoices.get_by_id(3))["status"] == "sent"

    async def test_mark_paid_rejects_garbage_date(self, seeded_stores):
        with pytest.raises(ValidationError):
            await seeded_stores.invoices.mark_paid(3, "next tuesday")

    async def test_transitions_on_unknown_invoice(self, seeded_stores):
        with pytest.raises(NotFoundError):
            await seeded_stores.invoices.mark_sent(99)
        with pytest.raises(NotFoundError):
            await seeded_stores.invoices.mark_paid(99, "2025-06-01")


class TestUpdateInvoice:
    async def test_new_line_items_recompute_amount(self, seeded_stores):
        updated = await seeded_stores.invoices.update(
            4,
            InvoiceUpdate(line_items=[{"description": "Logo concepts", "amount": 2000}]),
        )
        assert updated["amount"] == Decimal("2000")
        assert updated["line_items"] == [{"description": "Logo concepts", "amount": Decimal("2000")}]

    async def test_amount_must_still_match(self, seeded_stores):
        with pytest.raises(ValidationError):
            await seeded_stores.invoices.update(4, {"amount": 1000})
        assert (await seeded_stores.invoices.get_by_id(4))["amount"] == Decimal("2400")

    async def test_paid_status_needs_payment_date(self, seeded_stores):
        with pytest.raises(ValidationError):
            await seeded_stores.invoices.update(4, {"status": "paid"})
        paid = await seeded_stores.invoices.update(4, {"status": "paid", "payment_date": "2025-06-10"})
        assert paid["payment_date"] == datetime(2025, 6, 10)

    async def test_reopening_paid_invoice_clears_payment_date(self, seeded_stores):
        reopened = await seeded_stores.invoices.update(1, {"status": "overdue"})
        assert reopened["payment_date"] is None


class TestOutstanding:
    async def test_outstanding_amount(self, seeded_stores):
        assert await seeded_stores.invoices.outstanding_amount() == Decimal("15400")
        assert await seeded_stores.invoices.outstanding_amount(client_id=2) == Decimal("10000")
        assert await seeded_stores.invoices.outstanding_amount(client_id=1) == Decimal("0")

    async def test_paying_reduces_outstanding(self, seeded_stores):
        await seeded_stores.invoices.mark_paid(3, "2025-06-01")
        assert await seeded_stores.invoices.outstanding_amount() == Decimal("5400")

    async def test_filter_by_status(self, seeded_stores):
        paid = await seeded_stores.invoices.get_all(ListQuery(status="paid"))
        assert [i["id"] for i in paid] == [1, 2]
