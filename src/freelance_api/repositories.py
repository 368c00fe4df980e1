from __future__ import annotations

import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from threading import RLock
from typing import Any, Callable, Dict, FrozenSet, Generic, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar, Union

import pydantic
from pydantic import BaseModel

from . import fixtures
from .errors import NotFoundError, ValidationError
from .models import (
    ActiveTimer,
    ClientEntity,
    InvoiceEntity,
    LineItem,
    ProjectEntity,
    TaskEntity,
    TimeLog,
    empty_time_tracking,
)
from .schemas import (
    ClientCreate,
    ClientUpdate,
    InvoiceCreate,
    InvoiceUpdate,
    ProjectCreate,
    ProjectUpdate,
    TaskCreate,
    TaskStatusUpdate,
    TaskUpdate,
)
from .settings import Settings, get_settings
from .utils import DateInput, duration_ms, parse_datetime, utcnow

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Payload = Union[BaseModel, Mapping[str, Any]]
E = TypeVar("E")

# Per-operation delays in milliseconds, mimicking a remote backend
DEFAULT_LATENCY_MS: Dict[str, int] = {
    "get_all": 250,
    "get_by_id": 150,
    "create": 300,
    "update": 250,
    "delete": 200,
    "active_timer": 100,
}


@dataclass(frozen=True)
class ListQuery:
    """
    Optional filters for listing records. Unset fields do not filter.
    """
    status: Optional[str] = None
    search: Optional[str] = None  # case-insensitive substring over the store's search fields
    client_id: Optional[int] = None
    project_id: Optional[int] = None


def coerce_id(value: Any) -> Optional[int]:
    """Return value as an int id, or None when it cannot be one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _validation_message(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = str(err.get("msg", "invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid data"


def parse_payload(schema: Type[BaseModel], data: Payload) -> BaseModel:
    """
    Accept either an already-validated schema instance or a plain mapping.
    Schema errors are re-raised as domain ValidationError.
    """
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as exc:
        detail = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
        raise ValidationError(_validation_message(exc), detail=detail) from exc


# PUBLIC_INTERFACE
class InMemoryStore(ABC, Generic[E]):
    """
    Ordered in-memory collection of one entity type, and its only mutator.

    Every operation first awaits the configured simulated latency, then does
    its whole check-and-mutate step under the store lock, so a failed
    operation never leaves a partial change behind. Returned records are deep
    copies.
    """

    entity_name = "Record"
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    search_fields: Tuple[str, ...] = ()
    nullable_fields: FrozenSet[str] = frozenset()

    def __init__(
        self,
        records: Iterable[Mapping[str, Any]] = (),
        *,
        latency: Optional[Mapping[str, float]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._lock = RLock()
        self._latency: Dict[str, float] = dict(latency or {})
        self._clock: Clock = clock or utcnow
        self._items: List[E] = [self._seed(r) for r in records]
        ids = [item["id"] for item in self._items]  # type: ignore[index]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate {self.entity_name.lower()} ids in initial records")

    def _now(self) -> datetime:
        return self._clock()

    async def _simulate_latency(self, operation: str) -> None:
        delay = self._latency.get(operation, 0)
        if delay > 0:
            await asyncio.sleep(delay / 1000)

    def _seed(self, record: Mapping[str, Any]) -> E:
        record_id = coerce_id(record.get("id"))
        if record_id is None or record_id < 1:
            raise ValueError(f"Initial {self.entity_name.lower()} record needs a positive integer id")
        return self._build(record_id, parse_payload(self.create_schema, record))

    @abstractmethod
    def _build(self, record_id: int, data: BaseModel) -> E:
        """Turn validated create data into a stored record."""

    def _merge(self, existing: E, changes: Dict[str, Any]) -> E:
        merged = dict(existing)  # type: ignore[call-overload]
        merged.update(changes)
        return merged  # type: ignore[return-value]

    def _matches(self, item: E, query: ListQuery) -> bool:
        record: Mapping[str, Any] = item  # type: ignore[assignment]
        if query.status is not None and record.get("status") != query.status:
            return False
        if query.client_id is not None and record.get("client_id") != query.client_id:
            return False
        if query.project_id is not None and record.get("project_id") != query.project_id:
            return False
        if query.search:
            s = query.search.strip().lower()
            return any(s in str(record.get(f) if record.get(f) is not None else "").lower() for f in self.search_fields)
        return True

    def _index_of(self, record_id: Any) -> int:
        rid = coerce_id(record_id)
        if rid is not None:
            for index, item in enumerate(self._items):
                if item["id"] == rid:  # type: ignore[index]
                    return index
        raise NotFoundError(self.entity_name, record_id)

    def _next_id(self) -> int:
        return max((item["id"] for item in self._items), default=0) + 1  # type: ignore[index]

    def find(self, record_id: Any) -> Optional[E]:
        """Immediate lookup without simulated latency; None when absent."""
        with self._lock:
            try:
                return copy.deepcopy(self._items[self._index_of(record_id)])
            except NotFoundError:
                return None

    async def get_all(self, query: Optional[ListQuery] = None) -> List[E]:
        """Return copies of all records (optionally filtered), in insertion order."""
        await self._simulate_latency("get_all")
        with self._lock:
            items = self._items if query is None else [i for i in self._items if self._matches(i, query)]
            return copy.deepcopy(items)

    async def get_by_id(self, record_id: Any) -> E:
        """Return a copy of one record. Raises NotFoundError if absent."""
        await self._simulate_latency("get_by_id")
        with self._lock:
            return copy.deepcopy(self._items[self._index_of(record_id)])

    async def create(self, data: Payload) -> E:
        """Validate, assign the next id (max existing + 1) and append."""
        payload = parse_payload(self.create_schema, data)
        await self._simulate_latency("create")
        with self._lock:
            entity = self._build(self._next_id(), payload)
            self._items.append(entity)
            logger.debug("Created %s %s", self.entity_name.lower(), entity["id"])  # type: ignore[index]
            return copy.deepcopy(entity)

    async def update(self, record_id: Any, data: Payload) -> E:
        """
        Shallow-merge the explicitly provided fields over the stored record.
        The id is never changed.
        """
        changes = parse_payload(self.update_schema, data).model_dump(exclude_unset=True)
        changes.pop("id", None)
        await self._simulate_latency("update")
        with self._lock:
            index = self._index_of(record_id)
            for key, value in changes.items():
                if value is None and key not in self.nullable_fields:
                    raise ValidationError(f"{key} cannot be empty")
            updated = self._merge(self._items[index], changes)
            self._items[index] = updated
            logger.debug("Updated %s %s: %s", self.entity_name.lower(), updated["id"], sorted(changes))  # type: ignore[index]
            return copy.deepcopy(updated)

    async def delete(self, record_id: Any) -> bool:
        """Remove a record. Dependent records elsewhere are left untouched."""
        await self._simulate_latency("delete")
        with self._lock:
            index = self._index_of(record_id)
            removed = self._items.pop(index)
            logger.debug("Deleted %s %s", self.entity_name.lower(), removed["id"])  # type: ignore[index]
            return True


# PUBLIC_INTERFACE
class ClientStore(InMemoryStore[ClientEntity]):
    """Clients; `created_at` is stamped from the store clock."""

    entity_name = "Client"
    create_schema = ClientCreate
    update_schema = ClientUpdate
    search_fields = ("name", "email", "company")

    def _build(self, record_id: int, data: BaseModel) -> ClientEntity:
        return {"id": record_id, **data.model_dump(), "created_at": self._now()}  # type: ignore[typeddict-item]

    def _seed(self, record: Mapping[str, Any]) -> ClientEntity:
        entity = super()._seed(record)
        if record.get("created_at"):
            entity["created_at"] = parse_datetime(record["created_at"])  # type: ignore[typeddict-item]
        return entity


# PUBLIC_INTERFACE
class ProjectStore(InMemoryStore[ProjectEntity]):
    """Projects; the end date may not fall before the start date."""

    entity_name = "Project"
    create_schema = ProjectCreate
    update_schema = ProjectUpdate
    search_fields = ("name", "description")
    nullable_fields = frozenset({"start_date", "end_date"})

    @staticmethod
    def _check_dates(project: Mapping[str, Any]) -> None:
        start, end = project.get("start_date"), project.get("end_date")
        if start is not None and end is not None and end < start:
            raise ValidationError("End date must not be before start date")

    def _build(self, record_id: int, data: BaseModel) -> ProjectEntity:
        project = {"id": record_id, **data.model_dump()}
        self._check_dates(project)
        return project  # type: ignore[return-value]

    def _merge(self, existing: ProjectEntity, changes: Dict[str, Any]) -> ProjectEntity:
        merged = super()._merge(existing, changes)
        self._check_dates(merged)
        return merged


# PUBLIC_INTERFACE
class TaskStore(InMemoryStore[TaskEntity]):
    """
    Tasks with embedded time tracking.

    Besides CRUD, this store owns the timer transitions: `start_timer` and
    `stop_timer` check and change the active timer in one critical section,
    so at most one timer per task can ever be running.
    """

    entity_name = "Task"
    create_schema = TaskCreate
    update_schema = TaskUpdate
    search_fields = ("title",)
    nullable_fields = frozenset({"due_date"})

    def __init__(
        self,
        records: Iterable[Mapping[str, Any]] = (),
        *,
        latency: Optional[Mapping[str, float]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(records, latency=latency, clock=clock)
        self._last_log_id = max(
            (log["id"] for task in self._items for log in task["time_tracking"]["time_logs"]),
            default=0,
        )

    def _build(self, record_id: int, data: BaseModel) -> TaskEntity:
        return {"id": record_id, **data.model_dump()}  # type: ignore[return-value]

    async def update_status(self, task_id: Any, status: str) -> TaskEntity:
        """Move a task to another kanban column."""
        payload = parse_payload(TaskStatusUpdate, {"status": status})
        return await self.update(task_id, payload.model_dump())

    async def get_time_logs(self, task_id: Any) -> List[TimeLog]:
        await self._simulate_latency("get_by_id")
        with self._lock:
            task = self._items[self._index_of(task_id)]
            return copy.deepcopy(task["time_tracking"]["time_logs"])

    async def get_active_timer(self, task_id: Any) -> Optional[ActiveTimer]:
        await self._simulate_latency("active_timer")
        with self._lock:
            task = self._items[self._index_of(task_id)]
            return copy.deepcopy(task["time_tracking"]["active_timer"])

    async def start_timer(self, task_id: Any) -> ActiveTimer:
        """
        Start the task's timer. Raises NotFoundError for an unknown task and
        ValidationError when a timer is already running.
        """
        await self._simulate_latency("update")
        with self._lock:
            index = self._index_of(task_id)
            task = self._items[index]
            tracking = task.get("time_tracking") or empty_time_tracking()
            if tracking["active_timer"] is not None:
                raise ValidationError("Timer already running")
            timer: ActiveTimer = {"id": task["id"], "start_time": self._now()}
            self._items[index] = {**task, "time_tracking": {**tracking, "active_timer": timer}}  # type: ignore[typeddict-item]
            logger.info("Started timer for task %s", task["id"])
            return dict(timer)  # type: ignore[return-value]

    async def stop_timer(self, task_id: Any) -> TimeLog:
        """
        Stop the running timer, append a time log and add its duration to the
        task total. Returns the new log.
        """
        await self._simulate_latency("update")
        with self._lock:
            index = self._index_of(task_id)
            task = self._items[index]
            tracking = task.get("time_tracking") or empty_time_tracking()
            timer = tracking["active_timer"]
            if timer is None:
                raise ValidationError("No active timer")
            end = self._now()
            start = timer["start_time"]
            duration = max(duration_ms(start, end), 0)
            self._last_log_id += 1
            log: TimeLog = {
                "id": self._last_log_id,
                "start_time": start,
                "end_time": end,
                "duration": duration,
                "date": start.date(),
            }
            self._items[index] = {
                **task,
                "time_tracking": {
                    "total_time": tracking["total_time"] + duration,
                    "active_timer": None,
                    "time_logs": [*tracking["time_logs"], log],
                },
            }  # type: ignore[typeddict-item]
            logger.info("Stopped timer for task %s after %d ms", task["id"], duration)
            return dict(log)  # type: ignore[return-value]


# PUBLIC_INTERFACE
class InvoiceStore(InMemoryStore[InvoiceEntity]):
    """
    Invoices. Every stored invoice has a project, a due date, at least one
    line item and an amount equal to the sum of its line items. A paid
    invoice always has a payment date and an unpaid one never has.

    When a project store is given, a missing `client_id` is filled in from the
    invoice's project.
    """

    entity_name = "Invoice"
    create_schema = InvoiceCreate
    update_schema = InvoiceUpdate
    search_fields = ("id", "amount")
    nullable_fields = frozenset({"client_id", "payment_date"})

    def __init__(
        self,
        records: Iterable[Mapping[str, Any]] = (),
        *,
        projects: Optional[ProjectStore] = None,
        latency: Optional[Mapping[str, float]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._projects = projects
        super().__init__(records, latency=latency, clock=clock)

    @staticmethod
    def _clean_line_items(items: Iterable[Mapping[str, Any]]) -> List[LineItem]:
        cleaned: List[LineItem] = []
        for item in items:
            description = (item.get("description") or "").strip()
            amount = Decimal(str(item.get("amount") or 0))
            if not description and amount == 0:
                # blank form row
                continue
            if not description:
                raise ValidationError("Line item description is required")
            if amount <= 0:
                raise ValidationError("Line item amount must be greater than 0")
            cleaned.append({"description": description, "amount": amount})
        return cleaned

    def _validated(self, invoice: Mapping[str, Any]) -> InvoiceEntity:
        project_id = invoice.get("project_id")
        if project_id is None:
            raise ValidationError("Project ID is required")

        raw_items = invoice.get("line_items") or []
        line_items: Optional[List[LineItem]] = None
        amount = invoice.get("amount")
        if amount is None:
            # no amount given: derive it from the items
            line_items = self._clean_line_items(raw_items)
            if line_items:
                amount = sum((item["amount"] for item in line_items), Decimal("0"))
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        if invoice.get("due_date") is None:
            raise ValidationError("Due date is required")
        if line_items is None:
            line_items = self._clean_line_items(raw_items)
        if not line_items:
            raise ValidationError("At least one line item with description and amount is required")
        if sum((item["amount"] for item in line_items), Decimal("0")) != amount:
            raise ValidationError("Amount must equal the sum of the line items")

        client_id = invoice.get("client_id")
        if client_id is None and self._projects is not None:
            project = self._projects.find(project_id)
            if project is not None:
                client_id = project["client_id"]

        status = invoice.get("status") or "draft"
        payment_date = invoice.get("payment_date")
        if status == "paid" and payment_date is None:
            raise ValidationError("Payment date is required for paid invoices")
        if status != "paid":
            payment_date = None

        return {
            "id": invoice["id"],
            "project_id": project_id,
            "client_id": client_id,
            "amount": Decimal(amount),
            "status": status,
            "due_date": invoice["due_date"],
            "payment_date": payment_date,
            "line_items": line_items,
        }

    def _build(self, record_id: int, data: BaseModel) -> InvoiceEntity:
        return self._validated({**data.model_dump(), "id": record_id})

    def _merge(self, existing: InvoiceEntity, changes: Dict[str, Any]) -> InvoiceEntity:
        merged = super()._merge(existing, changes)
        if "line_items" in changes and "amount" not in changes:
            merged["amount"] = None  # type: ignore[typeddict-item]
        return self._validated(merged)

    async def mark_sent(self, invoice_id: Any) -> InvoiceEntity:
        """Set the status to 'sent' whatever the current status is."""
        await self._simulate_latency("update")
        with self._lock:
            index = self._index_of(invoice_id)
            updated = {**self._items[index], "status": "sent", "payment_date": None}
            self._items[index] = updated  # type: ignore[assignment]
            logger.info("Invoice %s marked as sent", updated["id"])
            return copy.deepcopy(updated)  # type: ignore[return-value]

    async def mark_paid(self, invoice_id: Any, payment_date: Optional[DateInput]) -> InvoiceEntity:
        """Set the status to 'paid' and record when the payment arrived."""
        if payment_date is None or payment_date == "":
            raise ValidationError("Payment date is required")
        try:
            paid_at = parse_datetime(payment_date)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        await self._simulate_latency("update")
        with self._lock:
            index = self._index_of(invoice_id)
            updated = {**self._items[index], "status": "paid", "payment_date": paid_at}
            self._items[index] = updated  # type: ignore[assignment]
            logger.info("Invoice %s marked as paid", updated["id"])
            return copy.deepcopy(updated)  # type: ignore[return-value]

    async def outstanding_amount(self, client_id: Optional[int] = None) -> Decimal:
        """Sum of amounts over invoices that are not paid, optionally for one client."""
        query = ListQuery(client_id=client_id) if client_id is not None else None
        invoices = await self.get_all(query)
        return sum((inv["amount"] for inv in invoices if inv["status"] != "paid"), Decimal("0"))


@dataclass
class Stores:
    """The four entity stores of one application instance."""

    clients: ClientStore
    projects: ProjectStore
    tasks: TaskStore
    invoices: InvoiceStore


# PUBLIC_INTERFACE
def build_stores(
    *,
    seed: bool = True,
    latency: Optional[Mapping[str, float]] = None,
    clock: Optional[Clock] = None,
) -> Stores:
    """
    Construct a fresh set of stores.
    - seed: start from the demo dataset in `fixtures`, else empty
    - latency: per-operation delays in ms (see DEFAULT_LATENCY_MS); None disables delays
    - clock: callable returning naive UTC datetimes, for timestamps and timers
    """
    projects = ProjectStore(fixtures.PROJECTS if seed else (), latency=latency, clock=clock)
    return Stores(
        clients=ClientStore(fixtures.CLIENTS if seed else (), latency=latency, clock=clock),
        projects=projects,
        tasks=TaskStore(fixtures.TASKS if seed else (), latency=latency, clock=clock),
        invoices=InvoiceStore(fixtures.INVOICES if seed else (), projects=projects, latency=latency, clock=clock),
    )


# PUBLIC_INTERFACE
def build_stores_from_settings(settings: Optional[Settings] = None) -> Stores:
    """Construct stores according to SEED_FIXTURES and SIMULATE_LATENCY."""
    settings = settings or get_settings()
    return build_stores(
        seed=settings.seed_fixtures,
        latency=DEFAULT_LATENCY_MS if settings.simulate_latency else None,
    )
