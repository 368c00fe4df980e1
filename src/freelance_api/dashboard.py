from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import NotFoundError, UpstreamError
from .models import ClientEntity, InvoiceEntity, ProjectEntity, TaskEntity
from .repositories import Clock, ListQuery, Stores
from .schemas import (
    ActivityItem,
    ClientDetail,
    ClientOut,
    DashboardSnapshot,
    DashboardSummary,
    ProjectDetail,
    ProjectOut,
    QuickStats,
    TaskOut,
    TaskStatusCounts,
)
from .time_tracking import TimeTracker
from .utils import ms_to_hours, percent, utcnow

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown Client"

# Activity entries carry no real timestamps; these labels are placeholders
# shown in feed order.
PLACEHOLDER_TIME_LABELS = ("2 hours ago", "4 hours ago", "6 hours ago", "1 day ago", "2 days ago")

# No expense data exists; spend is shown as a fixed share of the budget.
ESTIMATED_SPEND_RATIO = Decimal("0.7")

_Collected = Tuple[List[ClientEntity], List[ProjectEntity], List[TaskEntity], List[InvoiceEntity]]


def _client_label(clients: Mapping[int, ClientEntity], client_id: Optional[int]) -> str:
    client = clients.get(client_id) if client_id is not None else None
    if client is None:
        return UNKNOWN_CLIENT
    return client["company"] or client["name"]


# PUBLIC_INTERFACE
class DashboardService:
    """
    Derived views over all stores: the landing page snapshot and the project
    and client detail pages. Nothing is cached; every call reads the stores
    again.
    """

    def __init__(self, stores: Stores, clock: Optional[Clock] = None) -> None:
        self._stores = stores
        self._clock: Clock = clock or utcnow

    async def _collect(self) -> _Collected:
        try:
            clients, projects, tasks, invoices = await asyncio.gather(
                self._stores.clients.get_all(),
                self._stores.projects.get_all(),
                self._stores.tasks.get_all(),
                self._stores.invoices.get_all(),
            )
        except Exception as exc:
            raise UpstreamError(f"Failed to load dashboard data: {exc}") from exc
        return clients, projects, tasks, invoices

    async def get_dashboard(self) -> DashboardSnapshot:
        """
        Summary counters, recent activity and quick stats for the landing
        page. When the stores cannot be read, an all-zero snapshot is
        returned instead of an error.
        """
        try:
            clients, projects, tasks, invoices = await self._collect()
        except UpstreamError as exc:
            logger.warning("Returning empty dashboard snapshot: %s", exc.message)
            return DashboardSnapshot()

        now = self._clock()
        return DashboardSnapshot(
            summary=self._summary(now, clients, projects, tasks, invoices),
            recent_activity=self._recent_activity(clients, projects, tasks, invoices),
            quick_stats=self._quick_stats(tasks, invoices),
        )

    @staticmethod
    def _summary(
        now: datetime,
        clients: Sequence[ClientEntity],
        projects: Sequence[ProjectEntity],
        tasks: Sequence[TaskEntity],
        invoices: Sequence[InvoiceEntity],
    ) -> DashboardSummary:
        monthly_revenue = sum(
            (
                inv["amount"]
                for inv in invoices
                if inv["status"] == "paid"
                and inv["payment_date"] is not None
                and inv["payment_date"].year == now.year
                and inv["payment_date"].month == now.month
            ),
            Decimal("0"),
        )
        return DashboardSummary(
            total_clients=len(clients),
            active_projects=sum(1 for p in projects if p["status"] == "active"),
            pending_tasks=sum(1 for t in tasks if t["status"] in ("todo", "in-progress")),
            completed_tasks=sum(1 for t in tasks if t["status"] == "done"),
            overdue_items=sum(
                1
                for t in tasks
                # a date-only due date falls due at its midnight
                if t["due_date"] is not None
                and datetime.combine(t["due_date"], time.min) < now
                and t["status"] != "done"
            ),
            monthly_revenue=monthly_revenue,
        )

    @staticmethod
    def _recent_activity(
        clients: Sequence[ClientEntity],
        projects: Sequence[ProjectEntity],
        tasks: Sequence[TaskEntity],
        invoices: Sequence[InvoiceEntity],
    ) -> List[ActivityItem]:
        by_client = {c["id"]: c for c in clients}
        project_client = {p["id"]: p["client_id"] for p in projects}

        entries: List[Dict[str, Any]] = []
        for project in [p for p in projects if p["status"] == "completed"][:2]:
            entries.append(
                {
                    "type": "project",
                    "title": f"Project '{project['name']}' marked as completed",
                    "client": _client_label(by_client, project["client_id"]),
                }
            )
        for task in [t for t in tasks if t["status"] == "done"][:2]:
            entries.append(
                {
                    "type": "task",
                    "title": f"Task '{task['title']}' completed",
                    "client": _client_label(by_client, project_client.get(task["project_id"])),
                }
            )
        for invoice in [i for i in invoices if i["status"] == "sent"][:1]:
            client_id = invoice["client_id"] if invoice["client_id"] is not None else project_client.get(invoice["project_id"])
            entries.append(
                {
                    "type": "invoice",
                    "title": f"Invoice #{invoice['id']} sent to client",
                    "client": _client_label(by_client, client_id),
                }
            )

        return [ActivityItem(**entry, time=label) for entry, label in zip(entries, PLACEHOLDER_TIME_LABELS)]

    @staticmethod
    def _quick_stats(tasks: Sequence[TaskEntity], invoices: Sequence[InvoiceEntity]) -> QuickStats:
        tracked_ms = sum(t["time_tracking"]["total_time"] for t in tasks)
        return QuickStats(
            outstanding_amount=sum((i["amount"] for i in invoices if i["status"] != "paid"), Decimal("0")),
            hours_tracked=ms_to_hours(tracked_ms),
            active_timers=sum(1 for t in tasks if t["time_tracking"]["active_timer"] is not None),
        )

    async def _client_name(self, client_id: Optional[int]) -> str:
        if client_id is None:
            return UNKNOWN_CLIENT
        try:
            client = await self._stores.clients.get_by_id(client_id)
        except NotFoundError:
            return UNKNOWN_CLIENT
        return client["company"] or client["name"]

    def _schedule(self, project: ProjectEntity) -> Tuple[int, Optional[int]]:
        """Percent of the schedule elapsed, and whole days left until the end date."""
        now = self._clock()
        start, end = project["start_date"], project["end_date"]
        end_at = datetime.combine(end, time.min) if end is not None else None
        days_remaining = math.ceil((end_at - now).total_seconds() / 86400) if end_at is not None else None

        if start is None or end_at is None:
            return 0, days_remaining
        start_at = datetime.combine(start, time.min)
        total = (end_at - start_at).total_seconds()
        if total <= 0:
            return (100 if now >= end_at else 0), days_remaining
        elapsed = (now - start_at).total_seconds()
        return max(0, min(100, percent(elapsed, total))), days_remaining

    async def get_project_detail(self, project_id: Any) -> ProjectDetail:
        """
        Project page data. Raises NotFoundError for an unknown project; a
        missing client shows as 'Unknown Client'.
        """
        project = await self._stores.projects.get_by_id(project_id)
        client_name = await self._client_name(project["client_id"])
        tasks = await self._stores.tasks.get_all(ListQuery(project_id=project["id"]))
        time_tracking = await TimeTracker(self._stores.tasks).get_project_time_tracking(project["id"])

        counts = {status: 0 for status in ("todo", "in-progress", "review", "done")}
        for task in tasks:
            counts[task["status"]] += 1

        time_progress, days_remaining = self._schedule(project)
        spend = (project["budget"] * ESTIMATED_SPEND_RATIO).quantize(Decimal("1"), rounding=ROUND_HALF_UP)

        return ProjectDetail(
            project=ProjectOut(**project),
            client_name=client_name,
            tasks=[TaskOut(**t) for t in tasks],
            progress=percent(counts["done"], len(tasks)),
            time_progress=time_progress,
            days_remaining=days_remaining,
            task_counts=TaskStatusCounts(
                todo=counts["todo"],
                in_progress=counts["in-progress"],
                review=counts["review"],
                done=counts["done"],
            ),
            time_tracking=time_tracking,
            estimated_spend=spend,
            spend_is_estimate=True,
        )

    async def get_client_detail(self, client_id: Any) -> ClientDetail:
        """Client page data: the client's projects and money figures."""
        client = await self._stores.clients.get_by_id(client_id)
        projects = await self._stores.projects.get_all(ListQuery(client_id=client["id"]))
        outstanding = await self._stores.invoices.outstanding_amount(client["id"])
        return ClientDetail(
            client=ClientOut(**client),
            projects=[ProjectOut(**p) for p in projects],
            total_projects=len(projects),
            active_projects=sum(1 for p in projects if p["status"] == "active"),
            total_revenue=sum((p["budget"] for p in projects), Decimal("0")),
            outstanding_amount=outstanding,
        )
