from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator, model_validator

from .utils import DateInput, is_valid_email, parse_date, parse_datetime

# Decimal internally, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

ClientStatus = Literal["active", "inactive"]
ProjectStatus = Literal["planning", "active", "on-hold", "completed"]
TaskPriority = Literal["low", "medium", "high"]
TaskStatus = Literal["todo", "in-progress", "review", "done"]
InvoiceStatus = Literal["draft", "sent", "paid", "overdue"]


def _required_text(value: Optional[str], field: str) -> Optional[str]:
    if value is None:
        return value
    s = value.strip()
    if not s:
        raise ValueError(f"{field} is required")
    return s


def _to_date(value: Optional[DateInput]) -> Optional[date]:
    return parse_date(value)


def _to_datetime(value: Optional[DateInput]) -> Optional[datetime]:
    return parse_datetime(value)


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


# PUBLIC_INTERFACE
class ClientCreate(BaseModel):
    """
    Schema for creating a new client.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Sarah Johnson",
                "email": "sarah@techcorp.com",
                "company": "TechCorp Inc",
                "status": "active",
                "notes": "Prefers email contact",
            }
        }
    )

    name: str = Field(..., description="Contact name", max_length=200)
    email: str = Field(..., description="Contact email address")
    company: str = Field(..., description="Company name", max_length=200)
    status: ClientStatus = Field(default="active", description="Relationship status")
    notes: str = Field(default="", description="Free-form notes")

    @field_validator("name", "company")
    @classmethod
    def validate_text(cls, v: str, info) -> str:
        return _required_text(v, info.field_name)  # type: ignore[return-value]

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Require a something@something.something shape."""
        s = _required_text(v, "email")
        if not is_valid_email(s):  # type: ignore[arg-type]
            raise ValueError("email format is invalid")
        return s  # type: ignore[return-value]


# PUBLIC_INTERFACE
class ClientUpdate(BaseModel):
    """
    Schema for updating an existing client. Only provided fields are changed.
    """

    name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = None
    company: Optional[str] = Field(default=None, max_length=200)
    status: Optional[ClientStatus] = None
    notes: Optional[str] = None

    @field_validator("name", "company")
    @classmethod
    def validate_text(cls, v: Optional[str], info) -> Optional[str]:
        return _required_text(v, info.field_name)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        s = _required_text(v, "email")
        if not is_valid_email(s):  # type: ignore[arg-type]
            raise ValueError("email format is invalid")
        return s


# PUBLIC_INTERFACE
class ClientOut(BaseModel):
    """Schema returned by the API for a client."""

    id: int
    name: str
    email: str
    company: str
    status: ClientStatus
    notes: str
    created_at: datetime


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


# PUBLIC_INTERFACE
class ProjectCreate(BaseModel):
    """
    Schema for creating a new project. Dates accept ISO8601 strings.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Website Redesign",
                "description": "Complete overhaul of the marketing site",
                "client_id": 1,
                "status": "active",
                "budget": 15000,
                "start_date": "2025-01-15",
                "end_date": "2025-03-30",
            }
        }
    )

    name: str = Field(..., description="Project name", max_length=200)
    description: str = Field(default="", description="Project description")
    client_id: int = Field(..., description="Owning client id")
    status: ProjectStatus = Field(default="planning")
    budget: Money = Field(default=Decimal("0"), ge=0, description="Project budget")
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _required_text(v, "name")  # type: ignore[return-value]

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Optional[DateInput]) -> Optional[date]:
        return _to_date(v)


# PUBLIC_INTERFACE
class ProjectUpdate(BaseModel):
    """Partial project update."""

    name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    client_id: Optional[int] = None
    status: Optional[ProjectStatus] = None
    budget: Optional[Money] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _required_text(v, "name")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Optional[DateInput]) -> Optional[date]:
        return _to_date(v)


# PUBLIC_INTERFACE
class ProjectOut(BaseModel):
    """Schema returned by the API for a project."""

    id: int
    name: str
    description: str
    client_id: int
    status: ProjectStatus
    budget: Money
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# ---------------------------------------------------------------------------
# Tasks and time tracking
# ---------------------------------------------------------------------------


class ActiveTimerModel(BaseModel):
    id: int
    start_time: datetime

    @field_validator("start_time", mode="before")
    @classmethod
    def parse_start(cls, v: DateInput) -> Optional[datetime]:
        return _to_datetime(v)


class TimeLogModel(BaseModel):
    id: int
    start_time: datetime
    end_time: datetime
    duration: int = Field(..., ge=0, description="Duration in milliseconds")
    date: date

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_times(cls, v: DateInput) -> Optional[datetime]:
        return _to_datetime(v)

    @field_validator("date", mode="before")
    @classmethod
    def parse_log_date(cls, v: DateInput) -> Optional[date]:
        return _to_date(v)


# PUBLIC_INTERFACE
class TimeTrackingModel(BaseModel):
    """
    Embedded time tracking state of a task.

    total_time must equal the sum of the log durations.
    """

    total_time: int = Field(default=0, ge=0, description="Tracked time in milliseconds")
    active_timer: Optional[ActiveTimerModel] = None
    time_logs: List[TimeLogModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_total(self) -> "TimeTrackingModel":
        logged = sum(log.duration for log in self.time_logs)
        if self.total_time != logged:
            raise ValueError("total_time must equal the sum of time log durations")
        return self


def _normalize_time_tracking(value):
    # Opaque strings and nulls from older payloads mean "nothing tracked yet"
    if value is None or isinstance(value, str):
        return TimeTrackingModel()
    return value


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a task. `time_tracking` may be omitted, null or an
    opaque string; all of these become an empty tracking state.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Design homepage mockup",
                "priority": "high",
                "status": "todo",
                "due_date": "2025-02-01",
                "project_id": 1,
            }
        }
    )

    title: str = Field(..., description="Task title", max_length=200)
    priority: TaskPriority = Field(default="medium")
    status: TaskStatus = Field(default="todo")
    due_date: Optional[date] = None
    project_id: int = Field(..., description="Owning project id")
    time_tracking: TimeTrackingModel = Field(default_factory=TimeTrackingModel)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _required_text(v, "title")  # type: ignore[return-value]

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DateInput]) -> Optional[date]:
        return _to_date(v)

    @field_validator("time_tracking", mode="before")
    @classmethod
    def normalize_time_tracking(cls, v):
        return _normalize_time_tracking(v)


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Partial task update. Time tracking is changed only by the timer operations,
    so it is not accepted here.
    """

    title: Optional[str] = Field(default=None, max_length=200)
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None
    project_id: Optional[int] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _required_text(v, "title")

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DateInput]) -> Optional[date]:
        return _to_date(v)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """Schema returned by the API for a task."""

    id: int
    title: str
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[date] = None
    project_id: int
    time_tracking: TimeTrackingModel


class TimeLogOut(TimeLogModel):
    task_id: Optional[int] = None
    task_title: Optional[str] = None


# PUBLIC_INTERFACE
class ProjectTimeTracking(BaseModel):
    """Time tracked across the tasks of one project."""

    total_time: int = 0
    formatted_total: str = Field(default="0h 0m", description="total_time as hours and minutes")
    active_timers: int = 0
    total_entries: int = 0
    time_logs: List[TimeLogOut] = Field(default_factory=list, description="Ten most recent logs")


class TaskTimeBreakdown(BaseModel):
    task_id: int
    task_title: str
    project_id: int
    total_time: int
    has_active_timer: bool
    entry_count: int


# PUBLIC_INTERFACE
class TimeTrackingOverview(BaseModel):
    """Time tracked across all tasks, with a per-task breakdown."""

    total_time: int = 0
    formatted_total: str = Field(default="0h 0m", description="total_time as hours and minutes")
    active_timers: int = 0
    total_entries: int = 0
    task_breakdown: List[TaskTimeBreakdown] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------


class LineItemIn(BaseModel):
    description: str = ""
    amount: Money = Decimal("0")

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()


class LineItemOut(BaseModel):
    description: str
    amount: Money


# PUBLIC_INTERFACE
class InvoiceCreate(BaseModel):
    """
    Schema for creating an invoice.

    Required-field checks (project, amount, due date, line items) are done by
    the invoice store so that they surface as domain validation errors.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "project_id": 3,
                "amount": 150,
                "due_date": "2025-01-01",
                "line_items": [{"description": "Design", "amount": 150}],
            }
        }
    )

    project_id: Optional[int] = None
    client_id: Optional[int] = None
    amount: Optional[Money] = None
    status: InvoiceStatus = "draft"
    due_date: Optional[date] = None
    payment_date: Optional[datetime] = None
    line_items: List[LineItemIn] = Field(default_factory=list)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DateInput]) -> Optional[date]:
        return _to_date(v)

    @field_validator("payment_date", mode="before")
    @classmethod
    def parse_payment_date(cls, v: Optional[DateInput]) -> Optional[datetime]:
        return _to_datetime(v)


# PUBLIC_INTERFACE
class InvoiceUpdate(BaseModel):
    """Partial invoice update; the merged invoice is validated again."""

    project_id: Optional[int] = None
    client_id: Optional[int] = None
    amount: Optional[Money] = None
    status: Optional[InvoiceStatus] = None
    due_date: Optional[date] = None
    payment_date: Optional[datetime] = None
    line_items: Optional[List[LineItemIn]] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DateInput]) -> Optional[date]:
        return _to_date(v)

    @field_validator("payment_date", mode="before")
    @classmethod
    def parse_payment_date(cls, v: Optional[DateInput]) -> Optional[datetime]:
        return _to_datetime(v)


class InvoicePayment(BaseModel):
    payment_date: Optional[datetime] = None

    @field_validator("payment_date", mode="before")
    @classmethod
    def parse_payment_date(cls, v: Optional[DateInput]) -> Optional[datetime]:
        return _to_datetime(v)


# PUBLIC_INTERFACE
class InvoiceOut(BaseModel):
    """Schema returned by the API for an invoice."""

    id: int
    project_id: int
    client_id: Optional[int] = None
    amount: Money
    status: InvoiceStatus
    due_date: date
    payment_date: Optional[datetime] = None
    line_items: List[LineItemOut]


class OutstandingOut(BaseModel):
    outstanding_amount: Money
    formatted: str


# ---------------------------------------------------------------------------
# Dashboard and detail views
# ---------------------------------------------------------------------------


class DashboardSummary(BaseModel):
    total_clients: int = 0
    active_projects: int = 0
    pending_tasks: int = 0
    completed_tasks: int = 0
    overdue_items: int = 0
    monthly_revenue: Money = Decimal("0")


class ActivityItem(BaseModel):
    type: Literal["project", "task", "invoice"]
    title: str
    client: str
    time: str = Field(..., description="Placeholder relative-time label")


class QuickStats(BaseModel):
    outstanding_amount: Money = Decimal("0")
    hours_tracked: float = 0.0
    active_timers: int = 0


# PUBLIC_INTERFACE
class DashboardSnapshot(BaseModel):
    """Read-only landing page snapshot, recomputed on every request."""

    summary: DashboardSummary = Field(default_factory=DashboardSummary)
    recent_activity: List[ActivityItem] = Field(default_factory=list)
    quick_stats: QuickStats = Field(default_factory=QuickStats)


class TaskStatusCounts(BaseModel):
    todo: int = 0
    in_progress: int = Field(default=0, alias="in-progress")
    review: int = 0
    done: int = 0

    model_config = ConfigDict(populate_by_name=True)


# PUBLIC_INTERFACE
class ProjectDetail(BaseModel):
    """Everything the project page shows about one project."""

    project: ProjectOut
    client_name: str
    tasks: List[TaskOut]
    progress: int = Field(..., description="Percent of tasks done")
    time_progress: int = Field(..., description="Percent of the schedule elapsed")
    days_remaining: Optional[int] = None
    task_counts: TaskStatusCounts
    time_tracking: ProjectTimeTracking
    estimated_spend: Money
    spend_is_estimate: bool = True


# PUBLIC_INTERFACE
class ClientDetail(BaseModel):
    """Everything the client page shows about one client."""

    client: ClientOut
    projects: List[ProjectOut]
    total_projects: int
    active_projects: int
    total_revenue: Money
    outstanding_amount: Money
