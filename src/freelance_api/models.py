from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, TypedDict


# PUBLIC_INTERFACE
class ClientEntity(TypedDict):
    """
    A client of the freelancer.

    Fields:
    - id: Unique integer identifier
    - name: Contact name
    - email: Contact email
    - company: Company name
    - status: 'active' or 'inactive'
    - notes: Free-form notes
    - created_at: Creation timestamp (naive UTC)
    """

    id: int
    name: str
    email: str
    company: str
    status: str
    notes: str
    created_at: datetime


# PUBLIC_INTERFACE
class ProjectEntity(TypedDict):
    """
    A project done for a client. `client_id` is a plain reference; deleting the
    client leaves the project in place.
    """

    id: int
    name: str
    description: str
    client_id: int
    status: str
    budget: Decimal
    start_date: Optional[date]
    end_date: Optional[date]


class ActiveTimer(TypedDict):
    id: int
    start_time: datetime


class TimeLog(TypedDict):
    id: int
    start_time: datetime
    end_time: datetime
    duration: int  # milliseconds
    date: date


# PUBLIC_INTERFACE
class TimeTracking(TypedDict):
    """
    Time tracking state embedded in a task.

    total_time always equals the sum of time_logs durations; active_timer is
    set only while a timer runs.
    """

    total_time: int
    active_timer: Optional[ActiveTimer]
    time_logs: List[TimeLog]


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """A kanban task belonging to a project, with its embedded time tracking."""

    id: int
    title: str
    priority: str
    status: str
    due_date: Optional[date]
    project_id: int
    time_tracking: TimeTracking


class LineItem(TypedDict):
    description: str
    amount: Decimal


# PUBLIC_INTERFACE
class InvoiceEntity(TypedDict):
    """
    An invoice for a project. `client_id` is denormalized from the project and
    `amount` always equals the sum of the line items.
    """

    id: int
    project_id: int
    client_id: Optional[int]
    amount: Decimal
    status: str
    due_date: date
    payment_date: Optional[datetime]
    line_items: List[LineItem]


def empty_time_tracking() -> TimeTracking:
    return {"total_time": 0, "active_timer": None, "time_logs": []}
