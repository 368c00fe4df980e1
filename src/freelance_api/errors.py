from __future__ import annotations

from typing import Any, Optional


class FreelanceError(Exception):
    """
    Base class for domain errors raised by stores and services.

    Each error carries a machine-readable `code` and a human-readable message
    that the HTTP layer returns unchanged.
    """

    code = "error"

    def __init__(self, message: str, detail: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


# PUBLIC_INTERFACE
class NotFoundError(FreelanceError):
    """An operation referenced an id that does not exist."""

    code = "not_found"

    def __init__(self, entity: str, record_id: Any) -> None:
        super().__init__(f"{entity} not found", detail={"id": record_id})
        self.entity = entity
        self.record_id = record_id


# PUBLIC_INTERFACE
class ValidationError(FreelanceError):
    """A required field is missing or invalid, or a state transition is not allowed."""

    code = "validation_error"


# PUBLIC_INTERFACE
class UpstreamError(FreelanceError):
    """A derived view could not read one of the stores it depends on."""

    code = "upstream_failure"
