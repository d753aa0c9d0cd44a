"""NEXUS Query — Common request/response shapes."""
from datetime import date, datetime
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

T = TypeVar("T")


def _keep_bare_date(value: Any) -> Any:
    if isinstance(value, str) and len(value.strip()) == 10:
        return date.fromisoformat(value.strip())
    return value


# Timestamp bound. A bare "YYYY-MM-DD" stays a date so an upper bound can cover the whole day.
Instant = Annotated[datetime | date, BeforeValidator(_keep_bare_date)]

# Calendar-date bound. Full timestamps are accepted and reduced to their UTC date by the engine.
CalendarDate = date | datetime


class Pagination(BaseModel):
    """Page metadata."""

    current: int
    limit: int
    records: int
    pages: int


class PageEnvelope(BaseModel):
    """Standard page envelope: {pagination, data}. Records are plain mappings
    so absent optional keys stay absent."""

    pagination: Pagination
    data: list[dict[str, Any]] = Field(default_factory=list)


class Range(BaseModel, Generic[T]):
    """Inclusive {from, to} bounds; either side may be omitted."""

    model_config = ConfigDict(populate_by_name=True)

    from_: T | None = Field(default=None, alias="from")
    to: T | None = None


class FilterRequest(BaseModel):
    """Fields every list request understands. Entity requests add their filters.

    Unknown keys are dropped; keys that name scoping columns are accepted for
    wire compatibility but never trusted.
    """

    model_config = ConfigDict(extra="ignore")

    page: int | None = None
    limit: int | None = None
    sort: str | None = None
    order: str | None = None
    search: str | None = None
