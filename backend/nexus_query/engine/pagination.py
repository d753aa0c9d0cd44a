"""NEXUS Query — Pagination calculator."""
from typing import Any

from pydantic import BaseModel, ConfigDict

from nexus_query.core.errors import QueryValidationError

# Largest OFFSET a 64-bit store integer can carry.
MAX_OFFSET = 2**63 - 1


class PageWindow(BaseModel):
    """Normalized page request: what the fetch needs before the count is known."""

    model_config = ConfigDict(frozen=True)

    current: int
    limit: int
    offset: int


def _positive_int(name: str, value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise QueryValidationError(f"'{name}' must be an integer", {name: "expected an integer"})
    if value <= 0:
        raise QueryValidationError(f"'{name}' must be a positive integer", {name: "must be >= 1"})
    return value


class PaginationCalculator:
    """Page/limit normalization and page-count arithmetic."""

    @staticmethod
    def page_count(records: int, limit: int) -> int:
        """ceil(records / limit); 0 when there are no records."""
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if records <= 0:
            return 0
        return -(-records // limit)

    @staticmethod
    def window(
        page: Any,
        limit: Any,
        *,
        default_limit: int,
        max_limit: int,
        clamp: bool = True,
    ) -> PageWindow:
        """
        Normalize page/limit.
        Absent values take defaults; zero, negative or non-integer values are a
        validation error. A limit above `max_limit` is clamped, or rejected
        when `clamp` is False. A page whose offset overflows the store's
        integer range is rejected.
        """
        current = _positive_int("page", page) or 1
        size = _positive_int("limit", limit) or default_limit
        if size > max_limit:
            if not clamp:
                raise QueryValidationError(
                    f"'limit' may not exceed {max_limit}",
                    {"limit": f"must be <= {max_limit}"},
                )
            size = max_limit
        offset = (current - 1) * size
        if offset > MAX_OFFSET:
            raise QueryValidationError("'page' is too large", {"page": "offset out of range"})
        return PageWindow(current=current, limit=size, offset=offset)

    @staticmethod
    def compute(
        page: Any,
        limit: Any,
        total_records: int,
        *,
        default_limit: int,
        max_limit: int,
        clamp: bool = True,
    ) -> dict:
        """Full calculation: {current, limit, offset, pages}."""
        w = PaginationCalculator.window(page, limit, default_limit=default_limit, max_limit=max_limit, clamp=clamp)
        return {
            "current": w.current,
            "limit": w.limit,
            "offset": w.offset,
            "pages": PaginationCalculator.page_count(total_records, w.limit),
        }
