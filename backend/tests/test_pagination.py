"""Pagination arithmetic."""
import pytest

from nexus_query.core.errors import QueryValidationError
from nexus_query.engine.pagination import MAX_OFFSET, PaginationCalculator

LIMITS = {"default_limit": 20, "max_limit": 100}


@pytest.mark.parametrize(
    "records, limit, pages",
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (23, 10, 3), (100, 100, 1), (101, 100, 2)],
)
def test_page_count(records, limit, pages):
    assert PaginationCalculator.page_count(records, limit) == pages


def test_defaults_apply_to_absent_values():
    window = PaginationCalculator.window(None, None, **LIMITS)
    assert (window.current, window.limit, window.offset) == (1, 20, 0)


def test_offset_follows_page():
    assert PaginationCalculator.window(3, 10, **LIMITS).offset == 20


def test_limit_above_max_is_clamped():
    assert PaginationCalculator.window(1, 500, **LIMITS).limit == 100


def test_limit_above_max_can_be_rejected():
    with pytest.raises(QueryValidationError) as exc_info:
        PaginationCalculator.window(1, 500, clamp=False, **LIMITS)
    assert "limit" in exc_info.value.field_errors


@pytest.mark.parametrize("page, limit, field", [(0, 10, "page"), (-1, 10, "page"), (1, 0, "limit"), (1, -5, "limit")])
def test_non_positive_values_are_rejected(page, limit, field):
    with pytest.raises(QueryValidationError) as exc_info:
        PaginationCalculator.window(page, limit, **LIMITS)
    assert field in exc_info.value.field_errors


@pytest.mark.parametrize("value", ["2", 2.0, True])
def test_non_integers_are_rejected(value):
    with pytest.raises(QueryValidationError):
        PaginationCalculator.window(value, None, **LIMITS)


def test_compute_matches_the_envelope_fields():
    assert PaginationCalculator.compute(3, 10, 23, **LIMITS) == {"current": 3, "limit": 10, "offset": 20, "pages": 3}


def test_page_past_the_end_is_not_an_error():
    assert PaginationCalculator.compute(4, 10, 23, **LIMITS) == {"current": 4, "limit": 10, "offset": 30, "pages": 3}


def test_offset_at_the_store_integer_limit_is_allowed():
    window = PaginationCalculator.window(2**63, 1, **LIMITS)
    assert window.offset == MAX_OFFSET


@pytest.mark.parametrize("page, limit", [(2**63 + 1, 1), (10**18, 20), (2**62, 10)])
def test_offset_past_the_store_integer_limit_is_rejected(page, limit):
    with pytest.raises(QueryValidationError) as exc_info:
        PaginationCalculator.window(page, limit, **LIMITS)
    assert exc_info.value.field_errors == {"page": "offset out of range"}
