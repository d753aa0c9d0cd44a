"""Result mapping."""
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

from nexus_query.engine.mapper import Presence, Projection, ResultMapper, date_only, nullable, optional, timestamp

PROJECTION = Projection(
    "id",
    "title",
    nullable("room_id"),
    optional("notes"),
    timestamp("start_time"),
    timestamp("deleted_at", Presence.OPTIONAL),
    date_only("coverage_end_date", Presence.OPTIONAL),
    "amount",
)


def make_row(**overrides):
    values = dict(
        id=uuid.UUID("00000000-0000-0000-0000-000000000001"),
        title="Follow-up",
        room_id=None,
        notes=None,
        start_time=datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
        deleted_at=None,
        coverage_end_date=None,
        amount=Decimal("12.50"),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_null_and_absent_stay_apart():
    record = ResultMapper.map_row(make_row(), PROJECTION)
    assert record["room_id"] is None
    assert "notes" not in record
    assert "deleted_at" not in record
    assert "coverage_end_date" not in record


def test_values_are_made_wire_friendly():
    record = ResultMapper.map_row(
        make_row(notes="bring x-rays", coverage_end_date=date(2024, 12, 31)),
        PROJECTION,
    )
    assert record == {
        "id": "00000000-0000-0000-0000-000000000001",
        "title": "Follow-up",
        "room_id": None,
        "notes": "bring x-rays",
        "start_time": "2024-05-01T09:00:00.000Z",
        "coverage_end_date": "2024-12-31",
        "amount": 12.5,
    }


def test_field_order_follows_projection():
    assert list(ResultMapper.map_row(make_row(), PROJECTION)) == ["id", "title", "room_id", "start_time", "amount"]


def test_mapping_rows_and_missing_attributes():
    row = {"id": 7, "title": "Raw"}
    record = ResultMapper.map_row(row, PROJECTION)
    assert record["id"] == 7
    assert record["start_time"] is None
    assert "notes" not in record


def test_map_rows_preserves_order():
    rows = [make_row(title=t) for t in ("b", "a", "c")]
    assert [r["title"] for r in ResultMapper.map_rows(rows, PROJECTION)] == ["b", "a", "c"]


def test_extend_appends_fields():
    detail = Projection("id").extend(optional("notes"))
    assert detail.names == ["id", "notes"]
