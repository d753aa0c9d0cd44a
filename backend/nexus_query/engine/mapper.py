"""NEXUS Query — Result mapper: persisted row -> outbound summary/detail mapping.

Presence rules per field:
- REQUIRED: always emitted, value as stored
- NULLABLE: always emitted; a stored NULL is emitted as None
- OPTIONAL: a stored NULL (or a missing attribute) leaves the key out

An omitted key and a None value are different things on the wire and are
kept apart.
"""
import uuid
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from nexus_query.engine.timestamps import to_iso_date, to_iso_utc

_MISSING = object()


class OutKind(str, Enum):
    VALUE = "value"
    TIMESTAMP = "timestamp"
    DATE = "date"


class Presence(str, Enum):
    REQUIRED = "required"
    NULLABLE = "nullable"
    OPTIONAL = "optional"


class OutField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: OutKind = OutKind.VALUE
    presence: Presence = Presence.REQUIRED
    source: str | None = None

    @property
    def attribute(self) -> str:
        return self.source or self.name


def timestamp(name: str, presence: Presence = Presence.REQUIRED) -> OutField:
    return OutField(name=name, kind=OutKind.TIMESTAMP, presence=presence)


def date_only(name: str, presence: Presence = Presence.REQUIRED) -> OutField:
    return OutField(name=name, kind=OutKind.DATE, presence=presence)


def nullable(name: str) -> OutField:
    return OutField(name=name, presence=Presence.NULLABLE)


def optional(name: str) -> OutField:
    return OutField(name=name, presence=Presence.OPTIONAL)


class Projection:
    """Ordered outbound shape for one entity view."""

    def __init__(self, *fields: OutField | str):
        self.fields: tuple[OutField, ...] = tuple(
            f if isinstance(f, OutField) else OutField(name=f) for f in fields
        )

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    def extend(self, *fields: OutField | str) -> "Projection":
        return Projection(*self.fields, *fields)


def _plain(value: Any) -> Any:
    if isinstance(value, datetime):
        return to_iso_utc(value)
    if isinstance(value, date):
        return to_iso_date(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return value.value
    return value


class ResultMapper:
    """Pure projection; no validation, no I/O."""

    @staticmethod
    def _read(row: Any, attribute: str) -> Any:
        if isinstance(row, Mapping):
            return row.get(attribute, _MISSING)
        return getattr(row, attribute, _MISSING)

    @staticmethod
    def map_row(row: Any, projection: Projection) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for field in projection.fields:
            value = ResultMapper._read(row, field.attribute)
            if value is _MISSING or value is None:
                if field.presence is Presence.OPTIONAL:
                    continue
                out[field.name] = None
                continue
            if field.kind is OutKind.TIMESTAMP:
                out[field.name] = to_iso_utc(value)
            elif field.kind is OutKind.DATE:
                out[field.name] = to_iso_date(value)
            else:
                out[field.name] = _plain(value)
        return out

    @staticmethod
    def map_rows(rows: Iterable[Any], projection: Projection) -> list[dict[str, Any]]:
        return [ResultMapper.map_row(row, projection) for row in rows]
