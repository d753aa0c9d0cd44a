"""NEXUS Query — Predicate builder.

A Predicate is plain data: a conjunction of (field, op, value) constraints.
Nothing in here touches SQLAlchemy; `compiler.py` turns it into a WHERE
clause. That keeps the predicate safe to log for audit.
"""
import logging
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from nexus_query.core.errors import QueryValidationError
from nexus_query.engine.timestamps import to_date, to_datetime

logger = logging.getLogger(__name__)

SEARCH_KEY = "search"


class ConstraintOp(str, Enum):
    EQ = "eq"
    IS_NULL = "is_null"
    CONTAINS = "contains"
    ICONTAINS = "icontains"
    GTE = "gte"
    LTE = "lte"
    IN = "in"
    SEARCH = "search"


class ConstraintSource(str, Enum):
    SCOPE = "scope"
    FILTER = "filter"
    SYSTEM = "system"


class Constraint(BaseModel):
    """One atomic constraint. SEARCH spans `columns` with an OR; everything else targets `field`."""

    model_config = ConfigDict(frozen=True)

    field: str
    op: ConstraintOp
    value: Any = None
    columns: tuple[str, ...] = ()
    source: ConstraintSource = ConstraintSource.FILTER

    def describe(self) -> dict:
        out = {"field": self.field, "op": self.op.value, "source": self.source.value}
        if self.op is not ConstraintOp.IS_NULL:
            out["value"] = _printable(self.value)
        if self.columns:
            out["columns"] = list(self.columns)
        return out


class Predicate(BaseModel):
    """AND of constraints, built fresh per request."""

    model_config = ConfigDict(frozen=True)

    constraints: tuple[Constraint, ...] = ()

    def __len__(self) -> int:
        return len(self.constraints)

    def by_source(self, source: ConstraintSource) -> tuple[Constraint, ...]:
        return tuple(c for c in self.constraints if c.source is source)

    def scope_constraints(self) -> tuple[Constraint, ...]:
        return self.by_source(ConstraintSource.SCOPE)

    def describe(self) -> list[dict]:
        return [c.describe() for c in self.constraints]


class FilterKind(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    RANGE = "range"
    ONE_OF = "one_of"


class ValueType(str, Enum):
    STRING = "string"
    UUID = "uuid"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    DATE = "date"


class FilterField(BaseModel):
    """Declarative description of one filterable request field."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: FilterKind = FilterKind.EQUALS
    value_type: ValueType = ValueType.STRING
    column: str | None = None
    nullable: bool = False
    case_sensitive: bool = False
    choices: tuple[str, ...] | None = None

    @property
    def target(self) -> str:
        return self.column or self.name

    def request_keys(self) -> tuple[str, ...]:
        """Every wire key this field reads."""
        if self.kind is FilterKind.RANGE:
            return (self.name, f"{self.name}_from", f"{self.name}_to")
        return (self.name,)


def _printable(value: Any) -> Any:
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_printable(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


def _invalid(field: FilterField, expected: str) -> QueryValidationError:
    return QueryValidationError(
        f"Invalid value for filter '{field.name}': expected {expected}",
        {field.name: f"expected {expected}"},
    )


def coerce_value(field: FilterField, value: Any) -> Any:
    """Coerce one wire value to the field's declared type, or raise a validation error."""
    vt = field.value_type
    if vt is ValueType.STRING:
        if isinstance(value, Enum):
            value = value.value
        if not isinstance(value, str):
            raise _invalid(field, "a string")
        result: Any = value
    elif vt is ValueType.UUID:
        if isinstance(value, uuid.UUID):
            result = value
        elif isinstance(value, str):
            try:
                result = uuid.UUID(value)
            except ValueError:
                raise _invalid(field, "a UUID") from None
        else:
            raise _invalid(field, "a UUID")
    elif vt is ValueType.INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            raise _invalid(field, "an integer")
        result = value
    elif vt is ValueType.FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise _invalid(field, "a number")
        result = float(value)
    elif vt is ValueType.BOOLEAN:
        if isinstance(value, bool):
            result = value
        elif isinstance(value, str) and value.lower() in ("true", "false"):
            result = value.lower() == "true"
        else:
            raise _invalid(field, "a boolean")
    elif vt is ValueType.DATETIME:
        if not isinstance(value, (str, datetime, date)):
            raise _invalid(field, "an ISO-8601 timestamp")
        try:
            result = to_datetime(value)
        except QueryValidationError:
            raise _invalid(field, "an ISO-8601 timestamp") from None
    elif vt is ValueType.DATE:
        if not isinstance(value, (str, datetime, date)):
            raise _invalid(field, "an ISO-8601 date")
        try:
            result = to_date(value)
        except QueryValidationError:
            raise _invalid(field, "an ISO-8601 date") from None
    else:  # pragma: no cover
        raise _invalid(field, vt.value)

    if field.choices is not None and result not in field.choices:
        raise QueryValidationError(
            f"Invalid value for filter '{field.name}': must be one of {list(field.choices)}",
            {field.name: "not an allowed value"},
        )
    return result


def _is_date_only(value: Any) -> bool:
    if isinstance(value, datetime):
        return False
    if isinstance(value, date):
        return True
    return isinstance(value, str) and len(value.strip()) == 10


def _upper_bound(field: FilterField, value: Any) -> Any:
    """Inclusive upper bound. A bare date on a timestamp field covers that whole UTC day."""
    bound = coerce_value(field, value)
    if field.value_type is ValueType.DATETIME and _is_date_only(value):
        bound += timedelta(days=1) - timedelta(microseconds=1)
    return bound


class PredicateBuilder:
    """Merges the mandatory scope fragment with the caller's optional filters."""

    @staticmethod
    def build(
        scope_fragment: Sequence[Constraint],
        filter_fields: Sequence[FilterField],
        values: Mapping[str, Any],
        *,
        search_fields: Sequence[str] = (),
        soft_delete_column: str | None = None,
        include_deleted: bool = False,
    ) -> Predicate:
        """
        Build the conjunctive predicate for one request.

        - absent key: no constraint
        - explicit None: IS NULL when the field is nullable, otherwise no constraint
        - value: equality / containment / one-of / range bounds per field kind

        Caller values for a column the scope already constrains are dropped;
        the scope value is the only one that reaches the store.
        """
        constraints: list[Constraint] = list(scope_fragment)
        scoped_columns = {c.field for c in scope_fragment}

        for field in filter_fields:
            if field.target in scoped_columns:
                supplied = [k for k in field.request_keys() if values.get(k) is not None]
                if supplied:
                    logger.warning(
                        "Discarding caller-supplied %s; value is derived from the principal",
                        ", ".join(supplied),
                    )
                continue
            constraints.extend(PredicateBuilder._constraints_for(field, values))

        search = PredicateBuilder._search_constraint(values.get(SEARCH_KEY), search_fields)
        if search is not None:
            constraints.append(search)

        if soft_delete_column and not include_deleted:
            constraints.append(
                Constraint(field=soft_delete_column, op=ConstraintOp.IS_NULL, source=ConstraintSource.SYSTEM)
            )

        return Predicate(constraints=tuple(constraints))

    @staticmethod
    def _constraints_for(field: FilterField, values: Mapping[str, Any]) -> list[Constraint]:
        if field.kind is FilterKind.RANGE:
            return PredicateBuilder._range_constraints(field, values)

        if field.name not in values:
            return []
        raw = values[field.name]
        if raw is None:
            if field.nullable:
                return [Constraint(field=field.target, op=ConstraintOp.IS_NULL)]
            return []

        if field.kind is FilterKind.EQUALS:
            return [Constraint(field=field.target, op=ConstraintOp.EQ, value=coerce_value(field, raw))]

        if field.kind is FilterKind.CONTAINS:
            if not isinstance(raw, str):
                raise _invalid(field, "a string")
            if raw == "":
                return []
            op = ConstraintOp.CONTAINS if field.case_sensitive else ConstraintOp.ICONTAINS
            return [Constraint(field=field.target, op=op, value=raw)]

        if field.kind is FilterKind.ONE_OF:
            items = raw if isinstance(raw, (list, tuple, set, frozenset)) else [raw]
            coerced = tuple(coerce_value(field, item) for item in items)
            return [Constraint(field=field.target, op=ConstraintOp.IN, value=coerced)]

        return []  # pragma: no cover

    @staticmethod
    def _range_constraints(field: FilterField, values: Mapping[str, Any]) -> list[Constraint]:
        lower = upper = None
        if field.name in values:
            raw = values[field.name]
            if raw is None:
                if field.nullable:
                    return [Constraint(field=field.target, op=ConstraintOp.IS_NULL)]
            elif isinstance(raw, Mapping):
                lower = raw.get("from", raw.get("from_"))
                upper = raw.get("to")
            elif isinstance(raw, BaseModel):
                dumped = raw.model_dump(by_alias=True)
                lower, upper = dumped.get("from"), dumped.get("to")
            else:
                raise _invalid(field, "an object with 'from' and/or 'to'")

        if lower is None:
            lower = values.get(f"{field.name}_from")
        if upper is None:
            upper = values.get(f"{field.name}_to")

        # from > to is allowed: the store just returns nothing
        constraints = []
        if lower is not None:
            constraints.append(Constraint(field=field.target, op=ConstraintOp.GTE, value=coerce_value(field, lower)))
        if upper is not None:
            constraints.append(Constraint(field=field.target, op=ConstraintOp.LTE, value=_upper_bound(field, upper)))
        return constraints

    @staticmethod
    def _search_constraint(raw: Any, search_fields: Sequence[str]) -> Constraint | None:
        if raw is None or not search_fields:
            return None
        if not isinstance(raw, str):
            raise QueryValidationError("Search must be a string", {SEARCH_KEY: "expected a string"})
        term = raw.strip()
        if not term:
            return None
        return Constraint(field=SEARCH_KEY, op=ConstraintOp.SEARCH, value=term, columns=tuple(search_fields))
