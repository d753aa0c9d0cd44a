"""NEXUS Query — Predicate/sort -> SQLAlchemy statements."""
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from nexus_query.engine.pagination import PageWindow
from nexus_query.engine.predicate import Constraint, ConstraintOp, Predicate
from nexus_query.engine.sorting import SortDirection, SortSpec


def column_for(model: type, name: str) -> Any:
    """Mapped column attribute `name` on `model`. Names come from entity definitions only."""
    attr = getattr(model, name, None)
    if attr is None or not hasattr(attr, "property"):
        raise ValueError(f"{model.__name__} has no mapped column '{name}'")
    return attr


def constraint_clause(model: type, constraint: Constraint) -> ColumnElement:
    op = constraint.op
    if op is ConstraintOp.SEARCH:
        return or_(*(column_for(model, c).icontains(constraint.value, autoescape=True) for c in constraint.columns))

    column = column_for(model, constraint.field)
    if op is ConstraintOp.EQ:
        return column == constraint.value
    if op is ConstraintOp.IS_NULL:
        return column.is_(None)
    if op is ConstraintOp.CONTAINS:
        return column.contains(constraint.value, autoescape=True)
    if op is ConstraintOp.ICONTAINS:
        return column.icontains(constraint.value, autoescape=True)
    if op is ConstraintOp.GTE:
        return column >= constraint.value
    if op is ConstraintOp.LTE:
        return column <= constraint.value
    if op is ConstraintOp.IN:
        return column.in_(list(constraint.value))
    raise ValueError(f"Unsupported constraint op: {op}")


def where_clauses(model: type, predicate: Predicate) -> list[ColumnElement]:
    return [constraint_clause(model, c) for c in predicate.constraints]


def order_by_clauses(model: type, sort: SortSpec, tie_breaker: str | None = "id") -> list:
    """Resolved sort plus the primary key so equal sort keys page deterministically."""
    column = column_for(model, sort.column)
    clauses = [column.asc() if sort.direction is SortDirection.ASC else column.desc()]
    if tie_breaker and tie_breaker != sort.column:
        clauses.append(column_for(model, tie_breaker).asc())
    return clauses


def count_statement(model: type, predicate: Predicate) -> Select:
    return select(func.count()).select_from(model).where(*where_clauses(model, predicate))


def page_statement(
    model: type,
    predicate: Predicate,
    sort: SortSpec,
    window: PageWindow,
    tie_breaker: str | None = "id",
) -> Select:
    return (
        select(model)
        .where(*where_clauses(model, predicate))
        .order_by(*order_by_clauses(model, sort, tie_breaker))
        .offset(window.offset)
        .limit(window.limit)
    )
