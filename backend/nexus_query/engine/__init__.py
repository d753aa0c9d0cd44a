"""NEXUS Query — scoped filtered pagination engine."""
from nexus_query.engine.entity import EntityQuery
from nexus_query.engine.mapper import OutField, OutKind, Presence, Projection, ResultMapper, date_only, nullable, optional, timestamp
from nexus_query.engine.pagination import PageWindow, PaginationCalculator
from nexus_query.engine.predicate import (
    Constraint,
    ConstraintOp,
    ConstraintSource,
    FilterField,
    FilterKind,
    Predicate,
    PredicateBuilder,
    ValueType,
)
from nexus_query.engine.query_engine import QueryEngine, QueryPlan
from nexus_query.engine.scope import (
    UNRESTRICTED,
    ScopeContext,
    ScopePolicy,
    ScopeResolver,
    ScopeRule,
    ScopeSource,
    owned_by_principal,
    within_organization,
    within_tenant,
)
from nexus_query.engine.sorting import SortAllowList, SortDirection, SortResolver, SortSpec
from nexus_query.engine.timestamps import to_date, to_datetime, to_iso_date, to_iso_utc

__all__ = [
    "EntityQuery",
    "OutField", "OutKind", "Presence", "Projection", "ResultMapper", "date_only", "nullable", "optional", "timestamp",
    "PageWindow", "PaginationCalculator",
    "Constraint", "ConstraintOp", "ConstraintSource", "FilterField", "FilterKind", "Predicate", "PredicateBuilder", "ValueType",
    "QueryEngine", "QueryPlan",
    "UNRESTRICTED", "ScopeContext", "ScopePolicy", "ScopeResolver", "ScopeRule", "ScopeSource",
    "owned_by_principal", "within_organization", "within_tenant",
    "SortAllowList", "SortDirection", "SortResolver", "SortSpec",
    "to_date", "to_datetime", "to_iso_date", "to_iso_utc",
]
