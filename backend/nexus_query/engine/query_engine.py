"""NEXUS Query — Query engine: scoped, filtered, sorted, paginated reads.

Per request:
    resolve scope -> build predicate -> resolve sort -> compute pagination
    -> count + fetch -> map rows -> assemble envelope

Everything before the store round-trip is local and synchronous, so scope,
sort and pagination errors never reach the database.

Count and fetch are two statements on the same session. A write landing
between them can leave `records` slightly out of step with `data`; that is
accepted and not treated as an error. Cancelling the awaiting task cancels
the in-flight statement and nothing partial is returned. No retries here.
"""
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_query.core.errors import NotFoundError, QueryValidationError, StoreFailureError
from nexus_query.engine.compiler import count_statement, page_statement, where_clauses
from nexus_query.engine.entity import EntityQuery
from nexus_query.engine.mapper import ResultMapper
from nexus_query.engine.pagination import PageWindow, PaginationCalculator
from nexus_query.engine.predicate import (
    Constraint,
    ConstraintOp,
    ConstraintSource,
    Predicate,
    PredicateBuilder,
)
from nexus_query.engine.scope import ScopeContext, ScopeResolver
from nexus_query.engine.sorting import SortResolver, SortSpec
from nexus_query.schemas.common import PageEnvelope, Pagination

logger = logging.getLogger(__name__)

STORE_FAILURE_MESSAGE = "The record store could not complete the query"


class QueryPlan(BaseModel):
    """Everything decided before the store is touched."""

    model_config = ConfigDict(frozen=True)

    predicate: Predicate
    sort: SortSpec
    window: PageWindow
    include_deleted: bool = False


class QueryEngine:
    """Stateless orchestrator; every method works on request-scoped values only."""

    @staticmethod
    def normalize_request(request: BaseModel | Mapping[str, Any] | None) -> dict[str, Any]:
        """Wire request -> dict of the keys the caller actually sent (explicit None kept)."""
        if request is None:
            return {}
        if isinstance(request, BaseModel):
            return request.model_dump(exclude_unset=True, by_alias=True)
        if isinstance(request, Mapping):
            return dict(request)
        raise QueryValidationError("Filter request must be an object")

    @staticmethod
    def _include_deleted(context: ScopeContext, entity: EntityQuery, values: Mapping[str, Any]) -> bool:
        requested = values.get("include_deleted")
        if requested is None or requested is False:
            return False
        if not isinstance(requested, bool):
            raise QueryValidationError("'include_deleted' must be a boolean", {"include_deleted": "expected a boolean"})
        if entity.may_include_deleted(context.role):
            return True
        logger.warning(
            "Ignoring include_deleted for %s: role %s is not allowed to see deleted rows",
            entity.name, context.role,
        )
        return False

    @staticmethod
    def plan(
        context: ScopeContext,
        entity: EntityQuery,
        request: BaseModel | Mapping[str, Any] | None = None,
    ) -> QueryPlan:
        """Resolve scope, predicate, sort and page window. Pure; raises before any I/O."""
        values = QueryEngine.normalize_request(request)

        scope_fragment = ScopeResolver.resolve(context, entity.scope, entity.name)
        include_deleted = QueryEngine._include_deleted(context, entity, values)
        predicate = PredicateBuilder.build(
            scope_fragment,
            entity.filters,
            values,
            search_fields=entity.search_fields,
            soft_delete_column=entity.soft_delete_column,
            include_deleted=include_deleted,
        )
        sort = SortResolver.resolve(values.get("sort"), entity.sort, values.get("order"))
        window = PaginationCalculator.window(
            values.get("page"),
            values.get("limit"),
            default_limit=entity.default_limit,
            max_limit=entity.max_limit,
            clamp=entity.clamp_limit,
        )
        return QueryPlan(predicate=predicate, sort=sort, window=window, include_deleted=include_deleted)

    @staticmethod
    async def paginate(
        db: AsyncSession,
        context: ScopeContext,
        entity: EntityQuery,
        request: BaseModel | Mapping[str, Any] | None = None,
    ) -> PageEnvelope:
        """Run one scoped page query and return the complete envelope."""
        plan = QueryEngine.plan(context, entity, request)
        logger.debug("%s predicate (%d constraints): %s", entity.name, len(plan.predicate), plan.predicate.describe())

        try:
            total = (await db.execute(count_statement(entity.model, plan.predicate))).scalar_one()
            result = await db.execute(
                page_statement(entity.model, plan.predicate, plan.sort, plan.window, entity.primary_key)
            )
            rows = list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.error("Store failure listing %s: %s", entity.name, exc, exc_info=True)
            raise StoreFailureError(STORE_FAILURE_MESSAGE) from exc

        pages = PaginationCalculator.page_count(total, plan.window.limit)
        envelope = PageEnvelope(
            pagination=Pagination(current=plan.window.current, limit=plan.window.limit, records=total, pages=pages),
            data=ResultMapper.map_rows(rows, entity.summary),
        )
        logger.info(
            "query entity=%s principal=%s role=%s sort=%s:%s page=%d limit=%d records=%d returned=%d",
            entity.name, context.principal_id, context.role,
            plan.sort.field, plan.sort.direction.value,
            plan.window.current, plan.window.limit, total, len(envelope.data),
        )
        return envelope

    @staticmethod
    async def get_one(
        db: AsyncSession,
        context: ScopeContext,
        entity: EntityQuery,
        record_id: Any,
    ) -> dict[str, Any]:
        """
        Fetch one record through the same scope and soft-delete rules.
        Missing, deleted and out-of-scope records all raise the same NotFoundError.
        """
        scope_fragment = ScopeResolver.resolve(context, entity.scope, entity.name)
        predicate = PredicateBuilder.build(
            scope_fragment,
            (),
            {},
            soft_delete_column=entity.soft_delete_column,
        )
        predicate = Predicate(
            constraints=predicate.constraints
            + (Constraint(field=entity.primary_key, op=ConstraintOp.EQ, value=record_id, source=ConstraintSource.SYSTEM),)
        )

        try:
            result = await db.execute(select(entity.model).where(*where_clauses(entity.model, predicate)).limit(1))
            row = result.scalars().first()
        except SQLAlchemyError as exc:
            logger.error("Store failure reading %s: %s", entity.name, exc, exc_info=True)
            raise StoreFailureError(STORE_FAILURE_MESSAGE) from exc

        if row is None:
            raise NotFoundError(f"{entity.name} record not found")
        return ResultMapper.map_row(row, entity.detail)
