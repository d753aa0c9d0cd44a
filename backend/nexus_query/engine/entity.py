"""NEXUS Query — Per-entity query definition consumed by the engine."""
from collections.abc import Iterable, Sequence

from nexus_query.config import get_settings
from nexus_query.engine.compiler import column_for
from nexus_query.engine.mapper import Projection
from nexus_query.engine.predicate import FilterField
from nexus_query.engine.scope import ScopePolicy
from nexus_query.engine.sorting import SortAllowList


class EntityQuery:
    """
    Everything the engine needs to know about one listable entity:
    the model, who sees which rows, what can be filtered and sorted, and
    what the outbound records look like.

    Column names are checked against the model when the definition is
    built, so a typo fails at import time instead of at query time.
    """

    def __init__(
        self,
        name: str,
        model: type,
        *,
        scope: ScopePolicy,
        sort: SortAllowList,
        summary: Projection,
        detail: Projection | None = None,
        filters: Sequence[FilterField] = (),
        search_fields: Sequence[str] = (),
        soft_delete_column: str | None = "deleted_at",
        primary_key: str = "id",
        default_limit: int | None = None,
        max_limit: int | None = None,
        clamp_limit: bool = True,
        include_deleted_roles: Iterable[str] | None = None,
    ):
        self.name = name
        self.model = model
        self.scope = scope
        self.sort = sort
        self.summary = summary
        self.detail = detail or summary
        self.filters = tuple(filters)
        self.search_fields = tuple(search_fields)
        self.soft_delete_column = soft_delete_column
        self.primary_key = primary_key
        self._default_limit = default_limit
        self._max_limit = max_limit
        self.clamp_limit = clamp_limit
        self._include_deleted_roles = set(include_deleted_roles) if include_deleted_roles is not None else None

        names = [f.name for f in self.filters]
        if len(names) != len(set(names)):
            raise ValueError(f"{name}: duplicate filter field names")
        for projection in (self.summary, self.detail):
            if len(projection.names) != len(set(projection.names)):
                raise ValueError(f"{name}: duplicate output field names")
        for column in self._referenced_columns():
            column_for(model, column)

    def _referenced_columns(self) -> set[str]:
        columns = {f.target for f in self.filters}
        columns.update(self.search_fields)
        columns.update(self.sort.fields.values())
        columns.update(self.scope.columns())
        columns.add(self.primary_key)
        if self.soft_delete_column:
            columns.add(self.soft_delete_column)
        return columns

    @property
    def default_limit(self) -> int:
        return self._default_limit or get_settings().DEFAULT_PAGE_LIMIT

    @property
    def max_limit(self) -> int:
        return self._max_limit or get_settings().MAX_PAGE_LIMIT

    def may_include_deleted(self, role: str) -> bool:
        if not self.soft_delete_column:
            return False
        roles = self._include_deleted_roles
        if roles is None:
            roles = set(get_settings().INCLUDE_DELETED_ROLES)
        return role in roles

    def __repr__(self) -> str:
        return f"<EntityQuery {self.name}>"
