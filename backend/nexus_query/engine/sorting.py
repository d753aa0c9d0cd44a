"""NEXUS Query — Sort resolver: caller token -> allow-listed (field, direction)."""
from collections.abc import Iterable, Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict

from nexus_query.core.errors import QueryValidationError


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


_DIRECTION_ALIASES = {
    "asc": SortDirection.ASC,
    "ascending": SortDirection.ASC,
    "desc": SortDirection.DESC,
    "descending": SortDirection.DESC,
}


class SortSpec(BaseModel):
    """Resolved sort. `column` always comes from the allow-list, never from the caller."""

    model_config = ConfigDict(frozen=True)

    field: str
    column: str
    direction: SortDirection


class SortAllowList:
    """Closed set of sortable fields for one entity.

    `fields` maps the public sort name to the model column; an iterable of
    names means public name == column.
    """

    def __init__(
        self,
        fields: Mapping[str, str] | Iterable[str],
        default: str,
        default_direction: SortDirection | str = SortDirection.DESC,
    ):
        if isinstance(fields, Mapping):
            self.fields = dict(fields)
        else:
            self.fields = {name: name for name in fields}
        if default not in self.fields:
            raise ValueError(f"Default sort field '{default}' is not in the allow-list")
        self.default_field = default
        self.default_direction = SortDirection(default_direction)

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def column_for(self, name: str) -> str:
        return self.fields[name]

    def options(self) -> list[str]:
        return sorted(self.fields)

    def default_spec(self) -> SortSpec:
        return SortSpec(
            field=self.default_field,
            column=self.fields[self.default_field],
            direction=self.default_direction,
        )


class SortResolver:
    """Maps sort tokens like ``"created_at"``, ``"created_at desc"``,
    ``"price:asc"``, ``"-created_at"`` or ``"+price"`` onto an allow-list."""

    @staticmethod
    def parse_direction(raw: str | None) -> SortDirection | None:
        if raw is None:
            return None
        if not isinstance(raw, str):
            raise QueryValidationError("Sort direction must be 'asc' or 'desc'", {"order": "invalid direction"})
        text = raw.strip().lower()
        if not text:
            return None
        direction = _DIRECTION_ALIASES.get(text)
        if direction is None:
            raise QueryValidationError(
                f"Unsupported sort direction '{raw}'. Use 'asc' or 'desc'",
                {"order": "invalid direction"},
            )
        return direction

    @staticmethod
    def split_token(token: str) -> tuple[str, str | None]:
        """Split a token into (field, direction text or None)."""
        text = token.strip()
        if text.startswith("-"):
            return text[1:].strip(), "desc"
        if text.startswith("+"):
            return text[1:].strip(), "asc"
        parts = text.replace(":", " ").split()
        if len(parts) == 1:
            return parts[0], None
        if len(parts) == 2:
            return parts[0], parts[1]
        raise QueryValidationError(f"Malformed sort token '{token}'", {"sort": "malformed token"})

    @staticmethod
    def resolve(
        token: str | None,
        allow_list: SortAllowList,
        direction: str | None = None,
    ) -> SortSpec:
        """
        Resolve a caller token against the allow-list.
        A direction inside the token wins over `direction`; with neither, the
        entity's default direction applies. Unknown fields are a validation
        error: there is no fallback to the raw caller string.
        """
        requested = SortResolver.parse_direction(direction)

        if token is None or (isinstance(token, str) and not token.strip()):
            default = allow_list.default_spec()
            if requested is None:
                return default
            return SortSpec(field=default.field, column=default.column, direction=requested)

        if not isinstance(token, str):
            raise QueryValidationError("Sort token must be a string", {"sort": "invalid type"})

        field, token_direction = SortResolver.split_token(token)
        if field not in allow_list:
            raise QueryValidationError(
                f"Unsupported sort field '{field}'. Allowed: {', '.join(allow_list.options())}",
                {"sort": "unknown field"},
            )

        resolved = SortResolver.parse_direction(token_direction) or requested or allow_list.default_direction
        return SortSpec(field=field, column=allow_list.column_for(field), direction=resolved)
