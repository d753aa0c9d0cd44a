"""NEXUS Query — API response helpers."""
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from nexus_query.core.errors import ErrorKind, QueryError

T = TypeVar("T")

# Transport status for each error kind.
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORE_FAILURE: 503,
}


class APIResponse(BaseModel, Generic[T]):
    """Standard unified response envelope."""
    data: T | None = None
    error: dict[str, Any] | None = None
    meta: dict[str, Any] | None = None


def success_response(data: Any, meta: dict | None = None) -> dict:
    return {"data": data, "error": None, "meta": meta}


def error_response(code: str, message: str, field_errors: list[dict] | None = None, meta: dict | None = None) -> dict:
    return {
        "data": None,
        "error": {
            "code": code,
            "message": message,
            "field_errors": field_errors or []
        },
        "meta": meta
    }


def query_error_response(exc: QueryError) -> tuple[int, dict]:
    """Status code and body for a QueryError."""
    body = exc.to_dict()
    return STATUS_BY_KIND.get(exc.kind, 500), error_response(body["code"], body["message"], body["field_errors"])
