"""NEXUS Query — Error taxonomy surfaced to the transport layer."""
from enum import Enum


class ErrorKind(str, Enum):
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORE_FAILURE = "store_failure"


class QueryError(Exception):
    """Base for every error the query layer raises on purpose.

    `kind` is stable and machine-readable; `message` is safe to show to the
    caller and never contains predicate or SQL detail.
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, field_errors: dict[str, str] | None = None):
        self.message = message
        self.field_errors = field_errors or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "code": self.kind.value,
            "message": self.message,
            "field_errors": [{"field": k, "message": v} for k, v in self.field_errors.items()],
        }


class AuthorizationError(QueryError):
    """Principal lacks the scoping attribute this query needs."""

    kind = ErrorKind.AUTHORIZATION


class QueryValidationError(QueryError):
    """Malformed pagination, unknown sort token, or a filter value of the wrong kind."""

    kind = ErrorKind.VALIDATION


class NotFoundError(QueryError):
    """Single-record lookup found nothing visible to the caller."""

    kind = ErrorKind.NOT_FOUND


class StoreFailureError(QueryError):
    """The persistence layer failed. Not retried here."""

    kind = ErrorKind.STORE_FAILURE
