"""NEXUS Query — Scope resolver: principal -> mandatory predicate fragment."""
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nexus_query.core.errors import AuthorizationError
from nexus_query.engine.predicate import Constraint, ConstraintOp, ConstraintSource


class ScopeContext(BaseModel):
    """Verified principal for one request. Built by the transport, never from the request body."""

    model_config = ConfigDict(frozen=True)

    principal_id: UUID
    role: str
    tenant_id: UUID | None = None
    organization_id: UUID | None = None
    extra_claims: dict[str, Any] = Field(default_factory=dict)

    @field_validator("role", mode="before")
    @classmethod
    def _role_value(cls, v: Any) -> Any:
        return v.value if isinstance(v, Enum) else v


class ScopeSource(str, Enum):
    PRINCIPAL_ID = "principal_id"
    TENANT_ID = "tenant_id"
    ORGANIZATION_ID = "organization_id"
    CLAIM = "claim"


class ScopeRule(BaseModel):
    """`column` must equal the value taken from the principal."""

    model_config = ConfigDict(frozen=True)

    column: str
    source: ScopeSource
    claim: str | None = None

    def value_from(self, context: ScopeContext) -> Any:
        if self.source is ScopeSource.CLAIM:
            return context.extra_claims.get(self.claim or self.column)
        return getattr(context, self.source.value)

    @property
    def attribute(self) -> str:
        if self.source is ScopeSource.CLAIM:
            return f"claim '{self.claim or self.column}'"
        return self.source.value


# Explicit marker for roles that see every row of an entity.
UNRESTRICTED: tuple[ScopeRule, ...] = ()


def owned_by_principal(column: str) -> ScopeRule:
    return ScopeRule(column=column, source=ScopeSource.PRINCIPAL_ID)


def within_tenant(column: str = "tenant_id") -> ScopeRule:
    return ScopeRule(column=column, source=ScopeSource.TENANT_ID)


def within_organization(column: str = "organization_id") -> ScopeRule:
    return ScopeRule(column=column, source=ScopeSource.ORGANIZATION_ID)


class ScopePolicy:
    """Role -> scope rules for one entity. Roles not listed are refused."""

    def __init__(self, rules_by_role: Mapping[str | Enum, Sequence[ScopeRule]]):
        self._rules: dict[str, tuple[ScopeRule, ...]] = {}
        for role, rules in rules_by_role.items():
            key = role.value if isinstance(role, Enum) else role
            self._rules[key] = tuple(rules)

    def roles(self) -> list[str]:
        return sorted(self._rules)

    def rules_for(self, role: str) -> tuple[ScopeRule, ...] | None:
        return self._rules.get(role)

    def columns(self) -> set[str]:
        return {rule.column for rules in self._rules.values() for rule in rules}


class ScopeResolver:
    """Derives the constraints every query for this principal must carry."""

    @staticmethod
    def resolve(context: ScopeContext, policy: ScopePolicy, entity: str = "records") -> tuple[Constraint, ...]:
        """
        Return the mandatory fragment for `context`.
        Raises AuthorizationError when the role has no scope for the entity or
        the principal lacks an attribute a rule needs. Nothing is queried on
        failure.
        """
        rules = policy.rules_for(context.role)
        if rules is None:
            raise AuthorizationError(f"Role '{context.role}' may not list {entity}")

        fragment = []
        for rule in rules:
            value = rule.value_from(context)
            if value is None:
                raise AuthorizationError(f"Principal has no {rule.attribute} required to list {entity}")
            fragment.append(
                Constraint(field=rule.column, op=ConstraintOp.EQ, value=value, source=ConstraintSource.SCOPE)
            )
        return tuple(fragment)
