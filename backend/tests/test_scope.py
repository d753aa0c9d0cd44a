"""Scope resolution from the principal."""
import uuid

import pytest
from pydantic import ValidationError

from conftest import ORG_ID, PROVIDER_P, TENANT_ID, make_context
from nexus_query.core.errors import AuthorizationError
from nexus_query.core.roles import RoleEnum
from nexus_query.engine.predicate import ConstraintOp, ConstraintSource
from nexus_query.engine.scope import (
    UNRESTRICTED,
    ScopePolicy,
    ScopeResolver,
    ScopeRule,
    ScopeSource,
    owned_by_principal,
    within_organization,
    within_tenant,
)

POLICY = ScopePolicy({
    RoleEnum.MEDICAL_DOCTOR: (owned_by_principal("provider_id"),),
    RoleEnum.ORGANIZATION_ADMIN: (within_organization(),),
    RoleEnum.NURSE: (within_tenant(), ScopeRule(column="ward", source=ScopeSource.CLAIM)),
    RoleEnum.SYSTEM_ADMIN: UNRESTRICTED,
})


def test_owner_scope():
    (constraint,) = ScopeResolver.resolve(make_context(), POLICY)
    assert constraint.field == "provider_id"
    assert constraint.op is ConstraintOp.EQ
    assert constraint.value == PROVIDER_P
    assert constraint.source is ConstraintSource.SCOPE


def test_organization_scope():
    (constraint,) = ScopeResolver.resolve(make_context(RoleEnum.ORGANIZATION_ADMIN), POLICY)
    assert (constraint.field, constraint.value) == ("organization_id", ORG_ID)


def test_claim_scope():
    context = make_context(RoleEnum.NURSE, extra_claims={"ward": "icu"})
    fragment = ScopeResolver.resolve(context, POLICY)
    assert [(c.field, c.value) for c in fragment] == [("tenant_id", TENANT_ID), ("ward", "icu")]


def test_unrestricted_role_has_empty_fragment():
    assert ScopeResolver.resolve(make_context(RoleEnum.SYSTEM_ADMIN), POLICY) == ()


def test_missing_attribute_is_an_authorization_error():
    context = make_context(RoleEnum.ORGANIZATION_ADMIN, organization_id=None)
    with pytest.raises(AuthorizationError) as exc_info:
        ScopeResolver.resolve(context, POLICY, "appointments")
    assert "organization_id" in exc_info.value.message
    assert exc_info.value.field_errors == {}


def test_missing_claim_is_an_authorization_error():
    with pytest.raises(AuthorizationError):
        ScopeResolver.resolve(make_context(RoleEnum.NURSE), POLICY)


def test_unlisted_role_is_refused():
    with pytest.raises(AuthorizationError):
        ScopeResolver.resolve(make_context(RoleEnum.RECEPTIONIST), POLICY)
    with pytest.raises(AuthorizationError):
        ScopeResolver.resolve(make_context("auditor"), POLICY)


def test_context_is_immutable():
    context = make_context()
    with pytest.raises(ValidationError):
        context.principal_id = uuid.uuid4()


def test_role_enum_is_normalized():
    assert make_context(RoleEnum.NURSE).role == "nurse"


def test_policy_columns():
    assert POLICY.columns() == {"provider_id", "organization_id", "tenant_id", "ward"}
    assert "system_admin" in POLICY.roles()
