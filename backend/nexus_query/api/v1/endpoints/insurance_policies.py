"""NEXUS Query — Insurance policy endpoints. PATCH /insurance-policies, GET /insurance-policies/{id}."""
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends

from nexus_query.api.deps import PERM_INSURANCE_POLICIES_READ, DbSession, scope_for
from nexus_query.core.responses import APIResponse, success_response
from nexus_query.engine.scope import ScopeContext
from nexus_query.schemas.common import PageEnvelope
from nexus_query.schemas.insurance_policy import InsurancePolicyRequest
from nexus_query.services.insurance_policy_service import InsurancePolicyService

router = APIRouter()


@router.patch("", response_model=PageEnvelope)
async def search_policies(
    db: DbSession,
    body: InsurancePolicyRequest | None = None,
    context: ScopeContext = Depends(scope_for(PERM_INSURANCE_POLICIES_READ)),
):
    return await InsurancePolicyService.search_policies(db, context, body)


@router.get("/{id}", response_model=APIResponse[dict[str, Any]])
async def get_policy(
    id: UUID,
    db: DbSession,
    context: ScopeContext = Depends(scope_for(PERM_INSURANCE_POLICIES_READ)),
):
    return success_response(await InsurancePolicyService.get_policy(db, context, id))
