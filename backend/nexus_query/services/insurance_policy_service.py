"""NEXUS Query — InsurancePolicyService: organization-scoped policy search."""
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from nexus_query.core.roles import RoleEnum
from nexus_query.engine import (
    UNRESTRICTED,
    EntityQuery,
    FilterField,
    FilterKind,
    Presence,
    Projection,
    QueryEngine,
    ScopeContext,
    ScopePolicy,
    SortAllowList,
    ValueType,
    date_only,
    optional,
    timestamp,
    within_organization,
)
from nexus_query.models.insurance_policy import InsurancePolicy, PolicyStatus
from nexus_query.schemas.common import PageEnvelope
from nexus_query.schemas.insurance_policy import InsurancePolicyRequest

INSURANCE_POLICY_QUERY = EntityQuery(
    "insurance_policies",
    InsurancePolicy,
    scope=ScopePolicy({
        RoleEnum.ORGANIZATION_ADMIN: (within_organization(),),
        RoleEnum.SYSTEM_ADMIN: UNRESTRICTED,
    }),
    filters=(
        FilterField(name="organization_id", value_type=ValueType.UUID),
        FilterField(name="patient_id", value_type=ValueType.UUID),
        FilterField(
            name="policy_status",
            kind=FilterKind.ONE_OF,
            choices=tuple(s.value for s in PolicyStatus),
        ),
        FilterField(name="plan_type"),
        # policy numbers are matched exactly as typed
        FilterField(name="policy_number", kind=FilterKind.CONTAINS, case_sensitive=True),
        FilterField(name="payer_name", kind=FilterKind.CONTAINS),
        FilterField(name="group_number", nullable=True),
        FilterField(
            name="coverage_start",
            column="coverage_start_date",
            kind=FilterKind.RANGE,
            value_type=ValueType.DATE,
        ),
        FilterField(
            name="coverage_end",
            column="coverage_end_date",
            kind=FilterKind.RANGE,
            value_type=ValueType.DATE,
            nullable=True,
        ),
    ),
    search_fields=("policy_number", "payer_name", "plan_type"),
    sort=SortAllowList(
        [
            "created_at",
            "policy_number",
            "plan_type",
            "payer_name",
            "policy_status",
            "coverage_start_date",
            "coverage_end_date",
        ],
        default="created_at",
    ),
    summary=Projection(
        "id",
        "patient_id",
        "organization_id",
        "policy_number",
        "payer_name",
        optional("group_number"),
        date_only("coverage_start_date"),
        date_only("coverage_end_date", Presence.OPTIONAL),
        "plan_type",
        "policy_status",
        timestamp("created_at"),
        timestamp("updated_at"),
        timestamp("deleted_at", Presence.OPTIONAL),
    ),
    default_limit=20,
    max_limit=100,
)


class InsurancePolicyService:
    """Read side for insurance policies."""

    @staticmethod
    async def search_policies(
        db: AsyncSession,
        context: ScopeContext,
        request: InsurancePolicyRequest | None = None,
    ) -> PageEnvelope:
        return await QueryEngine.paginate(db, context, INSURANCE_POLICY_QUERY, request)

    @staticmethod
    async def get_policy(db: AsyncSession, context: ScopeContext, policy_id: UUID) -> dict:
        return await QueryEngine.get_one(db, context, INSURANCE_POLICY_QUERY, policy_id)
