"""NEXUS Query — DeviceIngestionService: tenant-scoped device readings."""
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from nexus_query.core.roles import RoleEnum
from nexus_query.engine import (
    UNRESTRICTED,
    EntityQuery,
    FilterField,
    FilterKind,
    Projection,
    QueryEngine,
    ScopeContext,
    ScopePolicy,
    SortAllowList,
    ValueType,
    nullable,
    timestamp,
    within_tenant,
)
from nexus_query.models.device_ingestion import DeviceIngestion
from nexus_query.schemas.common import PageEnvelope
from nexus_query.schemas.device_ingestion import DeviceIngestionRequest

PAYLOAD_STATUSES = ("accepted", "rejected", "quarantined")

DEVICE_INGESTION_QUERY = EntityQuery(
    "device_ingestions",
    DeviceIngestion,
    scope=ScopePolicy({
        RoleEnum.ORGANIZATION_ADMIN: (within_tenant(),),
        RoleEnum.MEDICAL_DOCTOR: (within_tenant(),),
        RoleEnum.NURSE: (within_tenant(),),
        RoleEnum.SYSTEM_ADMIN: UNRESTRICTED,
    }),
    filters=(
        FilterField(name="tenant_id", value_type=ValueType.UUID),
        FilterField(name="device_id"),
        FilterField(name="metric"),
        FilterField(name="unit", nullable=True),
        FilterField(name="payload_status", kind=FilterKind.ONE_OF, choices=PAYLOAD_STATUSES),
        FilterField(name="value", kind=FilterKind.RANGE, value_type=ValueType.FLOAT),
        FilterField(name="ingested_at", kind=FilterKind.RANGE, value_type=ValueType.DATETIME),
    ),
    search_fields=("device_id", "metric"),
    sort=SortAllowList(["ingested_at", "value", "device_id", "metric"], default="ingested_at"),
    summary=Projection(
        "id",
        "tenant_id",
        "device_id",
        "metric",
        "value",
        nullable("unit"),
        "payload_status",
        timestamp("ingested_at"),
        timestamp("created_at"),
    ),
    soft_delete_column=None,
    default_limit=50,
    max_limit=200,
    # integrations page through readings; an oversized limit is a client bug
    clamp_limit=False,
)


class DeviceIngestionService:
    """Read side for device readings."""

    @staticmethod
    async def search_ingestions(
        db: AsyncSession,
        context: ScopeContext,
        request: DeviceIngestionRequest | None = None,
    ) -> PageEnvelope:
        return await QueryEngine.paginate(db, context, DEVICE_INGESTION_QUERY, request)

    @staticmethod
    async def get_ingestion(db: AsyncSession, context: ScopeContext, ingestion_id: UUID) -> dict:
        return await QueryEngine.get_one(db, context, DEVICE_INGESTION_QUERY, ingestion_id)
