"""NEXUS Query — Device ingestion list request."""
from uuid import UUID

from nexus_query.schemas.common import FilterRequest, Instant, Range


class DeviceIngestionRequest(FilterRequest):
    tenant_id: UUID | None = None  # only system admins may narrow by tenant
    device_id: str | None = None
    metric: str | None = None
    unit: str | None = None
    payload_status: list[str] | str | None = None
    value: Range[float] | None = None
    ingested_at: Range[Instant] | None = None
