"""NEXUS Query — Device ingestion endpoints. PATCH /device-ingestions, GET /device-ingestions/{id}."""
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends

from nexus_query.api.deps import PERM_DEVICE_INGESTIONS_READ, DbSession, scope_for
from nexus_query.core.responses import APIResponse, success_response
from nexus_query.engine.scope import ScopeContext
from nexus_query.schemas.common import PageEnvelope
from nexus_query.schemas.device_ingestion import DeviceIngestionRequest
from nexus_query.services.device_ingestion_service import DeviceIngestionService

router = APIRouter()


@router.patch("", response_model=PageEnvelope)
async def search_ingestions(
    db: DbSession,
    body: DeviceIngestionRequest | None = None,
    context: ScopeContext = Depends(scope_for(PERM_DEVICE_INGESTIONS_READ)),
):
    """Device readings for the caller's tenant."""
    return await DeviceIngestionService.search_ingestions(db, context, body)


@router.get("/{id}", response_model=APIResponse[dict[str, Any]])
async def get_ingestion(
    id: UUID,
    db: DbSession,
    context: ScopeContext = Depends(scope_for(PERM_DEVICE_INGESTIONS_READ)),
):
    return success_response(await DeviceIngestionService.get_ingestion(db, context, id))
