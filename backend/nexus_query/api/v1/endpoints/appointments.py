"""NEXUS Query — Appointment endpoints. PATCH /appointments (search), GET /appointments/{id}."""
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends

from nexus_query.api.deps import PERM_APPOINTMENTS_READ, DbSession, scope_for
from nexus_query.core.responses import APIResponse, success_response
from nexus_query.engine.scope import ScopeContext
from nexus_query.schemas.appointment import AppointmentRequest
from nexus_query.schemas.common import PageEnvelope
from nexus_query.services.appointment_service import AppointmentService

router = APIRouter()


@router.patch("", response_model=PageEnvelope)
async def search_appointments(
    db: DbSession,
    body: AppointmentRequest | None = None,
    context: ScopeContext = Depends(scope_for(PERM_APPOINTMENTS_READ)),
):
    """Filtered, sorted, paginated appointments visible to the caller."""
    return await AppointmentService.search_appointments(db, context, body)


@router.get("/{id}", response_model=APIResponse[dict[str, Any]])
async def get_appointment(
    id: UUID,
    db: DbSession,
    context: ScopeContext = Depends(scope_for(PERM_APPOINTMENTS_READ)),
):
    """Get appointment by ID."""
    return success_response(await AppointmentService.get_appointment(db, context, id))
