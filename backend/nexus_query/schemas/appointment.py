"""NEXUS Query — Appointment list request."""
from uuid import UUID

from nexus_query.schemas.common import FilterRequest, Instant, Range


class AppointmentRequest(FilterRequest):
    # Scoping columns: honoured only for roles the scope doesn't pin to them
    organization_id: UUID | None = None
    provider_id: UUID | None = None

    patient_id: UUID | None = None
    room_id: UUID | None = None  # null = appointments without a room
    status: list[str] | str | None = None
    appointment_type: str | None = None
    title: str | None = None
    start_time: Range[Instant] | None = None
    start_time_from: Instant | None = None
    start_time_to: Instant | None = None
    created_at: Range[Instant] | None = None
    include_deleted: bool | None = None
