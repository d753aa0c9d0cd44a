"""NEXUS Query — AppointmentService: scoped appointment search and lookup."""
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
    SortDirection,
    ValueType,
    nullable,
    optional,
    owned_by_principal,
    timestamp,
    within_organization,
)
from nexus_query.models.appointment import Appointment, AppointmentStatus
from nexus_query.schemas.appointment import AppointmentRequest
from nexus_query.schemas.common import PageEnvelope

APPOINTMENT_SUMMARY = Projection(
    "id",
    "organization_id",
    "provider_id",
    "patient_id",
    nullable("room_id"),
    "status",
    "appointment_type",
    "title",
    timestamp("start_time"),
    timestamp("end_time"),
    timestamp("created_at"),
    timestamp("updated_at"),
)

APPOINTMENT_QUERY = EntityQuery(
    "appointments",
    Appointment,
    scope=ScopePolicy({
        RoleEnum.MEDICAL_DOCTOR: (owned_by_principal("provider_id"),),
        RoleEnum.ORGANIZATION_ADMIN: (within_organization(),),
        RoleEnum.RECEPTIONIST: (within_organization(),),
        RoleEnum.SYSTEM_ADMIN: UNRESTRICTED,
    }),
    filters=(
        FilterField(name="organization_id", value_type=ValueType.UUID),
        FilterField(name="provider_id", value_type=ValueType.UUID),
        FilterField(name="patient_id", value_type=ValueType.UUID),
        FilterField(name="room_id", value_type=ValueType.UUID, nullable=True),
        FilterField(
            name="status",
            kind=FilterKind.ONE_OF,
            choices=tuple(s.value for s in AppointmentStatus),
        ),
        FilterField(name="appointment_type"),
        FilterField(name="title", kind=FilterKind.CONTAINS),
        FilterField(name="start_time", kind=FilterKind.RANGE, value_type=ValueType.DATETIME),
        FilterField(name="created_at", kind=FilterKind.RANGE, value_type=ValueType.DATETIME),
    ),
    search_fields=("title", "appointment_type", "notes"),
    sort=SortAllowList(
        ["start_time", "end_time", "created_at", "status", "title"],
        default="start_time",
        default_direction=SortDirection.DESC,
    ),
    summary=APPOINTMENT_SUMMARY,
    detail=APPOINTMENT_SUMMARY.extend(optional("notes"), timestamp("deleted_at", Presence.OPTIONAL)),
    default_limit=20,
    max_limit=100,
)


class AppointmentService:
    """Read side for appointments."""

    @staticmethod
    async def search_appointments(
        db: AsyncSession,
        context: ScopeContext,
        request: AppointmentRequest | None = None,
    ) -> PageEnvelope:
        return await QueryEngine.paginate(db, context, APPOINTMENT_QUERY, request)

    @staticmethod
    async def get_appointment(db: AsyncSession, context: ScopeContext, appointment_id: UUID) -> dict:
        return await QueryEngine.get_one(db, context, APPOINTMENT_QUERY, appointment_id)
