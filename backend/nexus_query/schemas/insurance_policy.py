"""NEXUS Query — Insurance policy list request."""
from uuid import UUID

from nexus_query.schemas.common import CalendarDate, FilterRequest, Range


class InsurancePolicyRequest(FilterRequest):
    organization_id: UUID | None = None
    patient_id: UUID | None = None
    policy_status: list[str] | str | None = None
    plan_type: str | None = None
    policy_number: str | None = None
    payer_name: str | None = None
    group_number: str | None = None
    coverage_start_from: CalendarDate | None = None
    coverage_start_to: CalendarDate | None = None
    coverage_end: Range[CalendarDate] | None = None  # null = open-ended policies
    coverage_end_from: CalendarDate | None = None
    coverage_end_to: CalendarDate | None = None
    include_deleted: bool | None = None
