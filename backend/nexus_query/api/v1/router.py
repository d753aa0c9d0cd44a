"""NEXUS Query — API v1 router aggregation."""
from fastapi import APIRouter

from nexus_query.api.v1.endpoints import (
    appointments,
    device_ingestions,
    insurance_policies,
)

api_router = APIRouter()

api_router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
api_router.include_router(insurance_policies.router, prefix="/insurance-policies", tags=["insurance-policies"])
api_router.include_router(device_ingestions.router, prefix="/device-ingestions", tags=["device-ingestions"])
