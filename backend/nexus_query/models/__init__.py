"""NEXUS Query — SQLAlchemy models."""
from nexus_query.models.appointment import Appointment, AppointmentStatus
from nexus_query.models.device_ingestion import DeviceIngestion
from nexus_query.models.insurance_policy import InsurancePolicy, PolicyStatus

__all__ = [
    "Appointment", "AppointmentStatus",
    "DeviceIngestion",
    "InsurancePolicy", "PolicyStatus",
]
