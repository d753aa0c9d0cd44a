"""NEXUS Query — Principal roles."""
from enum import Enum


class RoleEnum(str, Enum):
    SYSTEM_ADMIN = "system_admin"
    ORGANIZATION_ADMIN = "organization_admin"
    MEDICAL_DOCTOR = "medical_doctor"
    RECEPTIONIST = "receptionist"
    NURSE = "nurse"
