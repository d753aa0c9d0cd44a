"""NEXUS Query — FastAPI dependencies (auth, DB, permissions)."""
from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from nexus_query.core.roles import RoleEnum
from nexus_query.db.session import get_db
from nexus_query.engine.scope import ScopeContext

DbSession = Annotated[AsyncSession, Depends(get_db)]

# ── Permission keys ─────────────────────────────────────────────────────────
# Route files use these constants, never raw strings.
PERM_APPOINTMENTS_READ = "appointments:read"
PERM_INSURANCE_POLICIES_READ = "insurance_policies:read"
PERM_DEVICE_INGESTIONS_READ = "device_ingestions:read"

# ── Role → permissions matrix ────────────────────────────────────────────────
PERMISSION_MATRIX: dict[str, set[str]] = {
    RoleEnum.SYSTEM_ADMIN.value: {
        PERM_APPOINTMENTS_READ, PERM_INSURANCE_POLICIES_READ, PERM_DEVICE_INGESTIONS_READ,
    },
    RoleEnum.ORGANIZATION_ADMIN.value: {
        PERM_APPOINTMENTS_READ, PERM_INSURANCE_POLICIES_READ, PERM_DEVICE_INGESTIONS_READ,
    },
    RoleEnum.MEDICAL_DOCTOR.value: {PERM_APPOINTMENTS_READ, PERM_DEVICE_INGESTIONS_READ},
    RoleEnum.RECEPTIONIST.value: {PERM_APPOINTMENTS_READ},
    RoleEnum.NURSE.value: {PERM_DEVICE_INGESTIONS_READ},
}


class CurrentUser:
    """Verified principal — set on request.state by the identity layer."""

    def __init__(
        self,
        id: UUID,
        email: str,
        role: str,
        tenant_id: UUID | None = None,
        organization_id: UUID | None = None,
        claims: dict[str, Any] | None = None,
    ):
        self.id = id
        self.email = email
        self.role = role.value if isinstance(role, RoleEnum) else role
        self.tenant_id = tenant_id
        self.organization_id = organization_id
        self.claims = claims or {}

    def has_permission(self, permission: str) -> bool:
        return permission in PERMISSION_MATRIX.get(self.role, set())

    def scope_context(self) -> ScopeContext:
        return ScopeContext(
            principal_id=self.id,
            role=self.role,
            tenant_id=self.tenant_id,
            organization_id=self.organization_id,
            extra_claims=dict(self.claims),
        )


async def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user. Raise 401 if not logged in."""
    user = getattr(request.state, "user", None)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_permission(permission: str):
    """Dependency factory: require specific RBAC permission."""

    async def _check(user: CurrentUser = Depends(require_auth)) -> CurrentUser:
        if not user.has_permission(permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: '{permission}' required. Your role: {user.role}",
            )
        return user

    return _check


def scope_for(permission: str):
    """Dependency factory: permission check, then the request's ScopeContext."""

    async def _scope(user: CurrentUser = Depends(require_permission(permission))) -> ScopeContext:
        return user.scope_context()

    return _scope
