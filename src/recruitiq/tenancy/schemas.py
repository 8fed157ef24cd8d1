"""Pydantic response schemas for the tenancy endpoints."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class TenantContextResponse(BaseModel):
    """Tenant bound to the current request."""

    organization_id: UUID
    organization_name: str
    organization_slug: str
    user_id: Optional[UUID] = None
    role: Optional[str] = None


class TenantSummaryResponse(BaseModel):
    """Record counts visible to the current tenant."""

    organization_id: UUID
    workspaces: int
    jobs: int
    candidates: int
    applications: int
    interviews: int
