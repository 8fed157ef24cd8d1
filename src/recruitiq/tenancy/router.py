"""FastAPI router for tenant introspection.

- GET /tenancy/context - the organization bound to the request
- GET /tenancy/summary - counts of records visible to that organization

Both endpoints read through a TenantSession, so they double as a smoke test
that the request's token scopes every query.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_tenant_context, get_tenant_session, validate_org_exists
from ..models import Application, Candidate, Interview, Job, Organization, Workspace
from .context import TenantContext, get_current_tenant
from .repository import TenantQuery
from .schemas import TenantContextResponse, TenantSummaryResponse
from .session import TenantSession

router = APIRouter(prefix="/tenancy", tags=["Tenancy"])


@router.get("/context", response_model=TenantContextResponse)
def read_tenant_context(
    context: TenantContext = Depends(get_tenant_context),
    organization_id=Depends(validate_org_exists),
    db: Session = Depends(get_db),
) -> TenantContextResponse:
    """Return the organization the request is scoped to.

    Raises:
        AuthenticationRequired (401): Missing or invalid token
        NotFoundOrForbidden (404): Organization no longer exists
    """
    org = db.get(Organization, organization_id)
    return TenantContextResponse(
        organization_id=org.id,
        organization_name=org.name,
        organization_slug=org.slug,
        user_id=context.user_id,
        role=context.role,
    )


@router.get("/summary", response_model=TenantSummaryResponse)
def read_tenant_summary(
    session: TenantSession = Depends(get_tenant_session),
) -> TenantSummaryResponse:
    """Count the records visible to the request's organization."""
    return TenantSummaryResponse(
        organization_id=get_current_tenant(session),
        workspaces=len(TenantQuery.list(session, Workspace)),
        jobs=len(TenantQuery.list(session, Job)),
        candidates=len(TenantQuery.list(session, Candidate)),
        applications=len(TenantQuery.list(session, Application)),
        interviews=len(TenantQuery.list(session, Interview)),
    )
