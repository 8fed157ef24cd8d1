"""FastAPI dependencies that establish tenant context for a request.

This module is the session context setter: it derives the tenant from the
verified JWT and binds it to the request's TenantSession exactly once,
before any handler code can query.

- get_tenant_context: TenantContext from the bearer token
- get_tenant_session: TenantSession bound to that context for the request
- validate_org_exists: ensure the organization in the token still exists
"""

from typing import Generator, Optional
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .auth.jwt import decode_token
from .database import get_db, tenant_session
from .models.organization import Organization
from .observability.logging_config import get_logger
from .tenancy.context import TenantContext, resolve_tenant_id
from .tenancy.errors import AuthenticationRequired, NotFoundOrForbidden
from .tenancy.session import TenantSession

logger = get_logger(__name__)

# Missing credentials are reported as AuthenticationRequired, not by HTTPBearer
security = HTTPBearer(auto_error=False)


def get_tenant_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TenantContext:
    """Build the request's TenantContext from the bearer token.

    The organization comes from the signed ``org_id`` claim, which prevents
    clients from choosing a tenant through request bodies or query params.

    Raises:
        AuthenticationRequired: If the token is missing, invalid or expired
        InvalidTenantIdentifier: If the org_id claim is not a UUID
    """
    if credentials is None:
        raise AuthenticationRequired()

    try:
        payload = decode_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationRequired("Invalid or expired token") from e

    organization_id = resolve_tenant_id(payload.get("org_id")).unwrap()
    user_resolution = resolve_tenant_id(payload.get("sub"))

    return TenantContext(
        organization_id=organization_id,
        user_id=user_resolution.tenant_id if user_resolution.ok else None,
        role=payload.get("role"),
        source="jwt",
    )


def get_tenant_session(
    context: TenantContext = Depends(get_tenant_context),
) -> Generator[TenantSession, None, None]:
    """Yield a TenantSession bound to the request's tenant.

    Example:
        @app.get("/jobs")
        def list_jobs(session: TenantSession = Depends(get_tenant_session)):
            return TenantQuery.list(session, Job)
    """
    with tenant_session(context) as session:
        yield session


def validate_org_exists(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
) -> UUID:
    """Ensure the organization named by the token exists.

    Raises:
        NotFoundOrForbidden: If the organization doesn't exist
    """
    organization_id = context.require()
    if db.get(Organization, organization_id) is None:
        raise NotFoundOrForbidden(Organization.__name__, organization_id)
    return organization_id
