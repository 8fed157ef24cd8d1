"""Tenant context resolution.

The tenant identity is an explicit value: a :class:`TenantContext` bound to
the session the caller opened for it. Nothing here reads ambient or global
state, so two sessions in the same thread (or two concurrent requests) never
observe each other's tenant.

Resolution of a raw identifier produces a :class:`TenantResolution`, which
holds either the organization UUID or the authentication error. Callers that
want exceptions call ``unwrap()``; callers that want to branch inspect ``ok``.

Session-scoped operations:
    set_current_tenant(session, tenant)   bind a verified tenant to a session
    get_current_tenant(session)           return the bound UUID or raise
    clear_current_tenant(session)         drop the tenant and everything it loaded
"""

from dataclasses import dataclass, field
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from ..observability.logging_config import get_logger
from .errors import AuthenticationRequired, InvalidTenantIdentifier
from .rls import apply_tenant_setting

logger = get_logger(__name__)

# Key under which the bound context is stored in Session.info
TENANT_CONTEXT_KEY = "tenant_context"

TenantIdentifier = Union[UUID, str]


@dataclass(frozen=True)
class TenantResolution:
    """Outcome of resolving a tenant identifier.

    Exactly one of ``tenant_id`` and ``error`` is set.
    """

    tenant_id: Optional[UUID] = None
    error: Optional[AuthenticationRequired] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.tenant_id is not None

    def unwrap(self) -> UUID:
        """Return the tenant UUID or raise the resolution error."""
        if self.error is not None:
            raise self.error
        if self.tenant_id is None:
            raise AuthenticationRequired()
        return self.tenant_id

    @classmethod
    def success(cls, tenant_id: UUID) -> "TenantResolution":
        return cls(tenant_id=tenant_id)

    @classmethod
    def failure(cls, error: AuthenticationRequired) -> "TenantResolution":
        return cls(error=error)


def resolve_tenant_id(raw: Optional[object]) -> TenantResolution:
    """Resolve a raw tenant identifier into a TenantResolution.

    Accepts a UUID or its canonical string form. Missing values (None or blank
    strings) resolve to AuthenticationRequired; anything else that is not a
    UUID resolves to InvalidTenantIdentifier.

    Example:
        >>> resolve_tenant_id("550e8400-e29b-41d4-a716-446655440000").ok
        True
        >>> resolve_tenant_id("'; DROP TABLE jobs; --").ok
        False
    """
    if raw is None:
        return TenantResolution.failure(AuthenticationRequired())

    if isinstance(raw, UUID):
        return TenantResolution.success(raw)

    if isinstance(raw, str):
        if not raw.strip():
            return TenantResolution.failure(AuthenticationRequired())
        try:
            return TenantResolution.success(UUID(raw.strip()))
        except ValueError:
            return TenantResolution.failure(InvalidTenantIdentifier(raw))

    return TenantResolution.failure(InvalidTenantIdentifier(raw))


@dataclass(frozen=True)
class TenantContext:
    """Verified tenant identity for one request or unit of work.

    Attributes:
        organization_id: Organization (tenant) UUID, None when unauthenticated
        user_id: Authenticated user, if known
        role: Role claim of the authenticated user, if known
        source: Where the identity came from (jwt, worker, seed, test)
    """

    organization_id: Optional[UUID]
    user_id: Optional[UUID] = None
    role: Optional[str] = None
    source: str = field(default="unknown", compare=False)

    def resolve(self) -> TenantResolution:
        return resolve_tenant_id(self.organization_id)

    def require(self) -> UUID:
        """Return the organization UUID or raise AuthenticationRequired."""
        return self.resolve().unwrap()

    @classmethod
    def for_tenant(
        cls,
        tenant: TenantIdentifier,
        user_id: Optional[UUID] = None,
        role: Optional[str] = None,
        source: str = "unknown",
    ) -> "TenantContext":
        """Build a context from a raw identifier, validating it first."""
        return cls(
            organization_id=resolve_tenant_id(tenant).unwrap(),
            user_id=user_id,
            role=role,
            source=source,
        )


def get_tenant_context(session: Session) -> Optional[TenantContext]:
    """Return the context bound to ``session``, or None."""
    return session.info.get(TENANT_CONTEXT_KEY)


def get_current_tenant(session: Session) -> UUID:
    """Return the tenant bound to ``session``.

    Raises:
        AuthenticationRequired: If no tenant has been set on the session
        InvalidTenantIdentifier: If the bound identifier is malformed
    """
    context = get_tenant_context(session)
    if context is None:
        raise AuthenticationRequired()
    return context.require()


def set_current_tenant(
    session: Session,
    tenant: Union[TenantContext, TenantIdentifier],
) -> TenantContext:
    """Bind a tenant to ``session`` before any tenant-scoped query runs.

    Binding a different tenant than the one already bound first clears the
    session (see :func:`clear_current_tenant`), so rows loaded for the
    previous tenant cannot be served from the identity map.

    Args:
        session: Session to scope
        tenant: TenantContext, organization UUID, or UUID string

    Returns:
        TenantContext: The context now bound to the session

    Raises:
        AuthenticationRequired: If the identifier is missing
        InvalidTenantIdentifier: If the identifier is malformed
    """
    if isinstance(tenant, TenantContext):
        context = tenant
        context.require()
    else:
        context = TenantContext.for_tenant(tenant)

    current = get_tenant_context(session)
    if current is not None and current.organization_id != context.organization_id:
        clear_current_tenant(session)

    session.info[TENANT_CONTEXT_KEY] = context
    if session.in_transaction():
        # Transaction began before the tenant was known; scope it now
        apply_tenant_setting(session.connection(), context.organization_id)
    logger.debug(
        "Tenant bound to session",
        extra={"org_id": context.organization_id, "user_id": context.user_id},
    )
    return context


def clear_current_tenant(session: Session) -> None:
    """Remove the tenant from ``session`` and discard everything loaded under it.

    Pending changes are rolled back and the identity map is emptied. On
    PostgreSQL the rollback also ends the transaction that carried the
    transaction-local tenant setting.
    """
    previous = session.info.pop(TENANT_CONTEXT_KEY, None)
    if session.in_transaction():
        session.rollback()
    session.expunge_all()
    if previous is not None:
        logger.debug("Tenant cleared from session", extra={"org_id": previous.organization_id})
