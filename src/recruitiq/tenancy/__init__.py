"""Tenancy module - Multi-tenant row isolation.

This module provides:
- Tenant context resolution bound to a session (never ambient state)
- Row isolation policies evaluated on every read and write
- PostgreSQL row-level security generated from the same declarations
- Tenant-scoped query helpers with not-found-or-forbidden semantics
"""

from .context import (
    TenantContext,
    TenantResolution,
    clear_current_tenant,
    get_current_tenant,
    get_tenant_context,
    resolve_tenant_id,
    set_current_tenant,
)
from .errors import (
    AuthenticationRequired,
    InvalidTenantIdentifier,
    NotFoundOrForbidden,
    TenancyError,
    TenantMismatch,
    UnsupportedTenantOperation,
)
from .ownership import is_tenant_scoped, ownership_chain, tenant_scoped_models
from .policy import resolve_owning_tenant, row_predicate
from .repository import TenantQuery
from .session import TenantSession

__all__ = [
    "TenantContext",
    "TenantResolution",
    "clear_current_tenant",
    "get_current_tenant",
    "get_tenant_context",
    "resolve_tenant_id",
    "set_current_tenant",
    "AuthenticationRequired",
    "InvalidTenantIdentifier",
    "NotFoundOrForbidden",
    "TenancyError",
    "TenantMismatch",
    "UnsupportedTenantOperation",
    "is_tenant_scoped",
    "ownership_chain",
    "tenant_scoped_models",
    "resolve_owning_tenant",
    "row_predicate",
    "TenantQuery",
    "TenantSession",
]
