"""Tenant isolation error taxonomy.

These errors are raised at the storage boundary and propagate unchanged to the
caller. They signal policy violations, not transient faults, so nothing in the
isolation layer retries or recovers from them.

Hierarchy:
    TenancyError
    ├── AuthenticationRequired
    │   └── InvalidTenantIdentifier
    ├── TenantMismatch
    ├── NotFoundOrForbidden
    └── UnsupportedTenantOperation
"""

from typing import Optional


class TenancyError(Exception):
    """Base class for all tenant isolation errors."""


class AuthenticationRequired(TenancyError):
    """No tenant context is set on the session.

    Every tenant-scoped operation refuses to execute until the session has a
    verified tenant identifier.
    """

    def __init__(self, message: str = "No organization context set. Authentication required."):
        super().__init__(message)


class InvalidTenantIdentifier(AuthenticationRequired):
    """A tenant identifier was supplied but is not a valid organization UUID."""

    def __init__(self, raw_value: object):
        self.raw_value = raw_value
        super().__init__(f"Invalid organization context: {raw_value!r}")


class TenantMismatch(TenancyError):
    """A write would create or move a record into another tenant.

    The write is rejected, never silently corrected.
    """

    def __init__(self, model_name: str, expected: object, actual: Optional[object], operation: str = "insert"):
        self.model_name = model_name
        self.expected = expected
        self.actual = actual
        self.operation = operation
        super().__init__(
            f"{operation} on {model_name} rejected: record resolves to organization "
            f"{actual} but session is scoped to {expected}"
        )


class NotFoundOrForbidden(TenancyError):
    """A targeted read found no visible record.

    Raised identically for records that do not exist and records owned by
    another tenant, so callers cannot tell the two apart.
    """

    def __init__(self, model_name: str, record_id: object):
        self.model_name = model_name
        self.record_id = record_id
        super().__init__(f"{model_name} not found")


class UnsupportedTenantOperation(TenancyError):
    """The operation cannot be checked by the isolation layer and is refused."""
