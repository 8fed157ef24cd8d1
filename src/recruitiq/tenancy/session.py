"""Tenant-scoped SQLAlchemy session.

TenantSession wires the isolation policy into the session lifecycle:

- ``do_orm_execute``: isolation criteria on every ORM SELECT, refusal of bulk
  writes and of table-level SELECTs on tenant tables, AuthenticationRequired
  when no tenant is bound
- ``before_flush``: WITH CHECK semantics for inserts, tenant immutability for
  updates, ownership check for deletes, own-row-only organization writes
- ``after_begin``: transaction-local tenant setting for PostgreSQL RLS

Plain ``Session`` objects are not affected; they are reserved for
maintenance work (migrations, seeding of the organizations table) that runs
outside any tenant.
"""

from sqlalchemy import event
from sqlalchemy.orm import Session

from .context import TENANT_CONTEXT_KEY, get_tenant_context
from .policy import apply_read_policy, enforce_write_policy
from .rls import apply_tenant_setting


class TenantSession(Session):
    """Session whose reads and writes are confined to one tenant.

    Closing the session drops its tenant context along with its identity
    map, so a session object that is reused cannot carry a tenant into the
    next unit of work.
    """

    def close(self) -> None:
        try:
            super().close()
        finally:
            self.info.pop(TENANT_CONTEXT_KEY, None)


@event.listens_for(TenantSession, "do_orm_execute")
def _apply_read_policy(orm_execute_state):
    apply_read_policy(orm_execute_state)


@event.listens_for(TenantSession, "before_flush")
def _enforce_write_policy(session, flush_context, instances):
    enforce_write_policy(session)


@event.listens_for(TenantSession, "after_begin")
def _scope_transaction(session, transaction, connection):
    context = get_tenant_context(session)
    apply_tenant_setting(connection, context.organization_id if context is not None else None)
