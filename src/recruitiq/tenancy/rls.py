"""PostgreSQL row-level security for tenant-scoped tables.

The database enforces the same isolation as the ORM layer, so raw SQL issued
through the application role is filtered as well. Policies read the tenant
from a transaction-local setting (``app.current_organization_id`` by default)
through ``get_current_organization_id()``, which raises when the setting is
missing or malformed. The setting is written with ``set_config(..., true)``,
so it ends with the transaction and never survives into the next checkout of
a pooled connection.

DDL is generated from the ownership declarations on the models:

    directly scoped    organization_id = get_current_organization_id()
    indirectly scoped  EXISTS (SELECT 1 FROM <owner chain>
                               WHERE ... AND tN.organization_id = get_current_organization_id())
"""

import re
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.engine import Connection

from ..config import get_settings
from .ownership import TENANT_COLUMN, ownership_chain, tenant_scoped_models

CURRENT_ORGANIZATION_FUNCTION = "get_current_organization_id"

_SETTING_NAME_PATTERN = re.compile(r"^[a-z_][a-z0-9_]*\.[a-z_][a-z0-9_]*$")


def _setting_name(setting_name: Optional[str] = None) -> str:
    name = setting_name or get_settings().TENANT_SETTING_NAME
    if not _SETTING_NAME_PATTERN.match(name):
        raise ValueError(f"Invalid tenant setting name: {name!r}")
    return name


def apply_tenant_setting(
    connection: Connection,
    tenant_id: Optional[UUID],
    setting_name: Optional[str] = None,
) -> None:
    """Write the tenant into the transaction-local PostgreSQL setting.

    No-op on other dialects. An empty value makes
    ``get_current_organization_id()`` raise, so policies fail closed.
    """
    if connection.dialect.name != "postgresql":
        return
    connection.execute(
        text("SELECT set_config(:name, :value, true)"),
        {"name": _setting_name(setting_name), "value": str(tenant_id) if tenant_id else ""},
    )


def current_organization_function_ddl(setting_name: Optional[str] = None) -> str:
    """DDL for the helper function every policy calls.

    Any failure (missing setting, malformed UUID) surfaces as a single
    "Invalid organization context" error. The function runs as its owner
    with a fixed search_path, so callers cannot shadow ``current_setting``.
    """
    name = _setting_name(setting_name)
    return f"""
        CREATE OR REPLACE FUNCTION {CURRENT_ORGANIZATION_FUNCTION}()
        RETURNS UUID AS $$
        DECLARE
          org_id TEXT;
        BEGIN
          org_id := current_setting('{name}', true);

          IF org_id IS NULL OR org_id = '' THEN
            RAISE EXCEPTION 'No organization context set. Authentication required.';
          END IF;

          RETURN org_id::UUID;
        EXCEPTION
          WHEN OTHERS THEN
            RAISE EXCEPTION 'Invalid organization context: %', SQLERRM;
        END;
        $$ LANGUAGE plpgsql STABLE SECURITY DEFINER SET search_path = pg_catalog, pg_temp;
    """


def tenant_predicate_sql(model) -> str:
    """Render the isolation predicate of ``model`` as PostgreSQL SQL."""
    table = model.__table__.name
    chain = ownership_chain(model)
    tenant_expr = f"{CURRENT_ORGANIZATION_FUNCTION}()"

    if not chain:
        return f"{TENANT_COLUMN} = {tenant_expr}"

    local, remote = chain[0].local_remote_pairs[0]
    from_clause = f"{chain[0].mapper.local_table.name} t1"
    conditions = [f"t1.{remote.name} = {table}.{local.name}"]

    for depth, rel in enumerate(chain[1:], start=2):
        local, remote = rel.local_remote_pairs[0]
        from_clause += (
            f" JOIN {rel.mapper.local_table.name} t{depth}"
            f" ON t{depth}.{remote.name} = t{depth - 1}.{local.name}"
        )

    conditions.append(f"t{len(chain)}.{TENANT_COLUMN} = {tenant_expr}")
    return f"EXISTS (SELECT 1 FROM {from_clause} WHERE {' AND '.join(conditions)})"


def policy_ddl(model) -> List[str]:
    """Statements enabling RLS and creating the isolation policies for one table.

    The unqualified policy covers SELECT, UPDATE and DELETE; for UPDATE its
    USING clause also acts as the check on the new row, so a record cannot be
    moved to another tenant. INSERT gets an explicit WITH CHECK policy.
    FORCE applies the policies to the table owner as well.
    """
    table = model.__table__.name
    predicate = tenant_predicate_sql(model)
    return [
        f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY",
        f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY",
        f"CREATE POLICY {table}_tenant_isolation ON {table} USING ({predicate})",
        f"CREATE POLICY {table}_tenant_isolation_insert ON {table} FOR INSERT WITH CHECK ({predicate})",
    ]


def drop_policy_ddl(model) -> List[str]:
    table = model.__table__.name
    return [
        f"DROP POLICY IF EXISTS {table}_tenant_isolation_insert ON {table}",
        f"DROP POLICY IF EXISTS {table}_tenant_isolation ON {table}",
        f"ALTER TABLE {table} NO FORCE ROW LEVEL SECURITY",
        f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY",
    ]


def enable_row_level_security_ddl(
    models: Optional[Iterable[type]] = None,
    setting_name: Optional[str] = None,
) -> List[str]:
    """Full upgrade script: helper function plus policies for every tenant table."""
    statements = [current_organization_function_ddl(setting_name)]
    for model in models if models is not None else tenant_scoped_models():
        statements.extend(policy_ddl(model))
    return statements


def disable_row_level_security_ddl(models: Optional[Iterable[type]] = None) -> List[str]:
    statements: List[str] = []
    for model in models if models is not None else tenant_scoped_models():
        statements.extend(drop_policy_ddl(model))
    statements.append(f"DROP FUNCTION IF EXISTS {CURRENT_ORGANIZATION_FUNCTION}()")
    return statements
