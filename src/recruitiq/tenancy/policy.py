"""Row isolation policy evaluation.

Every tenant-scoped model is either:

- directly scoped: it has an ``organization_id`` column, and the row
  predicate is ``organization_id == current tenant``; or
- indirectly scoped: it declares ``__tenant_owner__``, the name of the
  relationship to its owning record. The predicate walks that ownership chain
  until it reaches a directly scoped ancestor and compares the ancestor's
  tenant. Grandchildren resolve through two hops.

Models may also declare ``__tenant_references__``: relationships to other
tenant-scoped records that must belong to the same tenant (a job's
workspace, an application's candidate).

Reads are filtered (invisible rows are simply absent). Writes are checked
before flush: inserts are stamped with the session tenant or rejected with
TenantMismatch, and the tenant of an existing record can never change.

The evaluation is stateless; nothing is cached between calls beyond what the
session itself holds.
"""

from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import false, inspect as sa_inspect
from sqlalchemy.orm import (
    ORMExecuteState,
    RelationshipDirection,
    RelationshipProperty,
    Session,
    with_loader_criteria,
)
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.expression import TableClause
from sqlalchemy.sql.util import find_tables

from ..observability.logging_config import get_logger
from ..observability.metrics import tenant_policy_rejections_total
from .context import get_current_tenant, get_tenant_context, resolve_tenant_id
from .errors import (
    AuthenticationRequired,
    TenancyError,
    TenantMismatch,
    UnsupportedTenantOperation,
)
from .ownership import (
    MAX_OWNERSHIP_DEPTH,
    TENANT_COLUMN,
    TENANT_ROOT_TABLE,
    is_directly_scoped,
    is_tenant_root,
    is_tenant_scoped,
    owner_relationship,
    tenant_scoped_models,
)

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------

def row_predicate(model, tenant_id: Optional[UUID]) -> ColumnElement:
    """Build the isolation predicate for ``model`` under ``tenant_id``.

    A missing tenant yields constant false, so a predicate evaluated without
    context matches nothing.

    Example:
        >>> str(row_predicate(Interview, org_id))   # doctest: +SKIP
        EXISTS (SELECT 1 FROM applications WHERE applications.id = interviews.application_id
                AND applications.organization_id = :organization_id_1)
    """
    if tenant_id is None:
        return false()

    if is_directly_scoped(model):
        return getattr(model, TENANT_COLUMN) == tenant_id

    rel = owner_relationship(model)
    if rel is None:
        raise UnsupportedTenantOperation(f"{model.__name__} has no tenant linkage")
    return getattr(model, rel.key).has(row_predicate(rel.mapper.class_, tenant_id))


def tenant_tables_in(statement, include_root: bool = False) -> List[str]:
    """Names of tenant-scoped tables referenced anywhere in ``statement``.

    Subqueries, aliases and CTEs reached through their columns are searched
    as well. With ``include_root`` the organizations table counts too.
    """
    scoped = {model.__table__.name for model in tenant_scoped_models()}
    if include_root:
        scoped.add(TENANT_ROOT_TABLE)

    names = set()
    seen = set()
    pending = [statement]
    while pending:
        for found in find_tables(pending.pop(), check_columns=True, include_crud=True):
            if found is None or id(found) in seen:
                continue
            seen.add(id(found))
            if isinstance(found, TableClause):
                names.add(found.name)
            else:
                pending.append(found)
    return sorted(names & scoped)


def apply_read_policy(orm_execute_state: ORMExecuteState) -> None:
    """Attach isolation criteria to an ORM statement (``do_orm_execute`` hook).

    SELECTs touching tenant-scoped entities require a bound tenant and receive
    ``with_loader_criteria`` for every tenant-scoped model, so joins, aliases
    and relationship loads are filtered too. Statements the criteria cannot
    reach are refused: bulk INSERT/UPDATE/DELETE (ORM or table-level) against
    tenant tables or organizations, and table-level SELECTs against tenant
    tables.
    """
    touched = [
        mapper.class_
        for mapper in orm_execute_state.all_mappers
        if is_tenant_scoped(mapper.class_)
    ]

    if not orm_execute_state.is_select:
        written = tenant_tables_in(orm_execute_state.statement, include_root=True)
        if touched or written:
            target = touched[0].__name__ if touched else written[0]
            _reject(
                UnsupportedTenantOperation(
                    f"Bulk statements against {target} are not supported; "
                    "load records and modify them through the session"
                ),
                operation="bulk",
                reason="unsupported",
            )
        return

    if not orm_execute_state.is_orm_statement:
        # Table-level SELECTs carry no entities for loader criteria to attach to
        tables = tenant_tables_in(orm_execute_state.statement)
        if tables:
            if get_tenant_context(orm_execute_state.session) is None:
                _reject(AuthenticationRequired(), operation="select", reason="unauthenticated")
            _reject(
                UnsupportedTenantOperation(
                    f"Table-level SELECT against {tables[0]} is not supported; "
                    "select the mapped entities instead"
                ),
                operation="select",
                reason="unsupported",
            )
        return

    # Column refreshes target already-visible objects; relationship loads
    # inherit the criteria through propagate_to_loaders
    if orm_execute_state.is_column_load or orm_execute_state.is_relationship_load:
        return

    context = get_tenant_context(orm_execute_state.session)
    if context is None:
        if touched:
            _reject(AuthenticationRequired(), operation="select", reason="unauthenticated")
        tenant_id = None
    else:
        tenant_id = context.require()

    orm_execute_state.statement = orm_execute_state.statement.options(
        *(
            with_loader_criteria(model, row_predicate(model, tenant_id), include_aliases=True)
            for model in tenant_scoped_models()
        )
    )


# ---------------------------------------------------------------------------
# Write side
# ---------------------------------------------------------------------------

def _related_object(session: Session, instance, rel: RelationshipProperty) -> Tuple[bool, Optional[object]]:
    """Return ``(linked, target)`` for a many-to-one relationship.

    ``linked`` is True when the instance points at a record (through the
    relationship attribute or the foreign key). ``target`` is None when the
    linked record is not visible to the session.
    """
    state = sa_inspect(instance)
    history = state.attrs[rel.key].history
    if history.added:
        target = history.added[0]
        return target is not None, target

    mapper = state.mapper
    local_column = next(iter(rel.local_columns))
    fk_value = getattr(instance, mapper.get_property_by_column(local_column).key)
    if fk_value is None:
        target = getattr(instance, rel.key)
        return target is not None, target

    parent_mapper = rel.mapper
    identity_key = parent_mapper.identity_key_from_primary_key([fk_value])
    target = session.identity_map.get(identity_key)
    if target is None:
        target = session.get(parent_mapper.class_, fk_value)
    return True, target


def resolve_owning_tenant(session: Session, instance) -> Optional[UUID]:
    """Resolve the effective tenant of ``instance``.

    Directly scoped records return their stored tenant. Indirectly scoped
    records walk ``__tenant_owner__`` until a directly scoped ancestor is
    found. Returns None when the chain is broken or leads to a record the
    session cannot see.
    """
    current = instance
    for _ in range(MAX_OWNERSHIP_DEPTH + 1):
        model = sa_inspect(current).mapper.class_
        if is_directly_scoped(model):
            resolution = resolve_tenant_id(getattr(current, TENANT_COLUMN))
            return resolution.tenant_id if resolution.ok else None

        rel = owner_relationship(model)
        if rel is None:
            return None
        _, current = _related_object(session, current, rel)
        if current is None:
            return None
    return None


def _check_references(session: Session, instance, tenant_id: UUID, operation: str) -> None:
    model = sa_inspect(instance).mapper.class_
    for name in getattr(model, "__tenant_references__", ()):
        rel = sa_inspect(model).relationships[name]
        linked, target = _related_object(session, instance, rel)
        if not linked:
            continue
        owner = resolve_owning_tenant(session, target) if target is not None else None
        if owner != tenant_id:
            _reject(
                TenantMismatch(f"{model.__name__}.{name}", tenant_id, owner, operation),
                operation=operation,
                reason="mismatch",
                org_id=tenant_id,
            )


def _assigned_organization(instance) -> Tuple[bool, Optional[UUID]]:
    """Return ``(assigned, id)`` for an organization set through a relationship.

    Relationships populate ``organization_id`` during the flush, after the
    policy has run, so the assigned object is inspected directly.
    """
    state = sa_inspect(instance)
    for rel in state.mapper.relationships:
        if rel.direction is not RelationshipDirection.MANYTOONE:
            continue
        if not any(column.key == TENANT_COLUMN for column in rel.local_columns):
            continue
        added = state.attrs[rel.key].history.added
        if added:
            return True, getattr(added[0], "id", None)
    return False, None


def stamp_tenant(instance, tenant_id: UUID, operation: str = "insert") -> None:
    """Fill in or verify the tenant column of a directly scoped record."""
    model = sa_inspect(instance).mapper.class_
    assigned, organization_id = _assigned_organization(instance)
    if assigned and organization_id != tenant_id:
        _reject(
            TenantMismatch(model.__name__, tenant_id, organization_id, operation),
            operation=operation,
            reason="mismatch",
            org_id=tenant_id,
        )

    if operation != "insert":
        return

    value = getattr(instance, TENANT_COLUMN)
    if value is None:
        setattr(instance, TENANT_COLUMN, tenant_id)
    elif resolve_tenant_id(value).tenant_id != tenant_id:
        _reject(
            TenantMismatch(model.__name__, tenant_id, value, "insert"),
            operation="insert",
            reason="mismatch",
            org_id=tenant_id,
        )


def check_insert(session: Session, instance, tenant_id: UUID) -> None:
    """Stamp or verify the tenant of a pending record (WITH CHECK semantics)."""
    model = sa_inspect(instance).mapper.class_

    if is_directly_scoped(model):
        stamp_tenant(instance, tenant_id)
    else:
        owner = resolve_owning_tenant(session, instance)
        if owner != tenant_id:
            _reject(
                TenantMismatch(model.__name__, tenant_id, owner, "insert"),
                operation="insert",
                reason="mismatch",
                org_id=tenant_id,
            )

    _check_references(session, instance, tenant_id, "insert")


def check_update(session: Session, instance, tenant_id: UUID) -> None:
    """Verify a modified record stays within the session tenant.

    The tenant column is immutable after creation: any change is rejected,
    even one that would land in the current tenant.
    """
    state = sa_inspect(instance)
    model = state.mapper.class_

    if is_directly_scoped(model):
        history = state.attrs[TENANT_COLUMN].history
        if history.added:
            previous = history.deleted[0] if history.deleted else None
            _reject(
                TenantMismatch(model.__name__, previous, history.added[0], "update"),
                operation="update",
                reason="mismatch",
                org_id=tenant_id,
            )
        stamp_tenant(instance, tenant_id, "update")

    owner = resolve_owning_tenant(session, instance)
    if owner != tenant_id:
        _reject(
            TenantMismatch(model.__name__, tenant_id, owner, "update"),
            operation="update",
            reason="mismatch",
            org_id=tenant_id,
        )

    _check_references(session, instance, tenant_id, "update")


def check_delete(session: Session, instance, tenant_id: UUID) -> None:
    model = sa_inspect(instance).mapper.class_
    owner = resolve_owning_tenant(session, instance)
    if owner != tenant_id:
        _reject(
            TenantMismatch(model.__name__, tenant_id, owner, "delete"),
            operation="delete",
            reason="mismatch",
            org_id=tenant_id,
        )


def check_organization(session: Session, instance, tenant_id: UUID, operation: str) -> None:
    """Organizations are readable by every tenant but writable only by their own.

    A tenant may update its own organization row. Creating and deleting
    organizations is maintenance work done outside any tenant session.
    """
    if operation != "update" or instance.id != tenant_id:
        _reject(
            TenantMismatch(sa_inspect(instance).mapper.class_.__name__, tenant_id, instance.id, operation),
            operation=operation,
            reason="mismatch",
            org_id=tenant_id,
        )


def _pending_writes(session: Session) -> Iterable[Tuple[object, str]]:
    for instance in list(session.new):
        yield instance, "insert"
    for instance in list(session.dirty):
        if session.is_modified(instance):
            yield instance, "update"
    for instance in list(session.deleted):
        yield instance, "delete"


def enforce_write_policy(session: Session) -> None:
    """Check every pending write against the session tenant (``before_flush`` hook).

    Raises:
        AuthenticationRequired: If tenant-scoped or organization rows are
            written without a tenant
        TenantMismatch: If a write resolves to another tenant
    """
    writes = [
        (instance, operation)
        for instance, operation in _pending_writes(session)
        if is_tenant_scoped(sa_inspect(instance).mapper.class_)
        or is_tenant_root(sa_inspect(instance).mapper.class_)
    ]
    if not writes:
        return

    try:
        tenant_id = get_current_tenant(session)
    except AuthenticationRequired as e:
        _reject(e, operation=writes[0][1], reason="unauthenticated")

    # Parents added in the same flush must carry the tenant before children
    # resolve their owners through them
    for instance, operation in writes:
        if operation == "insert" and is_directly_scoped(sa_inspect(instance).mapper.class_):
            stamp_tenant(instance, tenant_id)

    checks = {"insert": check_insert, "update": check_update, "delete": check_delete}
    for instance, operation in writes:
        if is_tenant_root(sa_inspect(instance).mapper.class_):
            check_organization(session, instance, tenant_id, operation)
        else:
            checks[operation](session, instance, tenant_id)


def _reject(error: TenancyError, operation: str, reason: str, org_id: Optional[UUID] = None) -> None:
    tenant_policy_rejections_total.labels(operation=operation, reason=reason).inc()
    logger.warning(
        f"Tenant policy rejected {operation}: {error}",
        extra={"org_id": org_id, "operation": operation, "reason": reason},
    )
    raise error
