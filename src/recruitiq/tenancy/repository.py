"""Tenant-scoped data access helpers.

All helpers take a TenantSession; the isolation criteria and write checks
are applied by the session itself, so nothing here repeats the
organization filter. The helpers exist to give call sites the
not-found-or-forbidden contract for targeted reads and a single place that
refuses unscoped sessions.

Example:
    with tenant_session(context) as session:
        jobs = TenantQuery.list(session, Job, Job.status == "open")
        job = TenantQuery.get_or_raise(session, Job, job_id)
        TenantQuery.update(session, job, title="Senior Engineer")
"""

from typing import Any, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from ..observability.metrics import tenant_not_found_total
from .errors import NotFoundOrForbidden, UnsupportedTenantOperation
from .ownership import is_tenant_scoped
from .session import TenantSession

ModelT = TypeVar("ModelT")


def _coerce_uuid(value: Any) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def _require_scoped_session(session: Session) -> None:
    if not isinstance(session, TenantSession):
        raise UnsupportedTenantOperation(
            f"{type(session).__name__} is not tenant-scoped; open it with tenant_session()"
        )


class TenantQuery:
    """Utility class for tenant-scoped queries and writes."""

    @staticmethod
    def scoped_query(session: Session, model: Type[ModelT]) -> Select:
        """Return ``select(model)``; filtering happens when the session executes it.

        Raises:
            UnsupportedTenantOperation: If the model has no tenant linkage or
                the session is not tenant-scoped
        """
        _require_scoped_session(session)
        if not is_tenant_scoped(model):
            raise UnsupportedTenantOperation(f"Model {model.__name__} has no tenant linkage")
        return select(model)

    @staticmethod
    def list(session: Session, model: Type[ModelT], *criteria: Any, order_by: Any = None) -> List[ModelT]:
        """List visible records of ``model`` matching optional extra criteria."""
        stmt = TenantQuery.scoped_query(session, model)
        if criteria:
            stmt = stmt.where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        return list(session.scalars(stmt).all())

    @staticmethod
    def get_or_raise(session: Session, model: Type[ModelT], record_id: Any) -> ModelT:
        """Get a record by ID, or raise NotFoundOrForbidden.

        Raised identically for:
        - Records that don't exist
        - Records that exist but belong to another organization
        - Identifiers that are not UUIDs

        Raises:
            NotFoundOrForbidden: If no visible record has this ID
        """
        _require_scoped_session(session)
        key = _coerce_uuid(record_id)
        record: Optional[ModelT] = session.get(model, key) if key is not None else None

        if record is None:
            tenant_not_found_total.labels(model=model.__name__).inc()
            raise NotFoundOrForbidden(model.__name__, record_id)

        return record

    @staticmethod
    def create(session: Session, model: Type[ModelT], **values: Any) -> ModelT:
        """Insert a record. ``organization_id`` may be omitted; it is stamped at flush.

        Raises:
            TenantMismatch: If the record would belong to another organization
        """
        _require_scoped_session(session)
        record = model(**values)
        session.add(record)
        session.flush()
        return record

    @staticmethod
    def update(session: Session, record: ModelT, **values: Any) -> ModelT:
        """Apply ``values`` to a loaded record and flush.

        Raises:
            TenantMismatch: If the update would move the record to another organization
        """
        _require_scoped_session(session)
        for key, value in values.items():
            if not hasattr(record, key):
                raise AttributeError(f"{type(record).__name__} has no attribute '{key}'")
            setattr(record, key, value)
        session.flush()
        return record

    @staticmethod
    def delete(session: Session, model: Type[ModelT], record_id: Any) -> None:
        """Delete a visible record by ID.

        Raises:
            NotFoundOrForbidden: If no visible record has this ID
        """
        record = TenantQuery.get_or_raise(session, model, record_id)
        session.delete(record)
        session.flush()
