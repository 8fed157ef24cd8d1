"""Database engine and session factories.

Two kinds of sessions exist:

- ``SessionLocal``: plain sessions for maintenance work that runs outside
  any tenant (migrations, creating organizations). They are never handed to
  request handlers.
- ``TenantSessionLocal``: TenantSession instances; every ORM statement and
  flush is checked against the tenant bound to the session.

Use :func:`tenant_session` for a unit of work scoped to one organization.
"""

from contextlib import contextmanager
from typing import Generator, Optional, Union

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import get_settings
from .observability.logging_config import get_logger
from .observability.metrics import tenant_sessions_total
from .tenancy.context import TenantContext, TenantIdentifier, set_current_tenant
from .tenancy.session import TenantSession

logger = get_logger(__name__)


def build_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine with the connection pool settings for the backend.

    Pool settings only apply to server databases. In-memory SQLite shares a
    single connection so every session sees the same database.
    """
    settings = get_settings()
    url = database_url or settings.DATABASE_URL

    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.DB_ECHO,
    }

    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_size"] = settings.DB_POOL_SIZE
        engine_kwargs["max_overflow"] = settings.DB_MAX_OVERFLOW

    return create_engine(url, **engine_kwargs)


engine = build_engine()

# Maintenance sessions (no tenant isolation)
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Tenant-scoped sessions
TenantSessionLocal = sessionmaker(
    class_=TenantSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Context manager for maintenance sessions.

    Usage:
        with get_db_session() as session:
            session.add(Organization(name="Acme", slug="acme"))

    Automatically commits on success, rolls back on exception.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a maintenance session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def open_tenant_session(
    tenant: Union[TenantContext, TenantIdentifier],
    factory: Optional[sessionmaker] = None,
) -> TenantSession:
    """Create a TenantSession already bound to ``tenant``.

    Useful for background jobs that process data for one organization. The
    caller owns the session and must close it.

    Raises:
        AuthenticationRequired: If ``tenant`` is missing
        InvalidTenantIdentifier: If ``tenant`` is malformed
    """
    session = (factory or TenantSessionLocal)()
    try:
        set_current_tenant(session, tenant)
    except Exception:
        session.close()
        raise
    return session


@contextmanager
def tenant_session(
    tenant: Union[TenantContext, TenantIdentifier],
    factory: Optional[sessionmaker] = None,
) -> Generator[TenantSession, None, None]:
    """Unit of work confined to one organization.

    Usage:
        with tenant_session(context) as session:
            session.add(Job(title="Backend Engineer", workspace_id=workspace_id))

    Commits on success, rolls back on exception, and always clears the
    tenant context when the session is closed.
    """
    session = open_tenant_session(tenant, factory)
    try:
        yield session
        session.commit()
        tenant_sessions_total.labels(outcome="committed").inc()
    except Exception:
        session.rollback()
        tenant_sessions_total.labels(outcome="rolled_back").inc()
        raise
    finally:
        session.close()
