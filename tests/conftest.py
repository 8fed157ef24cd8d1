"""Pytest fixtures for tenant isolation testing.

Provides reusable test fixtures for:
- Database schema created and dropped around each test
- Maintenance session for global rows (organizations)
- Two organizations with a complete recruiting data graph each
- FastAPI test client and JWT tokens per organization

The suite runs against in-memory SQLite by default. Set TEST_DATABASE_URL to
run it against PostgreSQL instead.
"""

import os

# Set environment variables BEFORE any recruitiq import so settings pick them up
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("LOG_JSON", "false")

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from recruitiq.database import SessionLocal, engine
from recruitiq.models import Base, Organization
from tests.fixtures.multi_org import org_a, org_b, tenant_a, tenant_b  # noqa: F401


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh maintenance session for each test.

    Creates all tables before the test and drops them after.
    Each test gets a clean database state.
    """
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_org(db_session: Session) -> Organization:
    """Create a single test organization."""
    org = Organization(slug="test-org", name="Test Organization")
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture(scope="function")
def client(db_session: Session) -> TestClient:
    """Create an unauthenticated test client."""
    from recruitiq.main import create_app

    return TestClient(create_app())

