"""Unit tests for tenant context resolution

Tests cover:
- Resolution of valid, missing, blank and malformed identifiers
- Injection strings never resolving to a tenant
- Binding, reading and clearing the tenant on a session
- Sessions never sharing a tenant
"""

from uuid import UUID, uuid4

import pytest

from recruitiq.database import TenantSessionLocal
from recruitiq.tenancy.context import (
    TenantContext,
    TenantResolution,
    clear_current_tenant,
    get_current_tenant,
    get_tenant_context,
    resolve_tenant_id,
    set_current_tenant,
)
from recruitiq.tenancy.errors import AuthenticationRequired, InvalidTenantIdentifier


class TestResolveTenantId:
    """Test resolution of raw identifiers"""

    def test_uuid_resolves(self):
        org_id = uuid4()
        resolution = resolve_tenant_id(org_id)
        assert resolution.ok
        assert resolution.unwrap() == org_id

    def test_uuid_string_resolves(self):
        raw = "550e8400-e29b-41d4-a716-446655440000"
        resolution = resolve_tenant_id(raw)
        assert resolution.ok
        assert resolution.tenant_id == UUID(raw)

    def test_surrounding_whitespace_is_ignored(self):
        raw = "  550e8400-e29b-41d4-a716-446655440000 "
        assert resolve_tenant_id(raw).tenant_id == UUID(raw.strip())

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_identifier_requires_authentication(self, raw):
        resolution = resolve_tenant_id(raw)
        assert not resolution.ok
        assert type(resolution.error) is AuthenticationRequired
        with pytest.raises(AuthenticationRequired):
            resolution.unwrap()

    @pytest.mark.parametrize(
        "raw",
        [
            "not-a-uuid",
            "'; DROP TABLE jobs; --",
            "550e8400-e29b-41d4-a716-446655440000' OR '1'='1",
            "1 OR 1=1",
            12345,
            ["550e8400-e29b-41d4-a716-446655440000"],
        ],
    )
    def test_malformed_identifier_is_rejected(self, raw):
        resolution = resolve_tenant_id(raw)
        assert not resolution.ok
        assert resolution.tenant_id is None
        assert isinstance(resolution.error, InvalidTenantIdentifier)

    def test_invalid_identifier_is_an_authentication_error(self):
        with pytest.raises(AuthenticationRequired):
            resolve_tenant_id("garbage").unwrap()

    def test_empty_resolution_unwrap_raises(self):
        with pytest.raises(AuthenticationRequired):
            TenantResolution().unwrap()


class TestTenantContext:
    """Test the TenantContext value"""

    def test_for_tenant_validates_identifier(self):
        with pytest.raises(InvalidTenantIdentifier):
            TenantContext.for_tenant("nope")

    def test_for_tenant_accepts_string(self):
        org_id = uuid4()
        context = TenantContext.for_tenant(str(org_id), role="admin", source="test")
        assert context.organization_id == org_id
        assert context.role == "admin"

    def test_require_without_organization_raises(self):
        with pytest.raises(AuthenticationRequired):
            TenantContext(organization_id=None).require()

    def test_source_does_not_affect_equality(self):
        org_id = uuid4()
        assert TenantContext(org_id, source="jwt") == TenantContext(org_id, source="worker")


class TestSessionBinding:
    """Test tenant binding on sessions"""

    def test_unbound_session_requires_authentication(self):
        session = TenantSessionLocal()
        try:
            assert get_tenant_context(session) is None
            with pytest.raises(AuthenticationRequired):
                get_current_tenant(session)
        finally:
            session.close()

    def test_set_and_get_current_tenant(self):
        org_id = uuid4()
        session = TenantSessionLocal()
        try:
            context = set_current_tenant(session, org_id)
            assert context.organization_id == org_id
            assert get_current_tenant(session) == org_id
        finally:
            session.close()

    def test_set_current_tenant_rejects_malformed_identifier(self):
        session = TenantSessionLocal()
        try:
            with pytest.raises(InvalidTenantIdentifier):
                set_current_tenant(session, "'; DROP TABLE jobs; --")
            assert get_tenant_context(session) is None
        finally:
            session.close()

    def test_clear_current_tenant(self):
        session = TenantSessionLocal()
        try:
            set_current_tenant(session, uuid4())
            clear_current_tenant(session)
            with pytest.raises(AuthenticationRequired):
                get_current_tenant(session)
        finally:
            session.close()

    def test_close_drops_tenant(self):
        session = TenantSessionLocal()
        set_current_tenant(session, uuid4())
        session.close()
        assert get_tenant_context(session) is None

    def test_sessions_do_not_share_tenant(self):
        first, second = TenantSessionLocal(), TenantSessionLocal()
        try:
            org_a, org_b = uuid4(), uuid4()
            set_current_tenant(first, org_a)
            set_current_tenant(second, org_b)
            assert get_current_tenant(first) == org_a
            assert get_current_tenant(second) == org_b
        finally:
            first.close()
            second.close()
