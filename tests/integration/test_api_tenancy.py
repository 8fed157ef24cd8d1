"""Integration tests for the HTTP tenancy adapter

Tests cover:
- Tenant context derived from the JWT org_id claim
- 401 for missing, invalid and malformed credentials
- 404 (not 403) when the token names an unknown organization
- Per-tenant summaries never counting another tenant's rows
- Request ID propagation and health endpoint
"""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from recruitiq.auth.jwt import create_access_token
from tests.fixtures.multi_org import auth_headers

pytestmark = pytest.mark.integration


class TestTenantContextEndpoint:
    """Test GET /api/v1/tenancy/context"""

    def test_returns_token_organization(self, client: TestClient, org_a, org_b):
        response = client.get("/api/v1/tenancy/context", headers=auth_headers(org_a.id, role="admin"))

        assert response.status_code == 200
        body = response.json()
        assert body["organization_id"] == str(org_a.id)
        assert body["organization_slug"] == "acme-recruiting"
        assert body["role"] == "admin"

    def test_missing_token_is_unauthorized(self, client: TestClient):
        response = client.get("/api/v1/tenancy/context")

        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"

    def test_invalid_token_is_unauthorized(self, client: TestClient):
        response = client.get(
            "/api/v1/tenancy/context", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401

    def test_expired_token_is_unauthorized(self, client: TestClient, org_a):
        token = create_access_token(user_id=uuid4(), org_id=org_a.id, expires_in_minutes=-1)
        response = client.get("/api/v1/tenancy/context", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_malformed_org_claim_is_unauthorized(self, client: TestClient):
        response = client.get(
            "/api/v1/tenancy/context", headers=auth_headers("'; DROP TABLE jobs; --")
        )

        assert response.status_code == 401

    def test_unknown_organization_is_not_found(self, client: TestClient, org_a):
        response = client.get("/api/v1/tenancy/context", headers=auth_headers(uuid4()))

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestTenantSummaryEndpoint:
    """Test GET /api/v1/tenancy/summary"""

    def test_counts_only_own_rows(self, client: TestClient, tenant_a, tenant_b):
        response = client.get("/api/v1/tenancy/summary", headers=auth_headers(tenant_a.organization_id))

        assert response.status_code == 200
        assert response.json() == {
            "organization_id": str(tenant_a.organization_id),
            "workspaces": 1,
            "jobs": 1,
            "candidates": 1,
            "applications": 1,
            "interviews": 1,
        }

    def test_unknown_organization_sees_nothing(self, client: TestClient, tenant_a):
        response = client.get("/api/v1/tenancy/summary", headers=auth_headers(uuid4()))

        assert response.status_code == 200
        assert response.json()["jobs"] == 0

    def test_requires_token(self, client: TestClient, tenant_a):
        assert client.get("/api/v1/tenancy/summary").status_code == 401


class TestObservabilityEndpoints:
    """Test health and request correlation"""

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_request_id_is_propagated(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "req-abc"})

        assert response.headers["X-Request-ID"] == "req-abc"

    def test_request_id_is_generated(self, client: TestClient):
        assert client.get("/health").headers["X-Request-ID"]

    def test_metrics_exposes_tenant_counters(self, client: TestClient):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "recruitiq_tenant_sessions_total" in response.text
