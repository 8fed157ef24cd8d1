"""Multi-organization test fixtures for tenant isolation testing.

This module provides pytest fixtures for creating two organizations, each
with a complete recruiting data graph:

    workspace -> flow_template
    workspace -> job -> application <- candidate
                 job -> flow_template
                        application -> interview -> interview_interviewer
                        application -> communication

Direct, indirect (interview, communication) and two-hop (interviewer)
ownership are all represented, so every isolation property can be checked
against records the other tenant owns.

Usage:
    def test_cross_org_access(tenant_a, tenant_b):
        with tenant_session(tenant_a.organization_id) as session:
            with pytest.raises(NotFoundOrForbidden):
                TenantQuery.get_or_raise(session, Job, tenant_b.job_id)
"""

from dataclasses import dataclass
from typing import Dict
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from recruitiq.auth.jwt import create_access_token
from recruitiq.database import tenant_session
from recruitiq.models import (
    Application,
    Candidate,
    Communication,
    FlowTemplate,
    Interview,
    InterviewInterviewer,
    Job,
    Organization,
    Workspace,
)
from recruitiq.tenancy.context import TenantContext


@dataclass(frozen=True)
class TenantGraph:
    """Identifiers of one organization's test records."""

    organization_id: UUID
    workspace_id: UUID
    flow_template_id: UUID
    job_id: UUID
    candidate_id: UUID
    application_id: UUID
    interview_id: UUID
    interviewer_id: UUID
    communication_id: UUID


def create_organization(db_session: Session, slug: str, name: str) -> Organization:
    org = Organization(id=uuid4(), name=name, slug=slug)
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


def build_tenant_graph(organization_id: UUID, label: str) -> TenantGraph:
    """Create one record of every tenant-scoped model for ``organization_id``.

    Records are written through a tenant session without an explicit
    organization_id, so they are stamped by the write policy.
    """
    context = TenantContext(organization_id=organization_id, source="test")
    with tenant_session(context) as session:
        workspace = Workspace(name=f"{label} Workspace", slug=f"{label}-workspace")
        flow_template = FlowTemplate(
            workspace=workspace,
            name=f"{label} hiring flow",
            stages=[{"name": "Screening", "order": 1}, {"name": "Interview", "order": 2}],
        )
        job = Job(workspace=workspace, flow_template=flow_template, title=f"{label} Engineer", status="open")
        candidate = Candidate(
            first_name=label.title(),
            last_name="Candidate",
            email=f"candidate@{label}.example.com",
        )
        application = Application(job=job, candidate=candidate, stage="screening")
        interview = Interview(application=application, title=f"{label} technical interview")
        interviewer = InterviewInterviewer(
            interview=interview,
            interviewer_email=f"lead@{label}.example.com",
            is_primary=True,
        )
        communication = Communication(
            application=application,
            subject=f"{label} invitation",
            body="We would like to invite you for an interview.",
        )
        session.add_all([workspace, flow_template, job, candidate, application, interview, interviewer, communication])
        session.flush()

        return TenantGraph(
            organization_id=organization_id,
            workspace_id=workspace.id,
            flow_template_id=flow_template.id,
            job_id=job.id,
            candidate_id=candidate.id,
            application_id=application.id,
            interview_id=interview.id,
            interviewer_id=interviewer.id,
            communication_id=communication.id,
        )


def auth_headers(org_id, role: str = "recruiter") -> Dict[str, str]:
    """Authorization header carrying a token for a user of ``org_id``."""
    token = create_access_token(user_id=uuid4(), org_id=org_id, role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def org_a(db_session: Session) -> Organization:
    """Create test organization A."""
    return create_organization(db_session, "acme-recruiting", "Acme Recruiting")


@pytest.fixture
def org_b(db_session: Session) -> Organization:
    """Create test organization B."""
    return create_organization(db_session, "globex-talent", "Globex Talent")


@pytest.fixture
def tenant_a(org_a: Organization) -> TenantGraph:
    """Organization A with its full data graph."""
    return build_tenant_graph(org_a.id, "acme")


@pytest.fixture
def tenant_b(org_b: Organization) -> TenantGraph:
    """Organization B with its full data graph."""
    return build_tenant_graph(org_b.id, "globex")
