"""Demo tenant seeding.

Creates an organization and a small applicant-tracking data set for it. Every
row is looked up by its natural key first, so running the seed repeatedly
never duplicates anything.

The organization row is written through a maintenance session (the
organizations table is global). Everything else is written through a
TenantSession bound to the new organization, so seeded rows are stamped and
checked by the same policy as application writes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from .database import SessionLocal, tenant_session
from .models import (
    Application,
    Candidate,
    Communication,
    FlowTemplate,
    Interview,
    InterviewInterviewer,
    Job,
    JobStatus,
    Organization,
    Workspace,
)
from .observability.logging_config import get_logger
from .tenancy.context import TenantContext

logger = get_logger(__name__)

DEMO_ORGANIZATION_SLUG = "test-company"
DEMO_ORGANIZATION_NAME = "Test Company Ltd"

DEMO_FLOW_TEMPLATE = {
    "name": "Standard hiring flow",
    "category": "engineering",
    "is_default": True,
    "stages": [
        {"name": "Screening", "order": 1, "type": "review"},
        {"name": "Technical interview", "order": 2, "type": "interview"},
        {"name": "Offer", "order": 3, "type": "decision"},
    ],
}

DEMO_JOBS = (
    {"title": "Backend Engineer", "department": "Engineering", "location": "Remote",
     "employment_type": "full_time", "status": JobStatus.OPEN.value},
    {"title": "Product Designer", "department": "Design", "location": "Amsterdam",
     "employment_type": "full_time", "status": JobStatus.OPEN.value},
    {"title": "Recruiting Coordinator", "department": "People", "location": "Paramaribo",
     "employment_type": "part_time", "status": JobStatus.DRAFT.value},
)

DEMO_CANDIDATES = (
    {"first_name": "Ada", "last_name": "Jansen", "email": "ada.jansen@example.com", "source": "referral"},
    {"first_name": "Milan", "last_name": "Koster", "email": "milan.koster@example.com", "source": "linkedin"},
    {"first_name": "Sara", "last_name": "Pinas", "email": "sara.pinas@example.com", "source": "careers_page"},
)


@dataclass
class SeedResult:
    """Rows created by one seeding run (zero everywhere on a re-run)."""

    organization_id: UUID
    created: Dict[str, int] = field(default_factory=dict)

    def record(self, kind: str) -> None:
        self.created[kind] = self.created.get(kind, 0) + 1

    @property
    def total_created(self) -> int:
        return sum(self.created.values())


def ensure_organization(session: Session, slug: str, name: str, tier: str = "enterprise") -> tuple[Organization, bool]:
    """Return the organization with ``slug``, creating it if missing."""
    org = session.scalars(select(Organization).where(Organization.slug == slug)).first()
    if org is not None:
        return org, False

    org = Organization(name=name, slug=slug, tier=tier, subscription_status="active")
    session.add(org)
    session.flush()
    return org, True


def _get_or_add(session: Session, result: SeedResult, kind: str, model, lookup, **values):
    record = session.scalars(select(model).where(*lookup)).first()
    if record is None:
        record = model(**values)
        session.add(record)
        session.flush()
        result.record(kind)
    return record


def seed_tenant_records(session: Session, result: SeedResult) -> None:
    """Create the demo ATS records in an already tenant-bound session."""
    workspace = _get_or_add(
        session, result, "workspaces", Workspace,
        (Workspace.slug == "default",),
        name="Default Workspace", slug="default",
        description="Workspace created by the demo seed",
    )

    flow_template = _get_or_add(
        session, result, "flow_templates", FlowTemplate,
        (FlowTemplate.name == DEMO_FLOW_TEMPLATE["name"],),
        workspace=workspace, **DEMO_FLOW_TEMPLATE,
    )

    jobs = [
        _get_or_add(
            session, result, "jobs", Job,
            (Job.workspace_id == workspace.id, Job.title == values["title"]),
            workspace=workspace, flow_template=flow_template, **values,
        )
        for values in DEMO_JOBS
    ]

    candidates = [
        _get_or_add(
            session, result, "candidates", Candidate,
            (Candidate.email == values["email"],),
            **values,
        )
        for values in DEMO_CANDIDATES
    ]

    open_job = jobs[0]
    applications = [
        _get_or_add(
            session, result, "applications", Application,
            (Application.job_id == open_job.id, Application.candidate_id == candidate.id),
            job=open_job, candidate=candidate, stage="screening",
        )
        for candidate in candidates[:2]
    ]

    first_application = applications[0]
    interview = _get_or_add(
        session, result, "interviews", Interview,
        (Interview.application_id == first_application.id, Interview.title == "Technical interview"),
        application=first_application,
        title="Technical interview",
        interview_type="video",
        scheduled_at=datetime.now(timezone.utc) + timedelta(days=7),
        duration_minutes=60,
    )

    for email, is_primary in (("lead@testcompany.com", True), ("peer@testcompany.com", False)):
        _get_or_add(
            session, result, "interview_interviewers", InterviewInterviewer,
            (InterviewInterviewer.interview_id == interview.id,
             InterviewInterviewer.interviewer_email == email),
            interview=interview, interviewer_email=email, is_primary=is_primary,
        )

    _get_or_add(
        session, result, "communications", Communication,
        (Communication.application_id == first_application.id,
         Communication.subject == "Interview invitation"),
        application=first_application,
        direction="outbound",
        channel="email",
        subject="Interview invitation",
        body="We would like to invite you for a technical interview.",
    )


def seed_demo_tenant(
    slug: str = DEMO_ORGANIZATION_SLUG,
    name: str = DEMO_ORGANIZATION_NAME,
    maintenance_factory: Optional[sessionmaker] = None,
    tenant_factory: Optional[sessionmaker] = None,
) -> SeedResult:
    """Create the demo organization and its records, skipping existing rows.

    The organization is committed first; all tenant rows are then written in
    a single tenant transaction.

    Returns:
        SeedResult: Organization ID and per-table counts of created rows
    """
    session = (maintenance_factory or SessionLocal)()
    try:
        org, created = ensure_organization(session, slug, name)
        session.commit()
        organization_id = org.id
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    result = SeedResult(organization_id=organization_id)
    if created:
        result.record("organizations")

    context = TenantContext(organization_id=organization_id, source="seed")
    with tenant_session(context, tenant_factory) as scoped:
        seed_tenant_records(scoped, result)

    logger.info(
        f"Seeded organization '{slug}': {result.total_created} rows created",
        extra={"org_id": organization_id},
    )
    return result
