"""Job posting SQLAlchemy model"""

from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, Text, Uuid, func
from sqlalchemy.orm import relationship, validates

from .base import Base


class JobStatus(str, Enum):
    DRAFT = "draft"
    OPEN = "open"
    PAUSED = "paused"
    CLOSED = "closed"
    ARCHIVED = "archived"


class Job(Base):
    """Job posting inside a workspace.

    Directly tenant-scoped. The workspace and the flow template it points at
    must belong to the same organization.
    """
    __tablename__ = "jobs"
    __table_args__ = (
        Index("ix_jobs_organization_id", "organization_id"),
        Index("ix_jobs_organization_status", "organization_id", "status"),
        Index("ix_jobs_flow_template_id", "flow_template_id"),
    )
    __tenant_references__ = ("workspace", "flow_template")

    id = Column(Uuid, primary_key=True, default=uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    workspace_id = Column(Uuid, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False)
    flow_template_id = Column(Uuid, ForeignKey("flow_templates.id", ondelete="SET NULL"), nullable=True)
    title = Column(Text, nullable=False)
    department = Column(Text, nullable=True)
    location = Column(Text, nullable=True)
    employment_type = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default=JobStatus.DRAFT.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    workspace = relationship("Workspace", back_populates="jobs")
    flow_template = relationship("FlowTemplate", back_populates="jobs")
    applications = relationship("Application", back_populates="job")

    @validates("status")
    def validate_status(self, key, value):
        if isinstance(value, JobStatus):
            return value.value
        if value not in {status.value for status in JobStatus}:
            raise ValueError(f"Invalid job status: {value}")
        return value

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', status='{self.status}')>"
