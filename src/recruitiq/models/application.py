"""Application SQLAlchemy model"""

from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base


class ApplicationStatus(str, Enum):
    ACTIVE = "active"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    HIRED = "hired"


class Application(Base):
    """A candidate's application to a job.

    Directly tenant-scoped, and the owner through which interviews,
    interviewers and communications resolve their tenant.
    """
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "candidate_id", name="uq_applications_job_candidate"),
        Index("ix_applications_organization_id", "organization_id"),
    )
    __tenant_references__ = ("job", "candidate")

    id = Column(Uuid, primary_key=True, default=uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    job_id = Column(Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    candidate_id = Column(Uuid, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False)
    status = Column(Text, nullable=False, default=ApplicationStatus.ACTIVE.value)
    stage = Column(Text, nullable=True)
    applied_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    job = relationship("Job", back_populates="applications")
    candidate = relationship("Candidate", back_populates="applications")
    interviews = relationship("Interview", back_populates="application", cascade="all, delete-orphan")
    communications = relationship("Communication", back_populates="application", cascade="all, delete-orphan")
