"""Interview SQLAlchemy models.

Neither table stores a tenant column. Interviews resolve their organization
through the owning application; interviewer assignments resolve it through
the interview and then the application.
"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base


class Interview(Base):
    __tablename__ = "interviews"
    __tenant_owner__ = "application"

    id = Column(Uuid, primary_key=True, default=uuid4)
    application_id = Column(Uuid, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    interview_type = Column(Text, nullable=False, default="video")
    status = Column(Text, nullable=False, default="scheduled")
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    location = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    application = relationship("Application", back_populates="interviews")
    interviewers = relationship("InterviewInterviewer", back_populates="interview", cascade="all, delete-orphan")


class InterviewInterviewer(Base):
    """Assignment of an interviewer to an interview (two hops from the tenant)."""
    __tablename__ = "interview_interviewers"
    __table_args__ = (
        UniqueConstraint("interview_id", "interviewer_email", name="uq_interview_interviewers_interview_email"),
    )
    __tenant_owner__ = "interview"

    id = Column(Uuid, primary_key=True, default=uuid4)
    interview_id = Column(Uuid, ForeignKey("interviews.id", ondelete="CASCADE"), nullable=False, index=True)
    interviewer_email = Column(Text, nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)
    feedback_submitted = Column(Boolean, nullable=False, default=False)
    rating = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    interview = relationship("Interview", back_populates="interviewers")
