"""Workspace SQLAlchemy model"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB


class Workspace(Base):
    """Recruiting workspace grouping jobs and hiring teams within an organization.

    Directly tenant-scoped: carries organization_id.
    """
    __tablename__ = "workspaces"
    __table_args__ = (
        UniqueConstraint("organization_id", "slug", name="uq_workspaces_organization_slug"),
        Index("ix_workspaces_organization_id", "organization_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    settings = Column(PortableJSONB, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    organization = relationship("Organization", back_populates="workspaces")
    jobs = relationship("Job", back_populates="workspace")
    flow_templates = relationship("FlowTemplate", back_populates="workspace")

    def __repr__(self):
        return f"<Workspace(id={self.id}, slug='{self.slug}')>"
