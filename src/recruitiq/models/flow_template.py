"""Hiring flow template SQLAlchemy model"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Text, Uuid, func
from sqlalchemy.orm import relationship, validates

from .base import Base, PortableJSONB


class FlowTemplate(Base):
    """Reusable hiring process with an ordered list of stages.

    Directly tenant-scoped. A template may be pinned to one workspace, which
    must belong to the same organization; jobs point at the template they
    follow.

    Stages are stored as a list of objects:
        [{"name": "Screening", "order": 1, "type": "review"}, ...]
    """
    __tablename__ = "flow_templates"
    __table_args__ = (
        Index("ix_flow_templates_organization_id", "organization_id"),
        Index("ix_flow_templates_workspace_id", "workspace_id"),
    )
    __tenant_references__ = ("workspace",)

    id = Column(Uuid, primary_key=True, default=uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    workspace_id = Column(Uuid, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(Text, nullable=True)
    stages = Column(PortableJSONB, nullable=False, default=list)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    workspace = relationship("Workspace", back_populates="flow_templates")
    jobs = relationship("Job", back_populates="flow_template")

    @validates("stages")
    def validate_stages(self, key, value):
        if not isinstance(value, list) or not all(isinstance(stage, dict) and stage.get("name") for stage in value):
            raise ValueError("Flow template stages must be a list of objects with a name")
        return value

    def __repr__(self):
        return f"<FlowTemplate(id={self.id}, name='{self.name}')>"
