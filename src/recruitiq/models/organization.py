"""Organization model - Root entity for multi-tenant isolation"""

import re
from uuid import uuid4

from sqlalchemy import Column, DateTime, Text, Uuid, func
from sqlalchemy.orm import relationship, validates

from .base import Base, PortableJSONB

SLUG_PATTERN = re.compile(r'^[a-z0-9-]+$')


class Organization(Base):
    """
    Organization model - the tenant.

    Each organization is a distinct customer account with isolated data.
    Every tenant-scoped table references organizations.id, directly or
    through its owning record. The table itself is global: it carries no
    organization_id and is not filtered by the isolation policy.
    """
    __tablename__ = "organizations"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    tier = Column(Text, nullable=False, default="starter")
    subscription_status = Column(Text, nullable=False, default="active")
    settings = Column(PortableJSONB, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    workspaces = relationship("Workspace", back_populates="organization")

    @validates('slug')
    def validate_slug(self, key, value):
        """
        Ensure slug is URL-friendly.

        Pattern: ^[a-z0-9-]+$
        Valid: acme-recruiting, test-org-123
        Invalid: Acme_Recruiting, acme recruiting, acme.recruiting

        Raises:
            ValueError: If slug doesn't match pattern or length requirements
        """
        if not value or not SLUG_PATTERN.match(value):
            raise ValueError(
                "Slug must contain only lowercase letters, numbers, and hyphens"
            )
        if len(value) < 2 or len(value) > 100:
            raise ValueError("Slug must be between 2 and 100 characters")
        return value

    @validates('name')
    def validate_name(self, key, value):
        if not value or len(value.strip()) == 0:
            raise ValueError("Organization name cannot be empty")
        if len(value) > 200:
            raise ValueError("Organization name cannot exceed 200 characters")
        return value.strip()

    def __repr__(self):
        return f"<Organization(id={self.id}, slug='{self.slug}', name='{self.name}')>"
