"""Candidate SQLAlchemy model"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship, validates

from .base import Base


class Candidate(Base):
    """Person applying to jobs. Email is unique per organization."""
    __tablename__ = "candidates"
    __table_args__ = (
        UniqueConstraint("organization_id", "email", name="uq_candidates_organization_email"),
        Index("ix_candidates_organization_id", "organization_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    source = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    applications = relationship("Application", back_populates="candidate")

    @validates("email")
    def normalize_email(self, key, value):
        if not value or "@" not in value:
            raise ValueError("Candidate email must be a valid address")
        return value.strip().lower()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
