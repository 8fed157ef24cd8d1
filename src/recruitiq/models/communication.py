"""Communication SQLAlchemy model"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Text, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base


class Communication(Base):
    """Message exchanged about an application.

    No tenant column; the organization is the owning application's.
    """
    __tablename__ = "communications"
    __tenant_owner__ = "application"

    id = Column(Uuid, primary_key=True, default=uuid4)
    application_id = Column(Uuid, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    direction = Column(Text, nullable=False, default="outbound")  # inbound|outbound
    channel = Column(Text, nullable=False, default="email")
    subject = Column(Text, nullable=True)
    body = Column(Text, nullable=False)
    is_public = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    application = relationship("Application", back_populates="communications")
